"""Tests for the configuration file."""

import pathlib

import pytest

from kube_status.config import WatchConfig, load_config
from kube_status.exceptions import InputException
from kube_status.ownership import DEFAULT_DEPLOYMENT_OWNER_KINDS, OwnerKind


def test_defaults() -> None:
    """Test the configuration without a file."""
    config = load_config(None)
    assert config == WatchConfig()
    assert config.owner_kinds == list(DEFAULT_DEPLOYMENT_OWNER_KINDS)
    assert config.deployment_api_version == "apps/v1"
    assert config.replica_set_api_version == "apps/v1"


def test_empty_file(tmp_path: pathlib.Path) -> None:
    """Test an empty file returns the defaults."""
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path) == WatchConfig()


def test_extra_owner_kinds(tmp_path: pathlib.Path) -> None:
    """Test extending the Deployment owner kinds."""
    path = tmp_path / "config.yaml"
    path.write_text(
        """
extra_owner_kinds:
- apiVersion: example.io/v1
  kind: Deployment
replica_set_api_version: apps/v1beta2
"""
    )
    config = load_config(path)
    assert config.owner_kinds == list(DEFAULT_DEPLOYMENT_OWNER_KINDS) + [
        OwnerKind(api_version="example.io/v1", kind="Deployment")
    ]
    assert config.replica_set_api_version == "apps/v1beta2"


def test_replace_owner_kinds(tmp_path: pathlib.Path) -> None:
    """Test replacing the Deployment owner kinds."""
    path = tmp_path / "config.yaml"
    path.write_text(
        """
deployment_owner_kinds:
- apiVersion: apps/v1
  kind: Deployment
"""
    )
    config = load_config(path)
    assert config.owner_kinds == [OwnerKind(api_version="apps/v1", kind="Deployment")]


def test_missing_file(tmp_path: pathlib.Path) -> None:
    """Test a file that does not exist."""
    with pytest.raises(InputException, match="Unable to read"):
        load_config(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "content",
    [
        "extra_owner_kinds: [",
        "- a\n- b\n",
        "unknown_key: 1\n",
        "extra_owner_kinds:\n- kind: Deployment\n",
    ],
)
def test_invalid_file(tmp_path: pathlib.Path, content: str) -> None:
    """Test malformed configuration files."""
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(InputException):
        load_config(path)
