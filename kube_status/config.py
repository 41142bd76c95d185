"""Configuration objects for kube-status.

The configuration file is optional YAML, for example to follow Deployments
served from an additional API group:

```yaml
extra_owner_kinds:
- apiVersion: example.io/v1
  kind: Deployment
```
"""

from dataclasses import dataclass, field
import logging
from pathlib import Path

from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig
from mashumaro.exceptions import ExtraKeysError, InvalidFieldValue, MissingField
import yaml

from .exceptions import InputException
from .ownership import DEFAULT_DEPLOYMENT_OWNER_KINDS, OwnerKind

__all__ = [
    "WatchConfig",
    "load_config",
]

_LOGGER = logging.getLogger(__name__)


@dataclass
class WatchConfig(DataClassDictMixin):
    """Configuration for the watches opened when tracing a Deployment."""

    deployment_owner_kinds: list[OwnerKind] = field(
        default_factory=lambda: list(DEFAULT_DEPLOYMENT_OWNER_KINDS)
    )
    """Kinds considered equivalent Deployment owners of a ReplicaSet."""

    extra_owner_kinds: list[OwnerKind] = field(default_factory=list)
    """Kinds appended to `deployment_owner_kinds`."""

    deployment_api_version: str = "apps/v1"
    """The apiVersion used to watch Deployments."""

    replica_set_api_version: str = "apps/v1"
    """The apiVersion used to watch ReplicaSets."""

    @property
    def owner_kinds(self) -> list[OwnerKind]:
        """Return all kinds considered Deployment owners."""
        return self.deployment_owner_kinds + self.extra_owner_kinds

    class Config(BaseConfig):
        forbid_extra_keys = True


def load_config(path: Path | None = None) -> WatchConfig:
    """Load the configuration file, or return the defaults."""
    if path is None:
        return WatchConfig()
    _LOGGER.debug("Loading configuration from %s", path)
    try:
        doc = yaml.safe_load(path.read_text())
    except OSError as err:
        raise InputException(f"Unable to read config file {path}: {err}") from err
    except yaml.YAMLError as err:
        raise InputException(f"Config file {path} is not valid YAML: {err}") from err
    if doc is None:
        return WatchConfig()
    if not isinstance(doc, dict):
        raise InputException(f"Config file {path} must contain a mapping: {doc}")
    try:
        return WatchConfig.from_dict(doc)
    except (MissingField, InvalidFieldValue, ExtraKeysError, ValueError) as err:
        raise InputException(f"Invalid config file {path}: {err}") from err
