"""Exceptions related to kube-status."""

__all__ = [
    "KubeStatusException",
    "InputException",
    "WatchException",
]


class KubeStatusException(Exception):
    """Generic base exception used for this library."""


class InputException(KubeStatusException):
    """Raised when an object id or configuration file is not formatted as expected."""


class WatchException(KubeStatusException):
    """Raised when a watch stream cannot be opened or stops unexpectedly."""

    def __init__(self, stream: str, message: str) -> None:
        super().__init__(f"Watch on {stream} failed: {message}")
        self.stream = stream
        self.message = message
