"""Rules that judge the health of watched objects.

Each rule is a pure function of the latest known events and returns a list
of `StatusLine` objects, classified as success, failure or pending.
"""

from .deployment import deployment_status
from .lines import (
    Formatter,
    StatusKind,
    StatusLine,
    Style,
    ansi,
    plain,
)
from .pods import pod_status
from .service import service_status

__all__ = [
    "deployment_status",
    "service_status",
    "pod_status",
    "Formatter",
    "StatusKind",
    "StatusLine",
    "Style",
    "ansi",
    "plain",
]
