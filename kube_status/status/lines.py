"""Classified status lines and the styles used to render them."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, StrEnum

from rich.color import ColorSystem
from rich.style import Style as RichStyle

from kube_status.resource import WatchEvent

__all__ = [
    "Style",
    "Formatter",
    "plain",
    "ansi",
    "StatusKind",
    "StatusLine",
    "success",
    "failure",
    "pending",
    "info",
    "event_header",
]

INDENT = "    "


class Style(Enum):
    """Semantic text styles, independent of how a terminal renders them."""

    SUCCESS = "green"
    FAILURE = "bold red"
    PENDING = "yellow"
    HEADING = "bold cyan"
    NAME = "cyan"
    VALUE = "yellow"
    BOLD = "bold"
    EMPHASIS = "bold yellow"
    FAINT = "dim"
    TITLE = "bold blue"


Formatter = Callable[[Style, str], str]
"""A pure function applying a style to a piece of text."""


def plain(style: Style, text: str) -> str:
    """Formatter that leaves text unstyled."""
    return text


def ansi(style: Style, text: str) -> str:
    """Formatter that wraps text in ANSI escape codes."""
    return RichStyle.parse(style.value).render(
        text, color_system=ColorSystem.STANDARD
    )


class StatusKind(StrEnum):
    """Judgement carried by a status line."""

    SUCCESS = "success"
    FAILURE = "failure"
    PENDING = "pending"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    StatusKind.SUCCESS: "✅",
    StatusKind.FAILURE: "❌",
    StatusKind.PENDING: "⌛",
}


@dataclass(frozen=True)
class StatusLine:
    """One line of output from a status rule.

    Lines without a kind are informational, e.g. object headers.
    """

    kind: StatusKind | None
    text: str
    level: int = 1
    faint: bool = False

    def render(self, fmt: Formatter = plain) -> str:
        """Render the line with its indentation and status symbol."""
        if self.kind is None:
            text = f"{INDENT * self.level}{self.text}"
        else:
            text = f"{INDENT * self.level}{self.kind.symbol} {self.text}"
        if self.faint:
            return fmt(Style.FAINT, text)
        return text


def success(text: str, level: int = 1, faint: bool = False) -> StatusLine:
    return StatusLine(StatusKind.SUCCESS, text, level, faint)


def failure(text: str, level: int = 1, faint: bool = False) -> StatusLine:
    return StatusLine(StatusKind.FAILURE, text, level, faint)


def pending(text: str, level: int = 1, faint: bool = False) -> StatusLine:
    return StatusLine(StatusKind.PENDING, text, level, faint)


def info(text: str, level: int = 0, faint: bool = False) -> StatusLine:
    return StatusLine(None, text, level, faint)


def event_header(event: WatchEvent, fmt: Formatter = plain) -> StatusLine:
    """Return the `[TYPE apiVersion/Kind]  namespace/name` header of an event."""
    resource_id = event.resource_id
    event_style = Style.FAILURE if event.deleted else Style.SUCCESS
    return info(
        f"[{fmt(event_style, str(event.type))} {fmt(Style.HEADING, resource_id.api_type)}]"
        f"  {resource_id.namespace or ''}/{resource_id.name}"
    )
