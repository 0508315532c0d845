"""Terminal output helpers built on rich.

Colors are presentational only: the plain sink prints the same text with
styling stripped. ``NO_COLOR`` (any value) selects the plain sink.
"""

from __future__ import annotations

import os
from typing import IO, Any, Optional

from rich.console import Console
from rich.markup import escape

SUCCESS_STYLE = "green"
WARNING_STYLE = "yellow"
ERROR_STYLE = "red"
LABEL_STYLE = "blue"
SECONDARY_STYLE = "dim"

NO_COLOR_ENV_VAR = "NO_COLOR"


def color_disabled_by_env() -> bool:
    return NO_COLOR_ENV_VAR in os.environ


def styled(text: Any, style: str) -> str:
    """Escape ``text`` and wrap it in rich markup for ``style``."""
    return f"[{style}]{escape(str(text))}[/{style}]"


def green(text: Any) -> str:
    return styled(text, SUCCESS_STYLE)


def yellow(text: Any) -> str:
    return styled(text, WARNING_STYLE)


def red(text: Any) -> str:
    return styled(text, ERROR_STYLE)


def blue(text: Any) -> str:
    return styled(text, LABEL_STYLE)


def dim(text: Any) -> str:
    return styled(text, SECONDARY_STYLE)


def plain(text: Any) -> str:
    return escape(str(text))


class Printer:
    """Line-oriented writer used by every command."""

    def __init__(self, *, no_color: bool = False, file: Optional[IO[str]] = None) -> None:
        self.no_color = no_color or color_disabled_by_env()
        self.console = Console(
            file=file,
            no_color=self.no_color,
            highlight=False,
            soft_wrap=True,
            emoji=False,
        )

    def line(self, markup: str = "", *, end: str = "\n") -> None:
        """Print pre-built markup (use the module helpers to escape values)."""
        self.console.print(markup, end=end)

    def text(self, message: Any, *, end: str = "\n") -> None:
        self.console.print(plain(message), end=end)

    def blank(self) -> None:
        self.console.print()

    def info(self, message: Any) -> None:
        self.console.print(blue(message))

    def success(self, message: Any) -> None:
        self.console.print(green(message))

    def warning(self, message: Any) -> None:
        self.console.print(yellow(message))

    def error(self, message: Any) -> None:
        self.console.print(red(message))

    def label(self, label: str, value: Any) -> None:
        self.console.print(f"{blue(label + ':')} {plain(value)}")

    def status_label(self, label: str, status: str, is_good: bool) -> None:
        status_markup = green(status) if is_good else red(status)
        self.console.print(f"{blue(label + ':')} {status_markup}")

    def verbose(self, enabled: bool, message: Any) -> None:
        if enabled:
            self.console.print(f"{dim('[verbose]')} {plain(message)}")

    def dry_run(self, message: Any) -> None:
        self.console.print(f"{yellow('[dry-run]')} {plain(message)}")
