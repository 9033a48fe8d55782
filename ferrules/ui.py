"""Terminal styling and status messages."""

from __future__ import annotations

import os
import sys

_RESET = "\x1b[0m"


def use_emoji() -> bool:
    """Return True unless the NO_EMOJI environment variable is set."""
    return "NO_EMOJI" not in os.environ


def _colors_enabled() -> bool:
    force = os.environ.get("CLICOLOR_FORCE")
    if force and force != "0":
        return True
    if "NO_COLOR" in os.environ:
        return False
    return sys.stdout.isatty()


def _style(code: str, text: object) -> str:
    text = str(text)
    if not _colors_enabled():
        return text
    return f"\x1b[{code}m{text}{_RESET}"


def bold(text: object) -> str:
    """Render text in bold."""
    return _style("1", text)


def blue(text: object) -> str:
    """Render text in blue."""
    return _style("34", text)


def red(text: object) -> str:
    """Render text in red."""
    return _style("31", text)


def green(text: object) -> str:
    """Render text in green."""
    return _style("32", text)


def warn(message: str) -> None:
    """Print a red warning line."""
    mark = "⚠️ " if use_emoji() else "!"
    print(f"{red(mark)} {red(message)}")


def success(message: str) -> None:
    """Print a green success line."""
    mark = "✅" if use_emoji() else "✓"
    print(f"{green(mark)} {green(message)}")