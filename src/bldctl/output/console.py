"""Rich Console factory and theme for bldctl output.

Consoles render into a StringIO buffer so renderers keep a plain
``-> str`` contract. Under CliRunner and in pipes Rich emits no color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

BLD_THEME = Theme(
    {
        "bld.ok": "bold green",
        "bld.error": "bold red",
        "bld.warning": "bold yellow",
        "bld.op": "bold cyan",
        "bld.key": "dim",
        "bld.project": "bold blue",
        "bld.version": "bold magenta",
        "bld.path": "dim",
        "bld.scope.test": "yellow",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=BLD_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
