"""Rich Console factory and theme for rxctl output.

Consoles render into a StringIO buffer so renderers keep the
``format_result() -> str`` contract. In non-TTY environments (tests,
pipes) Rich disables color codes automatically.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

RX_THEME = Theme(
    {
        "rx.ok": "bold green",
        "rx.error": "bold red",
        "rx.warning": "bold yellow",
        "rx.op": "bold cyan",
        "rx.key": "dim",
        "rx.id": "bold blue",
        "rx.name": "bold",
        "rx.date": "cyan",
        "rx.due.today": "bold red",
        "rx.due.soon": "yellow",
        "rx.due.not_due": "green",
        "rx.stock.low": "bold red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "due_today": "rx.due.today",
    "due_soon": "rx.due.soon",
    "not_due": "rx.due.not_due",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=RX_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for a due status."""
    return _STATUS_STYLES.get(status, "")
