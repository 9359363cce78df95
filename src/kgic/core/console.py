"""Shared Rich console for CLI output and the mini-player line."""

from rich.console import Console
from rich.theme import Theme

# Named styles used by the CLI; renderers refer to these, never raw colours
KGIC_THEME = Theme(
    {
        "player.state": "bold green",
        "player.title": "bold white",
        "player.artist": "bright_blue",
        "player.bar": "cyan",
        "player.bar.empty": "dim",
        "player.time": "white",
        "player.volume": "dim",
        "advisory": "yellow",
        "notice": "yellow",
        "error": "bold red",
    }
)

_console: Console | None = None


def get_console() -> Console:
    global _console
    if _console is None:
        _console = Console(theme=KGIC_THEME)
    return _console


def print_notice(message: str) -> None:
    get_console().print(message, style="notice")


def print_error(message: str) -> None:
    """Print a command failure; the caller decides the exit status."""
    get_console().print(message, style="error")
