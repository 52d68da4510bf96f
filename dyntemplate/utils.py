"""Shared utility functions for dyntemplate.

Provides detached command execution, URL fetching, and Rich-based console
output. These back the helpers that configuration code can call
(``vsexec``, ``vsget``, ``vsopen``) as well as the CLI's reporting.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import sys

import httpx
from rich.console import Console
from rich.table import Table

console = Console()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


def spawn_detached(cmd: str | list[str]) -> subprocess.Popen:
    """Start a command without waiting for it.

    The child runs in its own session with its standard streams detached, so
    it survives the event loop shutting down. The exit status is never
    collected by callers; this is deliberately fire-and-forget.

    Args:
        cmd: Shell command string or list of arguments.

    Returns:
        The ``Popen`` handle (mostly useful for tests).
    """
    logger.debug("Spawning detached command: %s", cmd)
    return subprocess.Popen(
        cmd,
        shell=isinstance(cmd, str),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def opener_command(path: str, editor: str | None = None) -> list[str]:
    """Return the argument list that opens *path* for editing.

    Uses *editor* when given (it may carry its own arguments), otherwise the
    platform's default opener.
    """
    if editor:
        return [*shlex.split(editor), path]
    if sys.platform == "darwin":
        return ["open", path]
    if sys.platform.startswith("win"):
        return ["cmd", "/c", "start", "", path]
    return ["xdg-open", path]


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------


async def fetch_url(url: str, timeout: float = 30.0) -> str:
    """Fetch *url* and return the full response body as text.

    Both HTTP and HTTPS are supported and redirects are followed. The status
    code is not checked: whatever body the server sends is returned.
    Transport errors (DNS, refused connection, timeout) propagate as
    ``httpx`` exceptions.
    """
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=10.0), follow_redirects=True
    ) as client:
        response = await client.get(url)
        return response.text


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(rows: list[tuple[str, str]], title: str = "Summary") -> None:
    """Print a two-column table of ``(item, value)`` rows."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in rows:
        table.add_row(key, value)

    console.print(table)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
