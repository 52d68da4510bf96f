"""Clack-style interactive prompts using Rich + simple-term-menu.

The engine only talks to the :class:`Selector` protocol; this module also
provides the terminal implementation used by the CLI. Prompts read from the
terminal synchronously on the main thread: ``TerminalMenu`` installs a
SIGWINCH handler, which Python only allows there.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import Protocol

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from simple_term_menu import TerminalMenu

_console = Console()


class Selector(Protocol):
    """Label-list pick/edit interaction. Every method returns ``None`` on cancel."""

    async def pick(self, labels: Sequence[str], placeholder: str = "") -> str | None: ...

    async def pick_or_edit(
        self, labels: Sequence[str], placeholder: str = ""
    ) -> str | None: ...

    async def confirm(self, question: str, default: bool = True) -> bool: ...


def _print_bar() -> None:
    _console.print("[dim]│[/]")


def _clear_lines(n: int) -> None:
    """Move cursor up *n* lines and clear to end of screen."""
    sys.stdout.write(f"\033[{n}A\033[J")
    sys.stdout.flush()


def _print_answer(question: str, answer: str) -> None:
    _console.print(f"[bold green]◇[/]  {escape(question)}")
    _console.print(f"[dim]│[/]  {escape(answer)}")
    _print_bar()


def _select(question: str, labels: Sequence[str]) -> str | None:
    """Display a selection menu and return the chosen label."""
    _console.print(f"[bold cyan]◆[/]  {escape(question)}")
    _print_bar()

    menu = TerminalMenu(
        list(labels),
        menu_cursor="│  ● ",
        menu_cursor_style=("fg_cyan", "bold"),
        menu_highlight_style=("fg_cyan",),
    )
    raw_index = menu.show()

    # Overwrite the ◆ question + │ bar that stayed on screen
    _clear_lines(2)

    if raw_index is None:
        _print_answer(question, "cancelled")
        return None

    selected = labels[int(raw_index)]
    _print_answer(question, selected)
    return selected


def _select_or_type(question: str, labels: Sequence[str]) -> str | None:
    """Show numbered candidates; accept a number or any typed value."""
    _console.print(f"[bold cyan]◆[/]  {escape(question)}")
    _print_bar()
    for i, label in enumerate(labels, start=1):
        _console.print(f"[dim]│[/]  [bold cyan]{i:>2}[/] {escape(label)}")
    if labels:
        _print_bar()

    try:
        answer = Prompt.ask(
            "[dim]│[/]  number or path [dim](empty to cancel)[/]",
            console=_console,
            default="",
            show_default=False,
        ).strip()
    except EOFError:
        answer = ""

    if answer.isdigit() and 1 <= int(answer) <= len(labels):
        answer = labels[int(answer) - 1]

    _print_answer(question, answer or "cancelled")
    return answer or None


def _confirm(question: str, default: bool) -> bool:
    _console.print(f"[bold cyan]◆[/]  {escape(question)}")
    try:
        result = Confirm.ask("[dim]│[/] ", console=_console, default=default)
    except EOFError:
        result = False
    _print_answer(question, "Yes" if result else "No")
    return result


class TerminalSelector:
    """:class:`Selector` backed by the terminal."""

    async def pick(self, labels: Sequence[str], placeholder: str = "") -> str | None:
        if not labels:
            return None
        return _select(placeholder or "Choose one", labels)

    async def pick_or_edit(
        self, labels: Sequence[str], placeholder: str = ""
    ) -> str | None:
        return _select_or_type(placeholder or "Choose or type a value", labels)

    async def confirm(self, question: str, default: bool = True) -> bool:
        return _confirm(question, default)
