"""Interactive choice of the base directory for relative template paths."""

from __future__ import annotations

import os
from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .context import HostState

if TYPE_CHECKING:
    from dyntemplate.prompts import Selector

ANCHOR_PLACEHOLDER = "Enter base folder to expand template(s)"


class AnchorHistory:
    """Recently chosen base directories, most recent first, without duplicates."""

    def __init__(self, maxlen: int = 10) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be at least 1")
        self._entries: deque[str] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._entries.maxlen or 0

    def remember(self, directory: str) -> None:
        """Move *directory* to the front, dropping the oldest entry if full."""
        try:
            self._entries.remove(directory)
        except ValueError:
            pass
        self._entries.appendleft(directory)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AnchorHistory({list(self._entries)!r}, maxlen={self.maxlen})"


def _append_unique(candidates: list[str], directory: str | None) -> None:
    if directory and directory not in candidates:
        candidates.append(directory)


class AnchorResolver:
    """Asks the user for a base directory, offering likely candidates.

    Candidates are listed in this order, each only once: remembered choices,
    the active file's directory, directories of the other visible files, and
    workspace folder roots. The user may also type any other path.
    """

    def __init__(
        self,
        selector: "Selector",
        host: HostState,
        history: AnchorHistory | None = None,
    ) -> None:
        self.selector = selector
        self.host = host
        self.history = history if history is not None else AnchorHistory()

    def candidates(self) -> list[str]:
        dirs: list[str] = []
        for entry in self.history:
            _append_unique(dirs, entry)

        if self.host.active_file:
            _append_unique(dirs, os.path.dirname(self.host.active_file))

        for visible in self.host.visible_files:
            _append_unique(dirs, os.path.dirname(visible))

        for folder in self.host.workspace_folders:
            _append_unique(dirs, folder)

        return dirs

    async def resolve(self) -> str | None:
        """Return the chosen directory, or ``None`` if the user cancelled."""
        choice = await self.selector.pick_or_edit(
            self.candidates(), placeholder=ANCHOR_PLACEHOLDER
        )
        if choice:
            self.history.remember(choice)
            return choice
        return None
