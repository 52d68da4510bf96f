"""Storage adapter: the file operations the engine needs, as coroutines."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol


class Storage(Protocol):
    async def exists(self, path: str) -> bool: ...

    async def read_text(self, path: str) -> str: ...

    async def write_text(self, path: str, content: str) -> None: ...


def _exists(path: Path) -> bool:
    try:
        path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return False
    return True


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parents and write *content*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class LocalStorage:
    """Local file system, with blocking calls pushed to worker threads.

    Only a missing entry counts as "does not exist"; permission problems and
    other ``OSError`` subclasses propagate to the caller.
    """

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(_exists, Path(path))

    async def read_text(self, path: str) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")

    async def write_text(self, path: str, content: str) -> None:
        await asyncio.to_thread(_write_file, Path(path), content)
