"""Variables and helpers visible to configuration code.

Every configuration source is evaluated with a :class:`VariableContext`
bound as module globals. Time values come from a single clock reading so
that all sources loaded in one run agree on them; ``config_dir`` differs per
source.

Names available to a ``template.py``:

==================  ===========================================================
``YEAR``            four-digit year, e.g. ``"2024"``
``MON``             month, zero-padded (``"01"`` .. ``"12"``)
``DATE``            day of month, zero-padded
``HOUR``            hour, zero-padded, 24h clock
``MIN``             minute, zero-padded
``YMD``             ``YEAR + MON + DATE``, e.g. ``"20240105"``
``NOW``             the ``datetime`` the values above were taken from
``file``            path of the active file, or ``None``
``file_dirname``    directory of ``file``, or ``None``
``config_dir``      directory containing the configuration source
``HOME``            ``$HOME``, falling back to ``$USERPROFILE``
``vsopen(path)``    open *path* in the editor (fire-and-forget)
``vsadd(path)``     add *path* as a workspace folder
``vsexec(cmd)``     run a shell command (fire-and-forget)
``vsget(url)``      coroutine returning the body of *url*
==================  ===========================================================
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dyntemplate.utils import fetch_url, opener_command, spawn_detached


@dataclass
class HostState:
    """Snapshot of the editor/host the tool runs in.

    ``workspace_folders`` is mutable: ``vsadd`` inserts into it, and later
    anchor prompts in the same session offer the added folder.
    """

    active_file: str | None = None
    visible_files: list[str] = field(default_factory=list)
    workspace_folders: list[str] = field(default_factory=list)
    editor: str | None = None

    def open_path(self, path: str) -> None:
        editor = self.editor or os.environ.get("VISUAL") or os.environ.get("EDITOR")
        spawn_detached(opener_command(path, editor))

    def add_workspace_folder(self, path: str) -> None:
        if path not in self.workspace_folders:
            self.workspace_folders.insert(0, path)


@dataclass(frozen=True)
class Helpers:
    """Host actions offered to configuration code."""

    vsopen: Callable[[str], None]
    vsadd: Callable[[str], None]
    vsexec: Callable[[str], None]
    vsget: Callable[[str], Awaitable[str]]

    @classmethod
    def for_host(cls, host: HostState, fetch_timeout: float = 30.0) -> "Helpers":
        def vsexec(cmd: str) -> None:
            spawn_detached(cmd)

        async def vsget(url: str) -> str:
            return await fetch_url(url, timeout=fetch_timeout)

        return cls(
            vsopen=host.open_path,
            vsadd=host.add_workspace_folder,
            vsexec=vsexec,
            vsget=vsget,
        )


@dataclass(frozen=True)
class VariableContext:
    NOW: datetime
    YEAR: str
    MON: str
    DATE: str
    HOUR: str
    MIN: str
    YMD: str
    file: str | None
    file_dirname: str | None
    config_dir: str
    HOME: str | None
    helpers: Helpers

    def as_namespace(self) -> dict[str, Any]:
        """Return the globals a configuration module is evaluated with."""
        return {
            "NOW": self.NOW,
            "YEAR": self.YEAR,
            "MON": self.MON,
            "DATE": self.DATE,
            "HOUR": self.HOUR,
            "MIN": self.MIN,
            "YMD": self.YMD,
            "file": self.file,
            "file_dirname": self.file_dirname,
            "config_dir": self.config_dir,
            "HOME": self.HOME,
            "vsopen": self.helpers.vsopen,
            "vsadd": self.helpers.vsadd,
            "vsexec": self.helpers.vsexec,
            "vsget": self.helpers.vsget,
        }


def _two_digits(value: int) -> str:
    return f"{value:02d}"


def home_directory(environ: Mapping[str, str] | None = None) -> str | None:
    """Return ``HOME`` or, failing that, ``USERPROFILE``; ``None`` if neither is set."""
    env = os.environ if environ is None else environ
    return env.get("HOME") or env.get("USERPROFILE") or None


def build_context(
    config_dir: str,
    host: HostState,
    *,
    now: datetime | None = None,
    environ: Mapping[str, str] | None = None,
    helpers: Helpers | None = None,
) -> VariableContext:
    """Assemble the variables for one configuration source.

    Args:
        config_dir: Directory of the configuration source being evaluated.
        host: Current host state (active file, workspace folders).
        now: Clock reading to derive time values from; defaults to now.
        environ: Environment to read ``HOME``/``USERPROFILE`` from.
        helpers: Helper functions; defaults to ones bound to *host*.
    """
    now = now or datetime.now()
    year = str(now.year)
    month = _two_digits(now.month)
    day = _two_digits(now.day)

    active = host.active_file or None
    return VariableContext(
        NOW=now,
        YEAR=year,
        MON=month,
        DATE=day,
        HOUR=_two_digits(now.hour),
        MIN=_two_digits(now.minute),
        YMD=f"{year}{month}{day}",
        file=active,
        file_dirname=os.path.dirname(active) if active else None,
        config_dir=config_dir,
        HOME=home_directory(environ),
        helpers=helpers or Helpers.for_host(host),
    )
