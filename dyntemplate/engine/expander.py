"""Template expansion: turn a list of file entries into files on disk.

Expansion runs in two steps. First every entry's path is resolved; if any of
them is relative and no base directory was given, the anchor resolver is
asked exactly once and its answer is shared by the whole batch. Cancelling
that prompt aborts the batch before anything is written. Then all entries
are materialized concurrently: body resolution, the existence check, the
write decision, and finally the entry's hook.

Write decision per entry:

=================  =================  ======================
target exists      body is ``None``   result
=================  =================  ======================
no                 no                 written (``created``)
no                 yes                nothing (``no-body``)
yes, overwrite     no                 written (``overwritten``)
yes, overwrite     yes                nothing (``skipped``)
yes, no overwrite  either             nothing (``skipped``)
=================  =================  ======================

The hook runs after the decision whatever it was, but not when the storage
layer raised.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .anchor import AnchorResolver
from .errors import AnchorNotSelectedError
from .models import FileTemplate
from .storage import LocalStorage, Storage

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    """What happened to a single file entry."""

    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"
    NO_BODY = "no-body"

    @property
    def wrote(self) -> bool:
        return self in (Outcome.CREATED, Outcome.OVERWRITTEN)


@dataclass(frozen=True)
class ExpansionResult:
    path: str
    outcome: Outcome
    hooked: bool = False


class TemplateExpander:
    """Materializes :class:`FileTemplate` entries through a storage adapter.

    Attributes:
        storage: File operations used for the existence check and writes.
        anchor_resolver: Asked for a base directory when a relative path
            shows up and none was given. Without one, relative paths fail.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        anchor_resolver: AnchorResolver | None = None,
    ) -> None:
        self.storage = storage or LocalStorage()
        self.anchor_resolver = anchor_resolver

    # -- Public API --------------------------------------------------------

    async def expand(
        self,
        templates: Sequence[FileTemplate],
        *,
        overwrite: bool = False,
        basedir: str | None = None,
    ) -> list[ExpansionResult]:
        """Expand *templates* and return one result per entry that had a path.

        Args:
            templates: Entries of the selected template, in declared order.
            overwrite: Replace existing files when the entry has a body.
            basedir: Base directory for relative paths. Prompted for (once)
                when missing and needed.

        Raises:
            AnchorNotSelectedError: A relative path needed a base directory
                and the user cancelled the prompt.
        """
        resolved = await asyncio.gather(*(tp.resolve_path() for tp in templates))
        pending = [(tp, path) for tp, path in zip(templates, resolved) if path]

        if any(not os.path.isabs(path) for _, path in pending):
            basedir = basedir or await self._ask_basedir()
            pending = [
                (tp, path if os.path.isabs(path) else _join(basedir, path))
                for tp, path in pending
            ]

        results = await asyncio.gather(
            *(self._materialize(tp, path, overwrite) for tp, path in pending)
        )
        return list(results)

    # -- Internal helpers --------------------------------------------------

    async def _ask_basedir(self) -> str:
        basedir = None
        if self.anchor_resolver is not None:
            basedir = await self.anchor_resolver.resolve()
        if not basedir:
            raise AnchorNotSelectedError()
        return basedir

    async def _materialize(
        self, template: FileTemplate, path: str, overwrite: bool
    ) -> ExpansionResult:
        body = await template.resolve_body(path)

        if not await self.storage.exists(path):
            outcome = Outcome.NO_BODY if body is None else Outcome.CREATED
        elif overwrite and body is not None:
            outcome = Outcome.OVERWRITTEN
        else:
            outcome = Outcome.SKIPPED

        if outcome.wrote:
            await self.storage.write_text(path, body)
        logger.debug("%s: %s", path, outcome.value)

        hooked = await template.run_hook(path, body)
        return ExpansionResult(path=path, outcome=outcome, hooked=hooked)


def _join(basedir: str, path: str) -> str:
    return os.path.normpath(os.path.join(os.path.expanduser(basedir), path))


async def expand_templates(
    templates: Sequence[FileTemplate],
    *,
    overwrite: bool = False,
    basedir: str | None = None,
    storage: Storage | None = None,
    anchor_resolver: AnchorResolver | None = None,
) -> list[ExpansionResult]:
    """Convenience wrapper around :meth:`TemplateExpander.expand`."""
    expander = TemplateExpander(storage=storage, anchor_resolver=anchor_resolver)
    return await expander.expand(templates, overwrite=overwrite, basedir=basedir)
