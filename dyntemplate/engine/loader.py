"""Configuration discovery and loading.

A configuration source is a Python file that defines ``get_template()``::

    def get_template():
        return {
            "Daily note": [
                {"path": f"notes/{YMD}.md", "body": f"# {YMD}\\n"},
            ],
        }

The file is executed as a fresh module whose globals are pre-populated
from :class:`~dyntemplate.engine.context.VariableContext`, so ``YMD``,
``file_dirname``, ``vsopen`` and friends can be used directly. Sources are
trusted code: this is the user's own configuration on their own machine.
"""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import itertools
import logging
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from dyntemplate.config import Settings

from .context import Helpers, HostState, VariableContext, build_context
from .errors import ConfigEvaluationError
from .models import TemplateMap, coerce_template_map
from .storage import LocalStorage, Storage

logger = logging.getLogger(__name__)

ENTRY_POINT = "get_template"
MODULE_PREFIX = "dyntemplate_config_"

_module_ids = itertools.count()


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def find_config_sources(
    settings: Settings,
    host: HostState,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Return candidate configuration paths, lowest precedence first.

    Order: explicit ``settings.config_files``, then one source per workspace
    folder, then the per-user sources under ``$HOME`` and ``$USERPROFILE``.
    None of them has to exist.
    """
    env = os.environ if environ is None else environ
    sources = list(settings.config_files)

    for folder in host.workspace_folders:
        sources.append(str(settings.source_path(folder)))

    for var in ("HOME", "USERPROFILE"):
        if env.get(var):
            sources.append(str(settings.source_path(env[var])))

    return sources


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def evaluate_source(code: str, source: str, context: VariableContext) -> Any:
    """Execute *code* as a module and return what its ``get_template()`` returns.

    The module is registered in ``sys.modules`` under a unique name while it
    runs and while ``get_template()`` is called, so class decorators that look
    up their defining module (``@dataclass`` and friends) work.
    The return value may be an awaitable; awaiting it is the caller's job.

    Raises:
        ConfigEvaluationError: On syntax errors, exceptions while executing
            the module or ``get_template()``, or if ``get_template`` is missing.
    """
    name = f"{MODULE_PREFIX}{next(_module_ids)}"
    spec = importlib.util.spec_from_loader(name, loader=None, origin=source)
    module = importlib.util.module_from_spec(spec)
    module.__file__ = source
    namespace = module.__dict__
    namespace.update(context.as_namespace())

    sys.modules[name] = module
    try:
        try:
            exec(compile(code, source, "exec"), namespace)
        except Exception as exc:
            raise ConfigEvaluationError(source, f"{type(exc).__name__}: {exc}") from exc

        get_template = namespace.get(ENTRY_POINT)
        if not callable(get_template):
            raise ConfigEvaluationError(source, f"does not define {ENTRY_POINT}()")

        try:
            return get_template()
        except Exception as exc:
            raise ConfigEvaluationError(
                source, f"{ENTRY_POINT}() raised {type(exc).__name__}: {exc}"
            ) from exc
    finally:
        sys.modules.pop(name, None)


class ConfigLoader:
    """Loads and merges template maps from a list of configuration sources.

    Attributes:
        host: Host state the variable context is built from.
        storage: Where sources are read from.
        helpers: Helper functions injected into every source.
    """

    def __init__(
        self,
        host: HostState,
        storage: Storage | None = None,
        helpers: Helpers | None = None,
        environ: Mapping[str, str] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.host = host
        self.storage = storage or LocalStorage()
        self.helpers = helpers or Helpers.for_host(host)
        self.environ = environ
        self.clock = clock

    async def load(self, sources: Sequence[str]) -> TemplateMap:
        """Load every source concurrently and merge them in declared order.

        A template name defined by a later source replaces the same name from
        an earlier one. Missing or broken sources contribute nothing.
        """
        now = self.clock()
        contributions = await asyncio.gather(
            *(self._load_source(source, now) for source in sources)
        )

        merged: TemplateMap = {}
        for contribution in contributions:
            merged.update(contribution)
        return merged

    async def _load_source(self, source: str, now: datetime) -> TemplateMap:
        try:
            code = await self.storage.read_text(source)
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("No template config at %s", source)
            return {}
        except Exception:
            logger.error("Cannot read template config %s", source, exc_info=True)
            return {}

        context = build_context(
            os.path.dirname(source),
            self.host,
            now=now,
            environ=self.environ,
            helpers=self.helpers,
        )
        try:
            raw = evaluate_source(code, source, context)
            if inspect.isawaitable(raw):
                raw = await raw
            templates = coerce_template_map(raw, source)
        except ConfigEvaluationError as exc:
            logger.error("Ignoring template config: %s", exc, exc_info=exc.__cause__)
            return {}
        except Exception:
            logger.error("Ignoring template config %s", source, exc_info=True)
            return {}

        logger.debug("Loaded %d template(s) from %s", len(templates), source)
        return templates


async def load_config(
    sources: Sequence[str],
    host: HostState | None = None,
    **kwargs: Any,
) -> TemplateMap:
    """Convenience wrapper around :meth:`ConfigLoader.load`."""
    return await ConfigLoader(host or HostState(), **kwargs).load(sources)
