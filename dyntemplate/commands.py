"""Command entry points: expand a template, edit a configuration.

``TemplateCommands`` owns everything that lives for a whole session (the
anchor history, the host state) and wires a fresh loader and expander
together on every invocation, so configuration edits are picked up without
restarting.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field

from dyntemplate.config import Settings
from dyntemplate.engine.anchor import AnchorHistory, AnchorResolver
from dyntemplate.engine.context import Helpers, HostState
from dyntemplate.engine.errors import TemplateNotFoundError
from dyntemplate.engine.expander import ExpansionResult, TemplateExpander
from dyntemplate.engine.loader import ConfigLoader, find_config_sources
from dyntemplate.engine.models import TemplateMap
from dyntemplate.engine.sample import SAMPLE_CONFIG
from dyntemplate.engine.storage import LocalStorage, Storage
from dyntemplate.prompts import Selector

logger = logging.getLogger(__name__)

EDIT_TEMPLATE_KEY = "<Edit Template>"


class ExpandOptions(BaseModel):
    """Options of a single expand invocation."""

    overwrite: bool = Field(default=True, description="Replace existing files")
    basedir: str | None = Field(default=None, description="Base directory for relative paths")
    key: str | None = Field(default=None, description="Template name; skips the picker")
    configs: list[str] = Field(
        default_factory=list, description="Extra configuration sources for this call only"
    )


class TemplateCommands:
    """Session-level command handlers.

    Attributes:
        settings: Discovery and tuning settings.
        host: Host state shared with template helpers.
        selector: Interactive UI.
        storage: File operations for configs and expanded files.
        history: Base directories chosen during this session.
    """

    def __init__(
        self,
        settings: Settings,
        host: HostState,
        selector: Selector,
        storage: Storage | None = None,
        history: AnchorHistory | None = None,
    ) -> None:
        self.settings = settings
        self.host = host
        self.selector = selector
        self.storage = storage or LocalStorage()
        self.history = history if history is not None else AnchorHistory(settings.history_size)
        self.helpers = Helpers.for_host(host, fetch_timeout=settings.fetch_timeout)

    # -- Building blocks ---------------------------------------------------

    def config_sources(self, extra: Sequence[str] = ()) -> list[str]:
        return [*extra, *find_config_sources(self.settings, self.host)]

    async def load_templates(self, sources: Sequence[str]) -> TemplateMap:
        loader = ConfigLoader(self.host, storage=self.storage, helpers=self.helpers)
        return await loader.load(sources)

    def expander(self) -> TemplateExpander:
        resolver = AnchorResolver(self.selector, self.host, self.history)
        return TemplateExpander(storage=self.storage, anchor_resolver=resolver)

    # -- Commands ----------------------------------------------------------

    async def expand_template(
        self, options: ExpandOptions | None = None
    ) -> list[ExpansionResult] | None:
        """Load configurations, pick a template and expand it.

        Returns the expansion results, or ``None`` when nothing was expanded
        (no configuration, picker cancelled, or the edit entry was chosen).

        Raises:
            TemplateNotFoundError: ``options.key`` names no loaded template.
            AnchorNotSelectedError: The base-directory prompt was cancelled.
        """
        options = options or ExpandOptions()
        sources = self.config_sources(options.configs)
        templates = await self.load_templates(sources)

        if not templates:
            if await self.selector.confirm("No configuration found. Create one?"):
                await self.bootstrap_config(sources)
            return None

        key = options.key or await self.selector.pick(
            [*templates, EDIT_TEMPLATE_KEY], placeholder="Choose a template"
        )
        if key == EDIT_TEMPLATE_KEY:
            await self.edit_config(sources)
            return None
        if not key:
            return None
        if key not in templates:
            raise TemplateNotFoundError(key)

        logger.debug("Expanding %r (%d entries)", key, len(templates[key]))
        return await self.expander().expand(
            templates[key], overwrite=options.overwrite, basedir=options.basedir
        )

    async def edit_config(self, sources: Sequence[str] | None = None) -> str | None:
        """Let the user pick a configuration source and open it.

        A source that does not exist yet is first created from the sample
        configuration. Returns the opened path, or ``None`` if cancelled.
        """
        if sources is None:
            sources = self.config_sources()
        source = await self.selector.pick(
            list(dict.fromkeys(sources)), placeholder="Choose a configuration to edit"
        )
        if source is None:
            return None
        return await self._open_config(source)

    async def bootstrap_config(self, sources: Sequence[str]) -> str | None:
        """Write the sample configuration to the first candidate source and open it."""
        if not sources:
            return None
        return await self._open_config(sources[0])

    async def _open_config(self, source: str) -> str:
        if not await self.storage.exists(source):
            await self.storage.write_text(source, SAMPLE_CONFIG)
            logger.info("Created sample configuration at %s", source)
        self.host.open_path(source)
        return source
