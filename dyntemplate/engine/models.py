"""Data model shared by the loader and the expander.

A template is a named, ordered list of :class:`FileTemplate` entries. Each
entry's ``path`` and ``body`` may be a literal or a callable computing it;
``resolve_path`` / ``resolve_body`` hide that difference so the expander only
ever asks for a value. Callables may also return awaitables.
"""

from __future__ import annotations

import inspect
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .errors import ConfigEvaluationError

PathSpec = str | Callable[[], Any] | None
BodySpec = str | Callable[[str], Any] | None
Hook = Callable[[str, Any], Any]

_FIELDS = ("path", "body", "hook")


async def _settle(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class FileTemplate:
    """One file-production unit: where to write, what to write, what to run after."""

    path: PathSpec = None
    body: BodySpec = None
    hook: Hook | None = None

    async def resolve_path(self) -> str | None:
        """Evaluate ``path``. Anything but a non-empty string resolves to ``None``."""
        value = await _settle(self.path() if callable(self.path) else self.path)
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if isinstance(value, str) and value:
            return value
        return None

    async def resolve_body(self, path: str) -> str | None:
        """Evaluate ``body`` for the resolved *path*."""
        value = await _settle(self.body(path) if callable(self.body) else self.body)
        if value is not None and not isinstance(value, str):
            raise TypeError(
                f"body for {path} must be a string or None, got {type(value).__name__}"
            )
        return value

    async def run_hook(self, path: str, body: str | None) -> bool:
        """Call ``hook(path, body)`` if set. Returns whether a hook ran."""
        if not callable(self.hook):
            return False
        await _settle(self.hook(path, body))
        return True

    @classmethod
    def from_descriptor(cls, descriptor: Any) -> "FileTemplate":
        """Build an entry from a dict, an object with matching attributes, or an entry.

        Raises:
            TypeError: If *descriptor* is none of those.
        """
        if isinstance(descriptor, FileTemplate):
            return descriptor
        if isinstance(descriptor, Mapping):
            return cls(**{name: descriptor.get(name) for name in _FIELDS})
        if not any(hasattr(descriptor, name) for name in _FIELDS):
            raise TypeError(f"not a file entry: {descriptor!r}")
        return cls(**{name: getattr(descriptor, name, None) for name in _FIELDS})


TemplateMap = dict[str, list[FileTemplate]]


def coerce_template_map(raw: Any, source: str) -> TemplateMap:
    """Validate what ``get_template()`` returned and convert it to a ``TemplateMap``.

    Raises:
        ConfigEvaluationError: If *raw* is not a mapping of non-empty names
            to lists of descriptors.
    """
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigEvaluationError(
            source, f"get_template() must return a mapping, got {type(raw).__name__}"
        )

    templates: TemplateMap = {}
    for name, entries in raw.items():
        if not isinstance(name, str) or not name:
            raise ConfigEvaluationError(source, f"invalid template name: {name!r}")
        if isinstance(entries, (str, bytes)) or not isinstance(entries, (list, tuple)):
            raise ConfigEvaluationError(
                source, f"template {name!r} must be a list of file entries"
            )
        try:
            templates[name] = [FileTemplate.from_descriptor(entry) for entry in entries]
        except TypeError as exc:
            raise ConfigEvaluationError(source, f"template {name!r}: {exc}") from exc
    return templates
