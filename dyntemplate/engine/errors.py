"""Exceptions raised by the template engine."""

from __future__ import annotations


class TemplateError(Exception):
    """Base class for template engine failures."""


class ConfigEvaluationError(TemplateError):
    """A configuration source could not be evaluated into a template map."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class AnchorNotSelectedError(TemplateError):
    """The user cancelled the base-directory prompt for relative paths."""

    def __init__(self) -> None:
        super().__init__("No anchordir selected for template.")


class TemplateNotFoundError(TemplateError):
    """The requested template name is not defined by any configuration source."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Template not found: {key!r}")
