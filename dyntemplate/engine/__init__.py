"""dyntemplate engine: load template configurations and expand them to files.

Quick usage::

    from dyntemplate.engine import ConfigLoader, HostState, TemplateExpander

    host = HostState(workspace_folders=["/home/me/project"])
    templates = await ConfigLoader(host).load(["/home/me/template.py"])
    results = await TemplateExpander().expand(
        templates["Daily note"], basedir="/home/me/notes"
    )
"""

from dyntemplate.engine.anchor import AnchorHistory, AnchorResolver
from dyntemplate.engine.context import Helpers, HostState, VariableContext, build_context
from dyntemplate.engine.errors import (
    AnchorNotSelectedError,
    ConfigEvaluationError,
    TemplateError,
    TemplateNotFoundError,
)
from dyntemplate.engine.expander import ExpansionResult, Outcome, TemplateExpander
from dyntemplate.engine.loader import ConfigLoader, find_config_sources, load_config
from dyntemplate.engine.models import FileTemplate, TemplateMap
from dyntemplate.engine.storage import LocalStorage, Storage

__all__ = [
    "AnchorHistory",
    "AnchorNotSelectedError",
    "AnchorResolver",
    "ConfigEvaluationError",
    "ConfigLoader",
    "ExpansionResult",
    "FileTemplate",
    "Helpers",
    "HostState",
    "LocalStorage",
    "Outcome",
    "Storage",
    "TemplateError",
    "TemplateExpander",
    "TemplateMap",
    "TemplateNotFoundError",
    "VariableContext",
    "build_context",
    "find_config_sources",
    "load_config",
]
