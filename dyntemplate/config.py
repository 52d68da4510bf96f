"""dyntemplate configuration.

Typed settings for template discovery and expansion. Uses a Pydantic v2 model
so values are validated at construction time and can be round-tripped
through JSON or read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Global dyntemplate settings.

    ``config_files`` plays the role of the host's ``configFiles`` setting:
    explicit configuration sources that are always tried first. The
    remaining fields control where per-workspace and per-user sources are
    looked up, and tune the interactive parts of the tool.
    """

    config_files: list[str] = Field(
        default_factory=list,
        description="Explicit configuration sources, tried before discovered ones",
    )
    extension_id: str = Field(default="dynamic-template", min_length=1)
    config_dirname: str = Field(default=".vscode", min_length=1)
    config_filename: str = Field(default="template.py", min_length=1)
    history_size: int = Field(
        default=10, ge=1, description="How many base directories to remember"
    )
    fetch_timeout: float = Field(
        default=30.0, gt=0, description="Timeout in seconds for the vsget helper"
    )
    editor: str | None = Field(
        default=None, description="Command used to open files (falls back to $VISUAL/$EDITOR)"
    )

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def source_path(self, root: str | Path) -> Path:
        """Return ``<root>/<config_dirname>/extensions/<extension_id>/<config_filename>``."""
        return (
            Path(root)
            / self.config_dirname
            / "extensions"
            / self.extension_id
            / self.config_filename
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Settings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            DYNTEMPLATE_CONFIG_FILES (``os.pathsep`` separated),
            DYNTEMPLATE_EXTENSION_ID, DYNTEMPLATE_HISTORY_SIZE,
            DYNTEMPLATE_FETCH_TIMEOUT, DYNTEMPLATE_EDITOR.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, Any] = {}

        files = env.get("DYNTEMPLATE_CONFIG_FILES", "")
        if files:
            kwargs["config_files"] = [f for f in files.split(os.pathsep) if f.strip()]
        if env.get("DYNTEMPLATE_EXTENSION_ID"):
            kwargs["extension_id"] = env["DYNTEMPLATE_EXTENSION_ID"]
        if env.get("DYNTEMPLATE_HISTORY_SIZE"):
            kwargs["history_size"] = int(env["DYNTEMPLATE_HISTORY_SIZE"])
        if env.get("DYNTEMPLATE_FETCH_TIMEOUT"):
            kwargs["fetch_timeout"] = float(env["DYNTEMPLATE_FETCH_TIMEOUT"])
        if env.get("DYNTEMPLATE_EDITOR"):
            kwargs["editor"] = env["DYNTEMPLATE_EDITOR"]

        return cls(**kwargs)
