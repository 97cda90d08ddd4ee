"""Module runtime config schema (definition scripts + startup behaviour)."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ModulesConfig(BaseModel):
    # Directory holding definition scripts (<scripts_dir>/<name><suffix>)
    scripts_dir: str = "modules"
    suffix: str = Field(".py", pattern=r"^\.[A-Za-z0-9_]+$")
    # Execute every script under scripts_dir at startup, then fire ready()
    autoload: bool = True
    # Fetch known-but-unregistered requirement names before ready()
    preload_missing: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("scripts_dir")
    @classmethod
    def _dir_not_empty(cls, v: str) -> str:  # noqa: D401
        if not v.strip():
            raise ValueError("scripts_dir cannot be empty")
        return v
