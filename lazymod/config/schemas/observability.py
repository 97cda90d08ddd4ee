"""Observability + API surface schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    level: str = Field("info", pattern="^(debug|info|warn|error)$")
    format: str = Field("text", pattern="^(json|text)$")

    model_config = ConfigDict(extra="forbid")


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = ConfigDict(extra="forbid")
