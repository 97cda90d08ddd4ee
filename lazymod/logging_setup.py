"""Logging setup for the `lazymod` logger tree (text or JSON lines)."""
from __future__ import annotations

import json
import logging
from typing import Any

from lazymod.config.schemas.observability import LoggingConfig

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Marker so repeated configure_logging() calls replace our handler only
_HANDLER_ATTR = "_lazymod_handler"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data: dict[str, Any] = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        module = getattr(record, "module_name", None)
        if module is not None:
            data["module"] = module
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def configure_logging(
    cfg: LoggingConfig | None = None, stream: Any = None
) -> logging.Logger:
    cfg = cfg or LoggingConfig()
    root = logging.getLogger("lazymod")
    for h in list(root.handlers):
        if getattr(h, _HANDLER_ATTR, False):
            root.removeHandler(h)
    handler = logging.StreamHandler(stream)
    setattr(handler, _HANDLER_ATTR, True)
    if cfg.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(_LEVELS[cfg.level])
    return root


__all__ = ["configure_logging", "JsonFormatter"]
