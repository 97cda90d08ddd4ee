"""Central error taxonomy for module registration / resolution."""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # registration
    "duplicate-module",
    # resolution
    "undefined-module",
    "circular-dependency",
    "already-processed",
    # initialization
    "initializer-error",
    # fetch (definition scripts)
    "fetch-failed",
    # config
    "config-out-of-range",
    "config-invalid",
    # infra
    "event-handler-error",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


def map_exception(e: BaseException) -> str:
    """Map an exception to a taxonomy code.

    Exceptions from ``lazymod.modules`` carry their own ``error_type``;
    anything else raised by user code is an initializer error.
    """
    code = getattr(e, "error_type", None)
    if isinstance(code, str) and code in _ALLOWED_ERROR_TYPES:
        return code
    name = e.__class__.__name__.lower()
    if "config" in name:
        return "config-invalid"
    return "initializer-error"


__all__ = ["validate_error_type", "map_exception"]
