"""Modules package: lazy, dependency-ordered module initialization.

Public surface:
 - ModuleRuntime: register / lookup / resolve / resolve_by_name / ready
 - Module, ModuleState, ModuleAccessor: records handed to initializers
 - ScriptFetcher: definition scripts keyed by module name
 - get_runtime(): process-wide runtime built from config
"""
from __future__ import annotations

from .exceptions import (  # noqa: F401
    AlreadyProcessedError,
    CircularDependencyError,
    DuplicateModuleError,
    ModuleError,
    ModuleFetchError,
    ModuleInitializationError,
    ResolutionError,
    UndefinedModuleError,
)
from .fetcher import ScriptFetcher, ScriptLoadReport  # noqa: F401
from .module import Module, ModuleAccessor, ModuleState  # noqa: F401
from .registry import ModuleRegistry  # noqa: F401
from .runtime import (  # noqa: F401
    BulkRunReport,
    ModuleRuntime,
    ResolutionFailure,
    build_runtime,
    get_runtime,
    reset_runtime_for_tests,
)

__all__ = [
    "ModuleRuntime",
    "ModuleRegistry",
    "Module",
    "ModuleState",
    "ModuleAccessor",
    "ScriptFetcher",
    "ScriptLoadReport",
    "BulkRunReport",
    "ResolutionFailure",
    "build_runtime",
    "get_runtime",
    "reset_runtime_for_tests",
    "ModuleError",
    "DuplicateModuleError",
    "ResolutionError",
    "UndefinedModuleError",
    "CircularDependencyError",
    "AlreadyProcessedError",
    "ModuleInitializationError",
    "ModuleFetchError",
]
