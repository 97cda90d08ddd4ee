"""Module runtime exception hierarchy."""
from __future__ import annotations

from typing import Sequence


class ModuleError(Exception):
    """Base module runtime exception."""

    error_type = "initializer-error"


class DuplicateModuleError(ModuleError):
    """A module with this name is already registered."""

    error_type = "duplicate-module"

    def __init__(self, name: str) -> None:
        super().__init__(f'Module "{name}" cannot be redefined')
        self.name = name


class ResolutionError(ModuleError):
    """Resolution of a dependency graph could not proceed.

    Propagates to whoever triggered the resolve; the modules on the path
    are left UNPROCESSED.
    """


class UndefinedModuleError(ResolutionError):
    error_type = "undefined-module"

    def __init__(self, name: str, required_by: Sequence[str] = ()) -> None:
        msg = f'No "{name}" module defined'
        if required_by:
            msg += f' (required by "{required_by[-1]}")'
        super().__init__(msg)
        self.name = name
        self.required_by = tuple(required_by)


class CircularDependencyError(ResolutionError):
    error_type = "circular-dependency"

    def __init__(self, chain: Sequence[str]) -> None:
        rendered = " > ".join(f'"{m}"' for m in chain)
        super().__init__(f"Circular dependency! Dependency chain: {rendered}")
        self.chain = tuple(chain)


class AlreadyProcessedError(ModuleError):
    """Initializer invoked twice for one module (invariant violation)."""

    error_type = "already-processed"

    def __init__(self, name: str) -> None:
        super().__init__(f'Module "{name}" has already been processed')
        self.name = name


class ModuleInitializationError(ModuleError):
    """Failure raised by a module's own initializer.

    Recorded on the module (``module.error``) and reported, never raised
    to the resolver's caller. ``original`` is the exception the
    initializer raised.
    """

    error_type = "initializer-error"

    def __init__(self, name: str, original: BaseException) -> None:
        super().__init__(f"[Module initialization {name}] {original}")
        self.name = name
        self.original = original
        self.__cause__ = original


class ModuleFetchError(ModuleError):
    """Definition script missing, outside the root, or failed to run."""

    error_type = "fetch-failed"

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f'Cannot fetch module "{name}": {reason}')
        self.name = name
        self.reason = reason


__all__ = [
    "ModuleError",
    "DuplicateModuleError",
    "ResolutionError",
    "UndefinedModuleError",
    "CircularDependencyError",
    "AlreadyProcessedError",
    "ModuleInitializationError",
    "ModuleFetchError",
]
