"""Dependency-graph walk.

`resolve(name)` makes sure every requirement of `name` is in a terminal
state (depth-first, left-to-right) and then initializes the module with
the requirements' results in declared order.

Cycle detection uses the active path: the names currently being resolved,
shared across re-entrant calls (an initializer resolving another module by
name extends the same path). WAITING mirrors membership in that path on
the records; terminal state alone decides "already initialized".
"""
from __future__ import annotations

from .exceptions import CircularDependencyError, UndefinedModuleError
from .initializer import Initializer
from .module import Module, ModuleState
from .registry import ModuleRegistry


class Resolver:
    def __init__(
        self, registry: ModuleRegistry, initializer: Initializer
    ) -> None:
        self._registry = registry
        self._initializer = initializer
        self._path: list[str] = []
        self._active: set[str] = set()

    @property
    def busy(self) -> bool:
        """True while a dependency walk is on the stack."""
        return bool(self._path)

    def resolve(self, name: str) -> Module:
        module = self._registry.get(name)
        if module is None:
            raise UndefinedModuleError(name, required_by=self._path)
        if name in self._active:
            raise CircularDependencyError([*self._path, name])
        if module.terminal:
            return module

        self._path.append(name)
        self._active.add(name)
        module.state = ModuleState.WAITING
        try:
            args = [
                self.resolve(req).result for req in module.requirements
            ]
            self._initializer.initialize(module, *args)
        except BaseException:
            # dependency walk aborted: retryable once the graph is fixed
            if module.state is ModuleState.WAITING:
                module.state = ModuleState.UNPROCESSED
            raise
        finally:
            self._path.pop()
            self._active.discard(name)
        return module


__all__ = ["Resolver"]
