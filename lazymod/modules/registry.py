"""Module registry: name → Module store with uniqueness enforcement.

Pure data store. Records are never removed; iteration follows
registration order. `known_requirements` accumulates every name ever
listed as a requirement (introspection / preloading only).
"""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, Optional

from .exceptions import DuplicateModuleError
from .module import Module, ModuleInitializerFn


class ModuleRegistry:
    def __init__(self) -> None:
        self._modules: Dict[str, Module] = {}
        # dict as insertion-ordered set
        self._known_requirements: Dict[str, None] = {}

    def add(
        self,
        name: str,
        requirements: Iterable[str],
        initializer: ModuleInitializerFn,
    ) -> Module:
        if name in self._modules:
            raise DuplicateModuleError(name)
        if isinstance(requirements, str):
            raise TypeError(
                f'Module "{name}" requirements must be a list of names'
            )
        if not callable(initializer):
            raise TypeError(f'Module "{name}" initializer is not callable')
        module = Module(
            name=name,
            requirements=tuple(requirements),
            initializer=initializer,
        )
        self._modules[name] = module
        for req in module.requirements:
            self._known_requirements.setdefault(req, None)
        return module

    def get(self, name: str) -> Optional[Module]:
        return self._modules.get(name)

    def names(self) -> list[str]:
        return list(self._modules)

    @property
    def known_requirements(self) -> list[str]:
        return list(self._known_requirements)

    def missing_requirements(self) -> list[str]:
        return [n for n in self._known_requirements if n not in self._modules]

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __iter__(self) -> Iterator[Module]:
        return iter(list(self._modules.values()))

    def __len__(self) -> int:
        return len(self._modules)


__all__ = ["ModuleRegistry"]
