"""Module record, lifecycle state and the read-only accessor."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .registry import ModuleRegistry


class ModuleState(str, Enum):
    UNPROCESSED = "unprocessed"
    WAITING = "waiting"  # on the active resolution path
    PROCESSED = "processed"
    ERROR = "error"


TERMINAL_STATES = frozenset({ModuleState.PROCESSED, ModuleState.ERROR})

# initializer(get_module, module, *dependency_results) -> result
ModuleInitializerFn = Callable[..., Any]


@dataclass(eq=False)
class Module:
    name: str
    requirements: tuple[str, ...]
    initializer: ModuleInitializerFn = field(repr=False)
    state: ModuleState = ModuleState.UNPROCESSED
    result: Any = field(default=None, repr=False)
    error: Optional[BaseException] = field(default=None, repr=False)

    @property
    def terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "requirements": list(self.requirements),
            "error": str(self.error) if self.error is not None else None,
        }


class ModuleAccessor:
    """Lookup-by-name capability handed to initializers.

    Exposes reads only; registration and resolution stay on the runtime.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: "ModuleRegistry") -> None:
        self._registry = registry

    def __call__(self, name: str) -> Optional[Module]:
        return self._registry.get(name)

    def get(self, name: str) -> Optional[Module]:
        return self._registry.get(name)

    def result(self, name: str, default: Any = None) -> Any:
        module = self._registry.get(name)
        if module is None or module.state is not ModuleState.PROCESSED:
            return default
        return module.result

    def __contains__(self, name: object) -> bool:
        return name in self._registry


__all__ = [
    "Module",
    "ModuleState",
    "ModuleAccessor",
    "ModuleInitializerFn",
    "TERMINAL_STATES",
]
