"""Single-module initializer invocation.

Runs a module's initializer exactly once and records the outcome on the
record. Initializer failures are isolated here: logged, emitted as
`ModuleInitFailed`, stored on the module, never re-raised.
"""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any

from lazymod.errors import map_exception
from lazymod.events import ModuleInitFailed, ModuleInitialized, emit

from .exceptions import AlreadyProcessedError, ModuleInitializationError
from .module import Module, ModuleAccessor, ModuleState

logger = logging.getLogger("lazymod.modules")


class Initializer:
    def __init__(self, accessor: ModuleAccessor) -> None:
        self._accessor = accessor
        # names whose initializer is executing right now
        self._running: set[str] = set()

    def initialize(self, module: Module, *args: Any) -> Module:
        if module.terminal or module.name in self._running:
            raise AlreadyProcessedError(module.name)
        self._running.add(module.name)
        t0 = perf_counter()
        try:
            result = module.initializer(self._accessor, module, *args)
        except Exception as e:  # noqa: BLE001
            duration_ms = (perf_counter() - t0) * 1000
            err = ModuleInitializationError(module.name, e)
            module.error = err
            module.state = ModuleState.ERROR
            logger.error(
                "%s",
                err,
                exc_info=(type(e), e, e.__traceback__),
                extra={"module_name": module.name},
            )
            emit(
                ModuleInitFailed(
                    name=module.name,
                    error_type=map_exception(e),
                    message=str(e),
                    duration_ms=duration_ms,
                )
            )
            return module
        finally:
            self._running.discard(module.name)
        module.result = result
        module.state = ModuleState.PROCESSED
        duration_ms = (perf_counter() - t0) * 1000
        logger.debug(
            "module %s initialized in %.2fms",
            module.name,
            duration_ms,
            extra={"module_name": module.name},
        )
        emit(ModuleInitialized(name=module.name, duration_ms=duration_ms))
        return module


__all__ = ["Initializer"]
