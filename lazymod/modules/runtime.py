"""ModuleRuntime: registration facade + bulk-run driver.

Lifecycle:
  1. Producers call `register` (or `define` from definition scripts) in
     any order. Nothing is initialized yet.
  2. The environment signals "startup registrations done" via `ready()`;
     every module known at that point is resolved in registration order.
  3. From then on each `register` call triggers its own resolve pass over
     the whole registry, so modules waiting on a late dependency complete
     as soon as it arrives.

Resolution errors met during a pass (undefined dependency, cycle) are
reported and the pass moves on; direct `resolve` calls propagate them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from time import perf_counter
from typing import Any, Iterable, Optional

from lazymod.config import get_config
from lazymod.events import (
    BulkRunCompleted,
    ModuleRegistered,
    ModuleResolutionFailed,
    emit,
)

from .exceptions import (
    CircularDependencyError,
    ModuleFetchError,
    ResolutionError,
)
from .fetcher import ScriptFetcher, ScriptLoadReport, ScriptNamespace
from .initializer import Initializer
from .module import Module, ModuleAccessor, ModuleInitializerFn, ModuleState
from .registry import ModuleRegistry
from .resolver import Resolver

logger = logging.getLogger("lazymod.modules")


@dataclass(frozen=True)
class ResolutionFailure:
    name: str
    error: ResolutionError

    @property
    def error_type(self) -> str:
        return self.error.error_type


@dataclass
class BulkRunReport:
    processed: list[str] = field(default_factory=list)
    failures: list[ResolutionFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ModuleRuntime:
    def __init__(self, fetcher: Optional[ScriptFetcher] = None) -> None:
        self.registry = ModuleRegistry()
        self.accessor = ModuleAccessor(self.registry)
        self._initializer = Initializer(self.accessor)
        self._resolver = Resolver(self.registry, self._initializer)
        self.fetcher = fetcher
        self._ready = False
        self._pass_pending = False

    # --- Registration ----------------------------------------------------
    def register(
        self,
        name: str,
        requirements: Iterable[str],
        initializer: ModuleInitializerFn,
    ) -> Module:
        module = self.registry.add(name, requirements, initializer)
        emit(
            ModuleRegistered(
                name=name,
                requirements=list(module.requirements),
                after_ready=self._ready,
            )
        )
        if self._ready:
            if self._resolver.busy:
                # runs once the current dependency walk unwinds
                self._pass_pending = True
            else:
                self._process_all()
        return module

    define = register

    def lookup(self, name: str) -> Optional[Module]:
        return self.registry.get(name)

    # --- Resolution ------------------------------------------------------
    def resolve(self, name: str) -> Module:
        outermost = not self._resolver.busy
        try:
            return self._resolver.resolve(name)
        finally:
            if outermost and self._pass_pending:
                self._process_all()

    def resolve_by_name(self, name: str) -> None:
        self.resolve(name)

    # --- Bulk run --------------------------------------------------------
    @property
    def is_ready(self) -> bool:
        return self._ready

    def ready(self) -> Optional[BulkRunReport]:
        """Fire the one-time bulk run; later calls are no-ops (None)."""
        if self._ready:
            logger.debug("ready() called again; bulk run already done")
            return None
        t0 = perf_counter()
        report = self._process_all()
        self._ready = True
        emit(
            BulkRunCompleted(
                modules=len(self.registry),
                processed=len(report.processed),
                failed=len(report.failures),
                duration_ms=(perf_counter() - t0) * 1000,
            )
        )
        logger.info(
            "bulk run done: %d modules, %d processed, %d unresolved",
            len(self.registry),
            len(report.processed),
            len(report.failures),
        )
        return report

    def _process_all(self) -> BulkRunReport:
        report = BulkRunReport()
        self._pass_pending = False
        seen = 0
        # picks up modules registered by initializers during the pass
        while seen < len(self.registry):
            batch = self.registry.names()[seen:]
            seen += len(batch)
            for name in batch:
                module = self.registry.get(name)
                if module is None:
                    continue
                if module.state is not ModuleState.UNPROCESSED:
                    continue
                try:
                    self._resolver.resolve(name)
                except ResolutionError as e:
                    self._report_failure(name, e)
                    report.failures.append(ResolutionFailure(name, e))
                    continue
                report.processed.append(name)
        # registrations seen above were already picked up by this loop
        self._pass_pending = False
        return report

    def _report_failure(self, name: str, e: ResolutionError) -> None:
        if isinstance(e, CircularDependencyError):
            logger.error("module %s not resolved: %s", name, e,
                         extra={"module_name": name})
        else:
            logger.warning("module %s pending: %s", name, e,
                           extra={"module_name": name})
        emit(
            ModuleResolutionFailed(
                name=name, error_type=e.error_type, message=str(e)
            )
        )

    # --- Definition scripts ---------------------------------------------
    def script_namespace(self) -> ScriptNamespace:
        return {
            "define": self.register,
            "get_module": self.lookup,
            "initialize_module": self.resolve_by_name,
        }

    def _require_fetcher(self, name: str) -> ScriptFetcher:
        if self.fetcher is None:
            raise ModuleFetchError(name, "no fetcher configured")
        return self.fetcher

    def fetch(self, name: str) -> Path:
        """Run the definition script for `name` (explicit, never implicit)."""
        return self._require_fetcher(name).fetch(name, self.script_namespace())

    def load_scripts(self) -> ScriptLoadReport:
        return self._require_fetcher("*").load_all(self.script_namespace())

    def preload_missing(self) -> list[str]:
        """Fetch every known requirement that has no registered module.

        Repeats until no new names appear (fetched scripts may declare
        further requirements). Names whose script cannot be fetched are
        logged and skipped.
        """
        fetched: list[str] = []
        attempted: set[str] = set()
        while True:
            pending = [
                n for n in self.registry.missing_requirements()
                if n not in attempted
            ]
            if not pending:
                return fetched
            for name in pending:
                attempted.add(name)
                try:
                    self.fetch(name)
                except ModuleFetchError as e:
                    logger.warning("%s", e, extra={"module_name": name})
                    continue
                fetched.append(name)

    # --- Introspection ---------------------------------------------------
    def describe(self) -> list[dict[str, Any]]:
        return [m.describe() for m in self.registry]


def build_runtime() -> ModuleRuntime:
    """Runtime wired from config (fetcher rooted at modules.scripts_dir)."""
    cfg = get_config().modules
    return ModuleRuntime(fetcher=ScriptFetcher(cfg.scripts_dir, cfg.suffix))


@lru_cache(maxsize=1)
def get_runtime() -> ModuleRuntime:
    return build_runtime()


def reset_runtime_for_tests() -> None:
    get_runtime.cache_clear()


__all__ = [
    "ModuleRuntime",
    "BulkRunReport",
    "ResolutionFailure",
    "build_runtime",
    "get_runtime",
    "reset_runtime_for_tests",
]
