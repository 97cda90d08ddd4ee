"""Definition script loading (the way module definitions arrive).

A definition script is a Python file under ``root`` keyed by module name:
``<root>/<name><suffix>`` (names may contain ``/`` for sub-directories).
Scripts run with the runtime's script namespace injected as globals::

    define("b", ["a"], lambda get_module, module, a: a + 1)

The resolver never calls the fetcher; missing dependencies fail
immediately. Fetching is explicit (`ModuleRuntime.fetch`,
`ModuleRuntime.preload_missing`) or done once at startup (`load_all`).
"""
from __future__ import annotations

import logging
import runpy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator

from lazymod.events import ModuleFetched, emit

from .exceptions import ModuleFetchError

logger = logging.getLogger("lazymod.modules.fetcher")

ScriptNamespace = Dict[str, Callable[..., Any]]


@dataclass
class ScriptLoadReport:
    loaded: list[Path] = field(default_factory=list)
    failures: list[ModuleFetchError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class ScriptFetcher:
    def __init__(self, root: str | Path, suffix: str = ".py") -> None:
        self.root = Path(root)
        self.suffix = suffix

    def path_for(self, name: str) -> Path:
        if not name or name.startswith("/") or "\\" in name:
            raise ModuleFetchError(name, "invalid module name")
        root = self.root.resolve()
        path = (root / f"{name}{self.suffix}").resolve()
        if not path.is_relative_to(root):
            raise ModuleFetchError(name, "path escapes scripts root")
        return path

    def fetch(self, name: str, namespace: ScriptNamespace) -> Path:
        path = self.path_for(name)
        if not path.is_file():
            emit(
                ModuleFetched(
                    name=name,
                    path=str(path),
                    status="error",
                    message="not found",
                )
            )
            raise ModuleFetchError(name, f"script not found: {path}")
        self._run(name, path, namespace)
        return path

    def iter_scripts(self) -> Iterator[Path]:
        if not self.root.exists():
            return
        for path in sorted(self.root.rglob(f"*{self.suffix}")):
            if path.is_file() and not path.name.startswith("_"):
                yield path

    def load_all(self, namespace: ScriptNamespace) -> ScriptLoadReport:
        """Run every script under root (sorted path order).

        A failing script is logged and recorded; the scripts after it
        still run.
        """
        report = ScriptLoadReport()
        for path in self.iter_scripts():
            name = path.relative_to(self.root).with_suffix("").as_posix()
            try:
                self._run(name, path, namespace)
            except ModuleFetchError as e:
                logger.error("%s", e, extra={"module_name": name})
                report.failures.append(e)
                continue
            report.loaded.append(path)
        return report

    def _run(self, name: str, path: Path, namespace: ScriptNamespace) -> None:
        try:
            runpy.run_path(
                str(path),
                init_globals=dict(namespace),
                run_name=f"lazymod.scripts.{name.replace('/', '.')}",
            )
        except Exception as e:  # noqa: BLE001
            emit(
                ModuleFetched(
                    name=name, path=str(path), status="error", message=str(e)
                )
            )
            raise ModuleFetchError(name, f"script failed: {e}") from e
        logger.debug("loaded definition script %s", path)
        emit(ModuleFetched(name=name, path=str(path), status="ok"))


__all__ = ["ScriptFetcher", "ScriptLoadReport", "ScriptNamespace"]
