"""Static dependency-graph diagnostics.

Two graph sources share the same cycle / edge checks:
  - `requirements_graph(registry)`: declared requirements of registered
    modules (what the resolver will walk). Lets tools report every cycle
    up front instead of the first one a resolve pass runs into.
  - `build_import_graph(root, prefix)`: import edges between this
    project's own Python modules, used by the architecture test.

Import parsing is line based (first token after `from`/`import`); good
enough for a guardrail, not an AST tool.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Set, Tuple
import re

if TYPE_CHECKING:  # pragma: no cover
    from lazymod.modules.registry import ModuleRegistry

IMPORT_RE = re.compile(r"^(?:from|import)\s+([a-zA-Z0-9_.]+)")


def requirements_graph(registry: "ModuleRegistry") -> Dict[str, Set[str]]:
    edges: Dict[str, Set[str]] = {}
    for module in registry:
        edges.setdefault(module.name, set()).update(module.requirements)
    for n in list(edges):
        for m in edges[n]:
            edges.setdefault(m, set())
    return edges


def build_import_graph(
    root: str | Path = "lazymod", prefix: str = "lazymod"
) -> Dict[str, Set[str]]:
    root_path = Path(root)
    edges: Dict[str, Set[str]] = {}
    for py in root_path.rglob("*.py"):
        rel = py.relative_to(root_path).with_suffix("").as_posix()
        rel_mod = f"{prefix}.{rel}".replace("/", ".")
        if rel_mod.endswith(".__init__"):
            rel_mod = rel_mod[: -len(".__init__")]
        with py.open("r", encoding="utf-8") as f:
            for line in f:
                m = IMPORT_RE.match(line.strip())
                if not m:
                    continue
                target = m.group(1)
                if not target.startswith(prefix + "."):
                    continue
                edges.setdefault(rel_mod, set()).add(target.rstrip("."))
    for n in list(edges):
        for m in edges[n]:
            edges.setdefault(m, set())
    return edges


def detect_cycles(graph: Dict[str, Set[str]]) -> List[List[str]]:
    """Return each cycle found as [a, b, ..., a] (one per back edge)."""
    visited: Set[str] = set()
    stack: Set[str] = set()
    cycles: List[List[str]] = []

    def dfs(node: str, path: List[str]) -> None:
        if node in stack:
            cycles.append(path[path.index(node):])
            return
        if node in visited:
            return
        visited.add(node)
        stack.add(node)
        for nxt in sorted(graph.get(node, ())):
            dfs(nxt, path + [nxt])
        stack.remove(node)

    for n in graph:
        if n not in visited:
            dfs(n, [n])
    return cycles


def forbidden_edges(
    graph: Dict[str, Set[str]], rules: List[Tuple[str, str]]
) -> List[Tuple[str, str]]:
    found: List[Tuple[str, str]] = []
    for src, targets in graph.items():
        for dst in targets:
            for a, b in rules:
                if src.startswith(a) and dst.startswith(b):
                    found.append((src, dst))
    return found


__all__ = [
    "requirements_graph",
    "build_import_graph",
    "detect_cycles",
    "forbidden_edges",
]
