"""/modules routes: read-only introspection + explicit resolve trigger."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from lazymod.dev.graph import detect_cycles, requirements_graph
from lazymod.modules import (
    CircularDependencyError,
    ModuleRuntime,
    UndefinedModuleError,
)

router = APIRouter()


def _runtime(request: Request) -> ModuleRuntime:
    return request.app.state.runtime


@router.get("/modules")
def list_modules(request: Request):  # noqa: D401
    rt = _runtime(request)
    return {"ready": rt.is_ready, "modules": rt.describe()}


@router.get("/modules/{name:path}")
def module_state(name: str, request: Request):  # noqa: D401
    module = _runtime(request).lookup(name)
    if module is None:
        raise HTTPException(status_code=404, detail=f"unknown module: {name}")
    return module.describe()


@router.post("/modules/{name:path}/resolve")
def resolve_module(name: str, request: Request):  # noqa: D401
    rt = _runtime(request)
    try:
        module = rt.resolve(name)
    except UndefinedModuleError as e:
        raise HTTPException(
            status_code=404,
            detail={"error_type": e.error_type, "message": str(e)},
        ) from e
    except CircularDependencyError as e:
        raise HTTPException(
            status_code=409,
            detail={
                "error_type": e.error_type,
                "message": str(e),
                "chain": list(e.chain),
            },
        ) from e
    return module.describe()


@router.get("/requirements")
def requirements(request: Request):  # noqa: D401
    registry = _runtime(request).registry
    return {
        "known": registry.known_requirements,
        "missing": registry.missing_requirements(),
    }


@router.get("/graph")
def graph(request: Request):  # noqa: D401
    edges = requirements_graph(_runtime(request).registry)
    return {
        "edges": {k: sorted(v) for k, v in edges.items()},
        "cycles": detect_cycles(edges),
    }
