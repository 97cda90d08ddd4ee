"""FastAPI application factory for the lazymod introspection API.

On startup (lifespan) the runtime is bootstrapped from config:
definition scripts under modules.scripts_dir are executed, missing
requirements optionally preloaded, then the one-time bulk run fires.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lazymod import metrics
from lazymod.config import AggregatedConfig, get_config
from lazymod.logging_setup import configure_logging
from lazymod.modules import ModuleRuntime, get_runtime
from lazymod_server.api.routes.modules import router as modules_router

logger = logging.getLogger("lazymod.api")


def bootstrap(runtime: ModuleRuntime, cfg: AggregatedConfig) -> None:
    if not cfg.modules.autoload:
        logger.info("autoload disabled; waiting for explicit ready()")
        return
    if runtime.fetcher is not None:
        loaded = runtime.load_scripts()
        logger.info(
            "loaded %d definition scripts (%d failed)",
            len(loaded.loaded),
            len(loaded.failures),
        )
        if cfg.modules.preload_missing:
            runtime.preload_missing()
    runtime.ready()


def create_app(runtime: ModuleRuntime | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = get_config()
        configure_logging(cfg.logging)
        if app.state.runtime is None:
            app.state.runtime = get_runtime()
        bootstrap(app.state.runtime, cfg)
        yield

    app = FastAPI(
        title="lazymod API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.runtime = runtime

    @app.get("/health")
    def health():  # noqa: D401
        rt = app.state.runtime
        return {"status": "ok", "ready": bool(rt and rt.is_ready)}

    @app.get("/config")
    def config():  # noqa: D401
        cfg = get_config()
        return {
            "schema_version": cfg.schema_version,
            "modules": cfg.modules.model_dump(),
            "logging": cfg.logging.model_dump(),
        }

    @app.get("/metrics")
    def metrics_snapshot():  # noqa: D401
        return metrics.snapshot()

    app.include_router(modules_router)
    return app


app = create_app()


def main() -> None:  # pragma: no cover
    import uvicorn

    cfg = get_config()
    uvicorn.run(
        "lazymod_server.api.app:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":  # pragma: no cover
    main()
