"""Pytest configuration ensuring project root is importable.

Adds repository root and src/ to sys.path explicitly to avoid
interpreter/path quirks when running without an editable install.
"""
from __future__ import annotations

import sys
from pathlib import Path
import os
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
SRC = ROOT / "src"
if SRC.exists() and str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _drop_lazymod_handlers() -> None:
    import logging

    root = logging.getLogger("lazymod")
    for h in list(root.handlers):
        if getattr(h, "_lazymod_handler", False):
            root.removeHandler(h)
    root.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _isolate_process_state():  # noqa: D401
    """Ensure process-wide side effects do not leak between tests.

    - Clear aggregated config cache and the default runtime
    - Reset metrics, event listeners and the event bus
    - Restore LAZYMOD_CONFIG_DIR to original value
    """
    from lazymod import eventbus, metrics
    from lazymod.config import clear_config_cache
    from lazymod.events import reset_listeners_for_tests
    from lazymod.modules import reset_runtime_for_tests

    prev = os.environ.get("LAZYMOD_CONFIG_DIR")
    clear_config_cache()
    reset_runtime_for_tests()
    metrics.reset_for_tests()
    reset_listeners_for_tests()
    eventbus.reset_for_tests()
    try:
        yield
    finally:
        clear_config_cache()
        reset_runtime_for_tests()
        _drop_lazymod_handlers()
        if prev is None:
            os.environ.pop("LAZYMOD_CONFIG_DIR", None)
        else:
            os.environ["LAZYMOD_CONFIG_DIR"] = prev


@pytest.fixture()
def runtime():
    from lazymod.modules import ModuleRuntime

    return ModuleRuntime()


@pytest.fixture()
def config_dir(tmp_path, monkeypatch):
    """Empty config dir; tests write base.yaml into it as needed."""
    d = tmp_path / "configs"
    d.mkdir()
    monkeypatch.setenv("LAZYMOD_CONFIG_DIR", str(d))
    return d
