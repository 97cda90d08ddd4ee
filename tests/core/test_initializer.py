import logging

import pytest

from lazymod import metrics
from lazymod.events import on
from lazymod.modules import (
    AlreadyProcessedError,
    ModuleInitializationError,
    ModuleRegistry,
    ModuleState,
)
from lazymod.modules.initializer import Initializer
from lazymod.modules.module import ModuleAccessor


def _setup():
    reg = ModuleRegistry()
    return reg, Initializer(ModuleAccessor(reg))


def test_success_records_result_and_emits_event():
    reg, init = _setup()
    events = []
    on(lambda n, p: events.append((n, p)))
    mod = reg.add("a", [], lambda g, m, x, y: x + y)
    init.initialize(mod, 2, 3)
    assert mod.state is ModuleState.PROCESSED
    assert mod.result == 5
    assert mod.error is None
    names = [n for n, _ in events]
    assert "ModuleInitialized" in names
    assert metrics.counter("module_init_total", {"status": "ok"}) == 1


def test_initializer_receives_accessor_and_record():
    reg, init = _setup()
    reg.add("other", [], lambda g, m: None)
    seen = {}

    def _init(get_module, module):
        seen["other"] = get_module("other")
        seen["self"] = module
        seen["missing"] = get_module("nope")
        seen["fallback"] = get_module.result("other", "dflt")
        seen["has_other"] = "other" in get_module
        return None

    mod = reg.add("a", [], _init)
    init.initialize(mod)
    assert seen["other"] is reg.get("other")
    assert seen["self"] is mod
    assert seen["missing"] is None
    assert seen["fallback"] == "dflt"
    assert seen["has_other"] is True


def test_failure_captured_not_raised(caplog):
    reg, init = _setup()
    events = []
    on(lambda n, p: events.append((n, p)))

    def boom(g, m):
        raise RuntimeError("disk full")

    mod = reg.add("store", [], boom)
    with caplog.at_level(logging.ERROR, logger="lazymod.modules"):
        init.initialize(mod)  # must not raise
    assert mod.state is ModuleState.ERROR
    assert isinstance(mod.error, ModuleInitializationError)
    assert isinstance(mod.error.original, RuntimeError)
    assert mod.error.__cause__ is mod.error.original
    assert str(mod.error) == "[Module initialization store] disk full"
    assert mod.result is None
    assert any("store" in r.getMessage() for r in caplog.records)
    failed = [p for n, p in events if n == "ModuleInitFailed"]
    assert failed and failed[0]["name"] == "store"
    assert failed[0]["error_type"] == "initializer-error"
    assert metrics.counter("module_init_total", {"status": "error"}) == 1


def test_second_initialize_rejected():
    reg, init = _setup()
    mod = reg.add("a", [], lambda g, m: 1)
    init.initialize(mod)
    with pytest.raises(AlreadyProcessedError):
        init.initialize(mod)
    failed = reg.add("b", [], lambda g, m: 1 / 0)
    init.initialize(failed)
    assert failed.state is ModuleState.ERROR
    with pytest.raises(AlreadyProcessedError):
        init.initialize(failed)


def test_reentrant_initialize_rejected_while_running():
    reg, init = _setup()
    inner = {}

    def _init(get_module, module):
        try:
            init.initialize(module)
        except AlreadyProcessedError as e:
            inner["err"] = e
        return "done"

    mod = reg.add("a", [], _init)
    init.initialize(mod)
    assert isinstance(inner["err"], AlreadyProcessedError)
    assert mod.result == "done"


def test_base_exceptions_are_not_swallowed():
    reg, init = _setup()

    def _init(g, m):
        raise KeyboardInterrupt

    mod = reg.add("a", [], _init)
    with pytest.raises(KeyboardInterrupt):
        init.initialize(mod)
    assert not mod.terminal
