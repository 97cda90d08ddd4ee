import pytest

from lazymod.modules import (
    CircularDependencyError,
    ModuleRuntime,
    ModuleState,
    UndefinedModuleError,
)


def test_dependencies_complete_before_dependent_and_in_order(runtime):
    order = []

    def make(name, value):
        def _init(get_module, module, *args):
            # every requirement already terminal when we start
            for req in module.requirements:
                assert get_module(req).terminal
            order.append((name, args))
            return value
        return _init

    runtime.register("top", ["left", "right"], make("top", "T"))
    runtime.register("left", ["leaf"], make("left", "L"))
    runtime.register("right", [], make("right", "R"))
    runtime.register("leaf", [], make("leaf", "F"))

    mod = runtime.resolve("top")
    assert mod.state is ModuleState.PROCESSED
    assert mod.result == "T"
    # depth-first, left-to-right
    assert [n for n, _ in order] == ["leaf", "left", "right", "top"]
    assert dict(order)["top"] == ("L", "R")
    assert dict(order)["left"] == ("F",)


def test_initializer_runs_at_most_once(runtime):
    calls = []
    runtime.register("a", [], lambda g, m: calls.append(1) or 42)
    for _ in range(3):
        assert runtime.resolve("a").result == 42
    runtime.resolve_by_name("a")
    assert calls == [1]


def test_diamond_common_dependency_initialized_once(runtime):
    calls = []
    sentinel = object()

    def init_a(g, m):
        calls.append("a")
        return sentinel

    seen = {}
    runtime.register("a", [], init_a)
    runtime.register("b", ["a"], lambda g, m, a: seen.setdefault("b", a))
    runtime.register("c", ["a"], lambda g, m, a: seen.setdefault("c", a))
    runtime.register("d", ["b", "c"], lambda g, m, b, c: (b, c))

    d = runtime.resolve("d")
    assert calls == ["a"]
    assert seen["b"] is sentinel and seen["c"] is sentinel
    assert d.result == (sentinel, sentinel)


def test_cycle_reports_full_chain(runtime):
    runtime.register("A", ["B"], lambda g, m, b: None)
    runtime.register("B", ["C"], lambda g, m, c: None)
    runtime.register("C", ["A"], lambda g, m, a: None)

    with pytest.raises(CircularDependencyError) as ei:
        runtime.resolve("A")
    assert '"A" > "B" > "C" > "A"' in str(ei.value)
    assert ei.value.chain == ("A", "B", "C", "A")
    # nothing initialized; records back to UNPROCESSED
    for n in "ABC":
        assert runtime.lookup(n).state is ModuleState.UNPROCESSED


def test_cycle_chain_includes_path_prefix(runtime):
    runtime.register("X", ["A"], lambda g, m, a: None)
    runtime.register("A", ["B"], lambda g, m, b: None)
    runtime.register("B", ["A"], lambda g, m, a: None)
    with pytest.raises(CircularDependencyError) as ei:
        runtime.resolve("X")
    assert ei.value.chain == ("X", "A", "B", "A")


def test_self_dependency_is_a_cycle(runtime):
    runtime.register("self", ["self"], lambda g, m, s: None)
    with pytest.raises(CircularDependencyError) as ei:
        runtime.resolve("self")
    assert '"self" > "self"' in str(ei.value)


def test_undefined_module_named_in_error(runtime):
    with pytest.raises(UndefinedModuleError) as ei:
        runtime.resolve("ghost")
    assert ei.value.name == "ghost"
    assert '"ghost"' in str(ei.value)


def test_undefined_dependency_propagates_and_is_retryable(runtime):
    calls = []
    runtime.register("b", ["a"], lambda g, m, a: calls.append(a) or a + 1)
    with pytest.raises(UndefinedModuleError) as ei:
        runtime.resolve("b")
    assert ei.value.name == "a"
    assert ei.value.required_by == ("b",)
    assert runtime.lookup("b").state is ModuleState.UNPROCESSED
    assert calls == []

    runtime.register("a", [], lambda g, m: 1)
    assert runtime.resolve("b").result == 2
    assert calls == [1]


def test_failed_dependency_passes_none(runtime):
    received = {}

    def boom(g, m):
        raise ValueError("bad config")

    runtime.register("b", [], boom)
    runtime.register("c", ["b"], lambda g, m, b: received.setdefault("b", b))
    c = runtime.resolve("c")
    b = runtime.lookup("b")
    assert b.state is ModuleState.ERROR
    assert isinstance(b.error.original, ValueError)
    assert c.state is ModuleState.PROCESSED
    assert received == {"b": None}


def test_reentrant_resolve_from_initializer(runtime):
    runtime.register("late", [], lambda g, m: "late-value")

    def init_outer(get_module, module):
        # lazy pull of a module not declared as requirement
        runtime.resolve_by_name("late")
        return get_module("late").result.upper()

    runtime.register("outer", [], init_outer)
    assert runtime.resolve("outer").result == "LATE-VALUE"


def test_reentrant_resolve_of_self_fails_module_only(runtime):
    def init(get_module, module):
        runtime.resolve_by_name("loop")

    runtime.register("loop", [], init)
    mod = runtime.resolve("loop")
    assert mod.state is ModuleState.ERROR
    assert isinstance(mod.error.original, CircularDependencyError)
    assert mod.error.original.chain == ("loop", "loop")


def test_waiting_visible_while_dependencies_resolve():
    rt = ModuleRuntime()
    states = {}

    def init_dep(get_module, module):
        states["top"] = get_module("top").state
        return 1

    rt.register("dep", [], init_dep)
    rt.register("top", ["dep"], lambda g, m, d: d)
    rt.resolve("top")
    assert states["top"] is ModuleState.WAITING
    assert rt.lookup("top").state is ModuleState.PROCESSED
