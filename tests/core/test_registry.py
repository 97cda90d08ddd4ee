import pytest

from lazymod.modules import (
    DuplicateModuleError,
    ModuleRegistry,
    ModuleState,
)


def _noop(get_module, module, *args):
    return None


def test_add_creates_unprocessed_record():
    reg = ModuleRegistry()
    mod = reg.add("a", ["b", "c"], _noop)
    assert mod.state is ModuleState.UNPROCESSED
    assert mod.requirements == ("b", "c")
    assert mod.result is None and mod.error is None
    assert reg.get("a") is mod
    assert "a" in reg and len(reg) == 1


def test_requirements_taken_literally():
    # no implicit trimming of the caller's list
    reg = ModuleRegistry()
    mod = reg.add("m", ["x", "y", "z"], _noop)
    assert mod.requirements == ("x", "y", "z")


def test_requirements_copied_from_caller_list():
    reqs = ["a"]
    reg = ModuleRegistry()
    mod = reg.add("m", reqs, _noop)
    reqs.append("b")
    assert mod.requirements == ("a",)


def test_duplicate_name_rejected_first_record_untouched():
    reg = ModuleRegistry()
    first = reg.add("a", [], _noop)
    with pytest.raises(DuplicateModuleError) as ei:
        reg.add("a", ["other"], _noop)
    assert '"a"' in str(ei.value)
    assert reg.get("a") is first
    assert first.requirements == ()
    assert "other" not in reg.known_requirements


def test_lookup_unknown_is_none():
    assert ModuleRegistry().get("missing") is None


def test_known_and_missing_requirements():
    reg = ModuleRegistry()
    reg.add("b", ["a", "c"], _noop)
    reg.add("d", ["c", "b"], _noop)
    assert reg.known_requirements == ["a", "c", "b"]
    assert reg.missing_requirements() == ["a", "c"]
    reg.add("a", [], _noop)
    assert reg.missing_requirements() == ["c"]


def test_iteration_follows_registration_order():
    reg = ModuleRegistry()
    for n in ("z", "a", "m"):
        reg.add(n, [], _noop)
    assert [m.name for m in reg] == ["z", "a", "m"]
    assert reg.names() == ["z", "a", "m"]


def test_invalid_arguments_rejected():
    reg = ModuleRegistry()
    with pytest.raises(TypeError):
        reg.add("a", "bc", _noop)
    with pytest.raises(TypeError):
        reg.add("a", [], None)
    assert "a" not in reg
