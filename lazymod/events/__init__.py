"""Module lifecycle event dataclasses + any-subscriber bridge.

Per-event subscriptions go through `lazymod.eventbus`; `on(handler)` here
receives every event as handler(name, payload). The metrics collector is
always attached so counters stay in sync with emitted events.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from time import time
from typing import Any, Callable, Dict, List, Protocol

from lazymod import metrics as _metrics
from lazymod.eventbus import emit as _emit_bus

EventHandler = Callable[[str, Dict[str, Any]], None]


class SupportsEvent(Protocol):  # pragma: no cover
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        ...


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class ModuleRegistered(BaseEvent):
    name: str
    requirements: list[str]
    after_ready: bool = False


@dataclass(slots=True)
class ModuleInitialized(BaseEvent):
    name: str
    duration_ms: float


@dataclass(slots=True)
class ModuleInitFailed(BaseEvent):
    """Initializer raised; module is now permanently in ERROR state."""
    name: str
    error_type: str
    message: str
    duration_ms: float


@dataclass(slots=True)
class ModuleResolutionFailed(BaseEvent):
    """Undefined dependency or cycle hit during a resolve pass.

    The module stays UNPROCESSED and is retried by later passes.
    """
    name: str
    error_type: str  # undefined-module|circular-dependency
    message: str


@dataclass(slots=True)
class BulkRunCompleted(BaseEvent):
    modules: int
    processed: int
    failed: int
    duration_ms: float


@dataclass(slots=True)
class ModuleFetched(BaseEvent):
    name: str
    path: str
    status: str  # ok|error
    message: str | None = None


_ANY_SUBS: List[EventHandler] = []


def _metrics_collector(
    name: str, payload: Dict[str, Any]
) -> None:  # noqa: D401
    if name == "ModuleRegistered":
        _metrics.inc("modules_registered_total")
    elif name == "ModuleInitialized":
        _metrics.inc("module_init_total", {"status": "ok"})
        _metrics.observe(
            "module_init_latency_ms",
            payload.get("duration_ms", 0),
            {"module": payload.get("name", "unknown")},
        )
    elif name == "ModuleInitFailed":
        _metrics.inc("module_init_total", {"status": "error"})
        _metrics.observe(
            "module_init_latency_ms",
            payload.get("duration_ms", 0),
            {"module": payload.get("name", "unknown")},
        )
    elif name == "ModuleResolutionFailed":
        _metrics.inc(
            "module_resolution_failed_total",
            {"error_type": payload.get("error_type", "unknown")},
        )
    elif name == "BulkRunCompleted":
        _metrics.inc("bulk_run_total")
        _metrics.observe("bulk_run_latency_ms", payload.get("duration_ms", 0))
    elif name == "ModuleFetched":
        _metrics.inc(
            "module_fetch_total", {"status": payload.get("status", "unknown")}
        )


_ANY_SUBS.append(_metrics_collector)


def emit(ev: BaseEvent | SupportsEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    _emit_bus(name, payload)
    for h in list(_ANY_SUBS):  # copy for isolation
        try:
            h(name, dict(payload))
        except Exception:  # noqa: BLE001
            _metrics.inc("handler_exceptions_total", {"event": name})


def on(handler: EventHandler) -> None:
    _ANY_SUBS.append(handler)


def subscribe(handler: EventHandler):
    on(handler)

    def _unsub() -> None:  # noqa: D401
        try:
            _ANY_SUBS.remove(handler)
        except ValueError:
            pass
    return _unsub


def reset_listeners_for_tests() -> None:  # pragma: no cover
    _ANY_SUBS.clear()
    _ANY_SUBS.append(_metrics_collector)


__all__ = [
    "emit",
    "on",
    "subscribe",
    "BaseEvent",
    "ModuleRegistered",
    "ModuleInitialized",
    "ModuleInitFailed",
    "ModuleResolutionFailed",
    "BulkRunCompleted",
    "ModuleFetched",
    "reset_listeners_for_tests",
]
