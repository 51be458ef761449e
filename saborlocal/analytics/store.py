from __future__ import annotations

import time
from typing import Any

EVENT_TYPES = ("search", "page_view")
MAX_EVENTS = 10_000

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    """Append a ``search`` or ``page_view`` event; past ``MAX_EVENTS`` the oldest go first."""
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown analytics event type: {event_type}")
    _events.append({"type": event_type, "timestamp": time.time(), **data})
    if len(_events) > MAX_EVENTS:
        del _events[: len(_events) - MAX_EVENTS]


def record_search(term: str, results_count: int, response_time_ms: float, cache_hit: bool) -> None:
    record_event("search", {
        "term": term,
        "results_count": results_count,
        "response_time_ms": round(response_time_ms, 1),
        "cache_hit": cache_hit,
    })


def record_page_view(content_type: str, path: str, city: str | None = None) -> None:
    record_event("page_view", {"content_type": content_type, "path": path, "city": city})


def get_events() -> list[dict[str, Any]]:
    return _events


def clear_events() -> None:
    _events.clear()
