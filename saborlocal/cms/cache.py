from __future__ import annotations

import contextvars
import hashlib
import json
import threading
import time
from contextlib import contextmanager
from typing import Any, Iterable, Iterator

from .client import SanityClient

_cache: dict[str, dict[str, Any]] = {}
_hits: int = 0
_misses: int = 0
_lock = threading.Lock()
_DEFAULT_REVALIDATE = 3600  # 1 hour

# Every content tag; pages built from all document types carry these
CONTENT_TAGS = ("venue", "review", "post", "city", "category", "featuredItem", "linking")

# Cache outcomes of the lookups made inside ``track_cache_hits``
_hit_log_ctx: contextvars.ContextVar[list[bool] | None] = contextvars.ContextVar(
    "cache_hit_log", default=None
)


def _make_key(query: str, params: dict | None) -> str:
    normalized = json.dumps({"q": query, "p": params or {}}, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def _prune_expired(now: float) -> None:
    # caller holds _lock
    for key in [k for k, entry in _cache.items() if entry["expires_at"] <= now]:
        _cache.pop(key, None)


def cache_get(query: str, params: dict | None = None) -> Any | None:
    global _hits, _misses
    key = _make_key(query, params)
    with _lock:
        entry = _cache.get(key)
        if entry and time.time() < entry["expires_at"]:
            _hits += 1
            return entry["value"]
        if entry:
            _cache.pop(key, None)
        _misses += 1
        return None


def cache_set(
    query: str,
    params: dict | None,
    value: Any,
    tags: Iterable[str] = ("sanity",),
    ttl: float = _DEFAULT_REVALIDATE,
) -> None:
    key = _make_key(query, params)
    now = time.time()
    with _lock:
        _prune_expired(now)
        _cache[key] = {
            "value": value,
            "tags": set(tags),
            "expires_at": now + ttl,
        }


@contextmanager
def track_cache_hits() -> Iterator[list[bool]]:
    """Collect whether each cached lookup in this context was a hit."""
    log: list[bool] = []
    token = _hit_log_ctx.set(log)
    try:
        yield log
    finally:
        _hit_log_ctx.reset(token)


def sanity_fetch(
    client: SanityClient,
    query: str,
    params: dict | None = None,
    tags: Iterable[str] = ("sanity",),
    revalidate: float = _DEFAULT_REVALIDATE,
    preview: bool = False,
) -> Any:
    """
    Run a GROQ query through the shared result cache.

    ``revalidate`` is the entry lifetime in seconds; ``0`` or ``preview``
    skip the cache entirely. Errors from the client propagate and nothing
    is cached.
    """
    if preview or not revalidate:
        return client.fetch(query, params)

    cached = cache_get(query, params)
    hit_log = _hit_log_ctx.get()
    if hit_log is not None:
        hit_log.append(cached is not None)
    if cached is not None:
        return cached

    result = client.fetch(query, params)
    if result is not None:
        cache_set(query, params, result, tags=tags, ttl=revalidate)
    return result


def revalidate_tag(tag: str) -> int:
    """Drop every cached entry carrying ``tag``. Returns how many were dropped."""
    with _lock:
        stale = [key for key, entry in _cache.items() if tag in entry["tags"]]
        for key in stale:
            _cache.pop(key, None)
    return len(stale)


def get_cache_stats() -> dict:
    with _lock:
        total = _hits + _misses
        return {
            "size": len(_cache),
            "hits": _hits,
            "misses": _misses,
            "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
        }


def clear_cache() -> None:
    global _hits, _misses
    with _lock:
        _cache.clear()
        _hits = 0
        _misses = 0
