from __future__ import annotations

import logging
from collections import Counter
from typing import Any

import pandas as pd

from ..cms import groq
from ..cms.client import SanityClient, SanityError

logger = logging.getLogger(__name__)

DASHBOARD_SECTIONS = ("overview", "content", "growth", "ratings", "cities", "categories", "traffic")

_EMPTY_OVERVIEW = {
    "totalReviews": 0,
    "totalVenues": 0,
    "totalCities": 0,
    "totalPosts": 0,
    "totalCategories": 0,
    "publishedReviews": 0,
    "draftReviews": 0,
    "publishedPosts": 0,
    "draftPosts": 0,
}

_EMPTY_RATINGS = {
    "average_food": 0.0,
    "average_service": 0.0,
    "average_ambience": 0.0,
    "average_value": 0.0,
    "average_overall": 0.0,
    "total_reviews": 0,
}


# ── Request traffic ──────────────────────────────────────────────────────


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    views = [e for e in events if e["type"] == "page_view"]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top search terms
    term_counter: Counter[str] = Counter(s.get("term", "").strip().lower() for s in searches)
    term_counter.pop("", None)
    top_terms = [{"term": t, "count": c} for t, c in term_counter.most_common(10)]
    zero_results = sum(1 for s in searches if s.get("results_count", 0) == 0)

    # Page views
    type_counter: Counter[str] = Counter(v.get("content_type", "unknown") for v in views)
    page_counter: Counter[str] = Counter(v.get("path", "") for v in views if v.get("path"))
    city_counter: Counter[str] = Counter(v["city"] for v in views if v.get("city"))

    # Cache stats
    cache_hits = sum(1 for s in searches if s.get("cache_hit"))

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_search_terms": top_terms,
        "zero_result_searches": zero_results,
        "zero_result_rate": round(zero_results / total * 100, 1) if total else 0.0,
        "total_page_views": len(views),
        "views_by_type": dict(type_counter),
        "top_pages": [{"path": p, "count": c} for p, c in page_counter.most_common(10)],
        "top_cities": [{"name": n, "count": c} for n, c in city_counter.most_common(10)],
        "cache_stats": {
            "hits": cache_hits,
            "misses": total - cache_hits,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
    }


# ── CMS dashboard ────────────────────────────────────────────────────────


def _fetch(client: SanityClient, query: str, params: dict | None, default: Any, what: str) -> Any:
    try:
        result = client.fetch(query, params)
    except SanityError:
        logger.warning("Failed to load %s", what, exc_info=True)
        return default
    return default if result is None else result


def get_dashboard_stats(client: SanityClient) -> dict:
    stats = _fetch(client, groq.DASHBOARD_STATS_QUERY, None, {}, "dashboard stats")
    return {**_EMPTY_OVERVIEW, **stats}


def get_recent_content(client: SanityClient) -> dict:
    empty = {"recentReviews": [], "recentVenues": [], "recentPosts": []}
    return {**empty, **_fetch(client, groq.RECENT_CONTENT_QUERY, None, {}, "recent content")}


def group_by_month(timestamps: list[str]) -> list[dict]:
    """Count ISO timestamps per ``YYYY-MM``, oldest month first."""
    if not timestamps:
        return []
    months = pd.to_datetime(pd.Series(timestamps), utc=True, errors="coerce").dropna().dt.strftime("%Y-%m")
    counts = months.value_counts().sort_index()
    return [{"month": month, "count": int(count)} for month, count in counts.items()]


def get_growth_stats(client: SanityClient, now: pd.Timestamp | None = None, months: int = 6) -> dict:
    now = now if now is not None else pd.Timestamp.now(tz="UTC")
    cutoff = (now - pd.DateOffset(months=months)).isoformat()
    data = _fetch(client, groq.GROWTH_QUERY, {"cutoff": cutoff}, {}, "growth stats")
    return {
        "reviewsByMonth": group_by_month(data.get("reviews") or []),
        "venuesByMonth": group_by_month(data.get("venues") or []),
        "postsByMonth": group_by_month(data.get("posts") or []),
    }


def get_ratings_stats(client: SanityClient) -> dict:
    rows = [r for r in _fetch(client, groq.RATINGS_QUERY, None, [], "ratings stats") if r]
    if not rows:
        return dict(_EMPTY_RATINGS)

    frame = pd.DataFrame(rows).reindex(columns=["food", "service", "ambience", "value"]).fillna(0.0)
    means = frame.mean()
    return {
        "average_food": round(float(means["food"]), 1),
        "average_service": round(float(means["service"]), 1),
        "average_ambience": round(float(means["ambience"]), 1),
        "average_value": round(float(means["value"]), 1),
        "average_overall": round(float(means.mean()), 1),
        "total_reviews": len(frame),
    }


def get_city_stats(client: SanityClient) -> list[dict]:
    return _fetch(client, groq.CITY_STATS_QUERY, None, [], "city stats")


def get_category_stats(client: SanityClient) -> list[dict]:
    return _fetch(client, groq.CATEGORY_STATS_QUERY, None, [], "category stats")


def build_dashboard(client: SanityClient, events: list[dict[str, Any]], section: str = "all") -> Any:
    """One dashboard section, or every section keyed by name for ``all``."""
    builders = {
        "overview": lambda: get_dashboard_stats(client),
        "content": lambda: get_recent_content(client),
        "growth": lambda: get_growth_stats(client),
        "ratings": lambda: get_ratings_stats(client),
        "cities": lambda: get_city_stats(client),
        "categories": lambda: get_category_stats(client),
        "traffic": lambda: compute_analytics(events),
    }
    if section in builders:
        return builders[section]()
    return {name: build() for name, build in builders.items()}
