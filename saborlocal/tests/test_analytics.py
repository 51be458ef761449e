from __future__ import annotations

from unittest.mock import MagicMock

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from saborlocal.admin_api import get_admin_client
from saborlocal.analytics import store
from saborlocal.analytics.aggregator import (
    build_dashboard,
    compute_analytics,
    get_growth_stats,
    get_ratings_stats,
    group_by_month,
)
from saborlocal.analytics.store import get_events, record_event, record_page_view, record_search
from saborlocal.app import app, get_cms_client
from saborlocal.cms import groq
from saborlocal.cms.client import SanityError


def _login_admin(c):
    c.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})


def _cms(results: dict | None = None) -> MagicMock:
    results = results or {}
    cms = MagicMock()
    cms.fetch.side_effect = lambda query, params=None: results.get(query)
    return cms


# ── Traffic ──────────────────────────────────────────────────────────────


def test_analytics_empty():
    body = compute_analytics([])
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["zero_result_rate"] == 0.0
    assert body["cache_stats"] == {"hits": 0, "misses": 0, "hit_rate": 0.0}


def test_analytics_counts_searches_and_views():
    record_search("Tapas", 3, 10.0, cache_hit=False)
    record_search("tapas ", 0, 20.0, cache_hit=True)
    record_search("paella", 2, 30.04, cache_hit=True)
    record_page_view("venue", "/madrid/casa-lucio", "Madrid")
    record_page_view("venue", "/madrid/casa-lucio", "Madrid")
    record_page_view("home", "/")

    body = compute_analytics(get_events())

    assert body["total_searches"] == 3
    assert body["avg_response_time_ms"] == 20.0
    assert body["top_search_terms"][0] == {"term": "tapas", "count": 2}
    assert body["zero_result_searches"] == 1
    assert body["zero_result_rate"] == 33.3
    assert body["total_page_views"] == 3
    assert body["views_by_type"] == {"venue": 2, "home": 1}
    assert body["top_pages"][0] == {"path": "/madrid/casa-lucio", "count": 2}
    assert body["top_cities"] == [{"name": "Madrid", "count": 2}]
    assert body["cache_stats"]["hits"] == 2
    assert body["cache_stats"]["hit_rate"] == 66.7


# ── CMS dashboard ────────────────────────────────────────────────────────


def test_group_by_month_sorted_and_skips_garbage():
    rows = group_by_month([
        "2024-03-02T10:00:00Z",
        "2024-01-15T00:00:00Z",
        "2024-03-20T00:00:00Z",
        "sin fecha",
    ])
    assert rows == [{"month": "2024-01", "count": 1}, {"month": "2024-03", "count": 2}]


def test_group_by_month_empty():
    assert group_by_month([]) == []


def test_growth_stats_passes_cutoff():
    cms = MagicMock()
    cms.fetch.return_value = {"reviews": ["2024-05-01T00:00:00Z"], "venues": None}

    stats = get_growth_stats(cms, now=pd.Timestamp("2024-06-15T00:00:00Z"))

    assert cms.fetch.call_args[0][1]["cutoff"].startswith("2023-12-15")
    assert stats["reviewsByMonth"] == [{"month": "2024-05", "count": 1}]
    assert stats["venuesByMonth"] == []
    assert stats["postsByMonth"] == []


def test_ratings_stats_averages():
    cms = _cms({groq.RATINGS_QUERY: [
        {"food": 8, "service": 6, "ambience": 7, "value": 9},
        {"food": 10, "service": 8, "ambience": None, "value": 7},
        None,
    ]})

    stats = get_ratings_stats(cms)

    assert stats["average_food"] == 9.0
    assert stats["average_service"] == 7.0
    assert stats["average_ambience"] == 3.5
    assert stats["average_value"] == 8.0
    assert stats["average_overall"] == 6.9
    assert stats["total_reviews"] == 2


def test_ratings_stats_empty():
    stats = get_ratings_stats(_cms())
    assert stats["total_reviews"] == 0
    assert stats["average_overall"] == 0.0


def test_dashboard_overview_fills_missing_counts():
    cms = _cms({groq.DASHBOARD_STATS_QUERY: {"totalReviews": 12, "publishedReviews": 10}})
    overview = build_dashboard(cms, [], "overview")
    assert overview["totalReviews"] == 12
    assert overview["draftReviews"] == 0


def test_dashboard_survives_cms_failure():
    cms = MagicMock()
    cms.fetch.side_effect = SanityError("down")

    dashboard = build_dashboard(cms, [], "all")

    assert set(dashboard) == {"overview", "content", "growth", "ratings", "cities", "categories", "traffic"}
    assert dashboard["overview"]["totalVenues"] == 0
    assert dashboard["content"]["recentReviews"] == []
    assert dashboard["cities"] == []


# ── Tracking through the API ─────────────────────────────────────────────


def test_search_and_page_views_are_tracked():
    public = _cms({
        groq.SEARCH_VENUES_QUERY: [{"_id": "v1", "title": "Casa Lucio", "slug": "casa-lucio"}],
        groq.SEARCH_REVIEWS_QUERY: [],
        groq.SEARCH_POSTS_QUERY: [],
        groq.POST_BY_SLUG_QUERY: {"_id": "p1", "title": "Guía de tapas", "slug": "guia-tapas"},
    })
    app.dependency_overrides[get_cms_client] = lambda: public
    app.dependency_overrides[get_admin_client] = lambda: _cms()
    try:
        c = TestClient(app)
        assert c.get("/api/search", params={"q": "casa"}).json()["total"] == 1
        c.get("/api/search", params={"q": "casa"})
        c.get("/api/search", params={"q": "  "})
        c.get("/api/blog/guia-tapas")

        _login_admin(c)
        resp = c.get("/api/admin/analytics", params={"type": "traffic"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_searches"] == 2
    assert body["top_search_terms"] == [{"term": "casa", "count": 2}]
    assert body["cache_stats"]["hits"] == 1
    assert body["views_by_type"] == {"post": 1}


def test_analytics_rejects_unknown_section():
    app.dependency_overrides[get_admin_client] = lambda: _cms()
    try:
        c = TestClient(app)
        _login_admin(c)
        resp = c.get("/api/admin/analytics", params={"type": "revenue"})
    finally:
        app.dependency_overrides.clear()
    assert resp.status_code == 400


# ── Event log ────────────────────────────────────────────────────────────


def test_unknown_event_type_is_rejected():
    with pytest.raises(ValueError):
        record_event("click", {})


def test_event_log_drops_oldest(monkeypatch):
    monkeypatch.setattr(store, "MAX_EVENTS", 3)
    for i in range(5):
        record_page_view("post", f"/blog/{i}")

    assert [e["path"] for e in get_events()] == ["/blog/2", "/blog/3", "/blog/4"]
