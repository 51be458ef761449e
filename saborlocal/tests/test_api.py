from __future__ import annotations

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from saborlocal.admin_api import get_admin_client
from saborlocal.analytics.store import get_events
from saborlocal.app import app, get_cms_client
from saborlocal.cms import groq
from saborlocal.cms.cache import get_cache_stats, sanity_fetch
from saborlocal.cms.client import SanityError

MADRID = {"_id": "city-madrid", "title": "Madrid", "slug": "madrid", "region": "Comunidad de Madrid"}

VENUE = {
    "_id": "venue-casa-lucio",
    "title": "Casa Lucio",
    "slug": "casa-lucio",
    "city": MADRID,
    "address": "Calle Cava Baja 35",
    "priceRange": "€€€",
    "phone": "+34 913 653 252",
    "openingHours": ["Mo-Su 13:00-16:00"],
    "categories": [{"_id": "category-tradicional", "title": "Tradicional", "slug": "tradicional"}],
    "reviews": [],
}

REVIEW = {
    "_id": "review-1",
    "title": "Huevos rotos de referencia",
    "slug": "huevos-rotos",
    "venue": VENUE,
    "ratings": {"food": 9, "service": 8, "ambience": 8, "value": 7},
    "tldr": "Los huevos rotos más famosos de Madrid.",
    "publishedAt": "2024-02-01T10:00:00Z",
}


def _cms(results: dict | None = None) -> MagicMock:
    """A CMS stub answering ``fetch`` by query text."""
    results = results or {}
    cms = MagicMock()
    cms.fetch.side_effect = lambda query, params=None: results.get(query)
    return cms


def _public(cms: MagicMock) -> TestClient:
    app.dependency_overrides[get_cms_client] = lambda: cms
    return TestClient(app)


def _admin(cms: MagicMock) -> TestClient:
    app.dependency_overrides[get_admin_client] = lambda: cms
    c = TestClient(app)
    c.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})
    return c


def teardown_function():
    app.dependency_overrides.clear()


# ── Public pages ─────────────────────────────────────────────────────────


def test_home_renders_with_empty_cms():
    resp = _public(_cms()).get("/api/home")
    assert resp.status_code == 200
    body = resp.json()
    assert body["slides"] == []
    assert body["posts"] == []
    assert body["metadata"]["title"]
    assert body["json_ld"]


def test_home_builds_slides_from_active_items():
    items = [{
        "_id": "f1",
        "title": "Casa Lucio",
        "type": "venue",
        "isActive": True,
        "order": 0,
        "venueRef": {"title": "Casa Lucio", "slug": "casa-lucio", "city": {"slug": "madrid"}},
    }]
    cms = _cms({groq.featured_items_query(active_only=True, limit=5): items})

    slides = _public(cms).get("/api/home").json()["slides"]

    assert len(slides) == 1
    assert slides[0]["href"] == "/madrid/casa-lucio"


def test_city_page():
    city = {**MADRID, "venues": [VENUE]}
    resp = _public(_cms({groq.CITY_BY_SLUG_QUERY: city})).get("/api/cities/madrid")
    assert resp.status_code == 200
    body = resp.json()
    assert body["city"]["title"] == "Madrid"
    assert [v["slug"] for v in body["venues"]] == ["casa-lucio"]
    assert body["faqs"]


def test_city_not_found():
    resp = _public(_cms()).get("/api/cities/atlantida")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Ciudad no encontrada"


def test_category_not_found():
    assert _public(_cms()).get("/api/categories/nada").status_code == 404


def test_venue_page():
    resp = _public(_cms({groq.VENUE_BY_SLUG_QUERY: VENUE})).get("/api/venues/madrid/casa-lucio")
    assert resp.status_code == 200
    body = resp.json()
    assert body["venue"]["title"] == "Casa Lucio"
    assert body["related"] == []
    assert any("horario" in faq["question"] for faq in body["faqs"])
    assert body["metadata"]["canonical"].endswith("/madrid/casa-lucio")


def test_venue_in_other_city_is_not_found():
    resp = _public(_cms({groq.VENUE_BY_SLUG_QUERY: VENUE})).get("/api/venues/sevilla/casa-lucio")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Local no encontrado"


def test_review_page():
    resp = _public(_cms({groq.REVIEW_BY_SLUG_QUERY: REVIEW})).get("/api/reviews/huevos-rotos")
    assert resp.status_code == 200
    body = resp.json()
    assert body["review"]["title"] == "Huevos rotos de referencia"
    assert body["json_ld"]


def test_review_without_venue_is_not_found():
    orphan = {k: v for k, v in REVIEW.items() if k != "venue"}
    resp = _public(_cms({groq.REVIEW_BY_SLUG_QUERY: orphan})).get("/api/reviews/huevos-rotos")
    assert resp.status_code == 404


def test_blog_post_not_found():
    resp = _public(_cms()).get("/api/blog/no-existe")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Artículo no encontrado"


def test_blog_list_filters_by_tag():
    cms = _cms()
    _public(cms).get("/api/blog", params={"tag": "tapas", "limit": 3})
    query, params = cms.fetch.call_args[0]
    assert query == groq.POSTS_BY_TAG_QUERY
    assert params == {"tag": "tapas", "limit": 3}


def test_search_counts_results():
    cms = _cms({
        groq.SEARCH_VENUES_QUERY: [VENUE],
        groq.SEARCH_POSTS_QUERY: [{"_id": "p1", "title": "Casas de comidas", "slug": "casas"}],
    })
    body = _public(cms).get("/api/search", params={"q": "casa"}).json()
    assert body["query"] == "casa"
    assert body["total"] == 2
    assert body["reviews"] == []


def test_search_records_its_own_cache_hits():
    cms = _cms({groq.SEARCH_VENUES_QUERY: [VENUE]})
    c = _public(cms)

    c.get("/api/search", params={"q": "casa"})
    c.get("/api/search", params={"q": "tapas"})
    c.get("/api/search", params={"q": "casa"})

    searches = [e for e in get_events() if e["type"] == "search"]
    assert [(e["term"], e["cache_hit"]) for e in searches] == [
        ("casa", False),
        ("tapas", False),
        ("casa", True),
    ]


def test_blank_search_skips_cms():
    cms = _cms()
    body = _public(cms).get("/api/search", params={"q": "   "}).json()
    assert body["total"] == 0
    cms.fetch.assert_not_called()


# ── Sitemaps ─────────────────────────────────────────────────────────────


def test_sitemap_xml():
    cms = _cms({groq.SITEMAP_VENUES_QUERY: [VENUE]})
    resp = _public(cms).get("/api/sitemap/venues")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert "s-maxage=3600" in resp.headers["cache-control"]
    assert "/madrid/casa-lucio</loc>" in resp.text


def test_unknown_sitemap_type():
    resp = _public(_cms()).get("/api/sitemap/recetas")
    assert resp.status_code == 404


def test_sitemap_cms_failure_is_500():
    cms = MagicMock()
    cms.fetch.side_effect = SanityError("timeout")
    resp = _public(cms).get("/api/sitemap/posts")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Error generando el sitemap"


# ── Internal links ───────────────────────────────────────────────────────


def test_links_for_unknown_content():
    assert _public(_cms()).get("/api/links/review/nada").status_code == 404


def test_links_for_venue():
    cms = _cms({
        groq.LINK_SOURCE_QUERY: VENUE,
        groq.LINK_GUIDES_QUERY: [{"title": "Guía de Madrid", "slug": "guia", "city": MADRID}],
    })
    body = _public(cms).get("/api/links/venue/casa-lucio").json()
    assert body["suggestions"][0]["url"] == "/madrid/guias/guia"
    assert body["related"]["guides"][0]["title"] == "Guía de Madrid"


# ── Admin: featured items ────────────────────────────────────────────────


def test_create_featured_item():
    cms = _cms()
    cms.create.return_value = {"_id": "f1", "title": "Tapas", "type": "category", "isActive": True, "order": 0}

    resp = _admin(cms).post(
        "/api/admin/featured-items",
        json={"title": "Tapas", "type": "category", "reference_id": "category-tapas"},
    )

    assert resp.status_code == 201
    assert resp.json()["_id"] == "f1"
    doc = cms.create.call_args[0][0]
    assert doc["categoryRef"] == {"_type": "reference", "_ref": "category-tapas"}


def test_create_featured_item_validation():
    resp = _admin(_cms()).post("/api/admin/featured-items", json={"title": "Tapas", "type": "menu"})
    assert resp.status_code == 422


def test_create_featured_item_cms_failure():
    cms = _cms()
    cms.create.side_effect = SanityError("boom")
    resp = _admin(cms).post("/api/admin/featured-items", json={"title": "Tapas", "type": "category"})
    assert resp.status_code == 500


def test_featured_item_not_found():
    resp = _admin(_cms()).get("/api/admin/featured-items/nope")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Elemento destacado no encontrado"


def test_featured_stats():
    cms = _cms({groq.FEATURED_ITEMS_SUMMARY_QUERY: [
        {"type": "venue", "isActive": True},
        {"type": "venue", "isActive": False},
        {"type": "review", "isActive": True},
    ]})
    body = _admin(cms).get("/api/admin/featured-items", params={"action": "stats"}).json()
    assert body["total"] == 3
    assert body["active"] == 2
    assert body["by_type"] == [{"type": "review", "count": 1}, {"type": "venue", "count": 2}]


def test_reorder_on_both_routes():
    cms = _cms()
    c = _admin(cms)
    payload = {"items": [{"id": "f1", "order": 1}, {"id": "f2", "order": 0}]}

    assert c.patch("/api/admin/featured-items", json=payload).json() == {"success": True}
    assert c.put("/api/admin/featured-items/reorder", json=payload).json() == {"success": True}
    assert cms.mutate.call_count == 2
    assert len(cms.mutate.call_args[0][0]) == 2


def test_reorder_requires_items():
    resp = _admin(_cms()).patch("/api/admin/featured-items", json={"items": []})
    assert resp.status_code == 422


def test_toggle_featured_item():
    cms = _cms()
    cms.patch.return_value = {"_id": "f1", "title": "Tapas", "type": "category", "isActive": False}
    resp = _admin(cms).patch("/api/admin/featured-items/f1", json={"is_active": False})
    assert resp.status_code == 200
    assert resp.json()["isActive"] is False
    cms.patch.assert_called_once_with("f1", set={"isActive": False})


def test_delete_featured_item_failure():
    cms = _cms()
    cms.delete.side_effect = SanityError("boom")
    assert _admin(cms).delete("/api/admin/featured-items/f1").status_code == 500


def test_references_for_collections_are_empty():
    resp = _admin(_cms()).get("/api/admin/references", params={"type": "collection"})
    assert resp.status_code == 200
    assert resp.json() == []


# ── Admin: content CRUD ──────────────────────────────────────────────────


def test_create_city():
    cms = _cms()
    cms.create.return_value = {"_id": "c1", "title": "A Coruña"}

    resp = _admin(cms).post("/api/admin/cities", json={"title": "A Coruña"})

    assert resp.status_code == 201
    assert cms.create.call_args[0][0]["slug"] == {"_type": "slug", "current": "a-coruna"}


def test_create_city_duplicate_slug():
    resp = _admin(_cms({groq.SLUG_TAKEN_QUERY: True})).post("/api/admin/cities", json={"title": "Madrid"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Ya existe un elemento con este slug"


def test_create_venue_requires_address():
    resp = _admin(_cms()).post("/api/admin/venues", json={"title": "Casa Lucio"})
    assert resp.status_code == 422


def test_create_venue_rejects_bad_phone():
    resp = _admin(_cms()).post(
        "/api/admin/venues",
        json={"title": "Casa Lucio", "address": "Cava Baja 35", "phone": "12"},
    )
    assert resp.status_code == 400


def test_get_missing_document():
    resp = _admin(_cms()).get("/api/admin/reviews/r404")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Reseña no encontrada"


def test_delete_city_in_use():
    cms = _cms({groq.ADMIN_DOCUMENT_BY_ID_QUERY: {"_id": "city-madrid"}, groq.REFERENCING_COUNT_QUERY: 4})
    resp = _admin(cms).delete("/api/admin/cities/city-madrid")
    assert resp.status_code == 400
    cms.delete.assert_not_called()


def test_delete_post():
    cms = _cms({groq.ADMIN_DOCUMENT_BY_ID_QUERY: {"_id": "post-1"}})
    resp = _admin(cms).delete("/api/admin/posts/post-1")
    assert resp.json() == {"success": True}
    cms.delete.assert_called_once_with("post-1")


def test_cms_failure_is_500():
    cms = MagicMock()
    cms.fetch.side_effect = SanityError("HTTP 503")
    resp = _admin(cms).get("/api/admin/categories")
    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Error al listar categories")


def test_validate_content():
    cms = _cms({groq.VALIDATE_VENUE_DATA_QUERY: [{"_id": "v1", "title": "Sin dirección"}]})
    body = _admin(cms).get("/api/admin/validate").json()
    assert body == {"venues": [{"_id": "v1", "title": "Sin dirección"}], "reviews": []}


# ── Admin: AEO, cache, revalidation ──────────────────────────────────────


def test_aeo_validate():
    resp = _admin(_cms()).post("/api/admin/aeo/validate", json={"url": "/madrid/casa-lucio"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["result"]["score"] == 65
    assert body["result"]["grade"] == "C"
    assert "65/100 (C)" in body["report"]


def test_revalidate_drops_tagged_entries():
    cms = _cms({groq.POSTS_QUERY: []})
    sanity_fetch(cms, groq.POSTS_QUERY, {"limit": 3}, tags=("post",))

    resp = _admin(_cms()).post("/api/admin/revalidate", json={"tag": "post"})

    assert resp.json() == {"revalidated": True, "tag": "post", "entries": 1}


def test_cache_stats_and_flush():
    cms = _cms({groq.POSTS_QUERY: []})
    sanity_fetch(cms, groq.POSTS_QUERY, None, tags=("post",))
    c = _admin(_cms())

    assert c.get("/api/admin/cache").json()["size"] == 1
    assert c.delete("/api/admin/cache").status_code == 204
    assert get_cache_stats()["size"] == 0
