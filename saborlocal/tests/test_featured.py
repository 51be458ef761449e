from __future__ import annotations

from unittest.mock import MagicMock

from saborlocal.cms.cache import sanity_fetch
from saborlocal.cms.client import SanityError
from saborlocal.content import featured
from saborlocal.content.featured import PLACEHOLDER_SLIDE_IMAGE
from saborlocal.content.models import FeaturedItem, FeaturedItemIn, FeaturedType, ReorderItem


def _item(**fields) -> FeaturedItem:
    return FeaturedItem.model_validate({"_id": "f1", "title": "Elemento", "type": "venue", **fields})


# ── Reads ────────────────────────────────────────────────────────────────


def test_get_all_featured_items_parses_rows():
    client = MagicMock()
    client.fetch.return_value = [{"_id": "f1", "title": "A", "type": "review", "order": 1}, None]

    items = featured.get_all_featured_items(client)

    assert [i.id for i in items] == ["f1"]
    assert items[0].type is FeaturedType.review


def test_reads_return_empty_defaults_on_cms_failure():
    client = MagicMock()
    client.fetch.side_effect = SanityError("down", 503)

    assert featured.get_all_featured_items(client) == []
    assert featured.get_featured_item_by_id(client, "f1") is None
    assert featured.get_active_featured_items(client) == []
    assert featured.get_references_for_select(client, FeaturedType.venue) == []


def test_active_items_query_is_limited():
    client = MagicMock()
    client.fetch.return_value = []

    featured.get_active_featured_items(client, limit=3)

    query = client.fetch.call_args[0][0]
    assert "isActive == true" in query
    assert "[0...3]" in query


def test_references_for_collection_is_empty_without_query():
    client = MagicMock()
    assert featured.get_references_for_select(client, FeaturedType.collection) == []
    client.fetch.assert_not_called()


def test_stats_count_by_type():
    client = MagicMock()
    client.fetch.return_value = [
        {"_id": "1", "type": "venue", "isActive": True},
        {"_id": "2", "type": "venue", "isActive": False},
        {"_id": "3", "type": "review", "isActive": True},
    ]

    stats = featured.get_featured_items_stats(client)

    assert stats == {
        "total": 3,
        "active": 2,
        "inactive": 1,
        "by_type": [{"type": "review", "count": 1}, {"type": "venue", "count": 2}],
    }


# ── Writes ───────────────────────────────────────────────────────────────


def test_create_sets_only_matching_reference():
    client = MagicMock()
    client.create.return_value = {"_id": "f9", "title": "Lucio", "type": "venue"}
    body = FeaturedItemIn(title="Lucio", type=FeaturedType.venue, reference_id="venue-1", order=2)

    item = featured.create_featured_item(client, body)

    doc = client.create.call_args[0][0]
    assert doc["_type"] == "featuredItem"
    assert doc["venueRef"] == {"_type": "reference", "_ref": "venue-1"}
    assert "reviewRef" not in doc
    assert doc["order"] == 2
    assert item.id == "f9"


def test_update_clears_other_references():
    client = MagicMock()
    client.patch.return_value = {"_id": "f1", "title": "Guía", "type": "guide"}
    body = FeaturedItemIn(title="Guía", type=FeaturedType.guide, reference_id="guide-1")

    featured.update_featured_item(client, "f1", body)

    item_id = client.patch.call_args[0][0]
    fields = client.patch.call_args[1]["set"]
    assert item_id == "f1"
    assert fields["guideRef"] == {"_type": "reference", "_ref": "guide-1"}
    assert fields["venueRef"] is None
    assert fields["reviewRef"] is None


def test_writes_return_failure_values():
    client = MagicMock()
    client.create.side_effect = SanityError("nope")
    client.patch.side_effect = SanityError("nope")
    client.delete.side_effect = SanityError("nope")
    client.mutate.side_effect = SanityError("nope")
    body = FeaturedItemIn(title="X", type=FeaturedType.category)

    assert featured.create_featured_item(client, body) is None
    assert featured.update_featured_item(client, "f1", body) is None
    assert featured.delete_featured_item(client, "f1") is False
    assert featured.update_featured_item_order(client, [ReorderItem(id="f1", order=0)]) is False
    assert featured.toggle_featured_item_status(client, "f1", False) is None


def test_writes_with_unreadable_cms_response_return_none():
    client = MagicMock()
    client.create.return_value = {"_id": "f9"}
    client.patch.return_value = {"_id": "f9"}
    body = FeaturedItemIn(title="X", type=FeaturedType.category)

    assert featured.create_featured_item(client, body) is None
    assert featured.update_featured_item(client, "f9", body) is None
    assert featured.toggle_featured_item_status(client, "f9", True) is None


def test_reorder_is_one_transaction():
    client = MagicMock()

    ok = featured.update_featured_item_order(client, [ReorderItem(id="a", order=1), ReorderItem(id="b", order=0)])

    assert ok is True
    client.mutate.assert_called_once_with([
        {"patch": {"id": "a", "set": {"order": 1}}},
        {"patch": {"id": "b", "set": {"order": 0}}},
    ])


def test_writes_invalidate_cached_carousel():
    client = MagicMock()
    client.fetch.return_value = [{"_id": "f1", "title": "A", "type": "venue"}]
    featured.get_active_featured_items(client)
    featured.get_active_featured_items(client)
    assert client.fetch.call_count == 1

    client.patch.return_value = {"_id": "f1", "title": "A", "type": "venue", "isActive": False}
    featured.toggle_featured_item_status(client, "f1", False)
    featured.get_active_featured_items(client)

    assert client.fetch.call_count == 2
    client.patch.assert_called_once_with("f1", set={"isActive": False})


# ── Display ──────────────────────────────────────────────────────────────


def test_slide_for_review_links_to_review_page():
    item = _item(type="review", reviewRef={
        "title": "Huevos rotos",
        "slug": "huevos-rotos",
        "tldr": "Imprescindible",
        "venue": {"slug": "casa-lucio", "city": {"slug": "madrid"}},
    })

    slide = featured.to_carousel_slide(item)

    assert slide["href"] == "/madrid/casa-lucio/review/huevos-rotos"
    assert slide["title"] == "Huevos rotos"
    assert slide["description"] == "Imprescindible"
    assert slide["cta"] == "Leer reseña"
    assert slide["image"] == PLACEHOLDER_SLIDE_IMAGE


def test_slide_custom_fields_override():
    item = _item(
        customTitle="Nuevo",
        customDescription="Texto",
        customCTA="Reservar",
        customUrl="/especial",
        venueRef={"title": "Casa Lucio", "slug": "casa-lucio", "city": {"slug": "madrid"}},
    )

    slide = featured.to_carousel_slide(item)

    assert slide["title"] == "Nuevo"
    assert slide["description"] == "Texto"
    assert slide["cta"] == "Reservar"
    assert slide["href"] == "/especial"


def test_slide_fallback_urls():
    assert featured.to_carousel_slide(_item(type="review"))["href"] == "/blog"
    assert featured.to_carousel_slide(_item(type="venue"))["href"] == "/locales"
    assert featured.to_carousel_slide(_item(type="category"))["href"] == "/categorias"
    assert featured.to_carousel_slide(_item(type="guide", title="Ruta de tapas"))["href"] == "/guias/ruta-de-tapas"
    assert featured.to_carousel_slide(_item(type="collection", title="Top 10"))["href"] == "/colecciones/top-10"


def test_slide_for_guide_with_city():
    item = _item(type="guide", guideRef={"slug": "tapas", "city": {"slug": "sevilla"}})
    assert featured.to_carousel_slide(item)["href"] == "/sevilla/guias/tapas"


def test_slide_default_description():
    slide = featured.to_carousel_slide(_item(type="category", categoryRef={"slug": "tapas", "title": "Tapas"}))
    assert slide["description"] == "Explora esta categoría gastronómica"
    assert slide["href"] == "/categorias/tapas"


def test_sanity_fetch_is_shared_cache():
    # the carousel and direct fetches share one cache
    client = MagicMock()
    client.fetch.return_value = [1]
    sanity_fetch(client, "q", tags=("featuredItem",))
    featured.delete_featured_item(client, "f1")
    sanity_fetch(client, "q", tags=("featuredItem",))
    assert client.fetch.call_count == 2
