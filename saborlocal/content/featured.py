"""
Featured items: the curated homepage carousel.

Reads return ``[]`` / ``None`` when the CMS is unreachable; writes return
``None`` / ``False``. Every successful write drops the ``featuredItem``
cache tag so the public carousel picks the change up.
"""

from __future__ import annotations

import logging
from collections import Counter

from pydantic import ValidationError

from ..cms import groq
from ..cms.cache import revalidate_tag, sanity_fetch
from ..cms.client import SanityClient, SanityError, patch_mutation
from ..cms.images import preset_image_url
from .models import FeaturedItem, FeaturedItemIn, FeaturedType, ReorderItem
from .urls import review_url, slugify, venue_url

logger = logging.getLogger(__name__)

_REF_FIELDS = {t: f"{t.value}Ref" for t in FeaturedType}

_DEFAULT_DESCRIPTIONS = {
    FeaturedType.review: "Una reseña destacada de nuestro blog",
    FeaturedType.venue: "Un local destacado en nuestra selección",
    FeaturedType.category: "Explora esta categoría gastronómica",
    FeaturedType.collection: "Contenido especial seleccionado para ti",
    FeaturedType.guide: "Contenido especial seleccionado para ti",
}

_DEFAULT_CTAS = {
    FeaturedType.review: "Leer reseña",
    FeaturedType.venue: "Ver local",
    FeaturedType.category: "Explorar categoría",
    FeaturedType.collection: "Ver colección",
    FeaturedType.guide: "Ver guía",
}

PLACEHOLDER_SLIDE_IMAGE = "/api/placeholder/1920/1080"


def _parse(rows) -> list[FeaturedItem]:
    return [FeaturedItem.model_validate(r) for r in rows or [] if r]


def _reference_fields(item_type: FeaturedType, reference_id: str | None) -> dict:
    """The ref field for ``item_type`` set, every other ref field ``None``."""
    fields: dict = {name: None for name in _REF_FIELDS.values()}
    if reference_id:
        fields[_REF_FIELDS[item_type]] = {"_type": "reference", "_ref": reference_id}
    return fields


def _document_fields(data: FeaturedItemIn) -> dict:
    return {
        "title": data.title,
        "type": data.type.value,
        "customTitle": data.custom_title,
        "customDescription": data.custom_description,
        "customCTA": data.custom_cta,
        "customUrl": data.custom_url,
        "isActive": data.is_active,
        "order": data.order,
    }


# ── Reads ────────────────────────────────────────────────────────────────


def get_all_featured_items(client: SanityClient) -> list[FeaturedItem]:
    try:
        return _parse(client.fetch(groq.featured_items_query()))
    except (SanityError, ValidationError):
        logger.warning("Failed to load featured items", exc_info=True)
        return []


def get_featured_item_by_id(client: SanityClient, item_id: str) -> FeaturedItem | None:
    try:
        raw = client.fetch(groq.FEATURED_ITEM_BY_ID_QUERY, {"id": item_id})
        return FeaturedItem.model_validate(raw) if raw else None
    except (SanityError, ValidationError):
        logger.warning("Failed to load featured item %s", item_id, exc_info=True)
        return None


def get_active_featured_items(client: SanityClient, limit: int | None = None) -> list[FeaturedItem]:
    """Active items in display order; cached under the ``featuredItem`` tag."""
    try:
        rows = sanity_fetch(
            client,
            groq.featured_items_query(active_only=True, limit=limit),
            tags=("featuredItem",),
        )
        return _parse(rows)
    except (SanityError, ValidationError):
        logger.warning("Failed to load active featured items", exc_info=True)
        return []


# ── Writes ───────────────────────────────────────────────────────────────


def _written_item(result: dict, item_id: str) -> FeaturedItem | None:
    try:
        return FeaturedItem.model_validate(result)
    except ValidationError:
        logger.warning("CMS returned an unreadable featured item %s", item_id, exc_info=True)
        return None


def create_featured_item(client: SanityClient, data: FeaturedItemIn) -> FeaturedItem | None:
    doc = {"_type": "featuredItem", **_document_fields(data)}
    doc.update(_reference_fields(data.type, data.reference_id))
    doc = {k: v for k, v in doc.items() if v is not None}
    try:
        result = client.create(doc)
    except SanityError:
        logger.warning("Failed to create featured item %r", data.title, exc_info=True)
        return None
    revalidate_tag("featuredItem")
    logger.info("Created featured item %s (%s)", result.get("_id"), data.type.value)
    return _written_item(result, result.get("_id", ""))


def update_featured_item(client: SanityClient, item_id: str, data: FeaturedItemIn) -> FeaturedItem | None:
    fields = _document_fields(data)
    fields.update(_reference_fields(data.type, data.reference_id))
    try:
        result = client.patch(item_id, set=fields)
    except SanityError:
        logger.warning("Failed to update featured item %s", item_id, exc_info=True)
        return None
    revalidate_tag("featuredItem")
    return _written_item(result, item_id)


def delete_featured_item(client: SanityClient, item_id: str) -> bool:
    try:
        client.delete(item_id)
    except SanityError:
        logger.warning("Failed to delete featured item %s", item_id, exc_info=True)
        return False
    revalidate_tag("featuredItem")
    return True


def update_featured_item_order(client: SanityClient, items: list[ReorderItem]) -> bool:
    """Apply every new position in one transaction."""
    mutations = [patch_mutation(item.id, set={"order": item.order}) for item in items]
    try:
        client.mutate(mutations)
    except SanityError:
        logger.warning("Failed to reorder %d featured items", len(items), exc_info=True)
        return False
    revalidate_tag("featuredItem")
    return True


def toggle_featured_item_status(client: SanityClient, item_id: str, is_active: bool) -> FeaturedItem | None:
    try:
        result = client.patch(item_id, set={"isActive": is_active})
    except SanityError:
        logger.warning("Failed to toggle featured item %s", item_id, exc_info=True)
        return None
    revalidate_tag("featuredItem")
    return _written_item(result, item_id)


# ── Admin helpers ────────────────────────────────────────────────────────


def get_references_for_select(client: SanityClient, item_type: FeaturedType) -> list[dict]:
    query = groq.REFERENCE_QUERIES.get(item_type.value)
    if query is None:
        # No collection document type exists yet
        return []
    try:
        return client.fetch(query) or []
    except SanityError:
        logger.warning("Failed to load %s references", item_type.value, exc_info=True)
        return []


def get_featured_items_stats(client: SanityClient) -> dict:
    try:
        rows = client.fetch(groq.FEATURED_ITEMS_SUMMARY_QUERY) or []
    except SanityError:
        logger.warning("Failed to load featured item stats", exc_info=True)
        return {"total": 0, "active": 0, "inactive": 0, "by_type": []}

    active = sum(1 for r in rows if r.get("isActive"))
    counts = Counter(r.get("type") for r in rows if r.get("type"))
    return {
        "total": len(rows),
        "active": active,
        "inactive": len(rows) - active,
        "by_type": [{"type": t, "count": c} for t, c in sorted(counts.items())],
    }


# ── Display ──────────────────────────────────────────────────────────────


def _slide_href(item: FeaturedItem, ref: dict) -> str:
    slug = ref.get("slug")
    if item.type is FeaturedType.review:
        venue = ref.get("venue") or {}
        if slug and venue.get("slug"):
            city = (venue.get("city") or {}).get("slug") or "ciudad"
            return review_url(city, venue["slug"], slug)
        return "/blog"
    if item.type is FeaturedType.venue:
        if slug:
            city = (ref.get("city") or {}).get("slug") or "ciudad"
            return venue_url(city, slug)
        return "/locales"
    if item.type is FeaturedType.category:
        return f"/categorias/{slug}" if slug else "/categorias"
    if item.type is FeaturedType.guide:
        city = (ref.get("city") or {}).get("slug")
        if slug and city:
            return f"/{city}/guias/{slug}"
        return f"/guias/{slugify(item.title)}"
    return f"/colecciones/{slugify(item.title)}"


def _slide_image(item: FeaturedItem, ref: dict) -> str:
    if item.type is FeaturedType.review:
        image = ref.get("gallery")
    elif item.type is FeaturedType.venue:
        image = ref.get("images")
    else:
        image = ref.get("image")
    if isinstance(image, list):
        image = image[0] if image else None
    if not image:
        return PLACEHOLDER_SLIDE_IMAGE
    return preset_image_url(image, "hero")


def to_carousel_slide(item: FeaturedItem) -> dict:
    ref = item.reference or {}
    description = (
        item.custom_description
        or ref.get("tldr")
        or ref.get("description")
        or _DEFAULT_DESCRIPTIONS[item.type]
    )
    return {
        "id": item.id,
        "type": item.type.value,
        "title": item.custom_title or ref.get("title") or item.title,
        "description": description,
        "image": _slide_image(item, ref),
        "href": item.custom_url or _slide_href(item, ref),
        "cta": item.custom_cta or _DEFAULT_CTAS[item.type],
        "order": item.order,
    }
