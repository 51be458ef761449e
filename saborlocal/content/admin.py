"""
Admin CRUD over the CMS content types.

Responsibilities:
  - Build Sanity documents from validated admin request bodies
  - Generate slugs and keep them unique per document type
  - Refuse deletes that would leave dangling references
  - Drop the affected cache tags after every write
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from ..cms import groq
from ..cms.cache import revalidate_tag
from ..cms.client import SanityClient
from .models import CategoryIn, CityIn, PostIn, ReviewIn, VenueIn
from .urls import slugify
from .validation import is_valid_url, url_error_message, validate_phone

logger = logging.getLogger(__name__)


class AdminError(Exception):
    """A request the CMS could serve but the domain rules refuse."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class NotFoundError(AdminError):
    def __init__(self, message: str) -> None:
        super().__init__(404, message)


def _ref(doc_id: str | None) -> dict | None:
    return {"_type": "reference", "_ref": doc_id} if doc_id else None


def _keyed(items: list[dict]) -> list[dict]:
    # Sanity requires a _key on every object in an array
    return [{"_key": f"k{i}", **item} for i, item in enumerate(items)]


def _city_fields(data: CityIn) -> dict:
    return {
        "title": data.title,
        "region": data.region,
        "description": data.description,
    }


def _category_fields(data: CategoryIn) -> dict:
    return {
        "title": data.title,
        "description": data.description,
        "icon": data.icon,
        "color": data.color,
        "featured": data.featured,
    }


def _venue_fields(data: VenueIn) -> dict:
    phone = data.phone or ""
    check = validate_phone(phone)
    if not check.is_valid:
        raise AdminError(400, check.error or "Teléfono no válido")
    if not is_valid_url(data.website):
        raise AdminError(400, url_error_message(data.website))

    geo = None
    if data.lat is not None and data.lng is not None:
        geo = {"_type": "geopoint", "lat": data.lat, "lng": data.lng}

    return {
        "title": data.title,
        "address": data.address,
        "postalCode": data.postal_code,
        "phone": check.formatted or None,
        "website": data.website or None,
        "openingHours": data.opening_hours or None,
        "priceRange": data.price_range,
        "schemaType": data.schema_type,
        "description": data.description,
        "city": _ref(data.city_id),
        "categories": _keyed([_ref(c) for c in data.category_ids]),
        "geo": geo,
        "featured": data.featured,
    }


def _review_fields(data: ReviewIn) -> dict:
    return {
        "title": data.title,
        "venue": _ref(data.venue_id),
        "ratings": data.ratings.model_dump(),
        "visitDate": data.visit_date,
        "publishedAt": data.published_at,
        "avgTicket": data.avg_ticket,
        "highlights": data.highlights,
        "pros": data.pros,
        "cons": data.cons,
        "tldr": data.tldr,
        "faq": _keyed([f.model_dump() for f in data.faq]),
        "author": data.author,
        "tags": data.tags,
        "published": data.published,
        "featured": data.featured,
    }


def _post_fields(data: PostIn) -> dict:
    return {
        "title": data.title,
        "excerpt": data.excerpt,
        "body": data.body or None,
        "faq": _keyed([f.model_dump() for f in data.faq]),
        "tags": data.tags,
        "author": data.author,
        "category": _ref(data.category_id),
        "publishedAt": data.published_at,
        "seoTitle": data.seo_title,
        "seoDescription": data.seo_description,
        "featured": data.featured,
    }


@dataclass(frozen=True)
class ContentType:
    name: str
    not_found: str
    list_query: str
    build: Callable[[Any], dict]
    blocked_by: str | None = None
    blocked_message: str = ""
    extra_tags: tuple[str, ...] = ()


CONTENT_TYPES: dict[str, ContentType] = {
    "city": ContentType(
        name="city",
        not_found="Ciudad no encontrada",
        list_query=groq.CITIES_WITH_COUNTS_QUERY,
        build=_city_fields,
        blocked_by="venue",
        blocked_message="No se puede eliminar una ciudad que tiene locales asociados",
    ),
    "category": ContentType(
        name="category",
        not_found="Categoría no encontrada",
        list_query=groq.CATEGORIES_WITH_COUNTS_QUERY,
        build=_category_fields,
        blocked_by="venue",
        blocked_message="No se puede eliminar una categoría que tiene locales asociados",
    ),
    "venue": ContentType(
        name="venue",
        not_found="Local no encontrado",
        list_query=groq.ADMIN_VENUES_QUERY,
        build=_venue_fields,
        blocked_by="review",
        blocked_message="No se puede eliminar un local que tiene reseñas asociadas",
        extra_tags=("city",),
    ),
    "review": ContentType(
        name="review",
        not_found="Reseña no encontrada",
        list_query=groq.ADMIN_REVIEWS_QUERY,
        build=_review_fields,
        extra_tags=("venue",),
    ),
    "post": ContentType(
        name="post",
        not_found="Artículo no encontrado",
        list_query=groq.ADMIN_POSTS_QUERY,
        build=_post_fields,
    ),
}


def _content_type(name: str) -> ContentType:
    try:
        return CONTENT_TYPES[name]
    except KeyError:
        raise AdminError(400, f"Tipo de contenido no soportado: {name}") from None


def _revalidate(ctype: ContentType, doc_id: str) -> None:
    for tag in (ctype.name, f"{ctype.name}-{doc_id}", *ctype.extra_tags):
        revalidate_tag(tag)


# Document fields whose request attribute is not the snake_case of the key
_FIELD_SOURCES: dict[str, tuple[str, ...]] = {
    "city": ("city_id",),
    "venue": ("venue_id",),
    "category": ("category_id",),
    "categories": ("category_ids",),
    "geo": ("lat", "lng"),
}


def _sent_fields(data: BaseModel, fields: dict) -> dict:
    """Keep only the fields the request body actually set."""
    sent = data.model_fields_set
    return {
        key: value
        for key, value in fields.items()
        if sent.intersection(_FIELD_SOURCES.get(key, (to_snake(key),)))
    }


def _require_title(data: BaseModel) -> None:
    if not data.title.strip():
        raise AdminError(400, "Título es requerido")


def _resolve_slug(client: SanityClient, ctype: ContentType, data: BaseModel, exclude_id: str = "") -> str:
    _require_title(data)
    slug = slugify(getattr(data, "slug", None) or data.title)
    if not slug:
        raise AdminError(400, "No se pudo generar un slug a partir del título")
    taken = client.fetch(
        groq.SLUG_TAKEN_QUERY,
        {"type": ctype.name, "slug": slug, "excludeId": exclude_id},
    )
    if taken:
        raise AdminError(400, "Ya existe un elemento con este slug")
    return slug


# ── Operations ───────────────────────────────────────────────────────────


def list_documents(client: SanityClient, type_name: str) -> list[dict]:
    ctype = _content_type(type_name)
    return client.fetch(ctype.list_query) or []


def get_document(client: SanityClient, type_name: str, doc_id: str) -> dict:
    ctype = _content_type(type_name)
    doc = client.fetch(groq.ADMIN_DOCUMENT_BY_ID_QUERY, {"type": ctype.name, "id": doc_id})
    if not doc:
        raise NotFoundError(ctype.not_found)
    return doc


def create_document(client: SanityClient, type_name: str, data: BaseModel) -> dict:
    ctype = _content_type(type_name)
    fields = ctype.build(data)
    slug = _resolve_slug(client, ctype, data)

    doc = {"_type": ctype.name, "slug": {"_type": "slug", "current": slug}}
    doc.update({k: v for k, v in fields.items() if v is not None})
    created = client.create(doc)

    _revalidate(ctype, created.get("_id", ""))
    logger.info("Created %s %s (%s)", ctype.name, created.get("_id"), slug)
    return created


def update_document(client: SanityClient, type_name: str, doc_id: str, data: BaseModel) -> dict:
    ctype = _content_type(type_name)
    get_document(client, type_name, doc_id)
    _require_title(data)
    fields = _sent_fields(data, ctype.build(data))

    # The slug is the public URL; it only changes when one is sent
    if getattr(data, "slug", None):
        slug = _resolve_slug(client, ctype, data, exclude_id=doc_id)
        fields["slug"] = {"_type": "slug", "current": slug}
    updated = client.patch(doc_id, set=fields)

    _revalidate(ctype, doc_id)
    logger.info("Updated %s %s", ctype.name, doc_id)
    return updated


def delete_document(client: SanityClient, type_name: str, doc_id: str) -> None:
    ctype = _content_type(type_name)
    get_document(client, type_name, doc_id)

    if ctype.blocked_by:
        in_use = client.fetch(groq.REFERENCING_COUNT_QUERY, {"type": ctype.blocked_by, "id": doc_id})
        if in_use:
            raise AdminError(400, ctype.blocked_message)

    client.delete(doc_id)
    _revalidate(ctype, doc_id)
    logger.info("Deleted %s %s", ctype.name, doc_id)
