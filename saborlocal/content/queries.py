"""
Public read side: the data the site pages render from.

Each function runs one cached GROQ query and parses the result into the
content models. A CMS failure is logged and the empty default returned so a
page can still render.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from pydantic import ValidationError

from ..cms import groq
from ..cms.cache import CONTENT_TAGS, sanity_fetch
from ..cms.client import SanityClient, SanityError
from .models import Category, City, Post, Review, Venue

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _safe_fetch(
    client: SanityClient,
    query: str,
    params: dict | None,
    tags: tuple[str, ...],
    parse: Callable[[Any], T],
    default: T,
) -> T:
    try:
        raw = sanity_fetch(client, query, params, tags=tags)
        if raw is None:
            return default
        return parse(raw)
    except (SanityError, ValidationError):
        logger.warning("CMS query failed, returning default", exc_info=True)
        return default


def _many(model: type) -> Callable[[Any], list]:
    return lambda rows: [model.model_validate(r) for r in rows or [] if r]


# ── Detail pages ─────────────────────────────────────────────────────────


def get_venue(client: SanityClient, city_slug: str, venue_slug: str) -> Venue | None:
    venue = _safe_fetch(
        client,
        groq.VENUE_BY_SLUG_QUERY,
        {"slug": venue_slug},
        ("venue",),
        Venue.model_validate,
        None,
    )
    if venue is None or (venue.city and venue.city.slug != city_slug):
        return None
    return venue


def get_review(client: SanityClient, slug: str) -> Review | None:
    return _safe_fetch(
        client,
        groq.REVIEW_BY_SLUG_QUERY,
        {"slug": slug},
        ("review",),
        Review.model_validate,
        None,
    )


def get_post(client: SanityClient, slug: str) -> Post | None:
    return _safe_fetch(
        client,
        groq.POST_BY_SLUG_QUERY,
        {"slug": slug},
        ("post",),
        Post.model_validate,
        None,
    )


def get_city(client: SanityClient, slug: str) -> tuple[City, list[Venue]] | None:
    def parse(raw: dict) -> tuple[City, list[Venue]]:
        return City.model_validate(raw), _many(Venue)(raw.get("venues"))

    return _safe_fetch(
        client,
        groq.CITY_BY_SLUG_QUERY,
        {"slug": slug},
        ("city", "venue"),
        parse,
        None,
    )


def get_category(client: SanityClient, slug: str) -> tuple[Category, list[Venue]] | None:
    def parse(raw: dict) -> tuple[Category, list[Venue]]:
        return Category.model_validate(raw), _many(Venue)(raw.get("venues"))

    return _safe_fetch(
        client,
        groq.CATEGORY_BY_SLUG_QUERY,
        {"slug": slug},
        ("category", "venue"),
        parse,
        None,
    )


# ── Listings ─────────────────────────────────────────────────────────────


def get_latest_reviews(client: SanityClient, limit: int = 6) -> list[Review]:
    return _safe_fetch(
        client, groq.LATEST_REVIEWS_QUERY, {"limit": limit},
        ("review",), _many(Review), [],
    )


def get_featured_reviews(client: SanityClient, limit: int = 3) -> list[Review]:
    return _safe_fetch(
        client, groq.FEATURED_REVIEWS_QUERY, {"limit": limit},
        ("review",), _many(Review), [],
    )


def get_posts(client: SanityClient, limit: int = 12, tag: str | None = None) -> list[Post]:
    if tag:
        return _safe_fetch(
            client, groq.POSTS_BY_TAG_QUERY, {"tag": tag, "limit": limit},
            ("post",), _many(Post), [],
        )
    return _safe_fetch(
        client, groq.POSTS_QUERY, {"limit": limit},
        ("post",), _many(Post), [],
    )


def get_cities(client: SanityClient) -> list[City]:
    return _safe_fetch(
        client, groq.CITIES_WITH_COUNTS_QUERY, None,
        ("city",), _many(City), [],
    )


def get_categories(client: SanityClient) -> list[Category]:
    return _safe_fetch(
        client, groq.CATEGORIES_WITH_COUNTS_QUERY, None,
        ("category",), _many(Category), [],
    )


def get_related_venues(client: SanityClient, venue: Venue) -> list[Venue]:
    params = {
        "venueId": venue.id or "",
        "cityRef": venue.city.id if venue.city and venue.city.id else "",
        "categoryRefs": [c.id for c in venue.categories if c.id],
    }
    return _safe_fetch(
        client, groq.RELATED_VENUES_QUERY, params,
        ("venue",), _many(Venue), [],
    )


def get_stats(client: SanityClient) -> dict:
    return _safe_fetch(
        client, groq.STATS_QUERY, None,
        CONTENT_TAGS, dict, {},
    )


# ── Search ───────────────────────────────────────────────────────────────


def search(client: SanityClient, term: str) -> dict[str, list]:
    """Prefix-match venues, reviews and posts. Blank terms match nothing."""
    term = term.strip()
    if not term:
        return {"venues": [], "reviews": [], "posts": []}
    params = {"searchTerm": term}
    return {
        "venues": _safe_fetch(
            client, groq.SEARCH_VENUES_QUERY, params,
            ("venue",), _many(Venue), [],
        ),
        "reviews": _safe_fetch(
            client, groq.SEARCH_REVIEWS_QUERY, params,
            ("review",), _many(Review), [],
        ),
        "posts": _safe_fetch(
            client, groq.SEARCH_POSTS_QUERY, params,
            ("post",), _many(Post), [],
        ),
    }
