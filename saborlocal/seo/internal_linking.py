"""
Internal link suggestions between guides, rankings, recipes, dish guides,
venues and reviews.

Each content type links onwards according to its own rules: a guide points
at rankings in the same city, a recipe at the dish guide for that dish, a
venue at the city guides, and so on. Every rule assigns a relevance score.
The best eight suggestions are returned, highest score first.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from ..cms import groq
from ..cms.cache import sanity_fetch
from ..cms.client import SanityClient, SanityError

logger = logging.getLogger(__name__)

LinkType = Literal["guide", "list", "recipe", "dish-guide", "venue", "review"]

MAX_SUGGESTIONS = 8
LINK_REVALIDATE = 3600

_COLLECTIONS = {
    "guides": groq.LINK_GUIDES_QUERY,
    "lists": groq.LINK_LISTS_QUERY,
    "recipes": groq.LINK_RECIPES_QUERY,
    "dish_guides": groq.LINK_DISH_GUIDES_QUERY,
    "venues": groq.LINK_VENUES_QUERY,
    "reviews": groq.LINK_REVIEWS_QUERY,
}


class LinkSuggestion(BaseModel):
    type: LinkType
    title: str
    url: str
    relevance_score: int
    reason: str


def _city(doc: dict) -> dict:
    return doc.get("city") or {}


def _lower(value: Any) -> str:
    return str(value or "").lower()


def _overlaps(a: str, b: str) -> bool:
    """Either string contains the other, ignoring case."""
    a, b = a.lower(), b.lower()
    return bool(a and b) and (a in b or b in a)


def _ranking_url(city_slug: str | None, slug: str) -> str:
    return f"/{city_slug}/rankings/{slug}"


# ── Per-type rules ───────────────────────────────────────────────────────


def _guide_links(guide: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    city_slug = _city(guide).get("slug")
    city_title = _city(guide).get("title")
    neighborhood = guide.get("neighborhood")
    theme = guide.get("theme")

    for lst in content["lists"]:
        if not city_slug or _city(lst).get("slug") != city_slug or lst.get("_id") == guide.get("_id"):
            continue
        score = 70
        reason = f"Lista en {city_title}"
        if neighborhood and neighborhood.lower() in _lower(lst.get("title")):
            score += 20
            reason += f" (mismo barrio: {neighborhood})"
        if theme and lst.get("dish") and theme.lower() in lst["dish"].lower():
            score += 15
            reason += " (tema relacionado)"
        out.append(LinkSuggestion(
            type="list", title=lst["title"], url=_ranking_url(city_slug, lst["slug"]),
            relevance_score=score, reason=reason,
        ))

    sections = guide.get("sections")
    if sections:
        for dish_guide in content["dish_guides"]:
            out.append(LinkSuggestion(
                type="dish-guide", title=dish_guide["title"], url=f"/platos/{dish_guide['slug']}",
                relevance_score=50, reason="Guía de plato relacionada",
            ))

        venue_ids = {
            (entry.get("venue") or {}).get("_id")
            for section in sections
            for entry in section.get("venues") or []
        }
        venue_ids.discard(None)
        for venue in content["venues"]:
            if venue.get("_id") in venue_ids and city_slug:
                out.append(LinkSuggestion(
                    type="venue", title=venue["title"], url=f"/{city_slug}/{venue['slug']}",
                    relevance_score=60, reason="Local incluido en la guía",
                ))
    return out


def _list_links(lst: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    city_slug = _city(lst).get("slug")
    dish = lst.get("dish")

    for guide in content["guides"]:
        if not city_slug or _city(guide).get("slug") != city_slug or guide.get("_id") == lst.get("_id"):
            continue
        score = 75
        reason = f"Guía en {_city(lst).get('title')}"
        if lst.get("neighborhood") and guide.get("neighborhood") == lst["neighborhood"]:
            score += 20
            reason += " (mismo barrio)"
        out.append(LinkSuggestion(
            type="guide", title=guide["title"], url=f"/{city_slug}/guias/{guide['slug']}",
            relevance_score=score, reason=reason,
        ))

    if dish:
        for dish_guide in content["dish_guides"]:
            if dish.lower() in _lower(dish_guide.get("dishName")):
                out.append(LinkSuggestion(
                    type="dish-guide", title=dish_guide["title"], url=f"/platos/{dish_guide['slug']}",
                    relevance_score=90, reason=f"Guía específica de {dish}",
                ))
        for recipe in content["recipes"]:
            if dish.lower() in _lower(recipe.get("title")):
                out.append(LinkSuggestion(
                    type="recipe", title=recipe["title"], url=f"/recetas/{recipe['slug']}",
                    relevance_score=70, reason=f"Receta de {dish}",
                ))
    return out


def _recipe_links(recipe: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    dish_name = recipe.get("dishName") or recipe.get("title") or ""

    for dish_guide in content["dish_guides"]:
        if _overlaps(dish_guide.get("dishName") or "", dish_name):
            out.append(LinkSuggestion(
                type="dish-guide", title=dish_guide["title"], url=f"/platos/{dish_guide['slug']}",
                relevance_score=95, reason=f"Guía completa de {dish_guide['dishName']}",
            ))

    for lst in content["lists"]:
        if lst.get("dish") and _overlaps(lst["dish"], dish_name) and _city(lst).get("slug"):
            out.append(LinkSuggestion(
                type="list", title=lst["title"], url=_ranking_url(_city(lst).get("slug"), lst["slug"]),
                relevance_score=85, reason=f"Dónde probar {lst['dish']} en {_city(lst).get('title')}",
            ))

    for venue in recipe.get("relatedVenues") or []:
        if not _city(venue).get("slug"):
            continue
        out.append(LinkSuggestion(
            type="venue", title=venue["title"], url=f"/{_city(venue).get('slug')}/{venue['slug']}",
            relevance_score=80, reason="Local recomendado para probar el plato",
        ))
    return out


def _dish_guide_links(dish_guide: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    dish_name = dish_guide.get("dishName") or ""

    for recipe in content["recipes"]:
        if _overlaps(recipe.get("title") or "", dish_name):
            out.append(LinkSuggestion(
                type="recipe", title=recipe["title"], url=f"/recetas/{recipe['slug']}",
                relevance_score=90, reason=f"Receta casera de {dish_name}",
            ))

    for lst in content["lists"]:
        if lst.get("dish") and _overlaps(lst["dish"], dish_name) and _city(lst).get("slug"):
            out.append(LinkSuggestion(
                type="list", title=lst["title"], url=_ranking_url(_city(lst).get("slug"), lst["slug"]),
                relevance_score=85, reason=f"Mejores sitios para {dish_name}",
            ))

    for entry in (dish_guide.get("bestVenues") or [])[:3]:
        venue = entry.get("venue") or {}
        if not venue.get("slug"):
            continue
        out.append(LinkSuggestion(
            type="venue", title=venue.get("title", ""), url=f"/locales/{venue['slug']}",
            relevance_score=75, reason=f"#{entry.get('position')} mejor sitio para {dish_name}",
        ))
    return out


def _venue_links(venue: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    city_slug = _city(venue).get("slug")
    if not city_slug:
        return out

    for guide in content["guides"]:
        if _city(guide).get("slug") == city_slug:
            out.append(LinkSuggestion(
                type="guide", title=guide["title"], url=f"/{city_slug}/guias/{guide['slug']}",
                relevance_score=80, reason=f"Guía gastronómica de {_city(guide).get('title')}",
            ))

    for category in venue.get("categories") or []:
        for lst in content["lists"]:
            if _city(lst).get("slug") == city_slug and _lower(category.get("title")) in _lower(lst.get("title")):
                out.append(LinkSuggestion(
                    type="list", title=lst["title"], url=_ranking_url(city_slug, lst["slug"]),
                    relevance_score=75, reason=f"Ranking de {category.get('title')}",
                ))
    return out


def _review_links(review: dict, content: dict) -> list[LinkSuggestion]:
    out = []
    city_slug = _city(review.get("venue") or {}).get("slug")
    if not city_slug:
        return out

    for guide in content["guides"]:
        if _city(guide).get("slug") == city_slug:
            out.append(LinkSuggestion(
                type="guide", title=guide["title"], url=f"/{city_slug}/guias/{guide['slug']}",
                relevance_score=70, reason=f"Más opciones en {_city(guide).get('title')}",
            ))

    tags = review.get("tags") or []
    if tags:
        for lst in content["lists"]:
            if _city(lst).get("slug") != city_slug:
                continue
            if any(tag.lower() in _lower(lst.get("title")) for tag in tags):
                out.append(LinkSuggestion(
                    type="list", title=lst["title"], url=_ranking_url(city_slug, lst["slug"]),
                    relevance_score=65, reason="Rankings similares",
                ))
    return out


_RULES = {
    "guide": _guide_links,
    "list": _list_links,
    "recipe": _recipe_links,
    "dish-guide": _dish_guide_links,
    "venue": _venue_links,
    "review": _review_links,
}


# ── Public API ───────────────────────────────────────────────────────────


def get_internal_link_suggestions(client: SanityClient, content_type: str, content: dict) -> list[LinkSuggestion]:
    """
    Rank link targets for ``content`` (a raw CMS document of ``content_type``).

    Unknown content types yield no suggestions. A CMS failure is logged and
    also yields ``[]``.
    """
    rule = _RULES.get(content_type)
    if rule is None:
        return []
    try:
        collections = {
            name: sanity_fetch(
                client, query, tags=("linking",), revalidate=LINK_REVALIDATE
            ) or []
            for name, query in _COLLECTIONS.items()
        }
        suggestions = rule(content, collections)
    except (SanityError, ValidationError, KeyError, TypeError):
        logger.warning("Failed to build link suggestions for %s %s", content_type, content.get("_id"), exc_info=True)
        return []

    # sorted() is stable, equal scores keep rule order
    ranked = sorted(suggestions, key=lambda s: s.relevance_score, reverse=True)
    return ranked[:MAX_SUGGESTIONS]


def get_link_source(client: SanityClient, content_type: str, slug: str) -> dict | None:
    try:
        return sanity_fetch(
            client,
            groq.LINK_SOURCE_QUERY,
            {"type": content_type, "slug": slug},
            tags=("linking",),
            revalidate=LINK_REVALIDATE,
        )
    except SanityError:
        logger.warning("Failed to load %s %s for linking", content_type, slug, exc_info=True)
        return None


def generate_related_content_module(suggestions: list[LinkSuggestion]) -> dict[str, list[LinkSuggestion]]:
    """Group suggestions for a "También te puede interesar" block."""

    def pick(link_type: str, n: int) -> list[LinkSuggestion]:
        return [s for s in suggestions if s.type == link_type][:n]

    return {
        "guides": pick("guide", 3),
        "lists": pick("list", 3),
        "recipes": pick("recipe", 2),
        "venues": pick("venue", 4),
    }
