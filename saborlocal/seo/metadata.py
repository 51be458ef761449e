"""
Page metadata: title, description, canonical URL, Open Graph and Twitter cards.

Builders return plain dicts ready to be serialised for the front end.
Descriptions that reach search results are kept to 160 characters.
"""

from __future__ import annotations

import re
from typing import Any

from ..content.models import Category, City, Review, SanityImage, Venue
from ..content.urls import category_url, review_url, venue_url
from .site import DEFAULT_SITE_CONFIG, SiteConfig

DESCRIPTION_LIMIT = 160
TITLE_LIMIT = 60

_WHITESPACE_RE = re.compile(r"\s+")


def rating_label(avg: float) -> str:
    if avg >= 8:
        return "Excelente"
    if avg >= 6:
        return "Muy bueno"
    if avg >= 4:
        return "Bueno"
    return "Regular"


def generate_canonical_url(path: str, site: SiteConfig = DEFAULT_SITE_CONFIG) -> str:
    clean = path if path.startswith("/") else f"/{path}"
    return f"{site.url}{clean}"


def optimize_description(text: str | None, max_length: int = DESCRIPTION_LIMIT) -> str:
    """Collapse whitespace and cut at the last word boundary, adding ``...``."""
    if not text:
        return ""
    cleaned = _WHITESPACE_RE.sub(" ", text).strip()
    if len(cleaned) <= max_length:
        return cleaned
    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return f"{truncated[:last_space]}..."
    return f"{truncated[: max_length - 3]}..."


def optimize_title(title: str | None, max_length: int = TITLE_LIMIT) -> str:
    """Trim and cut at the last word boundary. No ellipsis is added."""
    if not title:
        return ""
    cleaned = title.strip()
    if len(cleaned) <= max_length:
        return cleaned
    truncated = cleaned[:max_length]
    last_space = truncated.rfind(" ")
    if last_space > 0:
        return truncated[:last_space]
    return truncated[: max_length - 3]


def _image_entries(images: list[SanityImage], alt: str, width: int = 1200, height: int = 800) -> list[dict]:
    return [
        {"url": img.asset.url, "alt": img.alt or alt, "width": width, "height": height}
        for img in images
        if img.asset and img.asset.url
    ]


def _page(
    title: str,
    description: str,
    url: str,
    og_type: str,
    images: list[dict],
    meta: list[dict],
    site: SiteConfig,
    article: dict | None = None,
) -> dict:
    open_graph: dict[str, Any] = {
        "title": title,
        "description": description,
        "url": url,
        "type": og_type,
        "images": images,
        "site_name": site.name,
        "locale": site.og_locale,
    }
    if article:
        open_graph["article"] = article
    return {
        "title": title,
        "description": description,
        "canonical": url,
        "openGraph": open_graph,
        "twitter": {
            "card": "summary_large_image",
            "title": title,
            "description": description,
            "images": [img["url"] for img in images],
        },
        "additionalMetaTags": meta,
    }


def generate_geo_meta_tags(geo: Any = None, location: str | None = None) -> list[dict]:
    if not geo and not location:
        return []
    tags = [{"name": "geo.region", "content": "ES"}]
    if location:
        tags.append({"name": "geo.placename", "content": location})
    if geo and geo.lat is not None and geo.lng is not None:
        tags.append({"name": "geo.position", "content": f"{geo.lat};{geo.lng}"})
        tags.append({"name": "ICBM", "content": f"{geo.lat}, {geo.lng}"})
    return tags


def _placename(city: City | None) -> str | None:
    if not city:
        return None
    return f"{city.title}, {city.region}" if city.region else city.title


def venue_metadata(venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    city = venue.city or City()
    title = f"{venue.title} en {city.title} - Reseña completa"
    category_titles = ", ".join(c.title for c in venue.categories)
    description = venue.description or (
        f"Descubre {venue.title} en {city.title}. Información completa, horarios, "
        f"precios y reseñas honestas. {venue.price_range or ''} • {category_titles}"
    )
    description = description[:DESCRIPTION_LIMIT]
    url = site.url + venue_url(city.slug, venue.slug)

    keywords = [venue.title, city.title, *(c.title for c in venue.categories)]
    if venue.price_range:
        keywords.append(venue.price_range)
    keywords += ["restaurante", "reseña", "opiniones"]

    meta = generate_geo_meta_tags(venue.geo, _placename(city))
    meta.append({"name": "keywords", "content": ", ".join(k for k in keywords if k)})

    return _page(title, description, url, "website", _image_entries(venue.images, venue.title), meta, site)


def review_metadata(review: Review, venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    city = venue.city or City()
    avg = round(review.ratings.overall, 1) if review.ratings else 0.0
    label = rating_label(avg)

    title = f"{venue.title} - Reseña {label} ({avg:g}/10) | {city.title}"
    description = (review.tldr or "")[:DESCRIPTION_LIMIT]
    url = site.url + review_url(city.slug, venue.slug, review.slug)
    images = _image_entries(review.gallery, f"{venue.title} - {review.title}")

    meta = []
    if review.author:
        meta.append({"name": "article:author", "content": review.author})
    if review.published_at:
        meta.append({"name": "article:published_time", "content": review.published_at})
    meta.append({"name": "rating", "content": f"{avg:g}"})
    keywords = [venue.title, city.title, "reseña", "opinión", "experiencia", label, *review.tags]
    meta.append({"name": "keywords", "content": ", ".join(k for k in keywords if k)})

    article = {
        "publishedTime": review.published_at,
        "authors": [review.author] if review.author else [],
        "tags": review.tags,
    }
    return _page(title, description, url, "article", images, meta, site, article=article)


def city_metadata(city: City, venue_count: int, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    title = f"Mejores restaurantes y locales en {city.title}"
    region = f", {city.region}" if city.region else ""
    description = (
        f"Descubre los {venue_count} mejores restaurantes y locales en {city.title}{region}. "
        "Reseñas honestas, fotos y toda la información que necesitas."
    )[:DESCRIPTION_LIMIT]
    url = f"{site.url}/{city.slug}"
    images = _image_entries(
        [city.hero_image] if city.hero_image else [], f"{city.title} - Mejores restaurantes"
    )

    meta = generate_geo_meta_tags(city.geo, _placename(city))
    keywords = [city.title, city.region, "restaurantes", "locales", "reseñas", "gastronomía", "mejores", "opiniones"]
    meta.append({"name": "keywords", "content": ", ".join(k for k in keywords if k)})
    return _page(title, description, url, "website", images, meta, site)


def category_metadata(category: str, city: str | None = None, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    category_slug = re.sub(r"\s+", "-", category.lower())
    if city:
        title = f"{category} en {city} - Mejores opciones"
        description = (
            f"Descubre los mejores {category.lower()} en {city}. Reseñas completas, fotos "
            "y toda la información que necesitas para elegir."
        )
        url = f"{site.url}/{city}/categoria/{category_slug}"
    else:
        title = f"{category} - Mejores locales y restaurantes"
        description = (
            f"Explora los mejores {category.lower()}. Reseñas honestas, fotos y "
            "recomendaciones para tu próxima visita."
        )
        url = site.url + category_url(category_slug)

    keywords = [category, city, "restaurantes", "locales", "reseñas", "mejores", "opiniones"]
    meta = [{"name": "keywords", "content": ", ".join(k for k in keywords if k)}]
    return _page(title, description[:DESCRIPTION_LIMIT], url, "website", [], meta, site)


def page_metadata(
    title: str,
    description: str,
    canonical: str,
    og_type: str = "website",
    images: list[dict] | None = None,
    published_time: str | None = None,
    modified_time: str | None = None,
    author: str | None = None,
    tags: list[str] | None = None,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
) -> dict:
    """Generic page metadata with robots directives and a default OG image."""
    og_images = images or [
        {"url": f"{site.url}/og-default.jpg", "width": 1200, "height": 630, "alt": title}
    ]
    meta: list[dict] = [
        {"name": "robots", "content": "index, follow, max-image-preview:large"},
        {
            "name": "googlebot",
            "content": "index, follow, max-video-preview:-1, max-image-preview:large, max-snippet:-1",
        },
        {"property": "og:locale", "content": site.og_locale},
    ]
    if published_time:
        meta.append({"property": "article:published_time", "content": published_time})
    if modified_time:
        meta.append({"property": "article:modified_time", "content": modified_time})
    if author:
        meta.append({"name": "author", "content": author})
    if tags:
        meta.append({"name": "keywords", "content": ", ".join(tags)})

    page = _page(title, description, canonical, og_type, og_images, meta, site)
    page["twitter"]["site"] = site.twitter_handle
    page["twitter"]["creator"] = site.twitter_handle
    return page


def default_metadata(site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    return page_metadata(
        title=site.name,
        description=site.description,
        canonical=site.url,
        tags=["restaurantes", "reseñas", "gastronomía", "locales", "opiniones", "blog", "comida", "España"],
        site=site,
    )


def generate_keywords(
    venue: Venue | None = None,
    city: City | None = None,
    category: Category | None = None,
    review: Review | None = None,
    custom: list[str] | None = None,
) -> list[str]:
    """Lower-cased keywords in first-seen order, without duplicates."""
    keywords = ["restaurante", "local", "reseña", "opinión", "gastronomía", "comida"]
    if venue:
        keywords.append(venue.title.lower())
        if venue.price_range:
            keywords.append(venue.price_range)
        keywords += [c.title.lower() for c in venue.categories]
    if city:
        keywords.append(city.title.lower())
        if city.region:
            keywords.append(city.region.lower())
    if category:
        keywords.append(category.title.lower())
    if review:
        keywords += [t.lower() for t in review.tags]
        keywords += [h.lower() for h in review.highlights]
    if custom:
        keywords += [k.lower() for k in custom]
    return list(dict.fromkeys(k for k in keywords if k))


def sanity_image_to_seo(image: SanityImage, alt: str | None = None, width: int = 1200, height: int = 630) -> dict:
    return {
        "url": image.asset.url if image.asset else None,
        "width": width,
        "height": height,
        "alt": alt or image.alt or "Imagen",
    }


def generate_image_sizes(image: SanityImage, alt: str | None = None) -> list[dict]:
    """Open Graph, card and thumbnail crops; none without an uploaded asset."""
    base = image.asset.url if image.asset else None
    if not base:
        return []
    alt_text = alt or image.alt or "Imagen"
    return [
        {"url": f"{base}?w={w}&h={h}&fit=crop&auto=format", "width": w, "height": h, "alt": alt_text}
        for w, h in ((1200, 630), (800, 600), (400, 300))
    ]
