"""XML sitemaps: one per content type plus an index pointing at all of them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Iterable
from xml.sax.saxutils import escape

from ..cms import groq
from ..cms.cache import sanity_fetch
from ..cms.client import SanityClient
from ..content.urls import category_url, city_url, post_url, review_url, venue_url
from .site import DEFAULT_SITE_CONFIG, SiteConfig

logger = logging.getLogger(__name__)

SITEMAP_REVALIDATE = 3600
XMLNS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class SitemapUrl:
    url: str
    lastmod: str | None = None
    changefreq: str | None = None
    priority: float | None = None


STATIC_PAGES = [
    ("/", 1.0, "daily"),
    ("/blog", 0.8, "daily"),
    ("/categorias", 0.7, "weekly"),
    ("/sobre", 0.5, "monthly"),
    ("/contacto", 0.5, "monthly"),
    ("/politica-privacidad", 0.3, "yearly"),
    ("/terminos", 0.3, "yearly"),
    ("/cookies", 0.3, "yearly"),
]


def get_full_url(path: str, site: SiteConfig = DEFAULT_SITE_CONFIG) -> str:
    return f"{site.url}{'' if path.startswith('/') else '/'}{path}"


def _parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    # date-only and offset-less values are UTC
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def format_sitemap_date(value: str) -> str:
    """ISO timestamp to ``YYYY-MM-DD``."""
    try:
        return _parse_date(value).date().isoformat()
    except ValueError:
        return value[:10]


def get_latest_date(items: Iterable[dict]) -> str:
    """Most recent ``publishedAt`` (or ``_updatedAt``) across ``items``; now when empty."""
    dates = []
    for item in items:
        raw = item.get("publishedAt") or item.get("_updatedAt")
        if not raw:
            continue
        try:
            dates.append(_parse_date(raw))
        except ValueError:
            logger.debug("Skipping unparseable date %r", raw)
    if not dates:
        return datetime.now(timezone.utc).isoformat()
    return max(dates).isoformat()


def generate_sitemap_xml(urls: Iterable[SitemapUrl]) -> str:
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', f'<urlset xmlns="{XMLNS}">']
    for entry in urls:
        lines.append("  <url>")
        lines.append(f"    <loc>{escape(entry.url)}</loc>")
        if entry.lastmod:
            lines.append(f"    <lastmod>{entry.lastmod}</lastmod>")
        if entry.changefreq:
            lines.append(f"    <changefreq>{entry.changefreq}</changefreq>")
        if entry.priority:
            lines.append(f"    <priority>{entry.priority}</priority>")
        lines.append("  </url>")
    lines.append("</urlset>")
    return "\n".join(lines)


def generate_sitemap_index_xml(sitemaps: Iterable[tuple[str, str]]) -> str:
    """``sitemaps`` are ``(loc, lastmod)`` pairs."""
    lines = ['<?xml version="1.0" encoding="UTF-8"?>', f'<sitemapindex xmlns="{XMLNS}">']
    for loc, lastmod in sitemaps:
        lines += ["  <sitemap>", f"    <loc>{escape(loc)}</loc>", f"    <lastmod>{lastmod}</lastmod>", "  </sitemap>"]
    lines.append("</sitemapindex>")
    return "\n".join(lines)


# ── Per-type entries ─────────────────────────────────────────────────────


def _lastmod(row: dict, today: str) -> str:
    raw = row.get("publishedAt") or row.get("_updatedAt")
    return format_sitemap_date(raw) if raw else today


def _venue_entries(rows: list[dict], site: SiteConfig, today: str) -> list[SitemapUrl]:
    out = []
    for row in rows:
        path = venue_url((row.get("city") or {}).get("slug"), row.get("slug"))
        if path == "#":
            continue
        out.append(SitemapUrl(get_full_url(path, site), _lastmod(row, today), "weekly", 0.8))
    return out


def _review_entries(rows: list[dict], site: SiteConfig, today: str) -> list[SitemapUrl]:
    out = []
    for row in rows:
        venue = row.get("venue") or {}
        path = review_url((venue.get("city") or {}).get("slug"), venue.get("slug"), row.get("slug"))
        if path == "#":
            continue
        out.append(SitemapUrl(get_full_url(path, site), _lastmod(row, today), "monthly", 0.9))
    return out


def _post_entries(rows: list[dict], site: SiteConfig, today: str) -> list[SitemapUrl]:
    return [SitemapUrl(get_full_url(post_url(r["slug"]), site), _lastmod(r, today), "monthly", 0.7) for r in rows]


def _city_entries(rows: list[dict], site: SiteConfig, today: str) -> list[SitemapUrl]:
    return [SitemapUrl(get_full_url(city_url(r["slug"]), site), _lastmod(r, today), "weekly", 0.7) for r in rows]


def _category_entries(rows: list[dict], site: SiteConfig, today: str) -> list[SitemapUrl]:
    return [
        SitemapUrl(get_full_url(category_url(r["slug"]), site), _lastmod(r, today), "weekly", 0.6) for r in rows
    ]


_SITEMAPS: dict[str, tuple[str, str, Callable[[list[dict], SiteConfig, str], list[SitemapUrl]]]] = {
    "venues": (groq.SITEMAP_VENUES_QUERY, "venue", _venue_entries),
    "reviews": (groq.SITEMAP_REVIEWS_QUERY, "review", _review_entries),
    "posts": (groq.SITEMAP_POSTS_QUERY, "post", _post_entries),
    "cities": (groq.SITEMAP_CITIES_QUERY, "city", _city_entries),
    "categories": (groq.SITEMAP_CATEGORIES_QUERY, "category", _category_entries),
}

SITEMAP_TYPES = ("static", *_SITEMAPS)


def build_sitemap(
    client: SanityClient,
    sitemap_type: str,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
    today: date | None = None,
) -> str | None:
    """
    Render the sitemap for ``sitemap_type``. Unknown types give ``None``.

    CMS errors propagate so the caller can answer with a 500.
    """
    day = (today or date.today()).isoformat()
    if sitemap_type == "static":
        return generate_sitemap_xml(
            SitemapUrl(get_full_url(path, site), day, freq, prio) for path, prio, freq in STATIC_PAGES
        )
    if sitemap_type not in _SITEMAPS:
        return None

    query, tag, entries = _SITEMAPS[sitemap_type]
    rows = sanity_fetch(client, query, tags=(tag,), revalidate=SITEMAP_REVALIDATE) or []
    return generate_sitemap_xml(entries([r for r in rows if r.get("slug")], site, day))


def build_sitemap_index(site: SiteConfig = DEFAULT_SITE_CONFIG, now: datetime | None = None) -> str:
    stamp = (now or datetime.now()).isoformat()
    return generate_sitemap_index_xml(
        (f"{site.url}/api/sitemap/{kind}", stamp) for kind in SITEMAP_TYPES
    )
