from __future__ import annotations

import re
import unicodedata
from typing import Any

_CITATION_RE = re.compile(r"\[\d+(?:†[^\]]*)?\]")


def slugify(text: str) -> str:
    """Lower-case ASCII slug: accents folded, runs of other characters collapsed to ``-``."""
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode()
    return re.sub(r"[^a-z0-9]+", "-", folded.lower()).strip("-")


def _strip_city_suffix(venue_slug: str, city_slug: str) -> str:
    suffix = f"-{city_slug}"
    return venue_slug[: -len(suffix)] if venue_slug.endswith(suffix) else venue_slug


def venue_url(city_slug: str | None, venue_slug: str | None) -> str:
    if not city_slug or not venue_slug:
        return "#"
    clean = _strip_city_suffix(venue_slug, city_slug)
    return f"/{city_slug.lower()}/{clean.lower()}"


def review_url(city_slug: str | None, venue_slug: str | None, review_slug: str | None) -> str:
    if not city_slug or not venue_slug or not review_slug:
        return "#"
    clean = _strip_city_suffix(venue_slug, city_slug)
    return f"/{city_slug.lower()}/{clean.lower()}/review/{review_slug.lower()}"


def city_url(city_slug: str) -> str:
    return f"/{city_slug}"


def category_url(category_slug: str) -> str:
    return f"/categorias/{category_slug}"


def post_url(post_slug: str) -> str:
    return f"/blog/{post_slug}"


def clean_content(content: Any) -> str:
    """
    Plain text with citation markers (``[1]``, ``[12†source]``) removed.

    Portable Text block lists are flattened to their span text.
    """
    if not content:
        return ""
    if isinstance(content, list):
        content = " ".join(
            "".join(child.get("text", "") for child in block.get("children") or [])
            for block in content
            if isinstance(block, dict)
        )
    elif not isinstance(content, str):
        return ""
    return _CITATION_RE.sub("", content).strip()
