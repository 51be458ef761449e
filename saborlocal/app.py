from __future__ import annotations

import logging
import os
import time

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import Response
from starlette.middleware.sessions import SessionMiddleware

from .admin_api import router as admin_router
from .analytics.store import record_page_view, record_search
from .auth.dependencies import require_user
from .auth.users import DEFAULT_AUTH_CONFIG, authenticate
from .cms.cache import track_cache_hits
from .cms.client import SanityClient, SanityError, get_read_client
from .content import queries
from .content.featured import get_active_featured_items, to_carousel_slide
from .content.models import LoginRequest
from .content.urls import review_url
from .seo import metadata, schema
from .seo.faq import get_contextual_faqs
from .seo.internal_linking import (
    generate_related_content_module,
    get_internal_link_suggestions,
    get_link_source,
)
from .seo.sitemap import build_sitemap, build_sitemap_index
from .seo.voice_search import generate_voice_search_faqs

logging.basicConfig(level=os.environ.get("SABORLOCAL_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="SaborLocal", version="1.0.0")

app.add_middleware(SessionMiddleware, secret_key=DEFAULT_AUTH_CONFIG.session_secret)

app.include_router(admin_router)


def get_cms_client() -> SanityClient:
    return get_read_client()


# ── Public endpoints ──────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/home")
def home(client: SanityClient = Depends(get_cms_client)) -> dict:
    slides = [to_carousel_slide(item) for item in get_active_featured_items(client, limit=5)]
    featured_reviews = queries.get_featured_reviews(client)
    latest_reviews = queries.get_latest_reviews(client)
    posts = queries.get_posts(client, limit=3)
    record_page_view("home", "/")
    return {
        "slides": slides,
        "featured_reviews": featured_reviews,
        "latest_reviews": latest_reviews,
        "posts": posts,
        "stats": queries.get_stats(client),
        "metadata": metadata.default_metadata(),
        "json_ld": schema.home_page(featured_reviews, posts),
    }


@app.get("/api/cities")
def list_cities(client: SanityClient = Depends(get_cms_client)) -> list:
    return queries.get_cities(client)


@app.get("/api/cities/{slug}")
def city_detail(slug: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    found = queries.get_city(client, slug)
    if found is None:
        raise HTTPException(status_code=404, detail="Ciudad no encontrada")
    city, venues = found
    record_page_view("city", f"/{slug}", city.title)
    return {
        "city": city,
        "venues": venues,
        "faqs": get_contextual_faqs("city", city.title),
        "metadata": metadata.city_metadata(city, len(venues)),
        "json_ld": schema.city_page(city, venues),
    }


@app.get("/api/categories")
def list_categories(client: SanityClient = Depends(get_cms_client)) -> list:
    return queries.get_categories(client)


@app.get("/api/categories/{slug}")
def category_detail(slug: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    found = queries.get_category(client, slug)
    if found is None:
        raise HTTPException(status_code=404, detail="Categoría no encontrada")
    category, venues = found
    record_page_view("category", f"/categorias/{slug}")
    return {
        "category": category,
        "venues": venues,
        "faqs": get_contextual_faqs("category", category.title),
        "metadata": metadata.category_metadata(category.title),
        "json_ld": schema.category_page(category, venues),
    }


@app.get("/api/venues/{city}/{venue}")
def venue_detail(city: str, venue: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    found = queries.get_venue(client, city, venue)
    if found is None:
        raise HTTPException(status_code=404, detail="Local no encontrado")
    record_page_view("venue", f"/{city}/{venue}", found.city.title if found.city else None)
    return {
        "venue": found,
        "related": queries.get_related_venues(client, found),
        "faqs": generate_voice_search_faqs(found, found.reviews),
        "metadata": metadata.venue_metadata(found),
        "json_ld": schema.venue_page(found),
    }


@app.get("/api/reviews/{slug}")
def review_detail(slug: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    review = queries.get_review(client, slug)
    if review is None or review.venue is None:
        raise HTTPException(status_code=404, detail="Reseña no encontrada")
    venue = review.venue
    city = venue.city
    record_page_view("review", review_url(city.slug if city else None, venue.slug, slug), city.title if city else None)
    return {
        "review": review,
        "metadata": metadata.review_metadata(review, venue),
        "json_ld": schema.review_page(review, venue),
    }


@app.get("/api/blog")
def blog(tag: str | None = None, limit: int = 12, client: SanityClient = Depends(get_cms_client)) -> dict:
    posts = queries.get_posts(client, limit=limit, tag=tag)
    return {"posts": posts, "json_ld": schema.blog_page(posts)}


@app.get("/api/blog/{slug}")
def post_detail(slug: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    post = queries.get_post(client, slug)
    if post is None:
        raise HTTPException(status_code=404, detail="Artículo no encontrado")
    record_page_view("post", f"/blog/{slug}")
    return {
        "post": post,
        "metadata": metadata.page_metadata(
            title=post.seo_title or post.title,
            description=post.seo_description or post.excerpt or "",
            canonical=metadata.generate_canonical_url(f"/blog/{slug}"),
            og_type="article",
            published_time=post.published_at,
            author=post.author,
            tags=post.tags,
        ),
        "json_ld": schema.post_page(post),
    }


@app.get("/api/search")
def search(q: str = "", client: SanityClient = Depends(get_cms_client)) -> dict:
    start = time.perf_counter()
    with track_cache_hits() as lookups:
        results = queries.search(client, q)
    elapsed_ms = (time.perf_counter() - start) * 1000
    total = sum(len(items) for items in results.values())
    if q.strip():
        record_search(q, total, elapsed_ms, any(lookups))
    return {"query": q, "total": total, **results}


# ── Sitemaps ──────────────────────────────────────────────────────────────


@app.get("/sitemap.xml")
def sitemap_index() -> Response:
    return Response(content=build_sitemap_index(), media_type="application/xml")


@app.get("/api/sitemap/{sitemap_type}")
def sitemap(sitemap_type: str, client: SanityClient = Depends(get_cms_client)) -> Response:
    try:
        xml = build_sitemap(client, sitemap_type)
    except SanityError:
        logger.exception("Failed to build %s sitemap", sitemap_type)
        raise HTTPException(status_code=500, detail="Error generando el sitemap")
    if xml is None:
        raise HTTPException(status_code=404, detail="Tipo de sitemap no válido")
    return Response(
        content=xml,
        media_type="application/xml",
        headers={"Cache-Control": "public, s-maxage=3600, stale-while-revalidate=86400"},
    )


# ── Internal linking ──────────────────────────────────────────────────────


@app.get("/api/links/{content_type}/{slug}")
def internal_links(content_type: str, slug: str, client: SanityClient = Depends(get_cms_client)) -> dict:
    source = get_link_source(client, content_type, slug)
    if not source:
        raise HTTPException(status_code=404, detail="Contenido no encontrado")
    suggestions = get_internal_link_suggestions(client, content_type, source)
    return {
        "suggestions": suggestions,
        "related": generate_related_content_module(suggestions),
    }


# ── Auth endpoints ────────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Credenciales no válidas")
    request.session["user"] = user
    logger.info("User %s logged in", user["email"])
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def me(user: dict = Depends(require_user)) -> dict:
    return user
