"""
schema.org JSON-LD builders.

Each builder returns a plain dict. Keys whose value would be ``None`` are
left out so the rendered markup only carries what the CMS actually has.
Page-level helpers combine several documents into one ``@graph``.
"""

from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from ..content.models import FAQ, Category, City, Post, Review, Venue
from ..content.urls import review_url, venue_url
from .site import DEFAULT_SITE_CONFIG, SiteConfig

CONTEXT = "https://schema.org"

_DAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
_DAY_ALIASES = {
    "Mon": "Monday", "Tue": "Tuesday", "Wed": "Wednesday", "Thu": "Thursday",
    "Fri": "Friday", "Sat": "Saturday", "Sun": "Sunday",
    "Lun": "Monday", "Mar": "Tuesday", "Mié": "Wednesday", "Mie": "Wednesday",
    "Jue": "Thursday", "Vie": "Friday", "Sáb": "Saturday", "Sab": "Saturday",
    "Dom": "Sunday",
}


def _compact(data: dict) -> dict:
    return {k: v for k, v in data.items() if v is not None}


def _round1(value: float) -> float:
    """One decimal, halves rounded up."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def speakable_specification(
    css_selectors: Iterable[str] = ("h1", ".review-summary", ".venue-description", ".tldr"),
    xpaths: Iterable[str] | None = None,
) -> dict:
    spec: dict[str, Any] = {"@type": "SpeakableSpecification", "cssSelector": list(css_selectors)}
    if xpaths:
        spec["xpath"] = list(xpaths)
    return spec


def _city(venue: Venue) -> City:
    return venue.city or City()


def _postal_address(venue: Venue, with_postal_code: bool = True) -> dict:
    city = _city(venue)
    return _compact({
        "@type": "PostalAddress",
        "streetAddress": venue.address,
        "addressLocality": city.title or None,
        "addressRegion": city.region,
        "postalCode": venue.postal_code if with_postal_code else None,
        "addressCountry": "ES",
    })


def _venue_page_url(venue: Venue, site: SiteConfig) -> str:
    return site.url + venue_url(_city(venue).slug, venue.slug)


def _geo(venue: Venue) -> dict | None:
    if not venue.geo or venue.geo.lat is None or venue.geo.lng is None:
        return None
    return {"@type": "GeoCoordinates", "latitude": venue.geo.lat, "longitude": venue.geo.lng}


# ── Entities ─────────────────────────────────────────────────────────────


def local_business(venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    url = _venue_page_url(venue, site)
    cuisines = [c.title for c in venue.categories]
    schema = _compact({
        "@context": CONTEXT,
        "@type": venue.schema_type or "LocalBusiness",
        "@id": f"{url}#business",
        "name": venue.title,
        "description": venue.description,
        "image": [img.asset.url for img in venue.images if img.asset and img.asset.url],
        "address": _postal_address(venue),
        "telephone": venue.phone,
        "url": url,
        "openingHours": venue.opening_hours or None,
        "priceRange": venue.price_range,
        "servesCuisine": cuisines,
        "knowsAbout": cuisines + ["gastronomía", "restaurante", "comida local"],
        "keywords": ", ".join([venue.title, _city(venue).title, *cuisines]),
        "geo": _geo(venue),
    })

    if venue.avg_rating and venue.review_count:
        schema["aggregateRating"] = {
            "@type": "AggregateRating",
            "ratingValue": _round1(venue.avg_rating),
            "reviewCount": venue.review_count,
            "bestRating": 10,
            "worstRating": 0,
        }

    same_as = [
        venue.social.get(network)
        for network in ("instagram", "facebook", "tiktok", "maps")
        if venue.social.get(network)
    ]
    if venue.website:
        same_as.append(venue.website)
    if same_as:
        schema["sameAs"] = same_as
    return schema


def opening_hours_specification(hours: Iterable[str]) -> list[dict]:
    """Parse ``"Lun-Vie 13:00-16:00"`` style lines into OpeningHoursSpecification."""
    specs = []
    for line in hours:
        parts = line.split()
        if not parts:
            continue
        day_part = parts[0].rstrip(":,")
        time_part = parts[1] if len(parts) > 1 else ""
        opens, _, closes = time_part.partition("-")

        if "-" in day_part:
            start, end = day_part.split("-", 1)
            days = day_range(start, end)
        else:
            days = [_DAY_ALIASES.get(day_part, day_part)]

        specs.append({
            "@type": "OpeningHoursSpecification",
            "dayOfWeek": days,
            "opens": opens or "09:00",
            "closes": closes or "22:00",
        })
    return specs


def day_range(start: str, end: str) -> list[str]:
    """Expand a day range, wrapping past Sunday (``Vie-Lun`` is Fri..Mon)."""
    first = _DAY_ALIASES.get(start, start)
    last = _DAY_ALIASES.get(end, end)
    if first not in _DAYS or last not in _DAYS:
        return [first]
    i, j = _DAYS.index(first), _DAYS.index(last)
    result = [_DAYS[i]]
    while i != j:
        i = (i + 1) % 7
        result.append(_DAYS[i])
    return result


def enhanced_local_business(venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    schema = local_business(venue, site)
    schema["speakable"] = speakable_specification(
        xpaths=["/html/head/title", "/html/body//h1", "/html/body//h2[1]", "/html/body//p[1]"]
    )
    city = _city(venue)
    if venue.phone:
        schema["contactPoint"] = [_compact({
            "@type": "ContactPoint",
            "telephone": venue.phone,
            "contactType": "reservations",
            "availableLanguage": ["es", "Spanish"],
            "areaServed": city.title or None,
        })]
    if venue.opening_hours:
        schema["openingHoursSpecification"] = opening_hours_specification(venue.opening_hours)
    geo = _geo(venue)
    if geo:
        schema["serviceArea"] = _compact({
            "@type": "GeoCircle",
            "geoMidpoint": geo,
            "geoRadius": "5 km",
            "addressRegion": city.region,
            "addressCountry": "ES",
        })
    return schema


def review(review: Review, venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    city = _city(venue)
    url = site.url + review_url(city.slug, venue.slug, review.slug)
    overall = review.ratings.overall if review.ratings else 0.0
    first_image = venue.images[0].asset.url if venue.images and venue.images[0].asset else None

    return _compact({
        "@context": CONTEXT,
        "@type": "Review",
        "@id": f"{url}#review",
        "url": url,
        "headline": review.title,
        "name": review.title,
        "itemReviewed": _compact({
            "@type": venue.schema_type or "LocalBusiness",
            "name": venue.title,
            "image": first_image,
            "address": _postal_address(venue, with_postal_code=False),
        }),
        "reviewRating": {
            "@type": "Rating",
            "ratingValue": _round1(overall / 2),
            "bestRating": 5,
            "worstRating": 1,
        },
        "author": _compact({
            "@type": "Person",
            "name": review.author,
            "image": review.author_avatar.asset.url
            if review.author_avatar and review.author_avatar.asset
            else None,
        }),
        "reviewBody": review.tldr,
        "datePublished": review.published_at,
        "isPartOf": {"@type": "WebSite", "name": site.name, "url": site.url},
        "keywords": ", ".join([venue.title, city.title, "reseña", "opinión", "experiencia"]),
        "about": {
            "@type": "Thing",
            "name": f"{venue.title} en {city.title}",
            "sameAs": _venue_page_url(venue, site),
        },
        "speakable": speakable_specification([".tldr-section", ".review-summary"]),
    })


def blog_posting(post: Post, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    url = f"{site.url}/blog/{post.slug}"
    schema = _compact({
        "@context": CONTEXT,
        "@type": "BlogPosting",
        "@id": f"{url}#article",
        "headline": post.title,
        "description": post.excerpt or "",
        "image": [post.cover.asset.url] if post.cover and post.cover.asset and post.cover.asset.url else None,
        "datePublished": post.published_at,
        "author": _compact({"@type": "Person", "name": post.author}),
        "publisher": {
            "@type": "Organization",
            "name": site.name,
            "logo": {"@type": "ImageObject", "url": f"{site.url}{site.logo}"},
        },
        "mainEntityOfPage": {"@type": "WebPage", "@id": url},
        "url": url,
        "keywords": ", ".join(post.tags) if post.tags else None,
        "speakable": speakable_specification([".tldr-section", ".article-summary", "h1", "h2"]),
        "potentialAction": {"@type": "ReadAction", "target": url},
    })
    if post.tags:
        things = [{"@type": "Thing", "name": tag} for tag in post.tags]
        schema["about"] = things
        schema["mentions"] = things
    return schema


def faq_page(faqs: list[FAQ]) -> dict | None:
    if not faqs:
        return None
    return {
        "@context": CONTEXT,
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": faq.question,
                "text": faq.question,
                "answerCount": 1,
                "acceptedAnswer": {
                    "@type": "Answer",
                    "text": faq.answer,
                    "speakable": speakable_specification([".faq-answer", ".answer-text"]),
                },
            }
            for faq in faqs
        ],
        "speakable": speakable_specification([".faq-section", ".faq-question", ".faq-answer"]),
        "about": {"@type": "Thing", "name": "Preguntas frecuentes"},
    }


def qa_page(
    question: str,
    answer: str,
    related: list[FAQ] | None = None,
    url: str | None = None,
) -> dict:
    schema: dict[str, Any] = {
        "@context": CONTEXT,
        "@type": "QAPage",
        "mainEntity": {
            "@type": "Question",
            "name": question,
            "text": question,
            "answerCount": 1,
            "acceptedAnswer": {
                "@type": "Answer",
                "text": answer,
                "speakable": speakable_specification([".answer-text", ".qa-answer"]),
            },
        },
    }
    if related:
        schema["mentions"] = [
            {
                "@type": "Question",
                "name": qa.question,
                "acceptedAnswer": {"@type": "Answer", "text": qa.answer},
            }
            for qa in related
        ]
    if url:
        schema["url"] = url
    return schema


def how_to(
    name: str,
    steps: list[dict],
    description: str | None = None,
    total_time: str | None = None,
    estimated_cost: str | None = None,
    supplies: list[str] | None = None,
    tools: list[str] | None = None,
) -> dict:
    """``steps`` are dicts with ``name``, ``text`` and an optional ``image`` URL."""
    schema = _compact({
        "@context": CONTEXT,
        "@type": "HowTo",
        "name": name,
        "description": description,
        "totalTime": total_time,
        "step": [
            _compact({
                "@type": "HowToStep",
                "position": i,
                "name": step["name"],
                "text": step["text"],
                "image": {"@type": "ImageObject", "url": step["image"]} if step.get("image") else None,
            })
            for i, step in enumerate(steps, start=1)
        ],
        "speakable": speakable_specification([".how-to-step", ".step-description"]),
    })
    if estimated_cost:
        schema["estimatedCost"] = {"@type": "MonetaryAmount", "currency": "EUR", "value": estimated_cost}
    if supplies:
        schema["supply"] = [{"@type": "HowToSupply", "name": s} for s in supplies]
    if tools:
        schema["tool"] = [{"@type": "HowToTool", "name": t} for t in tools]
    return schema


def menu(venue: Venue, sections: list[dict], site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    """
    Menu for a venue. ``sections`` hold ``name``, ``description`` and ``items``;
    each item has ``name`` and optionally ``description``, ``price``,
    ``dietary`` and ``calories``.
    """
    if not sections:
        return None
    url = _venue_page_url(venue, site)

    def menu_item(item: dict) -> dict:
        entry = _compact({
            "@type": "MenuItem",
            "name": item["name"],
            "description": item.get("description"),
            "suitableForDiet": item.get("dietary") or None,
        })
        if item.get("price") is not None:
            entry["offers"] = {"@type": "Offer", "price": item["price"], "priceCurrency": "EUR"}
        if item.get("calories"):
            entry["nutrition"] = {"@type": "NutritionInformation", "calories": item["calories"]}
        return entry

    return {
        "@context": CONTEXT,
        "@type": "Menu",
        "@id": f"{url}#menu",
        "name": f"Menú de {venue.title}",
        "description": f"Carta completa del restaurante {venue.title} en {_city(venue).title}",
        "provider": {"@type": venue.schema_type or "LocalBusiness", "name": venue.title, "url": url},
        "hasMenuSection": [
            _compact({
                "@type": "MenuSection",
                "name": section["name"],
                "description": section.get("description"),
                "hasMenuItem": [menu_item(item) for item in section.get("items", [])],
            })
            for section in sections
        ],
    }


def event(
    venue: Venue,
    name: str,
    start_date: str,
    end_date: str | None = None,
    description: str | None = None,
    price: str | float | None = None,
    organizer: str | None = None,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
) -> dict:
    url = _venue_page_url(venue, site)
    event_slug = "-".join(name.lower().split())
    schema = _compact({
        "@context": CONTEXT,
        "@type": "Event",
        "@id": f"{url}/evento/{event_slug}",
        "name": name,
        "description": description,
        "startDate": start_date,
        "endDate": end_date,
        "eventStatus": "https://schema.org/EventScheduled",
        "eventAttendanceMode": "https://schema.org/OfflineEventAttendanceMode",
        "location": _compact({
            "@type": "Place",
            "name": venue.title,
            "address": _postal_address(venue, with_postal_code=False),
            "geo": _geo(venue),
        }),
        "organizer": {"@type": "Organization", "name": organizer or venue.title, "url": url},
        "about": {"@type": "Thing", "name": f"Evento en {venue.title}"},
    })
    if price is not None:
        schema["offers"] = {
            "@type": "Offer",
            "price": price,
            "priceCurrency": "EUR",
            "availability": "https://schema.org/InStock",
        }
    return schema


# ── Site-wide ────────────────────────────────────────────────────────────


def breadcrumbs(items: list[tuple[str, str]], site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    """``items`` are ``(name, url)`` pairs; relative URLs are made absolute."""
    return {
        "@context": CONTEXT,
        "@type": "BreadcrumbList",
        "itemListElement": [
            {
                "@type": "ListItem",
                "position": i,
                "name": name,
                "item": url if url.startswith("http") else f"{site.url}{url}",
            }
            for i, (name, url) in enumerate(items, start=1)
        ],
    }


def website(site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict:
    return {
        "@context": CONTEXT,
        "@type": "WebSite",
        "@id": f"{site.url}#website",
        "name": site.name,
        "description": site.description,
        "url": site.url,
        "inLanguage": site.locale,
        "potentialAction": {
            "@type": "SearchAction",
            "target": {
                "@type": "EntryPoint",
                "urlTemplate": f"{site.url}/buscar?q={{search_term_string}}",
            },
            "query-input": "required name=search_term_string",
        },
        "publisher": {"@type": "Organization", "name": site.name, "url": site.url},
    }


def organization(site: SiteConfig = DEFAULT_SITE_CONFIG, same_as: list[str] | None = None) -> dict:
    return {
        "@context": CONTEXT,
        "@type": "Organization",
        "@id": f"{site.url}#organization",
        "name": site.name,
        "url": site.url,
        "logo": f"{site.url}{site.logo}",
        "description": site.description,
        "sameAs": same_as or [],
    }


def _list_entry(item: Review | Venue | Post, site: SiteConfig) -> dict:
    if isinstance(item, Review):
        venue = item.venue or Venue()
        url = site.url + review_url(_city(venue).slug, venue.slug, item.slug)
        return _compact({
            "@type": "Review",
            "name": item.title,
            "url": url,
            "datePublished": item.published_at,
            "author": {"@type": "Person", "name": item.author} if item.author else None,
        })
    if isinstance(item, Venue):
        return {"@type": "LocalBusiness", "name": item.title, "url": _venue_page_url(item, site)}
    return _compact({
        "@type": "BlogPosting",
        "name": item.title,
        "url": f"{site.url}/blog/{item.slug}",
        "datePublished": item.published_at,
        "author": {"@type": "Person", "name": item.author} if item.author else None,
    })


def item_list(
    items: list[Review | Venue | Post],
    name: str,
    description: str | None = None,
    url: str | None = None,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
) -> dict:
    return _compact({
        "@context": CONTEXT,
        "@type": "ItemList",
        "name": name,
        "description": description,
        "url": url,
        "numberOfItems": len(items),
        "itemListElement": [
            {"@type": "ListItem", "position": i, "item": _list_entry(item, site)}
            for i, item in enumerate(items, start=1)
        ],
    })


def collection_page(
    title: str,
    description: str,
    url: str,
    items: list[Review | Venue] | None = None,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
) -> dict:
    items = items or []
    return {
        "@context": CONTEXT,
        "@type": "CollectionPage",
        "name": title,
        "description": description,
        "url": url,
        "mainEntity": {
            "@type": "ItemList",
            "numberOfItems": len(items),
            "itemListElement": [
                {
                    "@type": "ListItem",
                    "position": i,
                    "item": {k: v for k, v in _list_entry(item, site).items() if k in ("@type", "name", "url")},
                }
                for i, item in enumerate(items, start=1)
            ],
        },
    }


# ── Page bundles ─────────────────────────────────────────────────────────


def combine_json_ld(*schemas: dict | None) -> dict | None:
    """One schema as-is, several under a shared ``@graph``, none as ``None``."""
    valid = [s for s in schemas if s]
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return {"@context": CONTEXT, "@graph": valid}


def render_json_ld(schema: dict | None) -> str:
    """A ``<script type="application/ld+json">`` tag; ``</`` is escaped."""
    if not schema:
        return ""
    payload = json.dumps(schema, ensure_ascii=False, separators=(",", ":"))
    payload = payload.replace("</", "<\\/")
    return f'<script type="application/ld+json">{payload}</script>'


def review_page(rev: Review, venue: Venue, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    city = _city(venue)
    trail = [
        ("Inicio", "/"),
        (city.title, f"/{city.slug}"),
        (venue.title, venue_url(city.slug, venue.slug)),
        (rev.title, review_url(city.slug, venue.slug, rev.slug)),
    ]
    return combine_json_ld(
        local_business(venue, site),
        review(rev, venue, site),
        faq_page(rev.faq),
        breadcrumbs(trail, site),
    )


def venue_page(venue: Venue, recent_reviews: list[Review] | None = None, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    city = _city(venue)
    trail = [("Inicio", "/"), (city.title, f"/{city.slug}"), (venue.title, venue_url(city.slug, venue.slug))]
    reviews_list = None
    if recent_reviews:
        reviews_list = item_list(
            recent_reviews,
            f"Reseñas de {venue.title}",
            f"Las mejores reseñas de {venue.title} en {city.title}",
            _venue_page_url(venue, site),
            site,
        )
    return combine_json_ld(enhanced_local_business(venue, site), breadcrumbs(trail, site), reviews_list)


def city_page(city: City, venues: list[Venue] | None = None, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    venues = venues or []
    url = f"{site.url}/{city.slug}"
    listing = None
    if venues:
        listing = item_list(
            venues, f"Locales en {city.title}", f"Los mejores restaurantes y locales en {city.title}", url, site
        )
    return combine_json_ld(
        collection_page(
            f"Restaurantes y locales en {city.title}",
            f"Descubre los mejores restaurantes y locales en {city.title}. "
            "Reseñas, direcciones y recomendaciones.",
            url,
            venues,
            site,
        ),
        breadcrumbs([("Inicio", "/"), (city.title, f"/{city.slug}")], site),
        listing,
    )


def category_page(category: Category, venues: list[Venue] | None = None, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    venues = venues or []
    url = f"{site.url}/categorias/{category.slug}"
    listing = None
    if venues:
        listing = item_list(
            venues,
            category.title,
            f"Los mejores {category.title.lower()} reseñados por nuestro equipo",
            url,
            site,
        )
    return combine_json_ld(
        collection_page(
            f"{category.title} - Restaurantes y locales",
            category.description
            or f"Descubre los mejores {category.title.lower()} con nuestras reseñas detalladas.",
            url,
            venues,
            site,
        ),
        breadcrumbs(
            [("Inicio", "/"), ("Categorías", "/categorias"), (category.title, f"/categorias/{category.slug}")],
            site,
        ),
        listing,
    )


def blog_page(posts: list[Post] | None = None, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    url = f"{site.url}/blog"
    listing = None
    if posts:
        listing = item_list(
            posts, "Artículos del blog", "Los últimos artículos sobre gastronomía y restaurantes", url, site
        )
    return combine_json_ld(
        collection_page(
            "Blog - Artículos sobre gastronomía",
            "Artículos, guías y consejos sobre restaurantes, cocina y gastronomía.",
            url,
            site=site,
        ),
        breadcrumbs([("Inicio", "/"), ("Blog", "/blog")], site),
        listing,
    )


def post_page(post: Post, site: SiteConfig = DEFAULT_SITE_CONFIG) -> dict | None:
    trail = [("Inicio", "/"), ("Blog", "/blog"), (post.title, f"/blog/{post.slug}")]
    return combine_json_ld(blog_posting(post, site), faq_page(post.faq), breadcrumbs(trail, site))


def home_page(
    featured_reviews: list[Review] | None = None,
    featured_posts: list[Post] | None = None,
    site: SiteConfig = DEFAULT_SITE_CONFIG,
) -> dict | None:
    reviews_list = posts_list = None
    if featured_reviews:
        reviews_list = item_list(
            featured_reviews, "Reseñas destacadas", "Las mejores reseñas de restaurantes y locales", site.url, site
        )
    if featured_posts:
        posts_list = item_list(
            featured_posts, "Artículos destacados", "Los mejores artículos sobre gastronomía", f"{site.url}/blog", site
        )
    return combine_json_ld(website(site), organization(site), reviews_list, posts_list)
