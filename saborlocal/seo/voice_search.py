"""
Voice search helpers.

Conversational FAQs, featured-snippet formatting and the
who/what/where answer blocks that voice assistants read aloud.
"""

from __future__ import annotations

import re
from typing import Literal

from ..content.models import FAQ, City, Post, Review, Venue

VOICE_SEARCH_PATTERNS: dict[str, list[str]] = {
    "location": [
        "¿Dónde está {venue}?",
        "¿Cómo llegar a {venue}?",
        "¿Cuál es la dirección de {venue}?",
        "Ubicación de {venue}",
    ],
    "hours": [
        "¿A qué hora abre {venue}?",
        "¿A qué hora cierra {venue}?",
        "¿Cuál es el horario de {venue}?",
        "¿Está abierto {venue} ahora?",
    ],
    "pricing": [
        "¿Cuánto cuesta comer en {venue}?",
        "¿Cuál es el precio promedio en {venue}?",
        "¿Es caro {venue}?",
        "Precios de {venue}",
    ],
    "quality": [
        "¿Es bueno {venue}?",
        "¿Qué tal está {venue}?",
        "¿Vale la pena {venue}?",
        "Opiniones de {venue}",
    ],
    "food": [
        "¿Qué sirven en {venue}?",
        "¿Cuál es la especialidad de {venue}?",
        "¿Qué tipo de comida hay en {venue}?",
        "Menú de {venue}",
    ],
    "contact": [
        "¿Cómo reservar en {venue}?",
        "¿Cuál es el teléfono de {venue}?",
        "¿Acepta reservas {venue}?",
        "Contacto de {venue}",
    ],
}

QUESTION_WORDS_RE = re.compile(r"cómo|qué|cuál|dónde|cuándo|por qué", re.IGNORECASE)

_PRICE_DESCRIPTIONS = {"€": "Económicos", "€€": "Moderados", "€€€": "Altos", "€€€€": "Muy altos"}

_AUDIENCES = {
    "€": "familias y estudiantes que buscan opciones económicas",
    "€€": "parejas y amigos en busca de buena relación calidad-precio",
    "€€€": "ocasiones especiales y cenas de negocios",
    "€€€€": "experiencias gastronómicas exclusivas y celebraciones importantes",
}


def price_description(price_range: str | None) -> str:
    return _PRICE_DESCRIPTIONS.get(price_range or "", "Variados")


def rating_description(rating: float) -> str:
    if rating >= 9:
        return "Excepcional"
    if rating >= 8:
        return "Excelente"
    if rating >= 7:
        return "Muy bueno"
    if rating >= 6:
        return "Bueno"
    if rating >= 5:
        return "Aceptable"
    return "Mejorable"


def target_audience(price_range: str | None) -> str:
    return _AUDIENCES.get(price_range or "", "diversos tipos de comensales")


def _hours_text(venue: Venue) -> str:
    return ", ".join(venue.opening_hours)


def generate_voice_search_faqs(venue: Venue, reviews: list[Review] | None = None) -> list[FAQ]:
    """Location, hours, price, quality, cuisine and contact FAQs, when the data exists."""
    city = venue.city or City()
    faqs: list[FAQ] = []

    if venue.address:
        faqs.append(FAQ(
            question=f"¿Dónde está {venue.title}?",
            answer=f"{venue.title} está ubicado en {venue.address}, {city.title}, {city.region or ''}.".replace(", .", "."),
        ))
    if venue.opening_hours:
        faqs.append(FAQ(
            question=f"¿Cuál es el horario de {venue.title}?",
            answer=f"{venue.title} abre {_hours_text(venue)}. Te recomendamos llamar antes para confirmar.",
        ))
    if venue.price_range:
        faqs.append(FAQ(
            question=f"¿Es caro {venue.title}?",
            answer=(
                f"{venue.title} tiene precios {price_description(venue.price_range).lower()}. "
                f"Rango de precios: {venue.price_range}."
            ),
        ))
    if reviews and venue.avg_rating:
        faqs.append(FAQ(
            question=f"¿Es bueno {venue.title}?",
            answer=(
                f"{venue.title} tiene una puntuación de {venue.avg_rating:g}/10, considerado "
                f"{rating_description(venue.avg_rating).lower()}."
            ),
        ))
    if venue.categories:
        cuisines = ", ".join(c.title for c in venue.categories)
        faqs.append(FAQ(
            question=f"¿Qué tipo de comida sirven en {venue.title}?",
            answer=f"{venue.title} especializa en {cuisines}. Es conocido por su cocina de calidad.",
        ))
    if venue.phone:
        faqs.append(FAQ(
            question=f"¿Cómo puedo contactar con {venue.title}?",
            answer=f"Puedes llamar a {venue.title} al {venue.phone} o visitarlos en {venue.address or city.title}.",
        ))
    return faqs


def generate_post_faqs(post: Post) -> list[FAQ]:
    faqs = [FAQ(
        question=f"¿De qué trata {post.title}?",
        answer=post.excerpt or "Artículo sobre gastronomía y restaurantes.",
    )]
    if post.author:
        faqs.append(FAQ(
            question="¿Quién escribió este artículo?",
            answer=f"Este artículo fue escrito por {post.author}, experto en gastronomía.",
        ))
    if post.tags:
        tag = post.tags[0]
        faqs.append(FAQ(
            question=f"¿Qué aprenderé sobre {tag}?",
            answer=f"Descubrirás información relevante sobre {tag} y temas relacionados.",
        ))
    return faqs


def optimize_for_featured_snippets(
    content: str, kind: Literal["paragraph", "list", "table"] = "paragraph"
) -> str:
    """
    Reshape ``content`` for position zero.

    ``paragraph`` keeps the first 50 words, ``list`` turns the first five
    sentences into a numbered list and ``table`` is returned unchanged.
    """
    if kind == "paragraph":
        words = content.split(" ")
        if len(words) > 50:
            return " ".join(words[:50]) + "..."
        return content
    if kind == "list":
        sentences = [s.strip() for s in content.split(".") if s.strip()]
        return "\n".join(f"{i}. {s}." for i, s in enumerate(sentences[:5], start=1))
    return content


def generate_answer_format(venue: Venue, review: Review | None = None) -> dict[str, str]:
    city = venue.city or City()
    kind = venue.categories[0].title if venue.categories else "restaurante"
    answers = {
        "what": f"{venue.title} es un {kind} ubicado en {city.title}.",
        "where": f"{venue.title} está en {venue.address or ''}, {city.title}, {city.region or ''}.",
    }
    if venue.opening_hours:
        answers["when"] = f"{venue.title} abre {_hours_text(venue)}."

    reservations = f" Reservas: {venue.phone}." if venue.phone else ""
    answers["how"] = f"Puedes llegar a {venue.title} en {venue.address or city.title}.{reservations}"

    if review and review.tldr:
        answers["why"] = f"Deberías visitar {venue.title} porque {review.tldr}"
    elif venue.avg_rating:
        answers["why"] = (
            f"{venue.title} es recomendable por su "
            f"{rating_description(venue.avg_rating).lower()} calidad ({venue.avg_rating:g}/10)."
        )
    if venue.price_range:
        answers["who"] = f"{venue.title} es ideal para {target_audience(venue.price_range)}."
    return answers


def validate_aeo_content(
    title: str | None = None,
    description: str | None = None,
    tldr: str | None = None,
    faqs: list[FAQ] | None = None,
) -> dict:
    """Check copy against voice-search limits. Returns ``is_valid``, ``issues`` and ``suggestions``."""
    issues: list[str] = []
    suggestions: list[str] = []

    if title:
        if len(title) > 60:
            issues.append("Título demasiado largo para SEO (>60 caracteres)")
        if "?" not in title and not QUESTION_WORDS_RE.search(title):
            suggestions.append("Considera incluir palabras clave de pregunta en el título")

    if description and len(description) > 160:
        issues.append("Descripción demasiado larga para meta description (>160 caracteres)")

    if tldr:
        word_count = len(tldr.split(" "))
        if word_count < 20 or word_count > 50:
            issues.append(f"TL;DR fuera del rango óptimo ({word_count} palabras, recomendado: 20-50)")

    if faqs is not None:
        for i, faq in enumerate(faqs, start=1):
            if len(faq.answer) > 300:
                issues.append(f"Respuesta FAQ {i} demasiado larga (>300 caracteres)")
            if "?" not in faq.question:
                issues.append(f"FAQ {i}: La pregunta debe incluir signo de interrogación")
        if len(faqs) < 3:
            suggestions.append("Considera agregar más FAQs para mejor cobertura de búsqueda por voz")

    return {"is_valid": not issues, "issues": issues, "suggestions": suggestions}


def generate_question_variations(base_question: str, venue: Venue | None = None) -> list[str]:
    variations = [base_question]
    if venue:
        city = venue.city.title if venue.city else ""
        variations += [
            base_question.replace("el restaurante", venue.title),
            base_question.replace("este lugar", venue.title),
            f"{base_question.replace('?', '')} en {city}?",
        ]
    variations += [
        base_question.replace("¿", "Me puedes decir "),
        base_question.replace("¿", "Quisiera saber "),
        base_question.replace("?", ", por favor?"),
    ]
    return list(dict.fromkeys(variations))


def generate_speakable_selectors(content_type: str) -> list[str]:
    base = [".tldr-section", ".summary", "h1", "h2"]
    extra = {
        "venue": [".venue-info", ".opening-hours", ".address", ".price-range"],
        "review": [".review-summary", ".rating", ".highlights", ".pros-cons"],
        "blog": [".article-intro", ".key-points", ".conclusion"],
    }
    return base + extra.get(content_type, [])
