from __future__ import annotations

from datetime import datetime

import pytest

from saborlocal.content.models import AEOPageIn
from saborlocal.seo.aeo_monitor import calculate_grade, generate_aeo_report, validate_page_aeo

SPEAKABLE_SCHEMA = {
    "@context": "https://schema.org",
    "@graph": [
        {"@type": "Restaurant", "name": "Casa Lucio"},
        {"@type": "FAQPage", "speakable": {"@type": "SpeakableSpecification", "cssSelector": [".faq"]}},
    ],
}

GOOD_FAQS = [
    {"question": "¿Dónde está Casa Lucio?", "answer": "En la Cava Baja, 35."},
    {"question": "¿Hay que reservar?", "answer": "Sí, sobre todo en fin de semana."},
    {"question": "¿Cuál es el plato estrella?", "answer": "Los huevos estrellados."},
]


@pytest.mark.parametrize(
    "score, grade",
    [(100, "A+"), (95, "A+"), (94, "A"), (85, "A"), (80, "B+"), (79, "B"), (60, "C"), (50, "D"), (49, "F"), (0, "F")],
)
def test_grade_thresholds(score, grade):
    assert calculate_grade(score) == grade


def test_well_optimised_page_scores_full_marks():
    page = AEOPageIn(
        url="/madrid/casa-lucio",
        title="¿Dónde comer cocido en Madrid?",
        description="Casa Lucio, clásico castizo.",
        content="Qué es Casa Lucio.\n\nPuedes reservar por teléfono.\n\n1. Huevos 2. Cocido",
        tldr=" ".join(["palabra"] * 25),
        faqs=GOOD_FAQS,
        json_ld=SPEAKABLE_SCHEMA,
    )

    result = validate_page_aeo(page)

    assert result.score == 100
    assert result.grade == "A+"
    assert result.issues == []
    m = result.metrics
    assert m.schema_types == ["Restaurant", "FAQPage"]
    assert m.has_speakable_markup and m.has_faq and m.has_optimized_tldr
    assert m.has_natural_questions and m.has_conversational_content and m.has_list_content
    assert m.faq_count == 3


def test_empty_page_loses_schema_and_faq_points():
    result = validate_page_aeo(AEOPageIn())

    assert result.score == 65
    assert result.grade == "C"
    assert [i.severity for i in result.issues] == ["critical", "warning"]


def test_missing_speakable_costs_ten():
    result = validate_page_aeo(AEOPageIn(json_ld={"@type": "Restaurant"}, faqs=GOOD_FAQS))
    assert result.score == 90
    assert result.issues[0].category == "voice"


def test_faq_shape_penalties_and_suggestion():
    page = AEOPageIn(
        json_ld=SPEAKABLE_SCHEMA,
        faqs=[{"question": "Horario", "answer": "x" * 301}],
    )

    result = validate_page_aeo(page)

    assert result.score == 100 - 5 - 3
    assert any(s.message.startswith("Considera agregar más FAQs") for s in result.suggestions)


def test_title_and_description_limits():
    page = AEOPageIn(
        json_ld=SPEAKABLE_SCHEMA,
        faqs=GOOD_FAQS,
        title="Casa Lucio " * 7,
        description="d" * 161,
    )

    result = validate_page_aeo(page)

    assert result.score == 90
    assert any(s.category == "voice" for s in result.suggestions)


def test_score_is_clamped_at_zero():
    page = AEOPageIn(faqs=[{"question": "Sin signo", "answer": "x" * 400}] * 20)
    result = validate_page_aeo(page)
    assert result.score == 0
    assert result.grade == "F"


def test_json_ld_list_is_accepted():
    result = validate_page_aeo(AEOPageIn(json_ld=[{"@type": "WebSite", "speakable": {}}, "ruido"], faqs=GOOD_FAQS))
    assert result.metrics.schema_types == ["WebSite"]
    assert result.score == 100


def test_report_renders_score_issues_and_suggestions():
    result = validate_page_aeo(AEOPageIn(title="Casa Lucio"))
    report = generate_aeo_report(result, date=datetime(2024, 3, 5))

    assert report.startswith("# Reporte de Optimización AEO")
    assert "**Puntuación:** 65/100 (C)" in report
    assert "**Fecha:** 5/3/2024" in report
    assert "## Problemas Encontrados" in report
    assert "1. 🔴 **SCHEMA**: No se encontró marcado estructurado JSON-LD" in report
    assert "## Sugerencias de Mejora" in report
