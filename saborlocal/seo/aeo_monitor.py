"""
Answer-engine optimisation (AEO) scoring.

A page starts at 100 points and loses points for missing structured data,
missing or badly shaped FAQs and over-long titles or descriptions. The
result carries the issues found, improvement suggestions and the raw
metrics, and can be rendered as a markdown report.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from ..content.models import AEOPageIn

logger = logging.getLogger(__name__)

Severity = Literal["critical", "warning", "info"]
IssueCategory = Literal["schema", "content", "voice", "performance"]
Level = Literal["high", "medium", "low"]
Difficulty = Literal["easy", "medium", "hard"]
Grade = Literal["A+", "A", "B+", "B", "C", "D", "F"]

TITLE_LIMIT = 60
DESCRIPTION_LIMIT = 160
FAQ_ANSWER_LIMIT = 300

_QUESTION_WORDS_RE = re.compile(r"\b(cómo|qué|cuál|dónde|cuándo|por qué|quién)\b", re.IGNORECASE)
_LIST_RE = re.compile(r"(<ul>|<ol>|\d+\.|•)", re.IGNORECASE)
_CONVERSATIONAL_RE = re.compile(r"(puedes|debes|te recomiendo|es importante|considera)", re.IGNORECASE)
_ANSWER_FORMAT_RE = re.compile(r"(qué es|dónde está|cuándo|cómo|por qué|quién)", re.IGNORECASE)
_TABLE_RE = re.compile(r"<table|\|.*\|", re.IGNORECASE)


class AEOIssue(BaseModel):
    severity: Severity
    category: IssueCategory
    message: str
    element: str | None = None
    fix: str | None = None


class AEOSuggestion(BaseModel):
    category: IssueCategory
    message: str
    impact: Level
    implementation: Difficulty


class AEOMetrics(BaseModel):
    page_url: str = ""
    timestamp: str = ""
    has_json_ld: bool = False
    schema_types: list[str] = Field(default_factory=list)
    has_speakable_markup: bool = False
    has_faq: bool = False
    faq_count: int = 0
    has_optimized_tldr: bool = False
    tldr_word_count: int = 0
    has_natural_questions: bool = False
    has_conversational_content: bool = False
    has_answer_format: bool = False
    has_list_content: bool = False
    has_table_content: bool = False
    has_paragraph_answers: bool = False


class AEOValidationResult(BaseModel):
    score: int
    grade: Grade
    issues: list[AEOIssue] = Field(default_factory=list)
    suggestions: list[AEOSuggestion] = Field(default_factory=list)
    metrics: AEOMetrics


def calculate_grade(score: int) -> Grade:
    if score >= 95:
        return "A+"
    if score >= 85:
        return "A"
    if score >= 80:
        return "B+"
    if score >= 70:
        return "B"
    if score >= 60:
        return "C"
    if score >= 50:
        return "D"
    return "F"


def _schemas(json_ld: dict | list | None) -> list[dict]:
    if not json_ld:
        return []
    if isinstance(json_ld, dict):
        return list(json_ld.get("@graph") or [json_ld])
    return [s for s in json_ld if isinstance(s, dict)]


def validate_page_aeo(page: AEOPageIn) -> AEOValidationResult:
    issues: list[AEOIssue] = []
    suggestions: list[AEOSuggestion] = []
    score = 100
    metrics = AEOMetrics(page_url=page.url, timestamp=datetime.now(timezone.utc).isoformat())

    # Structured data
    schemas = _schemas(page.json_ld)
    if schemas:
        metrics.has_json_ld = True
        metrics.schema_types = [str(s["@type"]) for s in schemas if s.get("@type")]
        metrics.has_speakable_markup = any("speakable" in json.dumps(s) for s in schemas)
        if not metrics.has_speakable_markup:
            score -= 10
            issues.append(AEOIssue(
                severity="warning",
                category="voice",
                message="Falta marcado speakable para búsqueda por voz",
                fix="Agregar propiedades speakable a los esquemas JSON-LD",
            ))
    else:
        score -= 20
        issues.append(AEOIssue(
            severity="critical",
            category="schema",
            message="No se encontró marcado estructurado JSON-LD",
            fix="Implementar schemas de Schema.org apropiados",
        ))

    # FAQs
    if page.faqs:
        metrics.has_faq = True
        metrics.faq_count = len(page.faqs)
        for i, faq in enumerate(page.faqs, start=1):
            if "?" not in faq.question:
                score -= 5
                issues.append(AEOIssue(
                    severity="warning",
                    category="content",
                    message=f"FAQ {i}: La pregunta no incluye signo de interrogación",
                    element=f"FAQ question {i}",
                    fix="Reformular como pregunta directa",
                ))
            if len(faq.answer) > FAQ_ANSWER_LIMIT:
                score -= 3
                issues.append(AEOIssue(
                    severity="info",
                    category="content",
                    message=f"FAQ {i}: Respuesta muy larga para featured snippets",
                    element=f"FAQ answer {i}",
                    fix="Acortar respuesta a menos de 300 caracteres",
                ))
        if len(page.faqs) < 3:
            suggestions.append(AEOSuggestion(
                category="content",
                message="Considera agregar más FAQs para mejor cobertura",
                impact="medium",
                implementation="easy",
            ))
    else:
        score -= 15
        issues.append(AEOIssue(
            severity="warning",
            category="content",
            message="No se encontraron FAQs para búsqueda por voz",
            fix="Agregar sección de preguntas frecuentes",
        ))

    # Title and description
    if page.title:
        if _QUESTION_WORDS_RE.search(page.title):
            metrics.has_natural_questions = True
        else:
            suggestions.append(AEOSuggestion(
                category="voice",
                message="El título podría incluir palabras de pregunta para búsqueda por voz",
                impact="medium",
                implementation="easy",
            ))
        if len(page.title) > TITLE_LIMIT:
            score -= 5
            issues.append(AEOIssue(
                severity="warning",
                category="content",
                message="Título demasiado largo para SEO",
                fix="Mantener títulos bajo 60 caracteres",
            ))

    if len(page.description) > DESCRIPTION_LIMIT:
        score -= 5
        issues.append(AEOIssue(
            severity="warning",
            category="content",
            message="Meta description demasiado larga",
            fix="Mantener descripciones bajo 160 caracteres",
        ))

    if page.tldr:
        metrics.tldr_word_count = len(page.tldr.split())
        metrics.has_optimized_tldr = 20 <= metrics.tldr_word_count <= 50

    # Body structure
    if page.content:
        metrics.has_list_content = bool(_LIST_RE.search(page.content))
        metrics.has_table_content = bool(_TABLE_RE.search(page.content))
        metrics.has_conversational_content = bool(_CONVERSATIONAL_RE.search(page.content))
        metrics.has_answer_format = bool(_ANSWER_FORMAT_RE.search(page.content))
        metrics.has_paragraph_answers = any(
            0 < len(p.split()) <= 50 for p in page.content.split("\n\n")
        )
        if not metrics.has_answer_format:
            suggestions.append(AEOSuggestion(
                category="voice",
                message="Agregar contenido en formato de respuesta (qué, cómo, dónde, etc.)",
                impact="high",
                implementation="medium",
            ))

    score = max(0, min(100, score))
    logger.debug("AEO score for %r: %d", page.url or page.title, score)
    return AEOValidationResult(
        score=score,
        grade=calculate_grade(score),
        issues=issues,
        suggestions=suggestions,
        metrics=metrics,
    )


_SEVERITY_ICONS = {"critical": "🔴", "warning": "🟡", "info": "🔵"}
_IMPACT_ICONS = {"high": "🔥", "medium": "⚡", "low": "💡"}
_DIFFICULTY_ICONS = {"easy": "🟢", "medium": "🟡", "hard": "🔴"}


def _yes_no(flag: bool) -> str:
    return "Sí" if flag else "No"


def generate_aeo_report(result: AEOValidationResult, date: datetime | None = None) -> str:
    """Render ``result`` as a markdown report in Spanish."""
    date = date or datetime.now()
    m = result.metrics
    lines = [
        "# Reporte de Optimización AEO",
        "",
        f"**Puntuación:** {result.score}/100 ({result.grade})",
        f"**Fecha:** {date.day}/{date.month}/{date.year}",
        "",
        "## Métricas de Optimización",
        "",
        f"- ✅ JSON-LD: {_yes_no(m.has_json_ld)}",
        f"- 🎙️ Marcado speakable: {_yes_no(m.has_speakable_markup)}",
        f"- ❓ FAQs: {m.faq_count} preguntas",
        f"- 📝 Contenido conversacional: {_yes_no(m.has_conversational_content)}",
        f"- 📋 Contenido en listas: {_yes_no(m.has_list_content)}",
        "",
    ]

    if result.issues:
        lines += ["## Problemas Encontrados", ""]
        for i, issue in enumerate(result.issues, start=1):
            lines.append(
                f"{i}. {_SEVERITY_ICONS[issue.severity]} **{issue.category.upper()}**: {issue.message}"
            )
            if issue.fix:
                lines.append(f"   💡 *Solución*: {issue.fix}")
            lines.append("")

    if result.suggestions:
        lines += ["## Sugerencias de Mejora", ""]
        for i, s in enumerate(result.suggestions, start=1):
            lines.append(
                f"{i}. {_IMPACT_ICONS[s.impact]} {_DIFFICULTY_ICONS[s.implementation]} "
                f"**{s.category.upper()}**: {s.message}"
            )
            lines.append(f"   - Impacto: {s.impact} | Dificultad: {s.implementation}")
            lines.append("")

    return "\n".join(lines)
