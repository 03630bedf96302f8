"""
Lesson format normalization.

Lesson files exist in three historical shapes:

- canonical: ``lessonId`` plus a ``content.introduction`` object, already in
  the shape the viewer renders
- flat sections: a ``sections`` array of typed pages (introduction, theory,
  case, summary, quiz, ...)
- legacy: the pre-schema documents with Spanish top-level keys
  ("Título", "Introducción", "Conceptos Teóricos", ...)

The variant is detected once and handed to one mapping function. Mapping never
raises: absent or malformed fields become empty strings, lists or objects.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .models import LessonDocument

BULLET_PATTERN = re.compile(r"^[-*]\s+(.+)$", re.MULTILINE)

THEORY_TYPES = {"theory", "procedure"}
CASE_TYPES = {"case", "practical"}
QUIZ_TYPES = {"assessment", "quiz"}

DEFAULT_ESTIMATED_TIME = 45
DEFAULT_DIFFICULTY = "beginner"
DEFAULT_BLOOM_LEVEL = "understand"


class LessonVariant(str, Enum):
    """Known lesson JSON shapes."""

    CANONICAL = "canonical"
    FLAT_SECTIONS = "flat-sections"
    LEGACY = "legacy"


# =============================================================================
# Coercion helpers
# =============================================================================


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _items(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def _mappings(value: Any) -> list[dict[str, Any]]:
    return [dict(item) for item in _items(value) if isinstance(item, Mapping)]


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _first_text(*values: Any) -> str:
    """First non-empty string among values."""
    for value in values:
        text = _text(value)
        if text:
            return text
    return ""


def _first_items(*values: Any) -> list[Any]:
    """First non-empty list among values."""
    for value in values:
        items = _items(value)
        if items:
            return items
    return []


def _body_text(section: Mapping[str, Any]) -> str:
    """Text body of a flat section: markdown, then text, then a bare string."""
    content = section.get("content")
    if isinstance(content, Mapping):
        return _first_text(content.get("markdown"), content.get("text"))
    return _text(content)


# =============================================================================
# Variant detection
# =============================================================================


def detect_variant(raw: Any) -> LessonVariant:
    """Decide which mapping applies to a raw lesson payload."""
    if not isinstance(raw, Mapping):
        return LessonVariant.LEGACY
    if raw.get("lessonId") and isinstance(_mapping(raw.get("content")).get("introduction"), Mapping):
        return LessonVariant.CANONICAL
    if isinstance(raw.get("sections"), list):
        return LessonVariant.FLAT_SECTIONS
    return LessonVariant.LEGACY


# =============================================================================
# Variant mappings
# =============================================================================


def from_canonical(raw: Mapping[str, Any]) -> LessonDocument:
    """Validate an already-canonical payload, salvaging it if it is malformed."""
    try:
        return LessonDocument.model_validate(dict(raw))
    except ValidationError as e:
        logger.warning(
            f"Canonical lesson {raw.get('lessonId')!r} failed validation "
            f"({e.error_count()} errors), mapping field by field"
        )
        return from_legacy(raw)


def from_flat_sections(raw: Mapping[str, Any]) -> LessonDocument:
    """Map the flat ``sections[]`` shape onto canonical content."""
    sections = _mappings(raw.get("sections"))
    top_content = _mapping(raw.get("content"))

    introduction = next((s for s in sections if s.get("type") == "introduction"), None)
    introduction_text = _body_text(introduction) if introduction else ""

    theory_sections = []
    for section in sections:
        if section.get("type") not in THEORY_TYPES:
            continue
        body = _mapping(section.get("content"))
        theory_sections.append(
            {
                "title": _text(section.get("title")),
                "content": _body_text(section),
                "media": body.get("media") or section.get("media") or None,
            }
        )

    visual_elements = []
    for section in sections:
        media = _mapping(_mapping(section.get("content")).get("media"))
        for image in _mappings(media.get("images")):
            visual_elements.append(
                {
                    "name": _first_text(image.get("id"), image.get("alt")) or "Image",
                    "description": _first_text(image.get("caption"), image.get("alt")),
                    "type": "image",
                    "url": _text(image.get("url")),
                }
            )

    practical_cases = []
    for section in sections:
        if section.get("type") not in CASE_TYPES:
            continue
        body = _mapping(section.get("content"))
        practical_cases.append(
            {
                "id": _text(section.get("id")) or f"case-{section.get('order')}",
                "title": _text(section.get("title")),
                "description": _body_text(section),
                "patientData": body.get("patientData"),
                "questions": _items(body.get("questions")),
            }
        )

    key_points: list[Any] = []
    summary = next((s for s in sections if s.get("type") == "summary"), None)
    if summary:
        summary_body = _mapping(summary.get("content"))
        summary_text = _first_text(summary_body.get("markdown"), summary_body.get("text"))
        key_points.extend(match.strip() for match in BULLET_PATTERN.findall(summary_text))

    questions: list[Any] = []
    for section in sections:
        embedded = _mapping(section.get("content")).get("questions")
        if isinstance(embedded, list):
            questions.extend(embedded)
        elif section.get("type") in QUIZ_TYPES:
            questions.extend(_items(section.get("questions")))

    references: list[Any] = []
    for section in sections:
        references.extend(_items(_mapping(section.get("content")).get("references")))
        references.extend(_items(section.get("references")))

    objectives = _items(raw.get("learningObjectives"))
    estimated_time = _int_or_none(raw.get("estimatedTime"))

    return LessonDocument(
        lesson_id=_first_text(raw.get("id"), raw.get("lessonId")),
        module_id=_text(raw.get("moduleId")),
        title=_text(raw.get("title")),
        description=_text(raw.get("description")),
        last_updated=_text(raw.get("lastUpdated")),
        authors=_items(raw.get("authors")),
        reviewers=_items(raw.get("reviewers")),
        learning_objectives=objectives,
        estimated_time=estimated_time if estimated_time is not None else DEFAULT_ESTIMATED_TIME,
        difficulty=_text(raw.get("difficulty")) or DEFAULT_DIFFICULTY,
        bloom_level=_text(raw.get("bloomLevel")) or DEFAULT_BLOOM_LEVEL,
        sections=sections,
        metadata=dict(_mapping(raw.get("metadata"))),
        content={
            "introduction": {"text": introduction_text, "objectives": objectives},
            "theory": {"sections": theory_sections, "examples": [], "analogies": []},
            "visual_elements": visual_elements or _items(top_content.get("visualElements")),
            "practical_cases": practical_cases or _items(top_content.get("practicalCases")),
            "key_points": key_points
            or _first_items(top_content.get("keyPoints"), raw.get("keyPoints")),
            "assessment": {
                "questions": questions
                or _items(_mapping(top_content.get("assessment")).get("questions"))
            },
            "references": references
            or _first_items(top_content.get("references"), raw.get("references")),
        },
    )


def from_legacy(raw: Any) -> LessonDocument:
    """Map legacy Spanish-keyed documents (or anything unrecognized) onto canonical content."""
    raw = _mapping(raw)
    content = _mapping(raw.get("content"))
    introduction = _mapping(content.get("introduction"))
    theory = _mapping(content.get("theory"))
    legacy_intro = _mapping(raw.get("Introducción"))

    theory_sections = _items(theory.get("sections"))
    if not theory_sections and ("Conceptos Teóricos" in raw or "conceptos_teoricos" in raw):
        theory_sections = [
            {
                "title": "Conceptos Teóricos",
                "content": _first_text(raw.get("Conceptos Teóricos"), raw.get("conceptos_teoricos")),
            }
        ]

    return LessonDocument(
        lesson_id=_first_text(raw.get("id"), raw.get("lessonId")),
        module_id=_text(raw.get("moduleId")),
        title=_first_text(raw.get("title"), raw.get("titulo"), raw.get("Título")),
        description=_text(raw.get("description")),
        last_updated=_text(raw.get("lastUpdated")),
        authors=_items(raw.get("authors")),
        reviewers=_items(raw.get("reviewers")),
        learning_objectives=_items(raw.get("learningObjectives")),
        estimated_time=_int_or_none(raw.get("estimatedTime")),
        difficulty=_text(raw.get("difficulty")),
        bloom_level=_text(raw.get("bloomLevel")),
        sections=_mappings(raw.get("sections")),
        metadata=dict(_mapping(raw.get("metadata"))),
        content={
            "introduction": {
                "text": _first_text(
                    introduction.get("text"),
                    legacy_intro.get("texto"),
                    legacy_intro.get("text"),
                    raw.get("introduccion"),
                ),
                "objectives": _first_items(
                    introduction.get("objectives"),
                    raw.get("learningObjectives"),
                    legacy_intro.get("objetivos"),
                    raw.get("objetivos_de_aprendizaje"),
                ),
            },
            "theory": {
                "sections": theory_sections,
                "examples": _items(theory.get("examples")),
                "analogies": _items(theory.get("analogies")),
            },
            "visual_elements": _first_items(
                content.get("visualElements"),
                raw.get("Elementos Visuales"),
                raw.get("elementos_visuales_requeridos"),
            ),
            "practical_cases": _first_items(
                content.get("practicalCases"),
                raw.get("Casos Prácticos"),
                raw.get("casos_practicos"),
            ),
            "key_points": _first_items(
                content.get("keyPoints"),
                raw.get("Puntos Clave"),
                raw.get("puntos_clave"),
            ),
            "assessment": {
                "questions": _first_items(
                    _mapping(content.get("assessment")).get("questions"),
                    raw.get("Autoevaluación"),
                    raw.get("autoevaluacion"),
                )
            },
            "references": _first_items(
                content.get("references"),
                raw.get("Referencias Bibliográficas"),
                raw.get("referencias"),
            ),
        },
    )


_MAPPERS = {
    LessonVariant.CANONICAL: from_canonical,
    LessonVariant.FLAT_SECTIONS: from_flat_sections,
    LessonVariant.LEGACY: from_legacy,
}


def normalize(raw: Any) -> LessonDocument:
    """
    Normalize any lesson payload into a LessonDocument.

    Already-normalized documents are returned unchanged, so normalization is
    idempotent.
    """
    if isinstance(raw, LessonDocument):
        return raw
    variant = detect_variant(raw)
    logger.debug(f"Normalizing lesson payload as {variant.value}")
    return _MAPPERS[variant](raw)
