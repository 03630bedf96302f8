"""
Pages API: lessons migrated to the database.

Migrated lessons are served by the backend as "pages" whose sections carry
upper-case types (INTRODUCTION, THEORY, CASE_STUDY, ...). The by-lesson
endpoint answers with ``{"source": "page", "data": {...}}`` for migrated
content and ``{"source": "lesson"}`` when the JSON file is still the source
of truth.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from .models import LessonDocument
from .normalizer import BULLET_PATTERN, DEFAULT_ESTIMATED_TIME

THEORY_TYPES = {"THEORY", "TEXT", "EQUATION", "CODE", "CALLOUT"}
QUESTION_TYPES = {"EXERCISE", "QUIZ"}
MEDIA_TYPES = {"IMAGE", "VIDEO"}


def _body(section: Mapping[str, Any]) -> Mapping[str, Any]:
    content = section.get("content")
    return content if isinstance(content, Mapping) else {}


def _markdown(section: Mapping[str, Any]) -> str:
    body = _body(section)
    for key in ("markdown", "text"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _of_type(sections: list[Mapping[str, Any]], *types: str) -> list[Mapping[str, Any]]:
    return [s for s in sections if s.get("type") in types]


def page_to_lesson(page: Mapping[str, Any]) -> LessonDocument:
    """Transform a page returned by the Pages API into a LessonDocument."""
    sections = [s for s in page.get("sections") or [] if isinstance(s, Mapping)]

    introduction = "\n\n".join(_markdown(s) for s in _of_type(sections, "INTRODUCTION"))

    theory = [
        {
            "title": s.get("title") or "",
            "content": _markdown(s),
            "media": _body(s).get("media"),
        }
        for s in _of_type(sections, *THEORY_TYPES)
    ]

    cases = [
        {
            "id": s.get("sectionId") or s.get("id") or f"case-{index}",
            "title": s.get("title") or "",
            "description": _markdown(s),
            "patientData": _body(s).get("patientData"),
            "questions": _body(s).get("questions") or [],
        }
        for index, s in enumerate(_of_type(sections, "CASE_STUDY"))
    ]

    key_points: list[str] = []
    for s in _of_type(sections, "SUMMARY"):
        text = _markdown(s)
        bullets = BULLET_PATTERN.findall(text)
        if bullets:
            key_points.extend(bullet.strip() for bullet in bullets)
        elif text.strip():
            key_points.append(text.strip())

    questions: list[Any] = []
    for s in _of_type(sections, *QUESTION_TYPES):
        if isinstance(_body(s).get("questions"), list):
            questions.extend(_body(s)["questions"])

    references: list[Any] = []
    for s in _of_type(sections, "REFERENCES"):
        body = _body(s)
        if isinstance(body.get("references"), list):
            references.extend(body["references"])
        elif body.get("markdown"):
            references.append(body["markdown"])

    visual_elements = [
        {
            "name": s.get("title") or s.get("sectionId") or "Media",
            "description": _body(s).get("caption") or _body(s).get("alt") or "",
            "type": str(s.get("type")).lower(),
            "url": _body(s).get("url") or _body(s).get("imageUrl") or "",
        }
        for s in _of_type(sections, *MEDIA_TYPES)
    ]

    module = page.get("module") if isinstance(page.get("module"), Mapping) else {}
    objectives = page.get("learningObjectives") or []

    return LessonDocument(
        lesson_id=page.get("legacyLessonId") or page.get("id") or "",
        module_id=module.get("id") or page.get("moduleId") or "",
        title=page.get("title") or "",
        description=page.get("description") or "",
        last_updated=page.get("updatedAt") or page.get("createdAt") or "",
        learning_objectives=objectives,
        estimated_time=page.get("estimatedMinutes") or DEFAULT_ESTIMATED_TIME,
        difficulty=str(page.get("difficulty") or "beginner").lower(),
        bloom_level=page.get("bloomLevel") or "understand",
        sections=[
            {
                "id": s.get("sectionId") or s.get("id"),
                "order": s.get("order"),
                "type": str(s.get("type") or "").lower(),
                "title": s.get("title") or "",
                "content": dict(_body(s)),
            }
            for s in sections
        ],
        content={
            "introduction": {"text": introduction, "objectives": objectives},
            "theory": {"sections": theory, "examples": [], "analogies": []},
            "visual_elements": visual_elements,
            "practical_cases": cases,
            "key_points": key_points or page.get("keyTakeaways") or [],
            "assessment": {"questions": questions},
            "references": references,
        },
    )


class PagesApiClient:
    """HTTP client for the backend Pages API."""

    def __init__(
        self,
        api_url: str,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ):
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def fetch_lesson(self, lesson_id: str) -> LessonDocument | None:
        """
        Look up a lesson among migrated pages.

        Returns:
            The transformed document, or None when the lesson is not migrated

        Raises:
            httpx.HTTPError: On API communication failure
        """
        response = await self.client.get(f"{self.api_url}/pages/by-lesson/{quote(lesson_id, safe='')}")
        response.raise_for_status()
        result = response.json()
        if not isinstance(result, Mapping):
            return None

        payload = result
        if "source" not in result and isinstance(result.get("data"), Mapping):
            # enveloped response: {"data": {"source": ..., "data": page}}
            payload = result["data"]
        source = payload.get("source")
        if source == "page" and isinstance(payload.get("data"), Mapping):
            logger.debug(f"Pages API hit for {lesson_id}")
            return page_to_lesson(payload["data"])
        if source == "lesson":
            logger.debug(f"Lesson {lesson_id} not migrated, JSON file remains the source")
        return None

    async def list_module_pages(self, module_id: str) -> list[dict[str, Any]]:
        """Page summaries of a module; empty when the API is unavailable."""
        try:
            response = await self.client.get(f"{self.api_url}/pages/by-module/{quote(module_id, safe='')}")
            response.raise_for_status()
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to load module pages for {module_id}: {e}")
            return []

        if isinstance(result, Mapping):
            result = result.get("data")
        return [item for item in result or [] if isinstance(item, dict)]
