"""
Canonical lesson document model.

Every lesson variant is normalized into LessonDocument. Field names follow the
camelCase keys of the lesson JSON files through aliases, and unknown keys are
preserved so nothing present in a source file is silently dropped.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LessonModel(BaseModel):
    """Base model: camelCase aliases, immutable, extra keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump using the JSON (camelCase) key names."""
        return self.model_dump(by_alias=True, mode="json")


class Introduction(LessonModel):
    text: str = ""
    objectives: list[Any] = Field(default_factory=list)


class Theory(LessonModel):
    sections: list[Any] = Field(default_factory=list)
    examples: list[Any] = Field(default_factory=list)
    analogies: list[Any] = Field(default_factory=list)


class Assessment(LessonModel):
    questions: list[Any] = Field(default_factory=list)


class LessonContent(LessonModel):
    """Rendered content of a lesson, grouped by pedagogical role."""

    introduction: Introduction = Field(default_factory=Introduction)
    theory: Theory = Field(default_factory=Theory)
    visual_elements: list[Any] = Field(default_factory=list)
    practical_cases: list[Any] = Field(default_factory=list)
    key_points: list[Any] = Field(default_factory=list)
    assessment: Assessment = Field(default_factory=Assessment)
    references: list[Any] = Field(default_factory=list)


class LessonDocument(LessonModel):
    """One lesson in canonical form."""

    lesson_id: str = ""
    module_id: str = ""
    title: str = ""
    description: str = ""
    last_updated: str = ""
    authors: list[Any] = Field(default_factory=list)
    reviewers: list[Any] = Field(default_factory=list)
    learning_objectives: list[Any] = Field(default_factory=list)
    estimated_time: int | None = None
    difficulty: str = ""
    bloom_level: str = ""
    sections: list[dict[str, Any]] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    content: LessonContent = Field(default_factory=LessonContent)

    @property
    def page_count(self) -> int:
        return len(self.sections)
