"""
Semantic collision linter.

Looks across lessons for sections that share a title:

- identical content in different lessons (duplicate-content), unless every
  copy is marked ``metadata.sectionTemplate = true``
- different content under the same title in different lessons
  (title-collision), which usually deserves a rename

Warnings are advisory. The linter also tallies per-level statistics for the
report.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .hasher import TEMPLATE_FLAG, digest

UNKNOWN = "unknown"


class WarningKind(str, Enum):
    DUPLICATE_CONTENT = "duplicate-content"
    TITLE_COLLISION = "title-collision"


@dataclass(frozen=True)
class LessonFile:
    """A parsed lesson together with the file it came from."""

    file: str
    lesson: Mapping[str, Any]

    @property
    def lesson_id(self) -> str:
        return str(self.lesson.get("id") or self.lesson.get("lessonId") or UNKNOWN)

    @property
    def level(self) -> str:
        metadata = self.lesson.get("metadata")
        level = metadata.get("level") if isinstance(metadata, Mapping) else None
        return str(level or UNKNOWN)

    def titled_sections(self) -> list[Mapping[str, Any]]:
        sections = self.lesson.get("sections")
        if not isinstance(sections, list):
            return []
        return [s for s in sections if isinstance(s, Mapping) and s.get("title")]


@dataclass(frozen=True)
class SectionRef:
    """Provenance of one section taking part in a title group."""

    file: str
    lesson_id: str
    section_id: str
    title: str
    level: str
    digest: str
    is_template: bool

    @property
    def label(self) -> str:
        return f"{self.lesson_id} ({self.file})"


@dataclass(frozen=True)
class CollisionWarning:
    kind: WarningKind
    title: str
    message: str
    sections: tuple[SectionRef, ...]
    is_template: bool = False

    @property
    def lesson_ids(self) -> list[str]:
        """Distinct lessons involved, in first-seen order."""
        return list(dict.fromkeys(ref.lesson_id for ref in self.sections))

    @property
    def levels(self) -> list[str]:
        return list(dict.fromkeys(ref.level for ref in self.sections))


@dataclass
class LevelStats:
    total: int = 0
    templates: int = 0
    collisions: int = 0
    suggestions: int = 0


@dataclass
class LintResult:
    warnings: list[CollisionWarning] = field(default_factory=list)
    summary_by_level: dict[str, LevelStats] = field(default_factory=dict)

    def of_kind(self, kind: WarningKind) -> list[CollisionWarning]:
        return [w for w in self.warnings if w.kind == kind]


def is_template(section: Mapping[str, Any]) -> bool:
    metadata = section.get("metadata")
    return isinstance(metadata, Mapping) and metadata.get(TEMPLATE_FLAG) is True


def _group_by_title(lessons: Sequence[LessonFile]) -> dict[str, list[SectionRef]]:
    groups: dict[str, list[SectionRef]] = {}
    for entry in lessons:
        for section in entry.titled_sections():
            title = str(section["title"])
            groups.setdefault(title, []).append(
                SectionRef(
                    file=entry.file,
                    lesson_id=entry.lesson_id,
                    section_id=str(section.get("id")),
                    title=title,
                    level=entry.level,
                    digest=digest(section),
                    is_template=is_template(section),
                )
            )
    return groups


def _distinct_lessons(refs: Sequence[SectionRef]) -> set[str]:
    return {ref.lesson_id for ref in refs}


def _check_title(title: str, refs: list[SectionRef]) -> list[CollisionWarning]:
    warnings: list[CollisionWarning] = []

    by_digest: dict[str, list[SectionRef]] = {}
    for ref in refs:
        by_digest.setdefault(ref.digest, []).append(ref)

    for same in by_digest.values():
        if len(same) < 2 or all(ref.is_template for ref in same):
            continue
        if len(_distinct_lessons(same)) < 2:
            continue
        labels = ", ".join(ref.label for ref in same)
        warnings.append(
            CollisionWarning(
                kind=WarningKind.DUPLICATE_CONTENT,
                title=title,
                message=(
                    f'Section "{title}" has identical content in {len(same)} '
                    f"instance(s) across different lessons: {labels}"
                ),
                sections=tuple(same),
                is_template=any(ref.is_template for ref in same),
            )
        )

    non_templates = [ref for ref in refs if not ref.is_template]
    if len(by_digest) > 1 and len(_distinct_lessons(non_templates)) > 1:
        warnings.append(
            CollisionWarning(
                kind=WarningKind.TITLE_COLLISION,
                title=title,
                message=(
                    f'Section "{title}" appears in {len(refs)} instance(s) with different '
                    "content. Consider renaming it if it is not a template."
                ),
                sections=tuple(non_templates),
            )
        )

    return warnings


def _summarize(lessons: Sequence[LessonFile], warnings: list[CollisionWarning]) -> dict[str, LevelStats]:
    summary: dict[str, LevelStats] = {}
    counted: set[tuple[str, str, str]] = set()

    for entry in lessons:
        for section in entry.titled_sections():
            key = (entry.file, entry.lesson_id, str(section.get("id")))
            if key in counted:
                continue
            counted.add(key)
            stats = summary.setdefault(entry.level, LevelStats())
            stats.total += 1
            if is_template(section):
                stats.templates += 1

    for warning in warnings:
        for level in warning.levels:
            stats = summary.setdefault(level, LevelStats())
            if warning.kind == WarningKind.DUPLICATE_CONTENT:
                stats.collisions += 1
            else:
                stats.suggestions += 1

    return summary


def lint(lessons: Sequence[LessonFile]) -> LintResult:
    """
    Find duplicate and colliding section titles across lessons.

    Args:
        lessons: Lessons that passed structural validation

    Returns:
        LintResult with warnings (title order of first appearance) and
        statistics per difficulty level
    """
    warnings: list[CollisionWarning] = []
    for title, refs in _group_by_title(lessons).items():
        if len(refs) >= 2:
            warnings.extend(_check_title(title, refs))
    return LintResult(warnings=warnings, summary_by_level=_summarize(lessons, warnings))


def sorted_levels(summary: Mapping[str, LevelStats]) -> list[tuple[str, LevelStats]]:
    """Levels alphabetically, with "unknown" last."""
    return sorted(summary.items(), key=lambda item: (item[0] == UNKNOWN, item[0]))
