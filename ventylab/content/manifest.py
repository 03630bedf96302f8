"""
Lessons manifest.

Summarizes a lessons tree for the curriculum views: one entry per lesson with
its page count, and per-level totals used for progress percentages.

Files directly under a module folder are regular lessons. Files under
``module-03-configuration/<category>/`` are virtual lessons whose id is the
filename stem.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from .paths import CATEGORIES, CATEGORIZED_MODULE_FOLDER

MANIFEST_VERSION = "1.0.0"
LEVELS = ("beginner", "intermediate", "advanced")
DEFAULT_LEVEL = "beginner"

MODULE_LEVELS = {
    "module-01-fundamentals": "beginner",
    "module-02-parameters": "intermediate",
    "module-02-modalidades-parametros": "intermediate",
    "module-03-configuration": "advanced",
}

IGNORED_FILES = {"metadata.json"}


@dataclass(frozen=True)
class ManifestEntry:
    module_id: str
    lesson_id: str
    sections_count: int
    allow_empty: bool = False

    def to_json(self) -> dict[str, Any]:
        return {
            "moduleId": self.module_id,
            "lessonId": self.lesson_id,
            "sectionsCount": self.sections_count,
        }


def _read_lesson(path: Path) -> dict[str, Any] | None:
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error reading {path}: {e}")
        return None
    return data if isinstance(data, dict) else None


def _entry(data: Mapping[str, Any], module_id: str, lesson_id: str) -> ManifestEntry | None:
    sections = data.get("sections")
    count = len(sections) if isinstance(sections, list) else 0
    metadata = data.get("metadata")
    allow_empty = isinstance(metadata, Mapping) and metadata.get("allowEmpty") is True
    if count == 0 and not allow_empty:
        return None
    return ManifestEntry(module_id, lesson_id, count, allow_empty)


def _regular_lessons(root: Path) -> list[ManifestEntry]:
    entries = []
    for path in sorted(root.glob("**/*.json")):
        relative = path.relative_to(root)
        if path.name in IGNORED_FILES or relative.parts[0] == CATEGORIZED_MODULE_FOLDER:
            continue
        data = _read_lesson(path)
        if data is None:
            continue
        module_id = data.get("moduleId") or (relative.parts[0] if len(relative.parts) > 1 else None)
        if not module_id:
            continue
        entry = _entry(data, str(module_id), str(data.get("id") or path.stem))
        if entry:
            entries.append(entry)
    return entries


def _virtual_lessons(root: Path, categories: Sequence[str]) -> list[ManifestEntry]:
    entries = []
    module_dir = root / CATEGORIZED_MODULE_FOLDER
    for category in categories:
        for path in sorted((module_dir / category).glob("*.json")):
            data = _read_lesson(path)
            if not data or not data.get("title"):
                continue
            entry = _entry(data, CATEGORIZED_MODULE_FOLDER, path.stem)
            if entry:
                entries.append(entry)
    return entries


def level_for(module_id: str, module_levels: Mapping[str, str] = MODULE_LEVELS) -> str:
    level = module_levels.get(module_id)
    if level is None:
        logger.warning(f"Unknown module level for {module_id}, defaulting to '{DEFAULT_LEVEL}'")
        return DEFAULT_LEVEL
    return level


def build_manifest(
    lessons_dir: Path | str,
    module_levels: Mapping[str, str] | None = None,
    categories: Sequence[str] = CATEGORIES,
    now: Callable[[], datetime] | None = None,
) -> dict[str, Any]:
    """
    Build the lessons manifest for a lessons tree.

    Args:
        lessons_dir: Directory holding one folder per module
        module_levels: Module id -> level table (defaults to MODULE_LEVELS)
        categories: Sub-category folders of the configuration module
        now: Clock used for ``generatedAt``

    Returns:
        ``{"version", "generatedAt", "levels", "lessons"}``
    """
    root = Path(lessons_dir)
    levels_table = MODULE_LEVELS if module_levels is None else module_levels
    clock = now or (lambda: datetime.now(timezone.utc))

    entries = _regular_lessons(root) + _virtual_lessons(root, categories)

    by_level: dict[str, list[ManifestEntry]] = {level: [] for level in LEVELS}
    for entry in entries:
        level = level_for(entry.module_id, levels_table)
        if level in by_level:
            by_level[level].append(entry)

    levels = []
    for level in LEVELS:
        completable = [entry for entry in by_level[level] if not entry.allow_empty]
        levels.append(
            {
                "levelId": level,
                "totalLessons": len(completable),
                "totalPages": sum(entry.sections_count for entry in completable),
            }
        )

    logger.info(f"Manifest: {len(entries)} lessons from {root}")
    return {
        "version": MANIFEST_VERSION,
        "generatedAt": clock().isoformat().replace("+00:00", "Z"),
        "levels": levels,
        "lessons": [entry.to_json() for entry in entries],
    }


def write_manifest(manifest: Mapping[str, Any], path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
