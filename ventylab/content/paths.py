"""
Lesson path resolution.

Maps a (lessonId, moduleId) pair to the storage path of its JSON document.
Module folders were renamed several times and some lessons were merged into
shared files, so the mapping goes through a set of lookup tables. Resolution
is pure and always produces a path; whether the file exists is only known
when it is fetched.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ParseError

LESSON_PATH_PREFIX = "lessons"
MODULE_PATH_PREFIX = "module"

DEFAULT_MODULE_FOLDER = "module-01-fundamentals"
CATEGORIZED_MODULE_FOLDER = "module-03-configuration"
VERBATIM_MODULE_FOLDER = "module-02-parameters"

LESSON_NUMBER_PREFIX = re.compile(r"^lesson-(\d+)-(.+)$")

# Relative to the lesson prefix, like every other resolved path.
DIRECT_PATHS = {
    "module-01-inversion-fisiologica": "module-01-fundamentals/module-01-inversion-fisiologica.json",
    "module-02-ecuacion-movimiento": "module-01-fundamentals/module-02-ecuacion-movimiento.json",
    "module-03-variables-fase": "module-01-fundamentals/module-03-variables-fase.json",
    "module-04-modos-ventilatorios": "module-01-fundamentals/module-04-modos-ventilatorios.json",
    "module-05-monitorizacion-grafica": "module-01-fundamentals/module-05-monitorizacion-grafica.json",
    "module-06-efectos-sistemicos": "module-01-fundamentals/module-06-efectos-sistemicos.json",
}

# Several early lesson ids were folded into the respiratory-anatomy file.
SLUG_FILENAMES = {
    "anatomy-overview": "respiratory-anatomy",
    "airway-structures": "respiratory-anatomy",
    "lung-mechanics": "respiratory-anatomy",
    "respiratory-anatomy": "respiratory-anatomy",
    "respiratory-mechanics": "respiratory-mechanics",
    "gas-exchange": "gas-exchange",
    "arterial-blood-gas": "arterial-blood-gas",
}

SLUG_NUMBERS = {
    "respiratory-anatomy": "01",
    "anatomy-overview": "01",
    "airway-structures": "01",
    "lung-mechanics": "01",
    "respiratory-mechanics": "01",
    "ventilation-mechanics": "01",
    "gas-exchange": "02",
    "arterial-blood-gas": "03",
}

MODULE_FOLDERS = {
    "module-02-modalidades-parametros": "module-02-parameters",
}

CATEGORY_EXACT = {
    "sdra-protocol": "pathologies",
    "copd-protocol": "pathologies",
    "asthma-protocol": "pathologies",
    "pneumonia-protocol": "pathologies",
    "low-tidal-volume": "protective-strategies",
    "permissive-hypercapnia": "protective-strategies",
    "peep-strategies": "protective-strategies",
    "lung-protective-ventilation": "protective-strategies",
    "sbt-protocol": "weaning",
    "readiness-criteria": "weaning",
}

CATEGORIES = ("pathologies", "protective-strategies", "weaning")

CATEGORY_KEYWORDS = {
    "sdra": "pathologies",
    "copd": "pathologies",
    "asthma": "pathologies",
    "pneumonia": "pathologies",
    "low-tidal": "protective-strategies",
    "permissive": "protective-strategies",
    "peep": "protective-strategies",
    "lung-protective": "protective-strategies",
    "sbt": "weaning",
    "readiness": "weaning",
}


@dataclass(frozen=True)
class PathTables:
    """Lookup tables used by LessonPathResolver."""

    direct_paths: Mapping[str, str] = field(default_factory=lambda: dict(DIRECT_PATHS))
    slug_filenames: Mapping[str, str] = field(default_factory=lambda: dict(SLUG_FILENAMES))
    slug_numbers: Mapping[str, str] = field(default_factory=lambda: dict(SLUG_NUMBERS))
    module_folders: Mapping[str, str] = field(default_factory=lambda: dict(MODULE_FOLDERS))
    category_exact: Mapping[str, str] = field(default_factory=lambda: dict(CATEGORY_EXACT))
    categories: tuple[str, ...] = CATEGORIES
    category_keywords: Mapping[str, str] = field(default_factory=lambda: dict(CATEGORY_KEYWORDS))

    @classmethod
    def from_file(cls, path: Path | str) -> PathTables:
        """
        Load tables from a JSON file.

        Keys are the camelCase field names (``directPaths``, ``slugFilenames``,
        ...). Tables missing from the file keep their defaults. ``directPaths``
        values are relative to the lesson prefix.
        """
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid path tables file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ParseError(f"Path tables file {path} must contain a JSON object")

        overrides = {}
        for name, key in (
            ("direct_paths", "directPaths"),
            ("slug_filenames", "slugFilenames"),
            ("slug_numbers", "slugNumbers"),
            ("module_folders", "moduleFolders"),
            ("category_exact", "categoryExact"),
            ("category_keywords", "categoryKeywords"),
        ):
            if isinstance(raw.get(key), dict):
                overrides[name] = {str(k): str(v) for k, v in raw[key].items()}
        if isinstance(raw.get("categories"), list):
            overrides["categories"] = tuple(str(item) for item in raw["categories"])
        return cls(**overrides)


def lesson_slug(lesson_id: str) -> str:
    """Strip a ``lesson-<NN>-`` prefix: ``lesson-02-gas-exchange`` -> ``gas-exchange``."""
    match = LESSON_NUMBER_PREFIX.match(lesson_id)
    return match.group(2) if match else lesson_id


class LessonPathResolver:
    """Resolve lesson ids to storage paths relative to the content root."""

    def __init__(self, tables: PathTables | None = None, lesson_prefix: str = LESSON_PATH_PREFIX):
        self.tables = tables or PathTables()
        self.lesson_prefix = lesson_prefix.rstrip("/")

    def module_folder(self, module_id: str) -> str:
        folder = self.tables.module_folders.get(module_id, module_id)
        if not folder.startswith(f"{MODULE_PATH_PREFIX}-"):
            return DEFAULT_MODULE_FOLDER
        return folder

    def category_for(self, slug: str) -> str | None:
        """Sub-category folder of a configuration-module lesson, if any."""
        if slug in self.tables.category_exact:
            return self.tables.category_exact[slug]
        for category in self.tables.categories:
            if category.split("-")[0] in slug:
                return category
        for keyword, category in self.tables.category_keywords.items():
            if keyword in slug:
                return category
        return None

    def resolve(self, lesson_id: str, module_id: str) -> str:
        """
        Resolve the storage path of a lesson.

        Args:
            lesson_id: Requested lesson id (may carry a ``lesson-NN-`` prefix)
            module_id: Module the lesson belongs to

        Returns:
            Path relative to the content root, e.g.
            ``lessons/module-01-fundamentals/lesson-01-respiratory-anatomy.json``
        """
        direct = self.tables.direct_paths.get(lesson_id)
        if direct:
            return f"{self.lesson_prefix}/{direct.lstrip('/')}"

        slug = lesson_slug(lesson_id)
        folder = self.module_folder(module_id)
        number = self.tables.slug_numbers.get(slug, "01")
        filename = self.tables.slug_filenames.get(slug, slug)

        if folder == CATEGORIZED_MODULE_FOLDER:
            category = self.category_for(slug)
            if category:
                return f"{self.lesson_prefix}/{folder}/{category}/{slug}.json"

        if folder == VERBATIM_MODULE_FOLDER and lesson_id.startswith("lesson-"):
            return f"{self.lesson_prefix}/{folder}/{lesson_id}.json"

        return f"{self.lesson_prefix}/{folder}/lesson-{number}-{filename}.json"
