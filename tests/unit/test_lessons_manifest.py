"""
Unit tests for the lessons manifest builder.
"""

import json
from datetime import datetime, timezone

import pytest

from ventylab.content.manifest import build_manifest, level_for, write_manifest

FIXED_NOW = datetime(2025, 3, 1, 8, 30, tzinfo=timezone.utc)


@pytest.fixture
def lessons_dir(tmp_path, json_writer, lesson_factory):
    root = tmp_path / "lessons"
    json_writer(root / "module-01-fundamentals" / "lesson-01-respiratory-anatomy.json",
                lesson_factory("respiratory-anatomy", orders=(1, 2, 3)))
    json_writer(root / "module-01-fundamentals" / "lesson-02-gas-exchange.json",
                lesson_factory("gas-exchange", orders=(1, 2)))
    # empty lessons are skipped unless explicitly allowed
    json_writer(root / "module-01-fundamentals" / "lesson-09-draft.json",
                lesson_factory("draft", orders=()))
    json_writer(root / "module-02-parameters" / "lesson-01-peep.json",
                lesson_factory("peep", orders=(), module_id="module-02-parameters",
                               metadata={"allowEmpty": True}))
    json_writer(root / "module-02-parameters" / "metadata.json", {"title": "Parameters", "sections": [{}]})
    # configuration module: category files are virtual lessons named after the file
    json_writer(root / "module-03-configuration" / "pathologies" / "sdra-protocol.json",
                lesson_factory("ards", orders=(1, 2, 3, 4), module_id="ignored"))
    json_writer(root / "module-03-configuration" / "weaning" / "notes.json", {"sections": [{"id": "x"}]})
    json_writer(root / "module-03-configuration" / "overview.json", lesson_factory("overview"))
    return root


class TestBuildManifest:

    def test_structure(self, lessons_dir):
        manifest = build_manifest(lessons_dir, now=lambda: FIXED_NOW)

        assert manifest["version"] == "1.0.0"
        assert manifest["generatedAt"] == "2025-03-01T08:30:00Z"
        assert [level["levelId"] for level in manifest["levels"]] == ["beginner", "intermediate", "advanced"]

    def test_lessons(self, lessons_dir):
        lessons = build_manifest(lessons_dir, now=lambda: FIXED_NOW)["lessons"]

        assert lessons == [
            {"moduleId": "module-01-fundamentals", "lessonId": "respiratory-anatomy", "sectionsCount": 3},
            {"moduleId": "module-01-fundamentals", "lessonId": "gas-exchange", "sectionsCount": 2},
            {"moduleId": "module-02-parameters", "lessonId": "peep", "sectionsCount": 0},
            {"moduleId": "module-03-configuration", "lessonId": "sdra-protocol", "sectionsCount": 4},
        ]

    def test_level_totals_exclude_allow_empty(self, lessons_dir):
        levels = {level["levelId"]: level for level in build_manifest(lessons_dir)["levels"]}

        assert levels["beginner"] == {"levelId": "beginner", "totalLessons": 2, "totalPages": 5}
        assert levels["intermediate"] == {"levelId": "intermediate", "totalLessons": 0, "totalPages": 0}
        assert levels["advanced"] == {"levelId": "advanced", "totalLessons": 1, "totalPages": 4}

    def test_module_id_falls_back_to_folder(self, tmp_path, json_writer):
        root = tmp_path / "lessons"
        json_writer(root / "module-02-parameters" / "lesson-03-flow.json", {"title": "Flujo", "sections": [{}]})

        lessons = build_manifest(root)["lessons"]

        assert lessons == [{"moduleId": "module-02-parameters", "lessonId": "lesson-03-flow", "sectionsCount": 1}]

    def test_unreadable_file_skipped(self, tmp_path, json_writer):
        root = tmp_path / "lessons"
        (root / "module-01-fundamentals").mkdir(parents=True)
        (root / "module-01-fundamentals" / "broken.json").write_text("{", encoding="utf-8")

        assert build_manifest(root)["lessons"] == []

    def test_custom_level_table(self, lessons_dir):
        levels = build_manifest(lessons_dir, module_levels={"module-01-fundamentals": "advanced"})["levels"]

        advanced = next(level for level in levels if level["levelId"] == "advanced")
        # module-03 is unknown to this table and defaults to beginner
        assert advanced["totalLessons"] == 2


def test_unknown_module_defaults_to_beginner():
    assert level_for("module-99-extra") == "beginner"


def test_write_manifest(tmp_path):
    path = write_manifest({"version": "1.0.0"}, tmp_path / "out" / "lessons.manifest.json")

    assert json.loads(path.read_text(encoding="utf-8")) == {"version": "1.0.0"}
