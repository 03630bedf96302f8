"""
Unit tests for batch lesson validation.
"""

import pytest

from ventylab.content.batch import (
    ZERO_PAGES_MESSAGE,
    BatchReport,
    IssueKind,
    LessonBatchValidator,
    PageCount,
    ValidationIssue,
    count_pages,
    discover_lesson_files,
)
from ventylab.content.linter import WarningKind
from ventylab.core.schema_validator import LessonSchemaValidator


@pytest.fixture
def validator():
    return LessonBatchValidator(LessonSchemaValidator.bundled())


class TestDiscovery:

    def test_excludes_schemas_and_metadata(self, tmp_path, json_writer, lesson_factory):
        json_writer(tmp_path / "module-01-fundamentals" / "lesson-01.json", lesson_factory("a"))
        json_writer(tmp_path / "module-01-fundamentals" / "metadata.json", {"title": "Module"})
        json_writer(tmp_path / "schemas" / "lesson.schema.json", {"type": "object"})
        json_writer(tmp_path / "module-02-parameters" / "schemas" / "extra.json", {})
        (tmp_path / "module-01-fundamentals" / "notes.txt").write_text("x", encoding="utf-8")

        files = discover_lesson_files(tmp_path)

        assert files == [tmp_path / "module-01-fundamentals" / "lesson-01.json"]

    def test_sorted(self, tmp_path, json_writer, lesson_factory):
        for name in ("c.json", "a.json", "b.json"):
            json_writer(tmp_path / "module-01-fundamentals" / name, lesson_factory(name))

        assert [path.name for path in discover_lesson_files(tmp_path)] == ["a.json", "b.json", "c.json"]

    def test_custom_pattern(self, tmp_path, json_writer, lesson_factory):
        json_writer(tmp_path / "m1" / "a.json", lesson_factory("a"))
        json_writer(tmp_path / "m2" / "b.json", lesson_factory("b"))

        assert discover_lesson_files(tmp_path, pattern="m2/*.json") == [tmp_path / "m2" / "b.json"]


@pytest.mark.parametrize(
    "lesson,expected",
    [
        ({"sections": [{}, {}, {}]}, 3),
        ({"sections": []}, 0),
        ({"sections": "none"}, 0),
        ({}, 0),
        ([], 0),
    ],
)
def test_count_pages(lesson, expected):
    assert count_pages(lesson) == expected


class TestValidateDocument:

    def test_valid_lesson_is_linted(self, validator, lesson_factory):
        report = BatchReport()

        validator.validate_document("a.json", lesson_factory("lesson-a"), report)

        assert report.issues == []
        assert report.page_counts == [PageCount("a.json", "lesson-a", "module-01-fundamentals", 3)]
        assert [entry.file for entry in report.lint_input] == ["a.json"]

    def test_zero_pages(self, validator, lesson_factory):
        report = BatchReport()

        validator.validate_document("b.json", lesson_factory("lesson-b", orders=()), report)

        assert report.issues == [ValidationIssue("b.json", IssueKind.ZERO_PAGES, ZERO_PAGES_MESSAGE)]
        assert report.lint_input == []

    def test_order_errors(self, validator, lesson_factory):
        report = BatchReport()

        validator.validate_document("c.json", lesson_factory("lesson-c", orders=(2, 3)), report)

        kinds = {issue.kind for issue in report.issues}
        assert kinds == {IssueKind.SECTIONS_ORDER}
        assert any("must start from 1" in issue.message for issue in report.issues)
        assert report.lint_input == []

    def test_schema_errors_block_linting(self, validator, lesson_factory):
        lesson = lesson_factory("lesson-d")
        del lesson["title"]
        report = BatchReport()

        validator.validate_document("d.json", lesson, report)

        assert [issue.kind for issue in report.issues] == [IssueKind.SCHEMA]
        assert report.lint_input == []

    def test_missing_ids_reported_as_unknown(self, validator):
        report = BatchReport()

        validator.validate_document("e.json", {"sections": []}, report)

        assert report.page_counts == [PageCount("e.json", "unknown", "unknown", 0)]


class TestRun:

    def test_oversized_order_is_reported_not_raised(self, validator, tmp_path, json_writer, lesson_factory):
        good = json_writer(tmp_path / "a.json", lesson_factory("lesson-a"))
        huge = tmp_path / "b.json"
        huge.write_text(
            '{"id": "lesson-b", "title": "B", "sections": ['
            '{"id": "s1", "order": 1, "type": "theory"}, '
            '{"id": "s2", "order": 1' + "0" * 400 + ', "type": "theory"}]}',
            encoding="utf-8",
        )

        report = validator.run([good, huge], root=tmp_path)

        assert report.exit_code == 1
        assert report.files_with_issues() == ["b.json"]
        assert {issue.kind for issue in report.issues} == {IssueKind.SECTIONS_ORDER}
        assert [entry.file for entry in report.lint_input] == ["a.json"]

    def test_parse_error(self, validator, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{ not json", encoding="utf-8")

        report = validator.run([broken], root=tmp_path)

        assert report.files == ["broken.json"]
        assert len(report.issues) == 1
        assert report.issues[0].kind == IssueKind.PARSE
        assert report.issues[0].message.startswith("Invalid JSON syntax:")
        assert report.page_counts == []
        assert report.exit_code == 1

    def test_clean_run(self, validator, tmp_path, json_writer, lesson_factory):
        path = json_writer(tmp_path / "module-01-fundamentals" / "a.json", lesson_factory("lesson-a"))

        report = validator.run([path], root=tmp_path)

        assert report.files == ["module-01-fundamentals/a.json"]
        assert not report.blocking
        assert report.exit_code == 0

    def test_warnings_do_not_block(self, validator, tmp_path, json_writer, lesson_factory):
        files = [
            json_writer(tmp_path / "a.json", lesson_factory("lesson-a")),
            json_writer(tmp_path / "b.json", lesson_factory("lesson-b")),
        ]

        report = validator.run(files, root=tmp_path)

        # same "Section N" titles, but section ids differ per lesson
        warnings = report.lint_result.warnings
        assert [warning.kind for warning in warnings] == [WarningKind.TITLE_COLLISION] * 3
        assert report.exit_code == 0

    def test_empty_tree(self, validator, tmp_path):
        report = validator.run_tree(tmp_path)

        assert report.files == []
        assert report.exit_code == 0


class TestReportGrouping:

    def test_issues_by_kind_keeps_first_occurrence_order(self):
        report = BatchReport(
            issues=[
                ValidationIssue("b.json", IssueKind.ZERO_PAGES, "empty"),
                ValidationIssue("c.json", IssueKind.SECTIONS_ORDER, "dup"),
                ValidationIssue("d.json", IssueKind.ZERO_PAGES, "empty"),
            ]
        )

        grouped = report.issues_by_kind()

        assert list(grouped) == [IssueKind.ZERO_PAGES, IssueKind.SECTIONS_ORDER]
        assert [issue.file for issue in grouped[IssueKind.ZERO_PAGES]] == ["b.json", "d.json"]

    def test_pages_by_module_sorted(self):
        report = BatchReport(
            page_counts=[
                PageCount("x.json", "x", "module-02-parameters", 4),
                PageCount("y.json", "y", "module-01-fundamentals", 2),
                PageCount("z.json", "z", "module-02-parameters", 1),
            ]
        )

        grouped = report.pages_by_module()

        assert list(grouped) == ["module-01-fundamentals", "module-02-parameters"]
        assert [count.lesson_id for count in grouped["module-02-parameters"]] == ["x", "z"]

    def test_files_with_issues_deduplicated(self):
        report = BatchReport(
            issues=[
                ValidationIssue("c.json", IssueKind.SECTIONS_ORDER, "one"),
                ValidationIssue("c.json", IssueKind.SECTIONS_ORDER, "two"),
                ValidationIssue("b.json", IssueKind.ZERO_PAGES, "empty"),
            ]
        )

        assert report.files_with_issues() == ["c.json", "b.json"]

    def test_issue_labels(self):
        assert IssueKind.SCHEMA.label == "Schema Validation Errors"
        assert IssueKind.ZERO_PAGES.label == "Zero Pages Errors"
