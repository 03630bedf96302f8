"""
Batch lesson validation.

One sequential pass over a lessons tree:

1. parse each file (parse issue on failure, file skipped)
2. JSON Schema validation (one schema issue per violation)
3. section order validation when the lesson has sections, otherwise a
   zero-pages issue
4. semantic linting across every lesson that passed 2 and 3

Issues are blocking and decide the exit code. Linter warnings are advisory.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

from .linter import LessonFile, LintResult, lint
from .ordering import validate_sections_order

if TYPE_CHECKING:
    from ventylab.core.schema_validator import LessonSchemaValidator

DEFAULT_LESSON_GLOB = "**/*.json"
DEFAULT_EXCLUDES = ("**/schemas/**", "**/metadata.json", "**/index.js")
UNKNOWN = "unknown"


class IssueKind(str, Enum):
    PARSE = "parse"
    SCHEMA = "schema"
    SECTIONS_ORDER = "sections-order"
    ZERO_PAGES = "zero-pages"

    @property
    def label(self) -> str:
        return _ISSUE_LABELS[self]


_ISSUE_LABELS = {
    IssueKind.PARSE: "Parse Errors",
    IssueKind.SCHEMA: "Schema Validation Errors",
    IssueKind.SECTIONS_ORDER: "Sections Order Validation Errors",
    IssueKind.ZERO_PAGES: "Zero Pages Errors",
}

ZERO_PAGES_MESSAGE = "Lesson has 0 pages (no sections found). Lessons must have at least one section."


@dataclass(frozen=True)
class ValidationIssue:
    file: str
    kind: IssueKind
    message: str


@dataclass(frozen=True)
class PageCount:
    file: str
    lesson_id: str
    module_id: str
    pages: int


@dataclass
class BatchReport:
    """Everything a batch run found."""

    files: list[str] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)
    page_counts: list[PageCount] = field(default_factory=list)
    lint_input: list[LessonFile] = field(default_factory=list)
    lint_result: LintResult = field(default_factory=LintResult)

    @property
    def blocking(self) -> bool:
        return bool(self.issues)

    @property
    def exit_code(self) -> int:
        return 1 if self.blocking else 0

    def issues_by_kind(self) -> dict[IssueKind, list[ValidationIssue]]:
        """Issues grouped by kind, kinds in order of first occurrence."""
        grouped: dict[IssueKind, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.kind, []).append(issue)
        return grouped

    def pages_by_module(self) -> dict[str, list[PageCount]]:
        """Page counts grouped by module, modules sorted by name."""
        grouped: dict[str, list[PageCount]] = {}
        for count in self.page_counts:
            grouped.setdefault(count.module_id, []).append(count)
        return dict(sorted(grouped.items()))

    def files_with_issues(self) -> list[str]:
        return list(dict.fromkeys(issue.file for issue in self.issues))


def count_pages(lesson: Any) -> int:
    """Number of sections (pages) in a parsed lesson."""
    sections = lesson.get("sections") if isinstance(lesson, dict) else None
    return len(sections) if isinstance(sections, list) else 0


def discover_lesson_files(
    root: Path | str,
    pattern: str = DEFAULT_LESSON_GLOB,
    excludes: Iterable[str] = DEFAULT_EXCLUDES,
) -> list[Path]:
    """
    Find lesson files under root.

    Args:
        root: Lessons directory
        pattern: Glob relative to root
        excludes: Globs (relative to root) of files that are never lessons

    Returns:
        Matching files in sorted order
    """
    root = Path(root)
    excludes = tuple(excludes)
    found = []
    for path in root.glob(pattern):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if any(relative.match(ex) or path.match(ex) for ex in excludes):
            continue
        if _in_excluded_dir(relative, excludes):
            continue
        found.append(path)
    return sorted(found)


def _in_excluded_dir(relative: Path, excludes: Sequence[str]) -> bool:
    # "**/schemas/**" style patterns exclude whole directories
    dirs = {ex.strip("*/") for ex in excludes if ex.endswith("/**")}
    return any(part in dirs for part in relative.parts[:-1])


class LessonBatchValidator:
    """Validate a whole lessons tree and lint the structurally valid lessons."""

    def __init__(self, schema_validator: LessonSchemaValidator):
        self.schema_validator = schema_validator

    def validate_document(self, file: str, lesson: Any, report: BatchReport) -> None:
        """Run schema, order and page checks on one parsed lesson."""
        schema_errors = self.schema_validator.validate(lesson)
        for message in schema_errors:
            report.issues.append(ValidationIssue(file, IssueKind.SCHEMA, message))

        pages = count_pages(lesson)
        fields = lesson if isinstance(lesson, dict) else {}
        report.page_counts.append(
            PageCount(
                file=file,
                lesson_id=str(fields.get("id") or UNKNOWN),
                module_id=str(fields.get("moduleId") or UNKNOWN),
                pages=pages,
            )
        )

        order_errors: list[str] = []
        if pages > 0:
            order_errors = validate_sections_order(fields["sections"]).errors
            for message in order_errors:
                report.issues.append(ValidationIssue(file, IssueKind.SECTIONS_ORDER, message))
        else:
            report.issues.append(ValidationIssue(file, IssueKind.ZERO_PAGES, ZERO_PAGES_MESSAGE))

        if not schema_errors and not order_errors and pages > 0:
            report.lint_input.append(LessonFile(file=file, lesson=lesson))

    def run(self, files: Sequence[Path], root: Path | str | None = None) -> BatchReport:
        """
        Validate files in the given order, then lint the eligible lessons.

        Args:
            files: Lesson files to validate
            root: Base directory used to display relative file names

        Returns:
            BatchReport; ``exit_code`` is 1 iff any blocking issue was found
        """
        report = BatchReport()
        base = Path(root) if root is not None else None

        for path in files:
            name = _display_name(path, base)
            report.files.append(name)
            try:
                lesson = json.loads(path.read_text(encoding="utf-8-sig"))
            except ValueError as e:
                report.issues.append(ValidationIssue(name, IssueKind.PARSE, f"Invalid JSON syntax: {e}"))
                continue
            except OSError as e:
                report.issues.append(ValidationIssue(name, IssueKind.PARSE, str(e)))
                continue
            self.validate_document(name, lesson, report)

        report.lint_result = lint(report.lint_input)
        logger.info(
            f"Validated {len(report.files)} lesson files: {len(report.issues)} issue(s), "
            f"{len(report.lint_result.warnings)} linter warning(s)"
        )
        return report

    def run_tree(
        self,
        root: Path | str,
        pattern: str = DEFAULT_LESSON_GLOB,
        excludes: Iterable[str] = DEFAULT_EXCLUDES,
    ) -> BatchReport:
        """Discover and validate every lesson file under root."""
        files = discover_lesson_files(root, pattern, excludes)
        if not files:
            logger.warning(f"No lesson files found under {root}")
        return self.run(files, root=root)


def _display_name(path: Path, base: Path | None) -> str:
    if base is not None:
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            pass
    return path.as_posix()
