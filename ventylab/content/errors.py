"""
Exception hierarchy for lesson content handling.

Batch validation defects (parse, schema, ordering, zero pages) are reported as
ValidationIssue records, not raised. These exceptions cover the loader path
and the few hard failures of the tooling.
"""

from __future__ import annotations


class ContentError(Exception):
    """Base class for lesson content errors."""


class ParseError(ContentError):
    """Raised when a lesson payload is not valid JSON."""


class FetchError(ContentError):
    """Raised when a content source cannot provide a lesson payload."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not fetch '{path}': {reason}")


class LessonDataError(ContentError):
    """Raised when a fetched payload fails the loader's structural checks."""


class SchemaLoadError(ContentError):
    """Raised when the lesson JSON Schema is missing or cannot be compiled."""


class LoadError(ContentError):
    """Raised when a lesson could not be loaded within the retry budget."""

    def __init__(self, lesson_id: str, attempts: int, cause: BaseException | None = None):
        self.lesson_id = lesson_id
        self.attempts = attempts
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to load lesson {lesson_id} after {attempts} attempts{reason}")
