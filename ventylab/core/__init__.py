"""
Core Module - Shared infrastructure for the content tooling.

Components:
- schema_validator: Draft 7 JSON Schema validation of lesson documents
"""

from ventylab.core.schema_validator import LessonSchemaValidator, get_validator

__all__ = [
    "LessonSchemaValidator",
    "get_validator",
]
