"""
Content: lesson parsing, validation, normalization and loading.

Core modules:
- hasher: Content-identity digests of sections
- ordering: Section order validation
- normalizer: Legacy and flat-section formats -> LessonDocument
- paths: Lesson id -> storage path resolution
- cache: Bounded LRU cache of loaded lessons
- retry: Linear backoff retry policy
- sources: Bundled-asset and network content sources
- loader: Cache -> resolve -> fetch -> validate -> normalize
- linter: Duplicate content and title collision warnings
- batch: Whole-tree validation report
- manifest: Lessons manifest by curriculum level
- pages: Pages API (lessons migrated to the database)
"""

from .batch import BatchReport, IssueKind, LessonBatchValidator, PageCount, ValidationIssue
from .cache import MAX_CACHE_SIZE, LRUContentCache
from .errors import ContentError, FetchError, LessonDataError, LoadError, ParseError, SchemaLoadError
from .hasher import canonicalize, content_body, digest
from .linter import CollisionWarning, LessonFile, LintResult, WarningKind, lint
from .loader import LessonLoader, build_lesson_loader, validate_lesson_data
from .manifest import build_manifest
from .models import LessonContent, LessonDocument
from .normalizer import LessonVariant, detect_variant, normalize
from .ordering import OrderValidation, validate_sections_order
from .pages import PagesApiClient, page_to_lesson
from .paths import LessonPathResolver, PathTables
from .retry import RetryError, RetryPolicy
from .sources import BundledAssetSource, ContentSource, FallbackSource, NetworkSource, build_content_source

__all__ = [
    # Identity and structure
    "canonicalize",
    "content_body",
    "digest",
    "OrderValidation",
    "validate_sections_order",
    # Model and normalization
    "LessonDocument",
    "LessonContent",
    "LessonVariant",
    "detect_variant",
    "normalize",
    # Loading
    "LessonPathResolver",
    "PathTables",
    "LRUContentCache",
    "MAX_CACHE_SIZE",
    "RetryPolicy",
    "RetryError",
    "ContentSource",
    "BundledAssetSource",
    "NetworkSource",
    "FallbackSource",
    "build_content_source",
    "LessonLoader",
    "build_lesson_loader",
    "validate_lesson_data",
    "PagesApiClient",
    "page_to_lesson",
    # Batch tooling
    "LessonBatchValidator",
    "BatchReport",
    "IssueKind",
    "PageCount",
    "ValidationIssue",
    "CollisionWarning",
    "LessonFile",
    "LintResult",
    "WarningKind",
    "lint",
    "build_manifest",
    # Errors
    "ContentError",
    "ParseError",
    "FetchError",
    "LessonDataError",
    "LoadError",
    "SchemaLoadError",
]
