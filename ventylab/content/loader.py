"""
Lesson loader: cache check, path resolution, fetch, validation, normalization.

Each ``load`` call runs the steps strictly in order. A cache hit returns at
once. On a miss the fetch-validate-normalize sequence runs under the retry
policy and the result is cached under the requested lesson id. Callers only
ever see the final outcome: a LessonDocument or a LoadError.

Concurrent loads of the same uncached lesson are not coalesced; both run the
full sequence and the last cache insert wins.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from loguru import logger

from .cache import LRUContentCache
from .errors import LessonDataError, LoadError
from .models import LessonDocument
from .normalizer import normalize
from .pages import PagesApiClient
from .paths import LessonPathResolver, PathTables
from .retry import RetryError, RetryPolicy
from .sources import ContentSource, build_content_source

if TYPE_CHECKING:
    from config import Settings


def validate_lesson_data(raw: Any) -> None:
    """
    Minimal structural contract for fetched payloads.

    Raises:
        LessonDataError: If the payload is not an object, or looks canonical
            but lacks moduleId, title or an object-typed content
    """
    if not isinstance(raw, Mapping):
        raise LessonDataError("Lesson data must be a valid object")
    if raw.get("lessonId") and raw.get("content"):
        if not raw.get("moduleId"):
            raise LessonDataError("Missing required field 'moduleId'")
        if not raw.get("title"):
            raise LessonDataError("Missing required field 'title'")
        if not isinstance(raw["content"], Mapping):
            raise LessonDataError("Field 'content' must be an object")


class LessonLoader:
    """Load lessons by id through cache, resolver, content source and normalizer."""

    def __init__(
        self,
        source: ContentSource,
        cache: LRUContentCache[LessonDocument],
        resolver: LessonPathResolver | None = None,
        retry_policy: RetryPolicy | None = None,
        pages: PagesApiClient | None = None,
    ):
        """
        Initialize loader.

        Args:
            source: Where raw lesson JSON is fetched from
            cache: Cache shared by everything that loads through this loader
            resolver: Maps lesson ids to storage paths
            retry_policy: Attempt budget and backoff for the fetch sequence
            pages: Optional Pages API client consulted before the JSON files
        """
        self.source = source
        self.cache = cache
        self.resolver = resolver or LessonPathResolver()
        self.retry_policy = retry_policy or RetryPolicy()
        self.pages = pages

    async def load(self, lesson_id: str, module_id: str) -> LessonDocument:
        """
        Load one lesson.

        Args:
            lesson_id: Id the caller knows the lesson by; the returned
                document always carries this id
            module_id: Module of the lesson, used for path resolution and as
                a fallback moduleId

        Returns:
            The normalized lesson

        Raises:
            LoadError: When every attempt failed
        """
        logger.debug(f"Loading lesson {lesson_id} (module {module_id})")

        cached = self.cache.get(lesson_id)
        if cached is not None:
            logger.debug(f"Cache hit: {lesson_id}")
            return cached

        document = await self._load_from_pages(lesson_id)
        if document is None:
            path = self.resolver.resolve(lesson_id, module_id)
            document = await self._load_from_source(lesson_id, path)

        document = self._bind_ids(document, lesson_id, module_id)
        self.cache.set(lesson_id, document)
        logger.info(f"Loaded lesson {lesson_id}")
        return document

    def clear_cache(self) -> None:
        """Drop every cached lesson so the next load fetches fresh content."""
        self.cache.clear()

    async def aclose(self) -> None:
        """Release HTTP clients held by the source and the pages client."""
        close = getattr(self.source, "aclose", None)
        if close is not None:
            await close()
        if self.pages is not None:
            await self.pages.close()

    async def _load_from_pages(self, lesson_id: str) -> LessonDocument | None:
        if self.pages is None:
            return None
        try:
            return await self.pages.fetch_lesson(lesson_id)
        except Exception as e:
            logger.warning(f"Pages API lookup failed for {lesson_id}, using lesson JSON: {e}")
            return None

    async def _load_from_source(self, lesson_id: str, path: str) -> LessonDocument:
        async def attempt(number: int) -> LessonDocument:
            raw = await self.source.fetch(path)
            validate_lesson_data(raw)
            return normalize(raw)

        try:
            return await self.retry_policy.run(attempt, label=f"load {lesson_id} from {path}")
        except RetryError as e:
            logger.error(f"Giving up on lesson {lesson_id} after {e.attempts} attempts: {e.last_error}")
            raise LoadError(lesson_id, e.attempts, e.last_error) from e.last_error

    @staticmethod
    def _bind_ids(document: LessonDocument, lesson_id: str, module_id: str) -> LessonDocument:
        # files are shared between logical lessons, so the requested id wins
        update: dict[str, str] = {"lesson_id": lesson_id}
        if not document.module_id:
            update["module_id"] = module_id
        return document.model_copy(update=update)


def build_lesson_loader(settings: Settings) -> LessonLoader:
    """
    Wire a LessonLoader from settings.

    Args:
        settings: Application settings (see config.Settings)

    Returns:
        Loader with its own cache, resolver, source and retry policy; callers
        should ``await loader.aclose()`` when done
    """
    tables = PathTables.from_file(settings.path_tables_file) if settings.path_tables_file else None
    source = build_content_source(
        settings.content_source,
        content_root=settings.content_root,
        base_url=settings.content_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    pages = None
    if settings.pages_api_url:
        pages = PagesApiClient(settings.pages_api_url, timeout_seconds=settings.http_timeout_seconds)

    return LessonLoader(
        source=source,
        cache=LRUContentCache(settings.cache_max_size),
        resolver=LessonPathResolver(tables, lesson_prefix=settings.lesson_path_prefix),
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
        ),
        pages=pages,
    )
