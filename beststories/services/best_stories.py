"""Best stories read-through cache.

Resolves a page of best stories from the shared cache, falling through to
the Hacker News API on misses:

1. The ranked id list comes from the short-lived cache entry, else a fresh
   upstream fetch (which also refreshes the backup list), else the backup
   list, else nothing.
2. The requested page window is cut from the id list.
3. Cached story details are used as-is; the rest are fetched concurrently,
   and only successful fetches are cached.
4. The page is sorted by score, highest first.

Upstream failures never reach the caller — the worst case is a stale or
partial page.  The only error raised is ``InvalidPageRequest``.
"""

import asyncio
import logging

from pydantic import ValidationError

from beststories.config import get_settings
from beststories.models.story import StoryDetail, decode_story
from beststories.services.cache import TTLCache
from beststories.services.hacker_news import HackerNewsClient
from beststories.services.http_client import get_shared_client
from beststories.services.story_cache import StoryCache

logger = logging.getLogger(__name__)


class InvalidPageRequest(ValueError):
    """Raised when page size or page number is below 1."""


class BestStoriesService:
    """Serves score-ordered pages of best stories through a shared cache."""

    def __init__(
        self,
        cache: StoryCache,
        client: HackerNewsClient,
        fetch_timeout: float | None = None,
    ) -> None:
        self.cache = cache
        self.client = client
        self.fetch_timeout = fetch_timeout

    async def get_page(self, page_size: int, page: int) -> list[StoryDetail]:
        """Return one page of best stories, sorted by score descending.

        Pagination applies to the upstream ranking, so page 2 is the next
        *page_size* ranked ids, sorted among themselves by score.
        """
        if page_size < 1 or page < 1:
            raise InvalidPageRequest("pageSize and page must both be at least 1")

        story_ids = await self._resolve_story_ids()
        start = (page - 1) * page_size
        window = list(dict.fromkeys(story_ids[start : start + page_size]))

        stories: list[StoryDetail] = []
        missing: list[int] = []
        for story_id in window:
            cached = self.cache.get_story(story_id)
            if cached is not None:
                stories.append(cached)
            else:
                missing.append(story_id)

        if missing:
            fetched = await self._fetch_details(missing)
            for story_id, story in fetched:
                self.cache.set_story(story_id, story)
                stories.append(story)
            logger.debug(
                "Page %d: %d cached, %d fetched, %d dropped",
                page,
                len(window) - len(missing),
                len(fetched),
                len(missing) - len(fetched),
            )

        stories.sort(key=lambda s: s.score, reverse=True)
        return stories

    async def _resolve_story_ids(self) -> list[int]:
        """Return the ranked id list from cache, upstream, or the backup copy."""
        cached = self.cache.get_ids()
        if cached is not None:
            return cached

        fresh = await self.client.fetch_best_story_ids()
        if fresh is not None:
            self.cache.set_ids(fresh)
            self.cache.set_backup_ids(fresh)
            return fresh

        backup = self.cache.get_backup_ids()
        if backup is None:
            logger.warning("Best stories unavailable and no backup list cached")
            return []

        logger.warning("Serving backup best stories list (%d ids)", len(backup))
        # Re-arm the short-lived entry so the next requests skip the network
        self.cache.set_ids(backup)
        return backup

    async def _fetch_details(self, story_ids: list[int]) -> list[tuple[int, StoryDetail]]:
        """Fetch details for *story_ids* concurrently and join the results.

        Waits for every fetch unless ``fetch_timeout`` is set, in which case
        fetches still running at the deadline are cancelled and dropped while
        the completed ones are kept.
        """
        tasks = [
            asyncio.create_task(self.fetch_detail(story_id), name=f"story-{story_id}")
            for story_id in story_ids
        ]
        try:
            _done, pending = await asyncio.wait(tasks, timeout=self.fetch_timeout)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        if pending:
            logger.warning(
                "Cancelling %d story fetches still running after %.1fs",
                len(pending),
                self.fetch_timeout,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        results: list[tuple[int, StoryDetail]] = []
        for task in tasks:
            if task.cancelled():
                continue
            exc = task.exception()
            if exc is not None:
                logger.error("Story fetch %s failed", task.get_name(), exc_info=exc)
                continue
            result = task.result()
            if result is not None:
                results.append(result)
        return results

    async def fetch_detail(self, story_id: int) -> tuple[int, StoryDetail] | None:
        """Fetch and decode one story.

        Returns ``(story_id, story)`` on success and None on any upstream or
        decode failure (bad status, transport error, malformed payload,
        out-of-range timestamp).  No other exception escapes.

        Cancellation is the one exception: it is logged and then re-raised
        so ``asyncio`` timeouts and task cancellation keep working.  The
        join in ``_fetch_details`` treats a cancelled fetch exactly like one
        that returned None, so it is never cached and never on the page.
        """
        try:
            payload = await self.client.fetch_item(story_id)
        except asyncio.CancelledError:
            logger.info("Request was cancelled for story %d", story_id)
            raise

        if payload is None:
            logger.info("No details returned for story %d", story_id)
            return None

        try:
            story = decode_story(payload)
        except ValidationError as e:
            logger.warning("Could not decode story %d: %s", story_id, e)
            return None
        return story_id, story


# Lazy singleton — one cache for the process lifetime
_service: BestStoriesService | None = None


def get_best_stories_service() -> BestStoriesService:
    """Return the process-wide service, building its cache and client on first call."""
    global _service
    if _service is None:
        settings = get_settings()
        cache = StoryCache(
            TTLCache(max_size=settings.cache_max_size),
            ids_ttl=settings.best_stories_cache_minutes * 60,
            story_ttl=settings.cache_expiration_hours * 3600,
        )
        client = HackerNewsClient.from_settings(get_shared_client(), settings)
        _service = BestStoriesService(cache, client, settings.detail_fetch_timeout)
    return _service


def reset_best_stories_service() -> None:
    """Drop the singleton so the next call rebuilds it (cache included)."""
    global _service
    _service = None
