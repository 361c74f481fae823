"""Typed access to the shared cache for best-story ids and story details.

Three kinds of entries live in one ``TTLCache``:

* ``BEST_STORIES_KEY`` — the current ranked id list (short TTL)
* ``BEST_STORIES_BACKUP_KEY`` — the last successfully fetched id list
  (never expires; used only when the upstream list fetch fails)
* ``<story id>`` — one ``StoryDetail`` per story (long TTL)

Callers go through the accessors below so they never have to guess what
type a raw cache value holds.
"""

from beststories.models.story import StoryDetail
from beststories.services.cache import TTLCache

BEST_STORIES_KEY = "best-stories"
BEST_STORIES_BACKUP_KEY = "best-stories-backup"


class StoryCache:
    """Typed facade over a ``TTLCache`` shared by every request."""

    def __init__(
        self,
        cache: TTLCache,
        ids_ttl: float = 60,
        story_ttl: float = 4 * 3600,
    ) -> None:
        self.cache = cache
        self.ids_ttl = ids_ttl
        self.story_ttl = story_ttl

    def get_ids(self) -> list[int] | None:
        return self.cache.get(BEST_STORIES_KEY)

    def set_ids(self, ids: list[int]) -> None:
        self.cache.set(BEST_STORIES_KEY, list(ids), ttl=self.ids_ttl)

    def get_backup_ids(self) -> list[int] | None:
        return self.cache.get(BEST_STORIES_BACKUP_KEY)

    def set_backup_ids(self, ids: list[int]) -> None:
        self.cache.set(BEST_STORIES_BACKUP_KEY, list(ids))

    def get_story(self, story_id: int) -> StoryDetail | None:
        return self.cache.get(story_id)

    def set_story(self, story_id: int, story: StoryDetail) -> None:
        self.cache.set(story_id, story, ttl=self.story_ttl)

    def __len__(self) -> int:
        return len(self.cache)
