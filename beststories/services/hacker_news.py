"""Hacker News upstream client — best story ids and item details."""

import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from beststories.config import Settings
from beststories.services.http_client import get_json

logger = logging.getLogger(__name__)

_ID_LIST = TypeAdapter(list[int])


class HackerNewsClient:
    """Thin wrapper around the two Hacker News endpoints this service uses.

    Both methods return None on any upstream failure (transport error,
    non-200 status, undecodable body) and log the reason; callers decide
    what to fall back to.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        best_stories_endpoint: str = "beststories.json",
        story_details_endpoint: str = "item/{id}.json",
    ) -> None:
        self._http = http
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._best_stories_endpoint = best_stories_endpoint
        self._story_details_endpoint = story_details_endpoint

    @classmethod
    def from_settings(cls, http: httpx.AsyncClient, settings: Settings) -> "HackerNewsClient":
        return cls(
            http,
            settings.hacker_news_base_url,
            settings.best_stories_endpoint,
            settings.story_details_endpoint,
        )

    @property
    def best_stories_url(self) -> str:
        return self._base_url + self._best_stories_endpoint.lstrip("/")

    def item_url(self, item_id: int) -> str:
        return self._base_url + self._story_details_endpoint.lstrip("/").format(id=item_id)

    async def fetch_best_story_ids(self) -> list[int] | None:
        """Fetch the ranked best-story id list, best first."""
        data = await get_json(self._http, self.best_stories_url, context="best stories")
        if data is None:
            return None
        try:
            return _ID_LIST.validate_python(data)
        except ValidationError:
            logger.warning("Best stories payload is not a list of ids: %.200r", data)
            return None

    async def fetch_item(self, item_id: int) -> Any | None:
        """Fetch the raw JSON payload for one item."""
        return await get_json(self._http, self.item_url(item_id), context=f"item {item_id}")
