"""Shared fixtures for best stories tests."""

import asyncio
import re

import httpx
import pytest

from beststories.services.best_stories import BestStoriesService
from beststories.services.cache import TTLCache
from beststories.services.hacker_news import HackerNewsClient
from beststories.services.story_cache import StoryCache

HN_BASE = "https://hn.test/v0/"

_ITEM_PATH = re.compile(r"/item/(\d+)\.json$")


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHackerNews:
    """In-process stand-in for the Hacker News API, served via MockTransport.

    ``best_ids = None`` makes the list endpoint unreachable; ids in
    ``down_items`` raise a transport error; ids in ``slow_items`` hang until
    cancelled; ids missing from ``items`` return 404.
    """

    def __init__(self) -> None:
        self.best_ids: list[int] | None = None
        self.best_status = 200
        self.items: dict[int, object] = {}
        self.down_items: set[int] = set()
        self.slow_items: set[int] = set()
        self.calls: list[str] = []

    @property
    def item_calls(self) -> list[str]:
        return [c for c in self.calls if "/item/" in c]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.calls.append(path)

        if path.endswith("/beststories.json"):
            if self.best_ids is None:
                raise httpx.ConnectError("upstream down", request=request)
            return httpx.Response(self.best_status, json=self.best_ids)

        match = _ITEM_PATH.search(path)
        if match is None:
            return httpx.Response(404)
        item_id = int(match.group(1))
        if item_id in self.down_items:
            raise httpx.ConnectError("item down", request=request)
        if item_id in self.slow_items:
            await asyncio.sleep(30)
        if item_id not in self.items:
            return httpx.Response(404, json={"error": "not found"})
        return httpx.Response(200, json=self.items[item_id])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def story_cache(clock):
    return StoryCache(TTLCache(clock=clock), ids_ttl=60, story_ttl=4 * 3600)


@pytest.fixture
def hacker_news():
    return FakeHackerNews()


@pytest.fixture
async def http_client(hacker_news):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(hacker_news.handler)
    ) as client:
        yield client


@pytest.fixture
def hn_base():
    return HN_BASE


@pytest.fixture
def hacker_news_client(http_client):
    return HackerNewsClient(http_client, HN_BASE)


@pytest.fixture
def make_service(story_cache, hacker_news_client):
    """Build a BestStoriesService over the shared test cache and fake upstream."""

    def _make(fetch_timeout=None):
        return BestStoriesService(story_cache, hacker_news_client, fetch_timeout)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons between tests."""
    yield

    # 1. Settings LRU cache
    from beststories.config import get_settings

    get_settings.cache_clear()

    # 2. HTTP client singleton
    import beststories.services.http_client as http_mod

    http_mod._client = None

    # 3. Best stories service (and its cache)
    import beststories.services.best_stories as best_mod

    best_mod._service = None

    # 4. Endpoint dependency overrides
    from beststories.main import app

    app.dependency_overrides.clear()


@pytest.fixture
def mock_settings(monkeypatch):
    """Provide a Settings object with safe test defaults."""
    from beststories.config import Settings, get_settings

    test_settings = Settings(
        hacker_news_base_url=HN_BASE,
        best_stories_endpoint="beststories.json",
        story_details_endpoint="item/{id}.json",
        best_stories_cache_minutes=1,
        cache_expiration_hours=4,
        http_timeout=5.0,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("beststories.config.get_settings", lambda: test_settings)

    # Modules that did ``from beststories.config import get_settings`` hold
    # their own binding, so patch those too
    for mod_path in [
        "beststories.services.http_client",
        "beststories.services.best_stories",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings
