"""Shared HTTP client utilities — reusable httpx client."""

import logging
from typing import Any

import httpx

from beststories.config import get_settings

logger = logging.getLogger(__name__)

# Module-level shared client (created lazily, lives for the process lifetime)
_client: httpx.AsyncClient | None = None


def get_shared_client() -> httpx.AsyncClient:
    """Return a shared httpx.AsyncClient, creating it on first call."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(timeout=get_settings().http_timeout)
    return _client


async def close_shared_client() -> None:
    """Close the shared client, if one was created."""
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
    _client = None


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    context: str = "",
) -> Any | None:
    """GET *url* and return the parsed JSON body.

    Returns None on a non-200 status, a transport error, or an unparseable
    body so callers can apply their own fallback.  Cancellation is not
    caught and propagates to the caller.
    """
    suffix = f" ({context})" if context else ""
    try:
        resp = await client.get(url)
        if resp.status_code != 200:
            logger.warning("Upstream %d for %s%s", resp.status_code, url, suffix)
            return None
        return resp.json()
    except httpx.HTTPError as e:
        logger.warning("Upstream request failed for %s%s: %s", url, suffix, e)
        return None
    except ValueError:
        logger.exception("Upstream returned invalid JSON for %s%s", url, suffix)
        return None
