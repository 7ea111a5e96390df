"""HTTP client factories for the Castle API."""

from typing import Any

import httpx

from castle_sdk.settings import Settings


def _client_options(settings: Settings) -> dict[str, Any]:
    # The API authenticates with basic auth: empty username, secret as password.
    return {
        "base_url": settings.base_url,
        "timeout": settings.timeout,
        "auth": httpx.BasicAuth("", settings.api_secret),
        "headers": {"Accept": "application/json"},
    }


def create_castle_client(settings: Settings) -> httpx.Client:
    """
    Build a blocking Client for the Castle API.

    The same instance serves the sync path and the thread-pool async path;
    httpx clients are safe to share across threads.
    """
    return httpx.Client(**_client_options(settings))


def create_async_castle_client(settings: Settings) -> httpx.AsyncClient:
    """Build an AsyncClient for asyncio hosts."""
    return httpx.AsyncClient(**_client_options(settings))
