"""
High-level Castle client used from request-handling code.

Callers pass an event name and user id; the client builds the payload and
delegates to the authenticate backend.
"""

import logging
from concurrent.futures import Future
from typing import Any

from castle_sdk.backend import AuthenticateBackend
from castle_sdk.models import AsyncCallbackHandler, Verdict
from castle_sdk.payloads import build_authenticate_payload
from castle_sdk.settings import Settings

logger = logging.getLogger(__name__)


class CastleClient:
    """Typed wrapper around the authenticate backend."""

    def __init__(self, backend: AuthenticateBackend) -> None:
        self._backend = backend

    @classmethod
    def from_settings(cls, settings: Settings) -> "CastleClient":
        """Factory that builds the client from Settings."""
        logger.debug(
            "Creating Castle client",
            extra={
                "base_url": settings.base_url,
                "throw_on_failure": settings.failover_strategy.throw_on_failure,
            },
        )
        return cls(AuthenticateBackend.from_settings(settings))

    def close(self) -> None:
        self._backend.close()

    def authenticate(
        self,
        event: str,
        user_id: str | None,
        *,
        traits: Any = None,
        properties: Any = None,
    ) -> Verdict:
        """Authenticate a user event, blocking until a verdict is available."""
        payload = build_authenticate_payload(event, user_id, traits, properties)
        return self._backend.authenticate_sync(payload)

    def authenticate_async(
        self,
        event: str,
        user_id: str | None,
        callback: AsyncCallbackHandler,
        *,
        traits: Any = None,
        properties: Any = None,
    ) -> "Future[Verdict]":
        """
        Authenticate without blocking; the result arrives through ``callback``.

        An empty ``event`` raises ``ValueError`` here, on the calling thread,
        before any request is submitted. Every other outcome is delivered to
        ``callback``.
        """
        payload = build_authenticate_payload(event, user_id, traits, properties)
        return self._backend.authenticate_async(payload, callback)

    def __enter__(self) -> "CastleClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
