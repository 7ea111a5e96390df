"""
Authenticate transport for the Castle API.

The blocking and thread-pool paths live on ``AuthenticateBackend``; asyncio
hosts use ``AsyncAuthenticateBackend``. Both hand responses to
``extract_authentication_action`` and apply the same failover policy to
network failures and 5xx responses.
"""

import json
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from castle_sdk.errors import CastleRuntimeError, MalformedResponseError, format_response_error
from castle_sdk.http_client import create_async_castle_client, create_castle_client
from castle_sdk.models import AsyncCallbackHandler, FailoverStrategy, Verdict, VerdictTransportModel
from castle_sdk.payloads import user_id_from_payload
from castle_sdk.settings import Settings

logger = logging.getLogger(__name__)

AUTHENTICATE_PATH = "/v1/authenticate"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
INVALID_JSON_REASON = "Invalid JSON in response"

_T = TypeVar("_T")


def _request_options(payload: Mapping[str, Any]) -> dict[str, Any]:
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return {"content": body, "headers": {"Content-Type": JSON_CONTENT_TYPE}}


def _parse_transport(body: str) -> VerdictTransportModel | None:
    try:
        return VerdictTransportModel.model_validate_json(body)
    except ValidationError:
        return None


def extract_authentication_action(
    response: httpx.Response,
    user_id: str | None,
    strategy: FailoverStrategy,
    *,
    log: logging.Logger = logger,
) -> Verdict:
    """
    Turn an authenticate response into a verdict, a failover verdict or an error.

    A 2xx response must carry both ``action`` and ``user_id``; anything less is
    a malformed response and is never recovered by failover. 5xx responses
    fall back to the strategy's default action unless it is set to throw.
    """
    reason = response.reason_phrase
    body = response.text
    malformed = False

    if response.is_success:
        transport = _parse_transport(body)
        if transport is not None and transport.action is not None and transport.user_id is not None:
            return Verdict.from_transport(transport)
        reason = INVALID_JSON_REASON
        malformed = True

    if response.is_server_error and not strategy.throw_on_failure:
        log.warning(
            "Castle API server error, using failover verdict",
            extra={
                "status_code": response.status_code,
                "default_action": strategy.default_action.value,
            },
        )
        return Verdict.failover(reason, action=strategy.default_action, user_id=user_id)

    if malformed:
        log.warning(
            "Castle API returned a success response without a usable verdict",
            extra={"status_code": response.status_code, "content": body[:512]},
        )
    else:
        log.warning(
            "Castle API responded with error",
            extra={"status_code": response.status_code, "content": body[:512]},
        )
    message = format_response_error(response.status_code, reason, body)
    if malformed:
        raise MalformedResponseError(message)
    raise CastleRuntimeError(message)


def _network_failure(
    message: str,
    exc: httpx.RequestError,
    user_id: str | None,
    strategy: FailoverStrategy,
    log: logging.Logger,
) -> Verdict:
    log.error(message, extra={"path": AUTHENTICATE_PATH}, exc_info=exc)
    if strategy.throw_on_failure:
        raise CastleRuntimeError(f"{message} {exc!s}".strip()) from exc
    return Verdict.failover(str(exc), action=strategy.default_action, user_id=user_id)


class AuthenticateBackend:
    """
    Blocking authenticate transport with a thread-pool async variant.

    ``authenticate_async`` runs the blocking pipeline on a worker thread and
    reports the outcome through the callback and the returned future.
    """

    def __init__(
        self,
        client: httpx.Client,
        failover_strategy: FailoverStrategy,
        *,
        executor: ThreadPoolExecutor | None = None,
        max_workers: int = 4,
        log: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._failover_strategy = failover_strategy
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="castle-authenticate",
        )
        self._logger = log or logger

    @classmethod
    def from_settings(cls, settings: Settings, *, log: logging.Logger | None = None) -> "AuthenticateBackend":
        """Factory that builds the backend from Settings."""
        return cls(
            create_castle_client(settings),
            settings.failover_strategy,
            max_workers=settings.max_async_workers,
            log=log,
        )

    @property
    def failover_strategy(self) -> FailoverStrategy:
        return self._failover_strategy

    def close(self) -> None:
        """Wait for in-flight async calls, then release HTTP resources."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._client.close()

    def authenticate_sync(self, payload: Mapping[str, Any]) -> Verdict:
        user_id = user_id_from_payload(payload)
        self._logger.debug(
            "Sending authenticate request",
            extra={"event": payload.get("event"), "user_id": user_id},
        )
        try:
            response = self._client.post(AUTHENTICATE_PATH, **_request_options(payload))
        except httpx.TimeoutException as exc:
            return _network_failure(
                "Castle authenticate request timed out.",
                exc,
                user_id,
                self._failover_strategy,
                self._logger,
            )
        except httpx.RequestError as exc:
            return _network_failure(
                "Castle authenticate request failed.",
                exc,
                user_id,
                self._failover_strategy,
                self._logger,
            )
        return extract_authentication_action(
            response, user_id, self._failover_strategy, log=self._logger
        )

    def authenticate_async(
        self,
        payload: Mapping[str, Any],
        callback: AsyncCallbackHandler,
    ) -> "Future[Verdict]":
        """
        Run ``authenticate_sync`` on a worker thread.

        Exactly one of ``callback.on_response`` / ``callback.on_exception`` is
        called, on the worker thread. Nothing is raised on the calling thread.
        """
        try:
            return self._executor.submit(self._deliver, payload, callback)
        except RuntimeError as exc:
            # Raised by submit() once the pool has been shut down.
            error = CastleRuntimeError("Castle authenticate backend is closed.")
            error.__cause__ = exc
            future: Future[Verdict] = Future()
            future.set_exception(error)
            self._notify(callback.on_exception, error)
            return future

    def _authenticate_wrapped(self, payload: Mapping[str, Any]) -> Verdict:
        try:
            return self.authenticate_sync(payload)
        except CastleRuntimeError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CastleRuntimeError(f"Unexpected error during authenticate: {exc!s}") from exc

    def _deliver(self, payload: Mapping[str, Any], callback: AsyncCallbackHandler) -> Verdict:
        try:
            verdict = self._authenticate_wrapped(payload)
        except CastleRuntimeError as exc:
            self._notify(callback.on_exception, exc)
            raise
        self._notify(callback.on_response, verdict)
        return verdict

    def _notify(self, handler: Callable[[_T], None], value: _T) -> None:
        try:
            handler(value)
        except Exception:  # noqa: BLE001
            self._logger.exception("Authenticate callback raised")

    def __enter__(self) -> "AuthenticateBackend":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(slots=True)
class AsyncAuthenticateBackend:
    """Authenticate transport around a shared AsyncClient."""

    _client: httpx.AsyncClient
    failover_strategy: FailoverStrategy = field(default_factory=FailoverStrategy)
    log: logging.Logger = logger

    @classmethod
    def from_settings(cls, settings: Settings) -> "AsyncAuthenticateBackend":
        """Factory that builds the backend from Settings."""
        return cls(create_async_castle_client(settings), settings.failover_strategy)

    async def aclose(self) -> None:
        """Close the underlying HTTP resources."""
        await self._client.aclose()

    async def authenticate(self, payload: Mapping[str, Any]) -> Verdict:
        user_id = user_id_from_payload(payload)
        self.log.debug(
            "Sending authenticate request",
            extra={"event": payload.get("event"), "user_id": user_id},
        )
        try:
            response = await self._client.post(AUTHENTICATE_PATH, **_request_options(payload))
        except httpx.TimeoutException as exc:
            return _network_failure(
                "Castle authenticate request timed out.",
                exc,
                user_id,
                self.failover_strategy,
                self.log,
            )
        except httpx.RequestError as exc:
            return _network_failure(
                "Castle authenticate request failed.",
                exc,
                user_id,
                self.failover_strategy,
                self.log,
            )
        return extract_authentication_action(
            response, user_id, self.failover_strategy, log=self.log
        )
