import json
import logging
import threading
from typing import Any

import httpx
import pytest

from castle_sdk.backend import AuthenticateBackend
from castle_sdk.client import CastleClient
from castle_sdk.errors import CastleRuntimeError
from castle_sdk.models import AuthenticateAction, FailoverStrategy, Verdict


def _build_client(handler: httpx.MockTransport, strategy: FailoverStrategy) -> CastleClient:
    http_client = httpx.Client(transport=handler, base_url="http://mock.local")
    return CastleClient(AuthenticateBackend(http_client, strategy))


def test_authenticate_sends_built_payload() -> None:
    seen: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content.decode()))
        return httpx.Response(200, json={"action": "deny", "user_id": "12345"})

    with _build_client(httpx.MockTransport(handler), FailoverStrategy.throw()) as client:
        verdict = client.authenticate(
            "$login.succeeded",
            "12345",
            properties={"ip": "203.0.113.7"},
        )
    assert verdict.action is AuthenticateAction.DENY
    assert seen == [
        {"event": "$login.succeeded", "user_id": "12345", "properties": {"ip": "203.0.113.7"}}
    ]


def test_authenticate_raises_with_throw_strategy() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("mock timeout", request=request)

    with _build_client(httpx.MockTransport(handler), FailoverStrategy.throw()) as client:
        with pytest.raises(CastleRuntimeError):
            client.authenticate("$login.succeeded", "12345")


def test_authenticate_async_delivers_to_callback() -> None:
    received: list[Verdict] = []
    done = threading.Event()

    class Callback:
        def on_response(self, verdict: Verdict) -> None:
            received.append(verdict)
            done.set()

        def on_exception(self, exc: BaseException) -> None:
            done.set()
            raise AssertionError(f"unexpected exception: {exc}")

    handler = httpx.MockTransport(lambda request: httpx.Response(500))
    with _build_client(handler, FailoverStrategy.with_default("challenge")) as client:
        future = client.authenticate_async("$login.failed", "12345", Callback())
        assert done.wait(timeout=5)
        assert future.result(timeout=5) == received[0]
    assert received[0].action is AuthenticateAction.CHALLENGE
    assert received[0].is_failover is True


def test_anonymous_authenticate_warns_once(caplog: pytest.LogCaptureFixture) -> None:
    handler = httpx.MockTransport(lambda request: httpx.Response(500))
    with _build_client(handler, FailoverStrategy.with_default("allow")) as client:
        with caplog.at_level(logging.WARNING, logger="castle_sdk.payloads"):
            verdict = client.authenticate("$login.succeeded", None)
    assert verdict.user_id is None
    assert caplog.text.count("user_id null") == 1


def test_authenticate_async_rejects_empty_event_on_caller() -> None:
    calls: list[object] = []

    class Callback:
        def on_response(self, verdict: Verdict) -> None:
            calls.append(verdict)

        def on_exception(self, exc: BaseException) -> None:
            calls.append(exc)

    handler = httpx.MockTransport(lambda request: httpx.Response(200))
    with _build_client(handler, FailoverStrategy.throw()) as client:
        with pytest.raises(ValueError):
            client.authenticate_async("", "12345", Callback())
    assert calls == []
