"""
Client SDK for the Castle risk-scoring API.

Only the authenticate pipeline is exposed: payload assembly, the sync and
async transports, and the failover policy applied when the API is unavailable.
"""

from castle_sdk.backend import AsyncAuthenticateBackend, AuthenticateBackend
from castle_sdk.client import CastleClient
from castle_sdk.errors import CastleRuntimeError, MalformedResponseError
from castle_sdk.models import (
    AsyncCallbackHandler,
    AuthenticateAction,
    FailoverStrategy,
    Verdict,
)
from castle_sdk.payloads import build_authenticate_payload
from castle_sdk.settings import Settings

__all__ = [
    "AsyncAuthenticateBackend",
    "AsyncCallbackHandler",
    "AuthenticateAction",
    "AuthenticateBackend",
    "CastleClient",
    "CastleRuntimeError",
    "FailoverStrategy",
    "MalformedResponseError",
    "Settings",
    "Verdict",
    "build_authenticate_payload",
]
