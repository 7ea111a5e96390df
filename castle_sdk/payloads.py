"""Request payload assembly for the authenticate endpoint."""

import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_NULL_USER_ID_WARNING = "Authenticate called with user_id null. Is this correct?"


def build_authenticate_payload(
    event: str,
    user_id: str | None,
    traits: Any = None,
    properties: Any = None,
) -> dict[str, Any]:
    """
    Build the JSON body of an authenticate request.

    ``traits`` and ``properties`` are passed through untouched and only
    included when given. A missing user id is allowed (anonymous
    authentication) but logged.
    """
    if not isinstance(event, str) or not event.strip():
        raise ValueError("event must be a non-empty string.")
    if user_id is None:
        logger.warning(_NULL_USER_ID_WARNING, extra={"event": event})

    payload: dict[str, Any] = {"event": event, "user_id": user_id}
    if traits is not None:
        payload["traits"] = traits
    if properties is not None:
        payload["properties"] = properties
    return payload


def user_id_from_payload(payload: Mapping[str, Any]) -> str | None:
    """
    Read the user id back from a built payload; ``None`` when absent.

    Only a missing key is logged here; an explicit null was already reported
    by ``build_authenticate_payload``.
    """
    if "user_id" not in payload:
        logger.warning(_NULL_USER_ID_WARNING)
        return None
    value = payload["user_id"]
    return None if value is None else str(value)
