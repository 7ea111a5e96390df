import logging

import pytest

from castle_sdk.payloads import build_authenticate_payload, user_id_from_payload


def test_payload_contains_only_given_keys() -> None:
    payload = build_authenticate_payload("$login.succeeded", "12345")
    assert payload == {"event": "$login.succeeded", "user_id": "12345"}


def test_payload_includes_traits_and_properties() -> None:
    payload = build_authenticate_payload(
        "$login.failed",
        "12345",
        traits={"email": "user@example.com"},
        properties={"attempts": 3},
    )
    assert payload["traits"] == {"email": "user@example.com"}
    assert payload["properties"] == {"attempts": 3}


def test_null_user_id_warns_but_proceeds(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="castle_sdk.payloads"):
        payload = build_authenticate_payload("$login.succeeded", None)
    assert payload == {"event": "$login.succeeded", "user_id": None}
    assert "user_id null" in caplog.text


@pytest.mark.parametrize("event", ["", "   "])
def test_empty_event_is_rejected(event: str) -> None:
    with pytest.raises(ValueError):
        build_authenticate_payload(event, "12345")


def test_user_id_from_payload() -> None:
    assert user_id_from_payload({"user_id": "abc"}) == "abc"
    assert user_id_from_payload({"user_id": 42}) == "42"
    assert user_id_from_payload({"event": "$login.succeeded"}) is None
    assert user_id_from_payload({"user_id": None}) is None


def test_explicit_null_user_id_is_not_reported_again(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="castle_sdk.payloads"):
        assert user_id_from_payload({"event": "$login.succeeded", "user_id": None}) is None
    assert "user_id null" not in caplog.text
