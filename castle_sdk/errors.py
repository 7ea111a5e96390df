"""Errors raised by the authenticate pipeline."""


class CastleRuntimeError(RuntimeError):
    """Represents failures when communicating with the Castle API."""


class MalformedResponseError(CastleRuntimeError):
    """A successful response that does not carry a usable verdict."""


def format_response_error(status_code: int, reason: str, body: str) -> str:
    return f"Request error: server responded with code {status_code}. {reason}: `{body}`"
