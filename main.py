"""Command-line entry point: send one authenticate request and print the verdict."""

import argparse
import json
import logging
import os
import sys
from typing import Any

from castle_sdk.client import CastleClient
from castle_sdk.errors import CastleRuntimeError
from castle_sdk.settings import Settings


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _json_argument(value: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        raise argparse.ArgumentTypeError(f"not valid JSON: {exc}") from exc


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send a Castle authenticate request.")
    parser.add_argument("--event", required=True, help="Event name, e.g. '$login.succeeded'.")
    parser.add_argument("--user-id", help="User id; omitted for anonymous authentication.")
    parser.add_argument("--traits", type=_json_argument, help="User traits as a JSON object.")
    parser.add_argument("--properties", type=_json_argument, help="Event properties as a JSON object.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Load settings, authenticate once, print the verdict as JSON."""
    _configure_logging()
    logger = logging.getLogger("castle-sdk")
    args = _parse_args(argv)
    settings = Settings.load()

    with CastleClient.from_settings(settings) as client:
        try:
            verdict = client.authenticate(
                args.event,
                args.user_id,
                traits=args.traits,
                properties=args.properties,
            )
        except CastleRuntimeError:
            logger.exception("Authenticate request failed.")
            return 1

    print(json.dumps(verdict.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
