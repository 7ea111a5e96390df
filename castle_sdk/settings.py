"""Environment-driven configuration for the Castle SDK."""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from castle_sdk.models import FailoverStrategy

DEFAULT_BASE_URL = "https://api.castle.io"


@dataclass(frozen=True, slots=True)
class Settings:
    """Container for runtime configuration."""

    api_secret: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 0.5
    failover_strategy: FailoverStrategy = field(default_factory=FailoverStrategy)
    max_async_workers: int = 4

    @classmethod
    def load(cls) -> "Settings":
        """
        Load configuration from environment variables.

        Python-dotenv is used so developers can rely on a local .env file without
        exporting variables globally.
        """
        load_dotenv()

        api_secret = os.getenv("CASTLE_API_SECRET", "").strip()
        if not api_secret:
            raise ValueError("CASTLE_API_SECRET is required but was not provided.")

        base_url = os.getenv("CASTLE_BASE_URL", "").strip() or DEFAULT_BASE_URL

        timeout_raw = os.getenv("CASTLE_TIMEOUT", "").strip() or "0.5"
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ValueError("CASTLE_TIMEOUT must be a numeric value.") from exc
        if timeout <= 0:
            raise ValueError("CASTLE_TIMEOUT must be greater than zero.")

        strategy_raw = os.getenv("CASTLE_FAILOVER_STRATEGY", "").strip() or "allow"
        failover_strategy = FailoverStrategy.parse(strategy_raw)

        workers_raw = os.getenv("CASTLE_MAX_ASYNC_WORKERS", "").strip() or "4"
        try:
            max_async_workers = int(workers_raw)
        except ValueError as exc:
            raise ValueError("CASTLE_MAX_ASYNC_WORKERS must be an integer.") from exc
        if max_async_workers <= 0:
            raise ValueError("CASTLE_MAX_ASYNC_WORKERS must be greater than zero.")

        return cls(
            api_secret=api_secret,
            base_url=base_url,
            timeout=timeout,
            failover_strategy=failover_strategy,
            max_async_workers=max_async_workers,
        )
