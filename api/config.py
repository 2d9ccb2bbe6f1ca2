"""
Application settings.

Read from environment variables (optionally from a .env file at the project root):
- AUCTION_STORE_BACKEND: "supabase" (default) or "memory"
- BID_MAX_ATTEMPTS: compare-and-swap retry budget per bid (default: 5)
- LOG_LEVEL: logging level name (default: INFO)
- CORS_ALLOW_ORIGINS: comma-separated origins (default: *)

Supabase credentials (SUPABASE_URL, SUPABASE_KEY) are read by repositories.client.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from services.bid_placement_service import DEFAULT_MAX_ATTEMPTS

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_BACKENDS = ("supabase", "memory")


@dataclass(frozen=True, slots=True)
class Settings:
    store_backend: str
    bid_max_attempts: int
    log_level: str
    cors_allow_origins: List[str]

    @staticmethod
    def from_env() -> "Settings":
        backend = os.getenv("AUCTION_STORE_BACKEND", "supabase").strip().lower()
        if backend not in _BACKENDS:
            raise RuntimeError(
                f"Invalid AUCTION_STORE_BACKEND: {backend!r}. Expected one of {', '.join(_BACKENDS)}."
            )

        raw_attempts = os.getenv("BID_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))
        try:
            attempts = int(raw_attempts)
        except ValueError:
            raise RuntimeError(f"BID_MAX_ATTEMPTS must be an integer, got {raw_attempts!r}") from None
        if attempts < 1:
            raise RuntimeError("BID_MAX_ATTEMPTS must be >= 1")

        origins = [
            origin.strip()
            for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        return Settings(
            store_backend=backend,
            bid_max_attempts=attempts,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_allow_origins=origins or ["*"],
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
