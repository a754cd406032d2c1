"""Interaction gate configuration from environment variables."""

from __future__ import annotations

import os


class Settings:
    """Gate settings, read from environment variables with defaults."""

    def __init__(self) -> None:
        self.public_key: str | None = os.getenv("DISCORD_PUBLIC_KEY") or None
        self.interactions_path: str = os.getenv(
            "DISCORD_INTERACTIONS_PATH", "/interactions"
        )
        self.log_level: str = os.getenv("DISCORD_LOG_LEVEL", "INFO").upper()
        self.debug: bool = os.getenv("DISCORD_DEBUG", "").lower() in ("1", "true", "yes")
