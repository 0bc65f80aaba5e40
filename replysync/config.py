"""replysync configuration management."""

import logging

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional

from .communication.segmenter import CODE_BLOCK_OVERHEAD

logger = logging.getLogger("replysync.config")


class ReplySyncSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")

    # Command
    command: str = Field(default="/bytecode", description="Command prefix that marks a tracked message")

    # Limits — Telegram rejects messages over 4096 characters
    unit_max_size: int = Field(default=4096, description="Maximum characters per output message")

    # Logging
    log_file: str = Field(default="~/replysync.log", description="Log file path")
    debug: bool = Field(default=False, description="Debug mode")

    model_config = {"env_prefix": "REPLYSYNC_", "env_file": ".env", "extra": "ignore"}


def load_settings(**overrides) -> ReplySyncSettings:
    """Load settings from environment."""
    settings = ReplySyncSettings(**overrides)

    # A message must hold the code fence plus at least one character
    minimum = CODE_BLOCK_OVERHEAD + 1
    if settings.unit_max_size < minimum:
        logger.warning(
            f"unit_max_size={settings.unit_max_size} cannot hold a code block; "
            f"using {minimum} instead"
        )
        settings.unit_max_size = minimum

    return settings
