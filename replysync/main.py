"""replysync — Main entry point."""

import asyncio
import logging
import os
import signal

from .config import load_settings
from .channels.telegram import TelegramChannel

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("replysync")


def setup_logging(log_file: str, debug: bool = False):
    """Log to stderr and to log_file."""
    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=[
            logging.StreamHandler(),                                          # stderr (console)
            logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"),
        ],
    )
    # httpx logs every Bot API request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    if debug:
        logger.setLevel(logging.DEBUG)


async def run(debug: bool = False):
    """Main run loop."""
    settings = load_settings()
    setup_logging(settings.log_file, debug or settings.debug)

    if not settings.telegram_bot_token:
        logger.error("No Telegram bot token configured. Set REPLYSYNC_TELEGRAM_BOT_TOKEN.")
        return

    telegram = TelegramChannel(settings)
    stop_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            pass  # Windows

    try:
        await telegram.start()
        logger.info(f"Tracking '{settings.command}' messages (max {settings.unit_max_size} chars per reply).")
        await stop_event.wait()
    finally:
        logger.info("Shutting down...")
        await telegram.stop()
