"""Channel-agnostic error classification for user-facing messages."""

import asyncio

from telegram.error import BadRequest, Forbidden, NetworkError, RetryAfter, TimedOut

from .transport import TransportError


def classify_error(e: Exception) -> str:
    """Classify a delivery failure into a user-friendly message.

    TransportError is unwrapped to its cause first. Returns a short
    string suitable for sending directly to the user.
    """
    if isinstance(e, TransportError) and e.cause is not None:
        e = e.cause

    # 1: Flood control
    if isinstance(e, RetryAfter):
        return f"Rate limited by Telegram. Please wait {int(_seconds(e.retry_after))}s and edit again."

    # 2: Missing rights (bot removed, can't delete others' messages, ...)
    if isinstance(e, Forbidden):
        return "Missing permission to update the replies in this chat."

    # 3: Message gone or rejected
    if isinstance(e, BadRequest):
        msg = str(e).lower()
        if "not found" in msg:
            return "A reply could not be found anymore. Send the command again."
        if "too long" in msg:
            return "A reply was too long to send."
        return "Telegram rejected a reply update."

    # 4-5: Timeouts before generic network errors (TimedOut is a NetworkError)
    if isinstance(e, (TimedOut, asyncio.TimeoutError)):
        return "Request timed out. Please try again."
    if isinstance(e, NetworkError):
        return "Cannot reach Telegram. Please try again later."

    # 6: Fallback — include type name for debugging
    type_name = type(e).__name__
    return f"Something went wrong ({type_name}). Check logs for details."


def _seconds(value) -> float:
    # retry_after is an int or a timedelta depending on library version
    return value.total_seconds() if hasattr(value, "total_seconds") else float(value)
