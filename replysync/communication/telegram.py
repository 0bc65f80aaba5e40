"""Telegram transport — deliver, edit and delete bot replies via python-telegram-bot."""

import logging
from collections import defaultdict
from typing import NamedTuple, Sequence

from telegram import Bot, ReplyParameters
from telegram.error import BadRequest, TelegramError

from .formatting import markdown_to_telegram_html
from .transport import Transport, TransportError

logger = logging.getLogger("replysync.telegram")

# deleteMessages accepts at most 100 ids per call
_DELETE_BATCH = 100


class MessageRef(NamedTuple):
    """A Telegram message; ids are only unique within a chat."""
    chat_id: int
    message_id: int


class TelegramTransport(Transport):
    """Transport backed by a Telegram Bot.

    Content is markdown with fenced code blocks; it is sent as HTML and
    falls back to plain text when Telegram cannot parse the markup.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send_as_reply(self, channel: int, source_id: MessageRef, content: str) -> MessageRef:
        reply = ReplyParameters(message_id=source_id.message_id, allow_sending_without_reply=True)
        return await self._send(channel, content, reply)

    async def send_plain(self, channel: int, content: str) -> MessageRef:
        return await self._send(channel, content, None)

    async def _send(self, chat_id: int, content: str, reply: ReplyParameters | None) -> MessageRef:
        try:
            try:
                msg = await self.bot.send_message(
                    chat_id=chat_id,
                    text=markdown_to_telegram_html(content),
                    parse_mode="HTML",
                    reply_parameters=reply,
                )
            except BadRequest as e:
                if not _is_parse_error(e):
                    raise
                logger.debug(f"HTML rejected for chat {chat_id}, sending plain text: {e}")
                msg = await self.bot.send_message(
                    chat_id=chat_id,
                    text=content,
                    reply_parameters=reply,
                )
        except TelegramError as e:
            raise TransportError(f"send to chat {chat_id} failed: {e}", cause=e) from e
        return MessageRef(msg.chat_id, msg.message_id)

    async def edit(self, output_id: MessageRef, content: str) -> None:
        chat_id, message_id = output_id
        try:
            try:
                await self.bot.edit_message_text(
                    text=markdown_to_telegram_html(content),
                    chat_id=chat_id,
                    message_id=message_id,
                    parse_mode="HTML",
                )
            except BadRequest as e:
                if _is_not_modified(e):
                    return
                if not _is_parse_error(e):
                    raise
                await self.bot.edit_message_text(text=content, chat_id=chat_id, message_id=message_id)
        except TelegramError as e:
            raise TransportError(f"edit of {output_id} failed: {e}", cause=e) from e

    async def delete(self, output_ids: Sequence[MessageRef]) -> None:
        by_chat: dict[int, list[int]] = defaultdict(list)
        for chat_id, message_id in output_ids:
            by_chat[chat_id].append(message_id)

        for chat_id, message_ids in by_chat.items():
            for start in range(0, len(message_ids), _DELETE_BATCH):
                batch = message_ids[start:start + _DELETE_BATCH]
                try:
                    await self.bot.delete_messages(chat_id=chat_id, message_ids=batch)
                except TelegramError as e:
                    raise TransportError(f"delete in chat {chat_id} failed: {e}", cause=e) from e
                logger.debug(f"Deleted {len(batch)} message(s) in chat {chat_id}")

    async def retrieve(self, output_id: MessageRef) -> MessageRef:
        # The Bot API cannot fetch a message by id; the reference is the handle
        return output_id


def _is_parse_error(e: BadRequest) -> bool:
    return "parse" in str(e).lower()


def _is_not_modified(e: BadRequest) -> bool:
    return "not modified" in str(e).lower()
