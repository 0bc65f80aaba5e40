"""Telegram channel adapter — feeds new and edited messages into the engine."""

import logging
from typing import Optional

from telegram import BotCommand, Update
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from ..commands import is_tracked_form
from ..communication.telegram import MessageRef, TelegramTransport
from ..config import ReplySyncSettings
from ..engine import EventKind, SourceEvent, SyncEngine
from ..processor import BytecodeProcessor

logger = logging.getLogger("replysync.telegram")


class TelegramChannel:
    """Telegram bot adapter for replysync.

    The Bot API reports new and edited messages but not deletions, so only
    created and updated events originate here. Editing a message so it no
    longer starts with the command clears its replies.
    """

    def __init__(self, settings: ReplySyncSettings):
        self.settings = settings
        self.app: Optional[Application] = None
        self.engine: Optional[SyncEngine] = None

    async def start(self):
        """Start the Telegram bot."""
        self.app = (
            Application.builder()
            .token(self.settings.telegram_bot_token)
            .build()
        )
        self.engine = SyncEngine(
            transport=TelegramTransport(self.app.bot),
            processor=BytecodeProcessor(),
            unit_max_size=self.settings.unit_max_size,
            command=self.settings.command,
        )

        self.app.add_handler(MessageHandler(
            filters.UpdateType.MESSAGE & filters.TEXT,
            self._handle_message,
        ))
        self.app.add_handler(MessageHandler(
            filters.UpdateType.EDITED_MESSAGE & filters.TEXT,
            self._handle_edited_message,
        ))

        # Error handler
        self.app.add_error_handler(self._handle_error)

        logger.info("Starting Telegram bot...")
        await self.app.initialize()
        await self.app.start()
        await self.app.updater.start_polling(drop_pending_updates=True)

        # Register the command in the "/" menu
        if self.settings.command.startswith("/"):
            await self.app.bot.set_my_commands([
                BotCommand(self.settings.command.lstrip("/"), "Disassemble Python code"),
            ])

        logger.info("Telegram bot started.")

    async def stop(self):
        """Stop the Telegram bot, finishing events already queued."""
        if self.app:
            await self.app.updater.stop()
            if self.engine:
                await self.engine.dispatcher.drain()
            await self.app.stop()
            await self.app.shutdown()
            logger.info("Telegram bot stopped.")

    # ── Message handlers ─────────────────────────────────────

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle incoming text messages."""
        message = update.message
        if not message or not message.text or _from_bot(message):
            return
        if not is_tracked_form(message.text, self.settings.command):
            return

        user = update.effective_user
        logger.info(f"[{message.chat.type}] {user.first_name if user else '?'}: {message.text[:100]}")
        self.engine.submit(self._event(EventKind.CREATED, message))

    async def _handle_edited_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle edits; the engine ignores messages it is not tracking."""
        message = update.edited_message
        if not message or message.text is None or _from_bot(message):
            return
        self.engine.submit(self._event(EventKind.UPDATED, message))

    @staticmethod
    def _event(kind: EventKind, message) -> SourceEvent:
        return SourceEvent(
            kind=kind,
            source_id=MessageRef(message.chat_id, message.message_id),
            channel=message.chat_id,
            content=message.text,
        )

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors."""
        logger.error(f"Telegram error: {context.error}", exc_info=context.error)


def _from_bot(message) -> bool:
    return bool(message.from_user and message.from_user.is_bot)
