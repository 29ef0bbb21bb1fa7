"""tgwire example bot — echo with an inline "Ping" button.

Runs with long polling by default, or as a webhook server when
``WEBHOOK_URL`` is configured (see :mod:`config`).

* ``/start`` sends a message with a button; the button is routed through a
  one-shot :class:`~dispatch.router.CallbackRouter` entry that expires
  after a minute.
* Any other text is echoed back as a piggyback call.

Usage::

    BOT_TOKEN=123:abc python main.py
"""

import asyncio
import signal
from datetime import datetime, timedelta, timezone
from typing import Optional

from botapi import BotAPI
from botapi.http import RequestsHTTP
from botapi.methods import SendMessage, SendOptions
from botapi.models import CallbackQuery, InlineKeyboardButton, InlineKeyboardMarkup, Message
from config import (
    API_URL,
    BOT_TOKEN,
    FILE_URL,
    HTTP_TIMEOUT,
    LOG_LEVEL,
    POLL_LIMIT,
    POLL_TIMEOUT,
    WEBHOOK_CERT,
    WEBHOOK_DROP_PENDING,
    WEBHOOK_IP,
    WEBHOOK_KEY,
    WEBHOOK_LISTEN,
    WEBHOOK_MAX_CONNECTIONS,
    WEBHOOK_PATH,
    WEBHOOK_SECRET,
    WEBHOOK_URL,
)
from core.logger import BotLogger
from dispatch import (
    Bot,
    CallbackAnswer,
    CallbackRouter,
    ChatContext,
    Context,
    Handler,
    LongPoller,
    MessageContext,
    MessageID,
    Piggyback,
    PollState,
    QueryContext,
    WebhookConfig,
    WebhookServer,
)

logger = BotLogger.get_logger()

PING_WINDOW = timedelta(minutes=1)

callbacks = CallbackRouter()


# ── Handlers ─────────────────────────────────────────────────────────────────


async def on_ping(ctx: MessageContext, query: CallbackQuery) -> CallbackAnswer:
    await ctx.edit_text("Pong!")
    return CallbackAnswer(text="Pong")


async def on_ping_expired(ctx: Context, key: MessageID) -> None:
    await MessageContext(ctx.reset(), key).edit_text("The button has expired.")


async def on_message(ctx: MessageContext, message: Message) -> Optional[Piggyback]:
    text = message.text or ""
    if text.startswith("/start"):
        chat = ChatContext(ctx.reset(), message.chat.id)
        keyboard = InlineKeyboardMarkup(
            inline_keyboard=[[InlineKeyboardButton(text="Ping", callback_data="ping")]]
        )
        sent = await chat.send_message("Tap the button within a minute.", options=SendOptions(reply_markup=keyboard))
        callbacks.register_once(
            MessageID.from_message(sent),
            on_ping,
            name="ping",
            deadline=datetime.now(timezone.utc) + PING_WINDOW,
            on_expire=on_ping_expired,
        )
        return None

    if not text:
        return None
    ctx.logger.debug("Echoing message", extra={"chat_id": message.chat.id})
    return Piggyback.from_call(SendMessage(message.chat.id, text))


async def on_callback_query(ctx: QueryContext, query: CallbackQuery) -> None:
    if not await callbacks.route_query(ctx, query):
        await ctx.answer(CallbackAnswer(text="This button is no longer active."))


# ── Entry point ──────────────────────────────────────────────────────────────


def build_bot() -> Bot:
    # The read timeout has to outlast the long-poll timeout.
    http = RequestsHTTP(timeout=(10.0, max(HTTP_TIMEOUT, POLL_TIMEOUT + 10.0)))
    api = BotAPI(BOT_TOKEN or "", api_url=API_URL, file_url=FILE_URL, http=http)
    return Bot(api, Handler(on_message=on_message, on_callback_query=on_callback_query))


async def run() -> None:
    """Start the bot and run until SIGINT/SIGTERM.

    Raises:
        EnvironmentError: If ``BOT_TOKEN`` is not set.
    """
    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")
    BotLogger.set_level(LOG_LEVEL)

    bot = build_bot()
    ctx = bot.context()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, ctx.cancel)
        except NotImplementedError:
            pass  # Windows event loops

    me = await bot.api.get_me(scope=ctx.scope)
    logger.info("Authorized", extra={"bot_id": me.id, "username": me.username})

    if WEBHOOK_URL:
        config = WebhookConfig(
            url=WEBHOOK_URL,
            listen=WEBHOOK_LISTEN,
            path=WEBHOOK_PATH,
            cert_file=WEBHOOK_CERT,
            key_file=WEBHOOK_KEY,
            secret=WEBHOOK_SECRET,
            ip_address=WEBHOOK_IP,
            max_connections=WEBHOOK_MAX_CONNECTIONS,
            drop_pending=WEBHOOK_DROP_PENDING,
        )
        await bot.run_webhook(ctx, WebhookServer(config))
        return

    await bot.api.delete_webhook(scope=ctx.scope)
    await bot.run_polling(ctx, LongPoller(PollState(limit=POLL_LIMIT, timeout=POLL_TIMEOUT)))


if __name__ == "__main__":
    asyncio.run(run())
