"""Bot -- binds an API transport to a handler table and runs an update source.

The bot keeps an error latch: the first exception escaping a handler is
recorded, every later update is dropped, and the running update source is
stopped.  :meth:`Bot.run_polling` and :meth:`Bot.run_webhook` re-raise the
latched exception once the source has shut down.

Usage::

    api = BotAPI(BOT_TOKEN)
    bot = Bot(api, Handler(on_message=echo))
    await bot.run_polling(bot.context())
"""

from __future__ import annotations

import asyncio
import threading
import weakref
from typing import List, Optional

from botapi.client import BotAPI
from botapi.models import Update
from core.logger import BotLogger
from dispatch.context import CancelScope, Context
from dispatch.longpoll import LongPoller, PollState
from dispatch.updates import Piggyback, UpdateHandler
from dispatch.webhook import WebhookServer

logger = BotLogger.get_logger()


class Bot:
    """Update handler with a one-way error latch.

    Args:
        api: Transport for all requests of this bot.
        handler: Handler table (or any :class:`UpdateHandler`).
        name: Root segment of every context path.
    """

    def __init__(self, api: BotAPI, handler: UpdateHandler, name: str = "bot") -> None:
        self.api = api
        self.handler = handler
        self.name = name
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self._runs: "weakref.WeakSet[CancelScope]" = weakref.WeakSet()

    def __repr__(self) -> str:
        return f"Bot(name={self.name!r}, failed={self.failed})"

    def context(self) -> Context:
        """Return a fresh root context."""
        return Context(self.api, self.name)

    def allowed(self) -> List[str]:
        return self.handler.allowed()

    # ── error latch ──────────────────────────────────────────────────────

    @property
    def error(self) -> Optional[BaseException]:
        with self._lock:
            return self._error

    @property
    def failed(self) -> bool:
        return self.error is not None

    def _latch(self, exc: BaseException, update: Update) -> None:
        with self._lock:
            if self._error is not None:
                return
            self._error = exc
            runs = list(self._runs)

        logger.error(
            "Handler failed, dispatch suspended",
            exc_info=exc,
            extra={"update_id": update.update_id, "kind": update.kind(), "context": self.name},
        )
        for scope in runs:
            scope.cancel()

    # ── dispatch ─────────────────────────────────────────────────────────

    async def handle(self, ctx: Context, update: Update) -> Optional[Piggyback]:
        """Run the handler for *update* unless the latch is set.

        A handler exception sets the latch and is not re-raised.
        """
        if self.failed:
            logger.debug("Update dropped, bot has failed", extra={"update_id": update.update_id})
            return None
        try:
            return await self.handler.handle(ctx, update)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._latch(exc, update)
            return None

    # ── update sources ───────────────────────────────────────────────────

    def _start(self, ctx: Context) -> Context:
        if self.failed:
            raise self.error  # type: ignore[misc]
        run_ctx = ctx.with_cancel()
        with self._lock:
            self._runs.add(run_ctx.scope)
        return run_ctx

    def _finish(self) -> None:
        error = self.error
        if error is not None:
            raise error

    async def run_polling(self, ctx: Context, poller: Optional[LongPoller] = None) -> None:
        """Long-poll until *ctx* ends or a handler fails.

        Raises:
            Exception: The latched handler error.
        """
        if poller is None:
            poller = LongPoller(PollState())
        if poller.state.allowed is None:
            poller.state.allowed = self.allowed()
        await poller.run(self._start(ctx), self)
        self._finish()

    async def run_webhook(self, ctx: Context, server: WebhookServer) -> None:
        """Serve webhook requests until *ctx* ends or a handler fails.

        Raises:
            Exception: The latched handler error.
        """
        await server.run(self._start(ctx), self)
        self._finish()
