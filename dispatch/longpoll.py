"""Long-polling update source.

Each cycle requests ``getUpdates`` with the current offset and advances it
past the last update received; the offset is the only protection against
re-delivery.  Updates are dispatched in their own tasks, so a slow
handler never delays the next poll.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Set

from botapi.client import BotAPI
from botapi.models import Update
from core.logger import BotLogger
from dispatch.context import CancelScope, Context
from dispatch.updates import UpdateHandler

logger = BotLogger.get_logger()


@dataclass
class PollState:
    """Offset and request options of a polling loop.

    Owned by a single loop; not safe to share between pollers.
    """

    offset: int = 0
    limit: int = 0
    timeout: int = 0
    allowed: Optional[List[str]] = None

    async def poll(self, api: BotAPI, scope: Optional[CancelScope] = None) -> List[Update]:
        """Run one ``getUpdates`` cycle and advance the offset.

        The offset moves to ``last.update_id + 1`` on a non-empty result and
        stays put on an empty one.  Errors propagate unchanged.
        """
        updates = await api.get_updates(self.offset, self.limit, self.timeout, self.allowed, scope=scope)
        if updates:
            self.offset = updates[-1].update_id + 1
        return updates


def _finished(ctx: Context) -> bool:
    remaining = ctx.scope.remaining()
    return ctx.cancelled or (remaining is not None and remaining <= 0)


class LongPoller:
    """Drives a :class:`PollState` until its context ends.

    Only one :meth:`run` may be active per poller.
    """

    def __init__(self, state: Optional[PollState] = None) -> None:
        self.state = state or PollState()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(self, ctx: Context, handler: UpdateHandler) -> None:
        """Poll and dispatch until *ctx* is cancelled or its deadline passes.

        Returns normally on cancellation of *ctx*; any other polling error
        propagates.  In-flight update tasks are awaited before returning.

        Raises:
            RuntimeError: The poller is already running.
        """
        if self._running:
            raise RuntimeError("long poller is already running")
        self._running = True

        tasks: Set[asyncio.Task] = set()
        logger.info("Polling for updates", extra={"context": ctx.name, "offset": self.state.offset})
        try:
            while not _finished(ctx):
                try:
                    updates = await self.state.poll(ctx.api, ctx.scope)
                except (asyncio.CancelledError, TimeoutError):
                    if _finished(ctx):
                        break
                    raise

                if updates:
                    logger.debug("Received updates", extra={"count": len(updates), "offset": self.state.offset})
                for update in updates:
                    task = asyncio.create_task(self._dispatch(ctx, handler, update))
                    tasks.add(task)
                    task.add_done_callback(tasks.discard)
        finally:
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)
            self._running = False
            logger.info("Polling stopped", extra={"context": ctx.name, "offset": self.state.offset})

    async def _dispatch(self, ctx: Context, handler: UpdateHandler, update: Update) -> None:
        try:
            call = await handler.handle(ctx, update)
            if call is not None:
                await call.execute(ctx)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Update dispatch failed", extra={"update_id": update.update_id, "context": ctx.name})
