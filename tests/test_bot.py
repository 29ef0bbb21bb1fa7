"""Tests for the Bot error latch and update-source wiring."""

import asyncio
import os
import sys
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botapi.models import Update
from dispatch import Bot, Context, Handler, LongPoller, Piggyback, PollState


def _message_update(update_id: int) -> Update:
    return Update.model_validate({
        "update_id": update_id,
        "message": {"message_id": update_id, "date": 1, "chat": {"id": 5, "type": "private"}, "text": "hi"},
    })


class FlakyHandler:
    """Raises for the listed update ids, records the rest."""

    def __init__(self, fail: tuple = ()) -> None:
        self.fail = fail
        self.seen: List[int] = []

    def allowed(self) -> List[str]:
        return ["message"]

    async def handle(self, ctx: Context, update: Update) -> Optional[Piggyback]:
        self.seen.append(update.update_id)
        if update.update_id in self.fail:
            raise RuntimeError(f"update {update.update_id} failed")
        return None


def _api() -> MagicMock:
    api = MagicMock()
    api.request = AsyncMock(return_value=None)
    return api


# ── Error latch ──────────────────────────────────────────────────────────────


class TestLatch:
    """The first handler error suspends dispatch."""

    @pytest.mark.asyncio
    async def test_error_latched_and_later_updates_dropped(self) -> None:
        handler = FlakyHandler(fail=(1,))
        bot = Bot(_api(), handler)

        assert await bot.handle(bot.context(), _message_update(1)) is None
        assert bot.failed
        assert isinstance(bot.error, RuntimeError)

        assert await bot.handle(bot.context(), _message_update(2)) is None
        assert handler.seen == [1]

    @pytest.mark.asyncio
    async def test_first_error_kept(self) -> None:
        bot = Bot(_api(), FlakyHandler(fail=(1, 2)))
        first = _message_update(1)
        await bot.handle(bot.context(), first)
        error = bot.error
        bot._latch(RuntimeError("second"), _message_update(2))
        assert bot.error is error

    @pytest.mark.asyncio
    async def test_passes_result_through(self) -> None:
        call = Piggyback("sendMessage")

        async def echo(ctx, message):
            return call

        bot = Bot(_api(), Handler(on_message=echo))
        assert await bot.handle(bot.context(), _message_update(1)) is call
        assert not bot.failed

    def test_allowed_and_context(self) -> None:
        bot = Bot(_api(), Handler(on_message=AsyncMock()), name="echo")
        assert bot.allowed() == ["message"]
        assert bot.context().name == "echo"


# ── Update sources ───────────────────────────────────────────────────────────


class TestRunPolling:
    """run_polling stops on the latched error and re-raises it."""

    @pytest.mark.asyncio
    async def test_handler_error_stops_polling(self) -> None:
        api = _api()
        batches = [[_message_update(1)]]

        async def get_updates(offset, limit, timeout, allowed, scope=None):
            if batches:
                return batches.pop(0)
            return await scope.guard(asyncio.sleep(5, result=[]))

        api.get_updates = AsyncMock(side_effect=get_updates)
        bot = Bot(api, FlakyHandler(fail=(1,)))
        ctx = bot.context()

        with pytest.raises(RuntimeError, match="update 1 failed"):
            await asyncio.wait_for(bot.run_polling(ctx), 2)

        assert not ctx.cancelled

    @pytest.mark.asyncio
    async def test_allowed_updates_from_handler(self) -> None:
        api = _api()
        bot = Bot(api, FlakyHandler())
        ctx = bot.context()

        async def get_updates(offset, limit, timeout, allowed, scope=None):
            ctx.cancel()
            raise asyncio.CancelledError("context cancelled")

        api.get_updates = AsyncMock(side_effect=get_updates)
        poller = LongPoller(PollState(limit=10))

        await bot.run_polling(ctx, poller)

        assert poller.state.allowed == ["message"]
        assert api.get_updates.call_args.args[:4] == (0, 10, 0, ["message"])

    @pytest.mark.asyncio
    async def test_explicit_allowed_kept(self) -> None:
        api = _api()
        bot = Bot(api, FlakyHandler())
        ctx = bot.context()
        ctx.cancel()
        poller = LongPoller(PollState(allowed=[]))

        await bot.run_polling(ctx, poller)

        assert poller.state.allowed == []

    @pytest.mark.asyncio
    async def test_failed_bot_does_not_start(self) -> None:
        api = _api()
        api.get_updates = AsyncMock(return_value=[])
        bot = Bot(api, FlakyHandler(fail=(1,)))
        await bot.handle(bot.context(), _message_update(1))

        with pytest.raises(RuntimeError):
            await bot.run_polling(bot.context())

        api.get_updates.assert_not_called()


class TestRunWebhook:
    """run_webhook hands the bot to the server under a child scope."""

    @pytest.mark.asyncio
    async def test_delegates_to_server(self) -> None:
        bot = Bot(_api(), FlakyHandler())
        server = MagicMock()
        server.run = AsyncMock()
        ctx = bot.context()

        await bot.run_webhook(ctx, server)

        run_ctx, handler = server.run.call_args.args
        assert handler is bot
        assert run_ctx.name == "bot"
        assert run_ctx.scope is not ctx.scope

    @pytest.mark.asyncio
    async def test_reraises_latched_error(self) -> None:
        bot = Bot(_api(), FlakyHandler(fail=(1,)))
        server = MagicMock()

        async def serve(ctx, handler):
            await handler.handle(ctx, _message_update(1))
            assert ctx.cancelled

        server.run = AsyncMock(side_effect=serve)

        with pytest.raises(RuntimeError):
            await bot.run_webhook(bot.context(), server)
