"""Tests for the query-answer gate and answer records."""

import asyncio
import json
import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botapi import APIException, Payload
from botapi.inputs import InlineQueryResultArticle, InputTextMessageContent
from botapi.models import LabeledPrice, ShippingOption
from dispatch import (
    CallbackAnswer,
    Context,
    InlineAnswer,
    PreCheckoutAnswer,
    QueryContext,
    ShippingAnswer,
    WebAppAnswer,
)


def _api() -> MagicMock:
    api = MagicMock()
    api.request = AsyncMock(return_value=True)
    return api


def _params(api: MagicMock) -> dict:
    return dict(api.request.call_args.args[1].params)


# ── Gate ─────────────────────────────────────────────────────────────────────


class TestQueryContext:
    """At most one answer per query."""

    @pytest.mark.asyncio
    async def test_first_answer_wins(self) -> None:
        api = _api()
        ctx = QueryContext(Context(api, "bot"), "q1", CallbackAnswer)
        assert not ctx.answered

        await ctx.answer(CallbackAnswer(text="first"))
        await ctx.answer(CallbackAnswer(text="second"))

        api.request.assert_awaited_once()
        assert api.request.call_args.args[0] == "answerCallbackQuery"
        assert _params(api) == {"callback_query_id": "q1", "text": "first"}
        assert ctx.answered

    @pytest.mark.asyncio
    async def test_concurrent_answers(self) -> None:
        api = _api()
        ctx = QueryContext(Context(api), "q1", CallbackAnswer)
        await asyncio.gather(*(ctx.answer() for _ in range(5)))
        api.request.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_none_sends_default_answer(self) -> None:
        api = _api()
        await QueryContext(Context(api), "q1", CallbackAnswer).answer()
        assert _params(api) == {"callback_query_id": "q1"}

    @pytest.mark.asyncio
    async def test_derived_contexts_share_latch(self) -> None:
        api = _api()
        ctx = QueryContext(Context(api, "bot"), "q1", CallbackAnswer)
        child = ctx.child("ping")
        assert isinstance(child, QueryContext)
        assert child.name == "bot::ping"

        await child.answer()
        await ctx.answer()

        api.request.assert_awaited_once()
        assert ctx.answered

    @pytest.mark.asyncio
    async def test_inherited_base_is_dropped(self) -> None:
        api = _api()
        parent = Context(api).with_payload(Payload().set("chat_id", "5").set("message_id", "7"))
        await QueryContext(parent, "q1", CallbackAnswer).answer()
        assert _params(api) == {"callback_query_id": "q1"}

    @pytest.mark.asyncio
    async def test_wrong_answer_type(self) -> None:
        api = _api()
        ctx = QueryContext(Context(api), "q1", CallbackAnswer)
        with pytest.raises(TypeError):
            await ctx.answer(PreCheckoutAnswer())
        assert not ctx.answered
        api.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_answer_keeps_latch(self) -> None:
        api = _api()
        api.request.side_effect = APIException(400, "query is too old")
        ctx = QueryContext(Context(api), "q1", CallbackAnswer)

        with pytest.raises(APIException):
            await ctx.answer()
        await ctx.answer()

        assert api.request.await_count == 1
        assert ctx.answered


# ── Answer records ───────────────────────────────────────────────────────────


class TestAnswers:
    """Each answer type sends its own method and parameters."""

    @pytest.mark.asyncio
    async def test_callback_alert(self) -> None:
        api = _api()
        answer = CallbackAnswer(text="Done", show_alert=True, cache_time=30)
        await QueryContext(Context(api), "cb", CallbackAnswer).answer(answer)
        assert _params(api) == {
            "callback_query_id": "cb",
            "text": "Done",
            "show_alert": "true",
            "cache_time": "30",
        }

    @pytest.mark.asyncio
    async def test_inline_results(self) -> None:
        api = _api()
        article = InlineQueryResultArticle(
            id="1",
            title="Hello",
            input_message_content=InputTextMessageContent(message_text="hi"),
        )
        answer = InlineAnswer(results=[article], is_personal=True, next_offset="20")
        await QueryContext(Context(api), "iq", InlineAnswer).answer(answer)

        assert api.request.call_args.args[0] == "answerInlineQuery"
        params = _params(api)
        assert params["inline_query_id"] == "iq"
        assert params["is_personal"] == "true"
        assert params["next_offset"] == "20"
        result = json.loads(params["results"])[0]
        assert result["type"] == "article"
        assert result["id"] == "1"
        assert result["input_message_content"] == {"message_text": "hi"}

    @pytest.mark.asyncio
    async def test_empty_inline_results(self) -> None:
        api = _api()
        await QueryContext(Context(api), "iq", InlineAnswer).answer()
        assert _params(api) == {"inline_query_id": "iq", "results": "[]"}

    @pytest.mark.asyncio
    async def test_shipping_options(self) -> None:
        api = _api()
        option = ShippingOption(id="post", title="Post", prices=[LabeledPrice(label="Post", amount=500)])
        await QueryContext(Context(api), "sq", ShippingAnswer).answer(ShippingAnswer(shipping_options=[option]))
        params = _params(api)
        assert params["shipping_query_id"] == "sq"
        assert params["ok"] == "true"
        assert json.loads(params["shipping_options"])[0]["id"] == "post"

    @pytest.mark.asyncio
    async def test_shipping_rejected(self) -> None:
        api = _api()
        answer = ShippingAnswer(ok=False, error_message="We do not ship there")
        await QueryContext(Context(api), "sq", ShippingAnswer).answer(answer)
        assert _params(api) == {"shipping_query_id": "sq", "ok": "false", "error_message": "We do not ship there"}

    @pytest.mark.asyncio
    async def test_pre_checkout(self) -> None:
        api = _api()
        await QueryContext(Context(api), "pc", PreCheckoutAnswer).answer()
        assert api.request.call_args.args[0] == "answerPreCheckoutQuery"
        assert _params(api) == {"pre_checkout_query_id": "pc", "ok": "true"}

    @pytest.mark.asyncio
    async def test_web_app_requires_result(self) -> None:
        api = _api()
        ctx = QueryContext(Context(api), "wa", WebAppAnswer)
        with pytest.raises(ValueError):
            await ctx.answer()
        assert not ctx.answered
        api.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_web_app(self) -> None:
        api = _api()
        article = InlineQueryResultArticle(
            id="1",
            title="Result",
            input_message_content=InputTextMessageContent(message_text="done"),
        )
        await QueryContext(Context(api), "wa", WebAppAnswer).answer(WebAppAnswer(result=article))
        params = _params(api)
        assert api.request.call_args.args[0] == "answerWebAppQuery"
        assert params["web_app_query_id"] == "wa"
        assert json.loads(params["result"])["title"] == "Result"
