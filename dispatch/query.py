"""Query-answer gate.

Callback, inline, shipping, pre-checkout and web-app queries each expect
exactly one answer.  A :class:`QueryContext` carries a one-way latch:
the first :meth:`QueryContext.answer` call sends the answer, every later
call returns without touching the network.

An unanswered query is acceptable; the platform times it out on its side.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Type

from botapi.inputs import InlineQueryResult, InlineQueryResultsButton
from botapi.models import ShippingOption
from botapi.payload import Payload
from dispatch.context import CancelScope, Context


# ── Answers ──────────────────────────────────────────────────────────────────


@dataclass
class CallbackAnswer:
    METHOD: ClassVar[str] = "answerCallbackQuery"

    text: str = ""
    show_alert: bool = False
    url: str = ""
    cache_time: int = 0

    def answer_data(self, payload: Payload, query_id: str) -> None:
        payload.set("callback_query_id", query_id, force=True)
        payload.set("text", self.text)
        payload.set_bool("show_alert", self.show_alert)
        payload.set("url", self.url)
        payload.set_int("cache_time", self.cache_time)


@dataclass
class InlineAnswer:
    """Answer to an inline query; uploads nested in results are attached."""

    METHOD: ClassVar[str] = "answerInlineQuery"

    results: List[InlineQueryResult] = field(default_factory=list)
    cache_time: int = 0
    is_personal: bool = False
    next_offset: str = ""
    button: Optional[InlineQueryResultsButton] = None

    def answer_data(self, payload: Payload, query_id: str) -> None:
        payload.set("inline_query_id", query_id, force=True)
        payload.set_input("results", list(self.results))
        payload.set_int("cache_time", self.cache_time)
        payload.set_bool("is_personal", self.is_personal)
        payload.set("next_offset", self.next_offset)
        payload.set_json("button", self.button)


@dataclass
class ShippingAnswer:
    """Answer to a shipping query; ``ok=False`` requires an error message."""

    METHOD: ClassVar[str] = "answerShippingQuery"

    ok: bool = True
    shipping_options: Optional[List[ShippingOption]] = None
    error_message: str = ""

    def answer_data(self, payload: Payload, query_id: str) -> None:
        payload.set("shipping_query_id", query_id, force=True)
        payload.set_bool("ok", self.ok, force=True)
        payload.set_json("shipping_options", self.shipping_options)
        payload.set("error_message", self.error_message)


@dataclass
class PreCheckoutAnswer:
    METHOD: ClassVar[str] = "answerPreCheckoutQuery"

    ok: bool = True
    error_message: str = ""

    def answer_data(self, payload: Payload, query_id: str) -> None:
        payload.set("pre_checkout_query_id", query_id, force=True)
        payload.set_bool("ok", self.ok, force=True)
        payload.set("error_message", self.error_message)


@dataclass
class WebAppAnswer:
    METHOD: ClassVar[str] = "answerWebAppQuery"

    result: Optional[InlineQueryResult] = None

    def answer_data(self, payload: Payload, query_id: str) -> None:
        if self.result is None:
            raise ValueError("web app answer requires a result")
        payload.set("web_app_query_id", query_id, force=True)
        payload.set_input("result", self.result)


# ── Gate ─────────────────────────────────────────────────────────────────────


class _Latch:
    """One-way flag; :meth:`trip` succeeds exactly once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tripped = False

    @property
    def tripped(self) -> bool:
        with self._lock:
            return self._tripped

    def trip(self) -> bool:
        with self._lock:
            if self._tripped:
                return False
            self._tripped = True
            return True


class QueryContext(Context):
    """Context of one query that must be answered at most once.

    The base payload is emptied so identifiers of the enclosing update never
    leak into the answer call.  Contexts derived from a query context share
    its latch.

    Args:
        ctx: Parent context.
        query_id: Identifier of the query being answered.
        answer_type: Answer record class; its default instance is sent when
            :meth:`answer` receives ``None``.
    """

    def __init__(self, ctx: Context, query_id: str, answer_type: Type[Any]) -> None:
        super().__init__(ctx.api, ctx.name, Payload(), ctx.scope)
        self.query_id = query_id
        self.answer_type = answer_type
        self._latch = _Latch()

    def _derive(
        self,
        name: Optional[str] = None,
        base: Optional[Payload] = None,
        scope: Optional[CancelScope] = None,
    ) -> "QueryContext":
        derived = copy.copy(self)
        derived.name = self.name if name is None else name
        derived._base = self._base if base is None else base
        derived.scope = self.scope if scope is None else scope
        return derived

    @property
    def answered(self) -> bool:
        return self._latch.tripped

    async def answer(self, value: Any = None) -> None:
        """Send *value* as the answer unless the query was answered already.

        Raises:
            TypeError: *value* is not an instance of the answer type.
            BotAPIError: The answer call failed (the latch stays tripped).
        """
        if value is None:
            value = self.answer_type()
        elif not isinstance(value, self.answer_type):
            raise TypeError(f"expected {self.answer_type.__name__}, got {type(value).__name__}")

        payload = Payload()
        value.answer_data(payload, self.query_id)
        if not self._latch.trip():
            return
        self.logger.debug("Answering query", extra={"api_method": value.METHOD, "query_id": self.query_id})
        await self.request(value.METHOD, payload)
