"""Keyed dispatch routers.

A :class:`Router` maps keys to registrations.  Routing sweeps expired
entries, looks the key up and removes one-shot entries while holding the
table lock; hooks and handlers run after the lock is released, so two
concurrent ``route`` calls for a one-shot key never both win.

Typical use is continuing a conversation after the bot sent a keyboard::

    callbacks = CallbackRouter()

    message = await chat.send_message("Pick one", options=SendOptions(reply_markup=keyboard))
    callbacks.register_once(
        MessageID.from_message(message),
        on_pick,
        name="pick",
        deadline=datetime.now(timezone.utc) + timedelta(minutes=5),
    )

    # in the callback_query handler:
    await callbacks.route_query(ctx, query)
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from botapi.models import CallbackQuery, PollAnswer
from core.logger import BotLogger
from dispatch.context import Context, MessageContext, MessageID
from dispatch.query import CallbackAnswer, QueryContext

logger = BotLogger.get_logger()

K = TypeVar("K")  # key type
D = TypeVar("D")  # routed data type

RouteHandler = Callable[[Any, Any], Awaitable[Any]]
ExpireHook = Callable[[Context, Any], Awaitable[None]]
AnswerErrorHook = Callable[[QueryContext, Exception], Awaitable[None]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ── Registration ─────────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True, slots=True)
class Registration:
    """One routing table entry.

    ``deadline`` must be timezone-aware.  ``on_error`` is consulted only by
    :class:`CallbackRouter`, when answering the query fails.
    """

    handler: RouteHandler
    name: str = ""
    once: bool = False
    deadline: Optional[datetime] = None
    on_expire: Optional[ExpireHook] = None
    on_error: Optional[AnswerErrorHook] = None

    def expired(self, now: datetime) -> bool:
        return self.deadline is not None and self.deadline <= now


# ── Generic router ───────────────────────────────────────────────────────────


class Router(Generic[K, D]):
    """Thread-safe ``key → registration`` table with expiry and one-shot entries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[K, Registration] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    # ── registration ─────────────────────────────────────────────────────

    def register(
        self,
        key: K,
        handler: Optional[RouteHandler],
        *,
        name: Optional[str] = None,
        deadline: Optional[datetime] = None,
        on_expire: Optional[ExpireHook] = None,
        on_error: Optional[AnswerErrorHook] = None,
    ) -> bool:
        """Register *handler* for *key*, replacing any previous entry.

        Returns ``False`` (and registers nothing) when *handler* is ``None``
        or *deadline* has already passed.
        """
        return self._insert(key, handler, False, name, deadline, on_expire, on_error)

    def register_once(
        self,
        key: K,
        handler: Optional[RouteHandler],
        *,
        name: Optional[str] = None,
        deadline: Optional[datetime] = None,
        on_expire: Optional[ExpireHook] = None,
        on_error: Optional[AnswerErrorHook] = None,
    ) -> bool:
        """Like :meth:`register`, but the entry is removed by its first match."""
        return self._insert(key, handler, True, name, deadline, on_expire, on_error)

    def _insert(
        self,
        key: K,
        handler: Optional[RouteHandler],
        once: bool,
        name: Optional[str],
        deadline: Optional[datetime],
        on_expire: Optional[ExpireHook],
        on_error: Optional[AnswerErrorHook],
    ) -> bool:
        if handler is None:
            return False
        if deadline is not None and deadline < _now():
            return False
        if name is None:
            name = getattr(handler, "__name__", "")
        entry = Registration(handler, name, once, deadline, on_expire, on_error)
        with self._lock:
            self._entries[key] = entry
        return True

    def unregister(self, key: K) -> Optional[Registration]:
        """Remove and return the entry for *key*, if any."""
        with self._lock:
            return self._entries.pop(key, None)

    def get(self, key: K) -> Optional[Registration]:
        with self._lock:
            return self._entries.get(key)

    # ── routing ──────────────────────────────────────────────────────────

    async def route(self, ctx: Context, key: K, data: D) -> bool:
        """Dispatch *data* to the handler registered for *key*.

        Returns ``True`` when a handler ran.  Exceptions from expiry hooks
        are logged; exceptions from the handler propagate.
        """
        now = _now()
        with self._lock:
            expired: List[Tuple[K, Registration]] = [
                (k, entry) for k, entry in self._entries.items() if entry.expired(now)
            ]
            for k, _ in expired:
                del self._entries[k]
            entry = self._entries.get(key)
            if entry is not None and entry.once:
                del self._entries[key]

        for k, stale in expired:
            await self._expire(ctx, k, stale)

        if entry is None:
            return False
        await self._invoke(ctx.child(entry.name), key, entry, data)
        return True

    async def _expire(self, ctx: Context, key: K, entry: Registration) -> None:
        if entry.on_expire is None:
            return
        try:
            await entry.on_expire(ctx.child(entry.name), key)
        except Exception:
            logger.exception("Route expiry hook failed", extra={"context": ctx.name, "route": entry.name})

    async def _invoke(self, ctx: Context, key: K, entry: Registration, data: D) -> None:
        await entry.handler(ctx, data)


# ── Specialisations ──────────────────────────────────────────────────────────


class CallbackRouter(Router[MessageID, CallbackQuery]):
    """Routes callback queries by the identity of the message carrying the keyboard.

    Handlers take ``(MessageContext, CallbackQuery)`` and return a
    :class:`~dispatch.query.CallbackAnswer` (``None`` sends the empty
    answer).  When answering fails, the registration's ``on_error`` hook
    receives the query context and the exception; without a hook the
    exception propagates.
    """

    async def route_query(self, ctx: Context, query: CallbackQuery) -> bool:
        return await self.route(ctx, MessageID.from_callback(query), query)

    async def _invoke(self, ctx: Context, key: MessageID, entry: Registration, query: CallbackQuery) -> None:
        answer = await entry.handler(MessageContext(ctx, key), query)
        gate = ctx if isinstance(ctx, QueryContext) else QueryContext(ctx, query.id, CallbackAnswer)
        try:
            await gate.answer(answer)
        except Exception as exc:
            if entry.on_error is None:
                raise
            await entry.on_error(gate, exc)


class PollRouter(Router[str, PollAnswer]):
    """Routes poll answers by poll id; handlers take ``(Context, PollAnswer)``."""

    async def route_answer(self, ctx: Context, answer: PollAnswer) -> bool:
        if not answer.poll_id:
            return False
        return await self.route(ctx, answer.poll_id, answer)
