"""Handler table -- one optional callback per update kind.

Each callback receives a sub-context bound to what the update is about,
and the update's payload::

    handler = Handler(
        on_message=echo,            # async (MessageContext, Message)
        on_callback_query=pressed,  # async (QueryContext, CallbackQuery)
    )
    handler.allowed()  # ["message", "callback_query"]

A callback may return a :class:`~dispatch.updates.Piggyback` call.  An
update whose populated field has no callback is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Awaitable, Callable, List, Optional

from botapi.models import UPDATE_KINDS, Update
from botapi.payload import Payload
from core.logger import BotLogger
from dispatch.context import (
    ChatContext,
    ChatMemberContext,
    Context,
    MessageContext,
    MessageID,
    UserContext,
)
from dispatch.query import (
    CallbackAnswer,
    InlineAnswer,
    PreCheckoutAnswer,
    QueryContext,
    ShippingAnswer,
)
from dispatch.updates import Piggyback

logger = BotLogger.get_logger()

Callback = Callable[[Any, Any], Awaitable[Optional[Piggyback]]]

_PREFIX = "on_"


# ── Sub-context builders ─────────────────────────────────────────────────────


def _message(ctx: Context, message: Any) -> Context:
    if message.business_connection_id:
        ctx = ctx.with_payload(Payload().set("business_connection_id", message.business_connection_id))
    return MessageContext(ctx, MessageID.from_message(message))


def _reaction(ctx: Context, update: Any) -> Context:
    return MessageContext(ctx, MessageID(chat_id=update.chat.id, message_id=update.message_id))


def _member(ctx: Context, update: Any) -> Context:
    return ChatMemberContext(ctx, update.chat.id, update.new_chat_member.user.id)


def _join_request(ctx: Context, request: Any) -> Context:
    return ChatMemberContext(ctx, request.chat.id, request.from_field.id)


def _sender(ctx: Context, obj: Any) -> Context:
    return UserContext(ctx, obj.from_field.id)


def _chat(ctx: Context, obj: Any) -> Context:
    return ChatContext(ctx, obj.chat.id)


def _query(answer_type: Any) -> Callable[[Context, Any], Context]:
    def build(ctx: Context, query: Any) -> Context:
        return QueryContext(ctx, query.id, answer_type)
    return build


def _poll_answer(ctx: Context, answer: Any) -> Context:
    if answer.user is not None:
        return UserContext(ctx, answer.user.id)
    return ctx


def _plain(ctx: Context, _: Any) -> Context:
    return ctx


_BUILDERS = {
    "message": _message,
    "edited_message": _message,
    "channel_post": _message,
    "edited_channel_post": _message,
    "business_connection": lambda ctx, conn: UserContext(ctx, conn.user.id),
    "business_message": _message,
    "edited_business_message": _message,
    "deleted_business_messages": _chat,
    "callback_query": _query(CallbackAnswer),
    "message_reaction": _reaction,
    "message_reaction_count": _reaction,
    "inline_query": _query(InlineAnswer),
    "chosen_inline_result": _sender,
    "shipping_query": _query(ShippingAnswer),
    "pre_checkout_query": _query(PreCheckoutAnswer),
    "purchased_paid_media": _sender,
    "poll": _plain,
    "poll_answer": _poll_answer,
    "my_chat_member": _member,
    "chat_member": _member,
    "chat_join_request": _join_request,
    "chat_boost": _chat,
    "removed_chat_boost": _chat,
}


# ── Handler table ────────────────────────────────────────────────────────────


@dataclass
class Handler:
    """Per-kind callbacks, declared in the order the update fields are."""

    on_message: Optional[Callback] = None
    on_edited_message: Optional[Callback] = None
    on_channel_post: Optional[Callback] = None
    on_edited_channel_post: Optional[Callback] = None
    on_business_connection: Optional[Callback] = None
    on_business_message: Optional[Callback] = None
    on_edited_business_message: Optional[Callback] = None
    on_deleted_business_messages: Optional[Callback] = None
    on_callback_query: Optional[Callback] = None
    on_message_reaction: Optional[Callback] = None
    on_message_reaction_count: Optional[Callback] = None
    on_inline_query: Optional[Callback] = None
    on_chosen_inline_result: Optional[Callback] = None
    on_shipping_query: Optional[Callback] = None
    on_pre_checkout_query: Optional[Callback] = None
    on_purchased_paid_media: Optional[Callback] = None
    on_poll: Optional[Callback] = None
    on_poll_answer: Optional[Callback] = None
    on_my_chat_member: Optional[Callback] = None
    on_chat_member: Optional[Callback] = None
    on_chat_join_request: Optional[Callback] = None
    on_chat_boost: Optional[Callback] = None
    on_removed_chat_boost: Optional[Callback] = None

    def callback(self, kind: str) -> Optional[Callback]:
        return getattr(self, _PREFIX + kind, None)

    def allowed(self) -> List[str]:
        """Update kinds that have a callback, for ``allowed_updates``."""
        return [f.name[len(_PREFIX):] for f in fields(self) if getattr(self, f.name) is not None]

    async def handle(self, ctx: Context, update: Update) -> Optional[Piggyback]:
        """Run the callback of the first populated field that has one."""
        for kind in UPDATE_KINDS:
            value = getattr(update, kind)
            if value is None:
                continue
            callback = self.callback(kind)
            if callback is None:
                continue
            sub = _BUILDERS[kind](ctx.child(kind), value)
            return await callback(sub, value)

        logger.debug("No callback for update", extra={"update_id": update.update_id, "kind": update.kind()})
        return None
