"""Context tree -- cancellation, display path and inherited parameters.

A :class:`Context` is immutable.  Deriving a child never mutates the
parent; the base payload is copied on write.  Every request issued through
a context merges the base parameters into the call's payload (the call's
own keys win) and runs under the context's :class:`CancelScope`.

Paths are joined with ``::``, e.g. ``bot::message::callback``.

Sub-contexts bind the identifiers an update refers to so handlers can act
on "this chat" or "this message" without repeating them::

    async def on_message(ctx: MessageContext, msg: Message) -> None:
        await ctx.reply("pong")
"""

from __future__ import annotations

import asyncio
import logging
import time
import weakref
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, BinaryIO, List, Mapping, Optional, TypeVar, Union

from botapi.client import BotAPI, Empty
from botapi.inputs import InputMedia, Inputtable
from botapi.methods import (
    ApproveChatJoinRequest,
    BanChatMember,
    DeclineChatJoinRequest,
    DeleteMessage,
    EditMessageReplyMarkup,
    EditMessageText,
    GetUserProfilePhotos,
    SendChatAction,
    SendDocument,
    SendMediaGroup,
    SendMessage,
    SendOptions,
    SendPhoto,
    UnbanChatMember,
)
from botapi.models import (
    CallbackQuery,
    ChosenInlineResult,
    File,
    Message,
    MessageEntity,
    ReplyMarkup,
    ReplyParameters,
    UserProfilePhotos,
)
from botapi.payload import Payload
from core.logger import BotLogger

T = TypeVar("T")

PATH_SEPARATOR = "::"

ChatID = Union[int, str]


# ── Cancellation ─────────────────────────────────────────────────────────────


class CancelScope:
    """Cancellation token with an optional deadline, linked to a parent scope.

    Cancelling a scope cancels all of its descendants.  A child's deadline
    never exceeds its parent's.
    """

    def __init__(self, parent: Optional["CancelScope"] = None, timeout: Optional[float] = None) -> None:
        self._event = asyncio.Event()
        self._children: "weakref.WeakSet[CancelScope]" = weakref.WeakSet()
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + timeout
        if parent is not None:
            parent._children.add(self)
            if parent.deadline is not None and (self._deadline is None or parent.deadline < self._deadline):
                self._deadline = parent.deadline
            if parent.cancelled:
                self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def deadline(self) -> Optional[float]:
        """Deadline on the :func:`time.monotonic` clock, if any."""
        return self._deadline

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def child(self, timeout: Optional[float] = None) -> "CancelScope":
        return CancelScope(self, timeout)

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        for child in list(self._children):
            child.cancel()

    async def wait(self) -> None:
        """Block until the scope is cancelled."""
        await self._event.wait()

    async def guard(self, aw: Awaitable[T]) -> T:
        """Await *aw*, aborting it when the scope is cancelled or its deadline passes.

        Raises:
            asyncio.CancelledError: The scope was cancelled.
            TimeoutError: The deadline expired first.
        """
        remaining = self.remaining()
        if self.cancelled or (remaining is not None and remaining <= 0):
            if asyncio.iscoroutine(aw):
                aw.close()
            self._raise()

        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task in done:
            return task.result()
        task.cancel()
        self._raise()

    def _raise(self) -> None:
        if self.cancelled:
            raise asyncio.CancelledError("context cancelled")
        raise TimeoutError("context deadline exceeded")


# ── Logging ──────────────────────────────────────────────────────────────────


class _ContextLogger(logging.LoggerAdapter):
    """Tags records with the context path, keeping the caller's ``extra``."""

    def process(self, msg: Any, kwargs: Any) -> Any:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


# ── Context ──────────────────────────────────────────────────────────────────


class Context:
    """Immutable node of the context tree.

    Attributes:
        api: Transport of the bot this context belongs to.
        name: Display path, segments joined with ``::``.
        scope: Cancellation scope every request runs under.
    """

    def __init__(
        self,
        api: BotAPI,
        name: str = "",
        base: Optional[Payload] = None,
        scope: Optional[CancelScope] = None,
    ) -> None:
        self.api = api
        self.name = name
        self._base = base if base is not None else Payload()
        self.scope = scope if scope is not None else CancelScope()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, base={dict(self._base.params)!r})"

    @property
    def base(self) -> Mapping[str, str]:
        """Read-only view of the inherited parameters."""
        return MappingProxyType(self._base.params)

    @property
    def cancelled(self) -> bool:
        return self.scope.cancelled

    # ── derivation ───────────────────────────────────────────────────────

    def _derive(
        self,
        name: Optional[str] = None,
        base: Optional[Payload] = None,
        scope: Optional[CancelScope] = None,
    ) -> "Context":
        return Context(
            self.api,
            self.name if name is None else name,
            self._base if base is None else base,
            self.scope if scope is None else scope,
        )

    def child(self, name: str) -> "Context":
        """Return a child whose path is extended by *name*; an empty name returns ``self``."""
        if not name:
            return self
        path = f"{self.name}{PATH_SEPARATOR}{name}" if self.name else name
        return self._derive(name=path)

    def with_payload(self, payload: Payload) -> "Context":
        """Return a child whose base also holds *payload*'s parameters (they override inherited ones)."""
        return self._derive(base=self._base.merge_into(payload.copy()))

    def reset(self) -> "Context":
        """Return a child with an empty base payload and the same path."""
        return self._derive(base=Payload())

    def with_cancel(self) -> "Context":
        return self._derive(scope=self.scope.child())

    def with_timeout(self, seconds: float) -> "Context":
        return self._derive(scope=self.scope.child(seconds))

    def cancel(self) -> None:
        """Cancel this context's scope and every scope derived from it."""
        self.scope.cancel()

    @property
    def logger(self) -> logging.LoggerAdapter:
        return _ContextLogger(BotLogger.get_logger(), {"context": self.name})

    # ── requests ─────────────────────────────────────────────────────────

    async def request(self, method: str, payload: Optional[Payload] = None, result: Any = Empty) -> Any:
        """Call *method* with the base parameters merged into *payload*."""
        if payload is None:
            payload = Payload()
        self._base.merge_into(payload)
        return await self.api.request(method, payload, result, self.scope)

    async def call(self, call: Any) -> Any:
        """Send a method record from :mod:`botapi.methods`."""
        return await self.request(call.METHOD, Payload.from_object(call), call.RESULT)

    async def download(self, path: str) -> BinaryIO:
        return await self.api.download(path, self.scope)

    async def download_bytes(self, path: str) -> bytes:
        return await self.api.download_bytes(path, self.scope)

    async def get_file(self, file_id: str) -> File:
        return await self.api.get_file(file_id, self.scope)


# ── Sub-contexts ─────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class MessageID:
    """Identity of a message: chat and message id, or an inline message id."""

    chat_id: int = 0
    message_id: int = 0
    inline_message_id: str = ""

    @classmethod
    def from_message(cls, message: Message) -> "MessageID":
        return cls(chat_id=message.chat.id, message_id=message.message_id)

    @classmethod
    def from_callback(cls, query: CallbackQuery) -> "MessageID":
        if query.message is not None:
            return cls.from_message(query.message)
        return cls(inline_message_id=query.inline_message_id or "")

    @classmethod
    def from_inline_result(cls, result: ChosenInlineResult) -> "MessageID":
        return cls(inline_message_id=result.inline_message_id or "")

    @property
    def is_inline(self) -> bool:
        return bool(self.inline_message_id)

    def marshal_payload(self, payload: Payload) -> None:
        if self.inline_message_id:
            payload.set("inline_message_id", self.inline_message_id)
            return
        payload.set_int("chat_id", self.chat_id, force=True)
        payload.set_int("message_id", self.message_id, force=True)


def _bound(ctx: Context, payload: Payload) -> tuple:
    return ctx.api, ctx.name, ctx._base.merge_into(payload), ctx.scope


class ChatContext(Context):
    """Context bound to one chat; ``chat_id`` is part of the base payload."""

    def __init__(self, ctx: Context, chat_id: ChatID) -> None:
        payload = Payload()
        if isinstance(chat_id, int):
            payload.set_int("chat_id", chat_id, force=True)
        else:
            payload.set("chat_id", chat_id)
        super().__init__(*_bound(ctx, payload))
        self.chat_id = chat_id

    async def send_message(
        self,
        text: str,
        parse_mode: str = "",
        entities: Optional[List[MessageEntity]] = None,
        options: Optional[SendOptions] = None,
    ) -> Message:
        return await self.call(SendMessage(self.chat_id, text, parse_mode, entities, options or SendOptions()))

    async def send_photo(self, photo: Inputtable, caption: str = "", options: Optional[SendOptions] = None) -> Message:
        return await self.call(SendPhoto(self.chat_id, photo, caption=caption, options=options or SendOptions()))

    async def send_document(self, document: Inputtable, caption: str = "", options: Optional[SendOptions] = None) -> Message:
        return await self.call(SendDocument(self.chat_id, document, caption=caption, options=options or SendOptions()))

    async def send_media_group(self, media: List[InputMedia], options: Optional[SendOptions] = None) -> List[Message]:
        return await self.call(SendMediaGroup(self.chat_id, media, options or SendOptions()))

    async def send_chat_action(self, action: str) -> bool:
        return await self.call(SendChatAction(self.chat_id, action))


class MessageContext(Context):
    """Context bound to one message (chat or inline)."""

    def __init__(self, ctx: Context, message_id: MessageID) -> None:
        payload = Payload()
        message_id.marshal_payload(payload)
        super().__init__(*_bound(ctx, payload))
        self.message_id = message_id

    async def edit_text(self, text: str, parse_mode: str = "", reply_markup: Optional[ReplyMarkup] = None) -> Any:
        return await self.call(EditMessageText(text, parse_mode, reply_markup=reply_markup))

    async def edit_reply_markup(self, reply_markup: Optional[ReplyMarkup]) -> Any:
        return await self.call(EditMessageReplyMarkup(reply_markup))

    async def delete(self) -> bool:
        return await self.call(DeleteMessage())

    async def reply(self, text: str, parse_mode: str = "", reply_markup: Optional[ReplyMarkup] = None) -> Message:
        """Send *text* to the message's chat as a reply to it.

        Raises:
            ValueError: For inline messages, which have no chat to reply in.
        """
        if self.message_id.is_inline:
            raise ValueError("cannot reply to an inline message")
        options = SendOptions(
            reply_parameters=ReplyParameters(message_id=self.message_id.message_id),
            reply_markup=reply_markup,
        )
        payload = Payload.from_object(SendMessage(self.message_id.chat_id, text, parse_mode, options=options))
        # sendMessage takes the target through reply_parameters, not message_id.
        base = self._base.copy()
        base.params.pop("message_id", None)
        base.merge_into(payload)
        return await self.api.request(SendMessage.METHOD, payload, SendMessage.RESULT, self.scope)


class UserContext(Context):
    """Context bound to one user; ``user_id`` is part of the base payload."""

    def __init__(self, ctx: Context, user_id: int) -> None:
        super().__init__(*_bound(ctx, Payload().set_int("user_id", user_id, force=True)))
        self.user_id = user_id

    async def get_profile_photos(self, offset: int = 0, limit: int = 0) -> UserProfilePhotos:
        return await self.call(GetUserProfilePhotos(self.user_id, offset, limit))


class ChatMemberContext(Context):
    """Context bound to one member of one chat."""

    def __init__(self, ctx: Context, chat_id: int, user_id: int) -> None:
        payload = Payload().set_int("chat_id", chat_id, force=True).set_int("user_id", user_id, force=True)
        super().__init__(*_bound(ctx, payload))
        self.chat_id = chat_id
        self.user_id = user_id

    async def ban(self, until_date: int = 0, revoke_messages: bool = False) -> bool:
        return await self.call(BanChatMember(until_date, revoke_messages))

    async def unban(self, only_if_banned: bool = False) -> bool:
        return await self.call(UnbanChatMember(only_if_banned))

    async def approve_join(self) -> bool:
        return await self.call(ApproveChatJoinRequest())

    async def decline_join(self) -> bool:
        return await self.call(DeclineChatJoinRequest())
