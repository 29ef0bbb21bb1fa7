"""Tests for the Pydantic wire models."""

import os
import sys

import pytest
from pydantic import ValidationError

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botapi.models import (
    UPDATE_KINDS,
    CallbackQuery,
    Chat,
    ChatMemberMember,
    ChatMemberUpdated,
    Error,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    Message,
    MessageOriginHiddenUser,
    Response,
    Update,
    User,
    WebhookInfo,
)

USER = {"id": 42, "is_bot": False, "first_name": "Ada"}
CHAT = {"id": 100, "type": "private", "first_name": "Ada"}


# ── Envelope ─────────────────────────────────────────────────────────────────


class TestResponse:
    """Validate the result envelope."""

    def test_success(self) -> None:
        envelope = Response.model_validate_json('{"ok":true,"result":[1,2]}')
        assert envelope.ok is True
        assert envelope.result == [1, 2]
        assert envelope.error_code is None

    def test_failure(self) -> None:
        envelope = Response.model_validate({
            "ok": False,
            "error_code": 400,
            "description": "Bad Request: chat not found",
        })
        assert envelope.ok is False
        assert envelope.error_code == 400
        assert envelope.parameters is None

    def test_missing_ok(self) -> None:
        with pytest.raises(ValidationError):
            Response.model_validate({"result": True})

    def test_error_model(self) -> None:
        err = Error(error_code=403, description="Forbidden")
        assert err.ok is False


# ── Users and chats ──────────────────────────────────────────────────────────


class TestChat:
    """Validate chat helpers."""

    @pytest.mark.parametrize(
        "kind, private, group, channel",
        [
            ("private", True, False, False),
            ("group", False, True, False),
            ("supergroup", False, True, False),
            ("channel", False, False, True),
        ],
    )
    def test_type_flags(self, kind: str, private: bool, group: bool, channel: bool) -> None:
        chat = Chat(id=1, type=kind)
        assert chat.is_private is private
        assert chat.is_group is group
        assert chat.is_channel is channel


# ── Messages ─────────────────────────────────────────────────────────────────


class TestMessage:
    """Validate Message parsing."""

    def test_from_alias(self) -> None:
        msg = Message.model_validate({"message_id": 1, "date": 1, "chat": CHAT, "from": USER, "text": "hi"})
        assert msg.from_field is not None
        assert msg.from_field.first_name == "Ada"
        assert msg.model_dump(by_alias=True, exclude_none=True)["from"]["id"] == 42

    def test_populate_by_name(self) -> None:
        msg = Message(message_id=1, date=1, chat=Chat(**CHAT), from_field=User(**USER))
        assert msg.from_field.id == 42

    def test_inaccessible(self) -> None:
        assert Message(message_id=1, date=0, chat=Chat(**CHAT)).is_inaccessible
        assert not Message(message_id=1, date=5, chat=Chat(**CHAT)).is_inaccessible

    def test_nested_reply(self) -> None:
        msg = Message.model_validate({
            "message_id": 2,
            "date": 2,
            "chat": CHAT,
            "reply_to_message": {"message_id": 1, "date": 1, "chat": CHAT, "text": "first"},
        })
        assert msg.reply_to_message.text == "first"

    def test_forward_origin_variant(self) -> None:
        msg = Message.model_validate({
            "message_id": 3,
            "date": 3,
            "chat": CHAT,
            "forward_origin": {"type": "hidden_user", "date": 1, "sender_user_name": "anon"},
        })
        assert isinstance(msg.forward_origin, MessageOriginHiddenUser)
        assert msg.forward_origin.sender_user_name == "anon"

    def test_missing_required(self) -> None:
        with pytest.raises(ValidationError):
            Message.model_validate({"message_id": 1, "chat": CHAT})

    def test_inline_keyboard(self) -> None:
        markup = InlineKeyboardMarkup(inline_keyboard=[[InlineKeyboardButton(text="Ping", callback_data="ping")]])
        dumped = markup.model_dump(exclude_none=True)
        assert dumped == {"inline_keyboard": [[{"text": "Ping", "callback_data": "ping"}]]}


# ── Updates ──────────────────────────────────────────────────────────────────


class TestUpdate:
    """Validate Update and the kind registry."""

    def test_kinds_declaration_order(self) -> None:
        assert UPDATE_KINDS[0] == "message"
        assert UPDATE_KINDS[-1] == "removed_chat_boost"
        assert "update_id" not in UPDATE_KINDS
        assert len(UPDATE_KINDS) == 23
        assert len(set(UPDATE_KINDS)) == len(UPDATE_KINDS)

    def test_message_kind(self) -> None:
        update = Update.model_validate_json(
            '{"update_id":1,"message":{"message_id":1,"date":1,"chat":{"id":5,"type":"private"},"text":"hi"}}'
        )
        assert update.kind() == "message"
        assert update.message.text == "hi"

    def test_callback_query_kind(self) -> None:
        update = Update.model_validate({
            "update_id": 2,
            "callback_query": {"id": "q1", "from": USER, "chat_instance": "ci", "data": "ping"},
        })
        assert update.kind() == "callback_query"
        assert isinstance(update.callback_query, CallbackQuery)
        assert update.callback_query.from_field.id == 42

    def test_chat_member_kind(self) -> None:
        member = {"status": "member", "user": USER}
        update = Update.model_validate({
            "update_id": 3,
            "chat_member": {
                "chat": {"id": -100, "type": "supergroup"},
                "from": USER,
                "date": 1,
                "old_chat_member": {"status": "left", "user": USER},
                "new_chat_member": member,
            },
        })
        assert update.kind() == "chat_member"
        assert isinstance(update.chat_member, ChatMemberUpdated)
        assert isinstance(update.chat_member.new_chat_member, ChatMemberMember)

    def test_empty_update(self) -> None:
        assert Update(update_id=9).kind() is None

    def test_unknown_fields_ignored(self) -> None:
        update = Update.model_validate({"update_id": 4, "some_future_kind": {"x": 1}})
        assert update.kind() is None


# ── Webhook info ─────────────────────────────────────────────────────────────


class TestWebhookInfo:
    """Validate getWebhookInfo results."""

    def test_parse(self) -> None:
        info = WebhookInfo.model_validate({
            "url": "https://example.com/hook",
            "has_custom_certificate": False,
            "pending_update_count": 3,
            "allowed_updates": ["message"],
        })
        assert info.pending_update_count == 3
        assert info.allowed_updates == ["message"]
        assert info.last_error_message is None
