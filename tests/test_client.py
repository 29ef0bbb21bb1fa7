"""Tests for BotAPI and the exception taxonomy."""

import asyncio
import io
import json
import os
import sys
import time
from typing import Any, List
from unittest.mock import MagicMock
from urllib.parse import parse_qs

import pytest
import requests

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botapi import APIException, BotAPI, HTTPError, InputFile, JSONError, Payload
from botapi.exceptions import BotAPIError
from botapi.http import RequestsHTTP
from botapi.methods import SendPhoto
from botapi.models import Message, Update, User
from dispatch.context import CancelScope

TOKEN = "123:secret-token"


class FakeHTTP:
    """Records requests and replays canned responses."""

    def __init__(self, *responses: Any) -> None:
        self.responses: List[Any] = list(responses)
        self.calls: List[tuple] = []
        self.downloads: List[str] = []

    def post(self, url: str, content_type: str, body: Any) -> tuple:
        data = body if isinstance(body, bytes) else b"".join(body)
        self.calls.append((url, content_type, data))
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, bytes):
            return 200, response
        return 200, json.dumps(response).encode()

    def get(self, url: str) -> tuple:
        self.downloads.append(url)
        return self.responses.pop(0)


def _ok(result: Any) -> dict:
    return {"ok": True, "result": result}


def _form(body: bytes) -> dict:
    return {k: v[0] for k, v in parse_qs(body.decode()).items()}


MESSAGE = {"message_id": 7, "date": 1700000000, "chat": {"id": 100, "type": "private"}, "text": "hi"}


# ── Exceptions ───────────────────────────────────────────────────────────────


class TestAPIException:
    """Validate the ok=false error."""

    def test_attributes(self) -> None:
        exc = APIException(403, "Forbidden", method="sendMessage", params={"chat_id": "1"})
        assert exc.error_code == 403
        assert exc.description == "Forbidden"
        assert "403" in str(exc)
        assert "Forbidden" in str(exc)
        assert "sendMessage chat_id=1" in str(exc)

    def test_default_description(self) -> None:
        assert "Unknown error" in str(APIException(500))

    def test_equality_by_code(self) -> None:
        assert APIException(429, "Too Many Requests", retry_after=5) == APIException.from_code(429)
        assert APIException(429) != APIException.from_code(400)
        assert hash(APIException(429)) == hash(APIException.from_code(429))

    def test_is_bot_api_error(self) -> None:
        assert issubclass(APIException, BotAPIError)
        assert issubclass(HTTPError, BotAPIError)
        assert issubclass(JSONError, BotAPIError)

    def test_files_listed(self) -> None:
        exc = BotAPIError("sendPhoto", {"chat_id": "1"}, {"photo": "cat.jpg"})
        assert str(exc).endswith("chat_id=1 \n[file] photo: cat.jpg")


# ── Construction ─────────────────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation."""

    def test_empty_token(self) -> None:
        with pytest.raises(ValueError):
            BotAPI("")

    def test_default_http(self) -> None:
        assert isinstance(BotAPI(TOKEN).http, RequestsHTTP)

    def test_repr_hides_token(self) -> None:
        assert TOKEN not in repr(BotAPI(TOKEN))


# ── request ──────────────────────────────────────────────────────────────────


class TestRequest:
    """Validate the request pipeline."""

    @pytest.mark.asyncio
    async def test_send_text(self) -> None:
        http = FakeHTTP(_ok(MESSAGE))
        api = BotAPI(TOKEN, http=http)

        payload = Payload().set_int("chat_id", 100).set("text", "hi")
        message = await api.request("sendMessage", payload, Message)

        url, content_type, body = http.calls[0]
        assert url == f"https://api.telegram.org/bot{TOKEN}/sendMessage"
        assert content_type == "application/x-www-form-urlencoded"
        assert _form(body) == {"chat_id": "100", "text": "hi"}
        assert isinstance(message, Message)
        assert message.message_id == 7
        assert message.chat.is_private

    @pytest.mark.asyncio
    async def test_send_photo_multipart(self) -> None:
        data = b"\x89\x50\x4e\x47" + b"\x00" * 32
        http = FakeHTTP(_ok(MESSAGE))
        api = BotAPI(TOKEN, http=http)

        call = SendPhoto(chat_id=100, photo=InputFile.from_bytes("cat.jpg", data))
        await api.request(call.METHOD, Payload.from_object(call), call.RESULT)

        _, content_type, body = http.calls[0]
        assert content_type.startswith("multipart/form-data; boundary=")
        assert b'name="photo"; filename="cat.jpg"' in body
        assert data in body

    @pytest.mark.asyncio
    async def test_resending_uploaded_file_fails_before_transport(self) -> None:
        http = FakeHTTP(_ok(MESSAGE))
        api = BotAPI(TOKEN, http=http)
        photo = InputFile.from_bytes("cat.jpg", b"meow")
        await api.request("sendPhoto", Payload().set_int("chat_id", 100).set_file("photo", photo), Message)

        payload = Payload().set_int("chat_id", 100)
        payload.files["photo"] = photo
        with pytest.raises(ValueError, match="already uploaded"):
            await api.request("sendPhoto", payload, Message)
        assert len(http.calls) == 1

    @pytest.mark.asyncio
    async def test_custom_api_url(self) -> None:
        http = FakeHTTP(_ok(True))
        api = BotAPI(TOKEN, api_url="http://localhost:8081/bot", http=http)
        await api.request("close")
        assert http.calls[0][0] == f"http://localhost:8081/bot{TOKEN}/close"

    @pytest.mark.asyncio
    async def test_empty_result_marker(self) -> None:
        api = BotAPI(TOKEN, http=FakeHTTP(_ok({"anything": 1})))
        assert await api.request("logOut") is None

    @pytest.mark.asyncio
    async def test_api_error_mapping(self) -> None:
        envelope = {
            "ok": False,
            "error_code": 429,
            "description": "Too Many Requests: retry after 5",
            "parameters": {"retry_after": 5},
        }
        api = BotAPI(TOKEN, http=FakeHTTP(envelope))
        with pytest.raises(APIException) as exc_info:
            await api.request("sendMessage", Payload().set_int("chat_id", 1), Message)
        exc = exc_info.value
        assert exc.error_code == 429
        assert exc.retry_after == 5
        assert exc.method == "sendMessage"
        assert exc.params == {"chat_id": "1"}
        assert exc == APIException.from_code(429)

    @pytest.mark.asyncio
    async def test_migrate_to_chat_id(self) -> None:
        envelope = {"ok": False, "error_code": 400, "description": "migrated", "parameters": {"migrate_to_chat_id": -1001}}
        api = BotAPI(TOKEN, http=FakeHTTP(envelope))
        with pytest.raises(APIException) as exc_info:
            await api.request("sendMessage")
        assert exc_info.value.migrate_to_chat_id == -1001

    @pytest.mark.asyncio
    async def test_transport_error_masks_token(self) -> None:
        failure = requests.ConnectionError(f"Max retries exceeded with url: /bot{TOKEN}/getMe")
        api = BotAPI(TOKEN, http=FakeHTTP(failure))
        with pytest.raises(HTTPError) as exc_info:
            await api.request("getMe", result=User)
        exc = exc_info.value
        assert exc.cause is failure
        assert exc.method == "getMe"
        assert TOKEN not in str(exc)
        assert "<token>" in exc.url

    @pytest.mark.asyncio
    async def test_undecodable_body(self) -> None:
        api = BotAPI(TOKEN, http=FakeHTTP(b"<html>bad gateway</html>"))
        with pytest.raises(JSONError) as exc_info:
            await api.request("getMe", result=User)
        assert exc_info.value.response == b"<html>bad gateway</html>"
        assert exc_info.value.status == 200

    @pytest.mark.asyncio
    async def test_result_shape_mismatch(self) -> None:
        api = BotAPI(TOKEN, http=FakeHTTP(_ok("not a message")))
        with pytest.raises(JSONError):
            await api.request("sendMessage", result=Message)

    @pytest.mark.asyncio
    async def test_cancelled_scope_skips_transport(self) -> None:
        http = MagicMock()
        api = BotAPI(TOKEN, http=http)
        scope = CancelScope()
        scope.cancel()
        with pytest.raises(asyncio.CancelledError):
            await api.request("getMe", scope=scope)
        http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_deadline(self) -> None:
        class SlowHTTP(FakeHTTP):
            def post(self, url: str, content_type: str, body: Any) -> tuple:
                time.sleep(0.3)
                return 200, b'{"ok":true,"result":true}'

        api = BotAPI(TOKEN, http=SlowHTTP())
        with pytest.raises(TimeoutError):
            await api.request("getMe", scope=CancelScope(timeout=0.05))

    @pytest.mark.asyncio
    async def test_cancel_in_flight(self) -> None:
        class SlowHTTP(FakeHTTP):
            def post(self, url: str, content_type: str, body: Any) -> tuple:
                time.sleep(0.3)
                return 200, b'{"ok":true,"result":true}'

        api = BotAPI(TOKEN, http=SlowHTTP())
        scope = CancelScope()
        asyncio.get_running_loop().call_later(0.05, scope.cancel)
        with pytest.raises(asyncio.CancelledError):
            await api.request("getMe", scope=scope)


# ── Downloads ────────────────────────────────────────────────────────────────


class TestDownload:
    """File downloads use the file URL and GET."""

    @pytest.mark.asyncio
    async def test_download_bytes(self) -> None:
        http = FakeHTTP((200, io.BytesIO(b"file-contents")))
        api = BotAPI(TOKEN, http=http)
        assert await api.download_bytes("photos/file_1.jpg") == b"file-contents"
        assert http.downloads == [f"https://api.telegram.org/file/bot{TOKEN}/photos/file_1.jpg"]

    @pytest.mark.asyncio
    async def test_download_not_found(self) -> None:
        stream = io.BytesIO(b"not found")
        api = BotAPI(TOKEN, http=FakeHTTP((404, stream)))
        with pytest.raises(HTTPError) as exc_info:
            await api.download("missing")
        assert exc_info.value.status == 404
        assert exc_info.value.method == "download"
        assert stream.closed


# ── Convenience methods ──────────────────────────────────────────────────────


class TestEndpointMethods:
    """Spot-check the convenience wrappers."""

    @pytest.mark.asyncio
    async def test_get_me(self) -> None:
        http = FakeHTTP(_ok({"id": 1, "is_bot": True, "first_name": "Bot", "username": "tg_bot"}))
        me = await BotAPI(TOKEN, http=http).get_me()
        assert me.username == "tg_bot"
        assert http.calls[0][0].endswith("/getMe")

    @pytest.mark.asyncio
    async def test_get_updates_params(self) -> None:
        http = FakeHTTP(_ok([{"update_id": 10, "message": MESSAGE}]))
        updates = await BotAPI(TOKEN, http=http).get_updates(offset=5, limit=100, timeout=30, allowed_updates=["message"])
        assert isinstance(updates[0], Update)
        assert updates[0].kind() == "message"
        assert _form(http.calls[0][2]) == {
            "offset": "5",
            "limit": "100",
            "timeout": "30",
            "allowed_updates": '["message"]',
        }

    @pytest.mark.asyncio
    async def test_set_webhook_uploads_certificate(self) -> None:
        http = FakeHTTP(_ok(True))
        cert = InputFile.from_bytes("cert.pem", b"-----BEGIN CERTIFICATE-----")
        ok = await BotAPI(TOKEN, http=http).set_webhook("https://example.com/hook", certificate=cert, secret_token="s3")
        assert ok is True
        _, content_type, body = http.calls[0]
        assert content_type.startswith("multipart/form-data")
        assert b'name="certificate"; filename="cert.pem"' in body
        assert b'name="secret_token"\r\n\r\ns3\r\n' in body
