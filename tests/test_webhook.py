"""Tests for the webhook endpoint, server and secret generator."""

import asyncio
import os
import re
import sys
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from botapi import InputFile, Payload
from botapi.models import Update
from dispatch import Context, Piggyback, WebhookConfig, WebhookError, WebhookHandler, WebhookServer, generate_secret
from dispatch.webhook import SECRET_HEADER

UPDATE = b'{"update_id":1,"message":{"message_id":1,"date":1,"chat":{"id":5,"type":"private"},"text":"hi"}}'


class StubHandler:
    """Returns a fixed result and records update ids."""

    def __init__(self, result: Optional[Piggyback] = None, error: Optional[Exception] = None) -> None:
        self.result = result
        self.error = error
        self.seen: List[int] = []

    def allowed(self) -> List[str]:
        return ["message", "callback_query"]

    async def handle(self, ctx: Context, update: Update) -> Optional[Piggyback]:
        self.seen.append(update.update_id)
        if self.error is not None:
            raise self.error
        return self.result


def _client(handler: StubHandler, secret: str = "", on_error=None) -> TestClient:
    endpoint = WebhookHandler(Context(MagicMock(), "bot"), handler, secret=secret, on_error=on_error)
    app = FastAPI()
    app.router.routes.append(endpoint.route("/hook"))
    return TestClient(app)


# ── Endpoint ─────────────────────────────────────────────────────────────────


class TestWebhookEndpoint:
    """Validate the request checks and responses."""

    def test_wrong_method(self) -> None:
        handler = StubHandler()
        resp = _client(handler).get("/hook")
        assert resp.status_code == 405
        assert resp.json() == {"error": "wrong http method (POST is required)"}
        assert handler.seen == []

    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE"])
    def test_other_methods_answered_by_endpoint(self, method: str) -> None:
        resp = _client(StubHandler()).request(method, "/hook", content=UPDATE)
        assert resp.status_code == 405
        assert resp.json() == {"error": "wrong http method (POST is required)"}

    def test_wrong_secret(self) -> None:
        handler = StubHandler()
        resp = _client(handler, secret="s3cr3t").post("/hook", content=UPDATE, headers={SECRET_HEADER: "nope"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "wrong secret token"}
        assert handler.seen == []

    def test_missing_secret(self) -> None:
        resp = _client(StubHandler(), secret="s3cr3t").post("/hook", content=UPDATE)
        assert resp.status_code == 403

    def test_matching_secret(self) -> None:
        handler = StubHandler()
        resp = _client(handler, secret="s3cr3t").post("/hook", content=UPDATE, headers={SECRET_HEADER: "s3cr3t"})
        assert resp.status_code == 200
        assert handler.seen == [1]

    def test_invalid_body(self) -> None:
        resp = _client(StubHandler()).post("/hook", content=b"not json")
        assert resp.status_code == 400
        assert resp.json()["error"].startswith("invalid update:")

    def test_unknown_variant_is_invalid(self) -> None:
        body = (
            b'{"update_id":2,"message_reaction":{"chat":{"id":5,"type":"group"},"message_id":1,"date":1,'
            b'"old_reaction":[],"new_reaction":[{"type":"sparkles"}]}}'
        )
        resp = _client(StubHandler()).post("/hook", content=body)
        assert resp.status_code == 400

    def test_no_call(self) -> None:
        resp = _client(StubHandler()).post("/hook", content=UPDATE)
        assert resp.status_code == 200
        assert resp.content == b""

    def test_piggyback_form(self) -> None:
        call = Piggyback("sendMessage", Payload().set_int("chat_id", 5).set("text", "ok"))
        resp = _client(StubHandler(result=call)).post("/hook", content=UPDATE)
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/x-www-form-urlencoded"
        assert resp.content == b"chat_id=5&text=ok&method=sendMessage"

    def test_piggyback_multipart(self) -> None:
        payload = Payload().set_int("chat_id", 5)
        payload.set_file("document", InputFile.from_bytes("a.txt", b"file body"))
        resp = _client(StubHandler(result=Piggyback("sendDocument", payload))).post("/hook", content=UPDATE)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b"file body" in resp.content
        assert b'name="method"\r\n\r\nsendDocument\r\n' in resp.content

    def test_handler_error_still_ok(self) -> None:
        handler = StubHandler(error=RuntimeError("boom"))
        resp = _client(handler).post("/hook", content=UPDATE)
        assert resp.status_code == 200
        assert handler.seen == [1]

    def test_on_error_hook(self) -> None:
        on_error = AsyncMock()
        _client(StubHandler(), secret="x", on_error=on_error).post("/hook", content=UPDATE)
        on_error.assert_awaited_once()
        error = on_error.call_args.args[1]
        assert isinstance(error, WebhookError)
        assert error.status == 403


# ── Config ───────────────────────────────────────────────────────────────────


class TestWebhookConfig:
    """Validate listener settings."""

    def test_path_from_url(self) -> None:
        assert WebhookConfig(url="https://example.com/bot/hook").path == "/bot/hook"

    def test_root_path(self) -> None:
        assert WebhookConfig(url="https://example.com").path == "/"

    def test_explicit_path(self) -> None:
        assert WebhookConfig(url="https://example.com/a", path="/b").path == "/b"

    def test_cert_without_key(self) -> None:
        with pytest.raises(ValueError):
            WebhookConfig(url="https://example.com", cert_file="cert.pem")

    def test_key_without_cert(self) -> None:
        with pytest.raises(ValueError):
            WebhookConfig(url="https://example.com", key_file="key.pem")

    @pytest.mark.parametrize(
        "listen, expected",
        [("127.0.0.1:9000", ("127.0.0.1", 9000)), (":8443", ("0.0.0.0", 8443))],
    )
    def test_address(self, listen: str, expected: tuple) -> None:
        assert WebhookConfig(url="https://example.com", listen=listen).address == expected

    def test_bad_address(self) -> None:
        with pytest.raises(ValueError):
            WebhookConfig(url="https://example.com", listen="localhost").address


# ── Server ───────────────────────────────────────────────────────────────────


class FakeServer:
    """Stands in for uvicorn.Server; serves until asked to exit."""

    instances: List["FakeServer"] = []

    def __init__(self, config) -> None:
        self.config = config
        self.should_exit = False
        FakeServer.instances.append(self)

    async def serve(self) -> None:
        while not self.should_exit:
            await asyncio.sleep(0.01)


class TestWebhookServer:
    """Registration and server lifecycle."""

    def test_mount(self) -> None:
        server = WebhookServer(WebhookConfig(url="https://example.com/hook", secret="s"))
        endpoint = server.mount(Context(MagicMock()), StubHandler())
        assert endpoint.secret == "s"
        resp = TestClient(server.app).get("/hook")
        assert resp.status_code == 405

    def test_mount_accepts_post(self) -> None:
        handler = StubHandler()
        server = WebhookServer(WebhookConfig(url="https://example.com/hook"))
        server.mount(Context(MagicMock()), handler)
        resp = TestClient(server.app).post("/hook", content=UPDATE)
        assert resp.status_code == 200
        assert handler.seen == [1]

    def test_mount_twice_keeps_one_route(self) -> None:
        server = WebhookServer(WebhookConfig(url="https://example.com/hook"))
        first = server.mount(Context(MagicMock()), StubHandler())
        routes = len(server.app.router.routes)
        second_handler = StubHandler()

        assert server.mount(Context(MagicMock()), second_handler) is first
        assert len(server.app.router.routes) == routes
        TestClient(server.app).post("/hook", content=UPDATE)
        assert second_handler.seen == [1]

    @pytest.mark.asyncio
    async def test_register(self, tmp_path) -> None:
        cert = tmp_path / "cert.pem"
        cert.write_bytes(b"-----BEGIN CERTIFICATE-----")
        key = tmp_path / "key.pem"
        key.write_bytes(b"key")
        config = WebhookConfig(
            url="https://example.com/hook",
            cert_file=str(cert),
            key_file=str(key),
            secret="s",
            max_connections=10,
            drop_pending=True,
        )
        api = MagicMock()
        api.set_webhook = AsyncMock(return_value=True)
        ctx = Context(api, "bot")

        assert await WebhookServer(config).register(ctx, StubHandler()) is True

        args, kwargs = api.set_webhook.call_args
        assert args == ("https://example.com/hook",)
        certificate = kwargs["certificate"]
        assert isinstance(certificate, InputFile)
        assert certificate.name == "cert.pem"
        assert certificate.reader.closed
        assert kwargs["allowed_updates"] == ["message", "callback_query"]
        assert kwargs["drop_pending_updates"] is True
        assert kwargs["max_connections"] == 10
        assert kwargs["secret_token"] == "s"
        assert kwargs["scope"] is ctx.scope

    @pytest.mark.asyncio
    async def test_register_closes_certificate_on_error(self, tmp_path) -> None:
        cert = tmp_path / "cert.pem"
        cert.write_bytes(b"cert")
        config = WebhookConfig(url="https://example.com/hook", cert_file=str(cert), key_file=str(cert))
        api = MagicMock()
        api.set_webhook = AsyncMock(side_effect=asyncio.CancelledError())

        with pytest.raises(asyncio.CancelledError):
            await WebhookServer(config).register(Context(api, "bot"), StubHandler())

        assert api.set_webhook.call_args.kwargs["certificate"].reader.closed

    @pytest.mark.asyncio
    async def test_run_until_cancelled(self) -> None:
        api = MagicMock()
        api.set_webhook = AsyncMock(return_value=True)
        ctx = Context(api, "bot")
        server = WebhookServer(WebhookConfig(url="https://example.com/hook", listen="127.0.0.1:9000"))

        FakeServer.instances.clear()
        with patch("dispatch.webhook.uvicorn.Server", FakeServer):
            task = asyncio.create_task(server.run(ctx, StubHandler()))
            await asyncio.sleep(0.05)
            assert not task.done()
            ctx.cancel()
            await asyncio.wait_for(task, 1)

        fake = FakeServer.instances[0]
        assert fake.should_exit
        assert fake.config.host == "127.0.0.1"
        assert fake.config.port == 9000
        api.set_webhook.assert_awaited_once()


# ── Secret generator ─────────────────────────────────────────────────────────


class TestGenerateSecret:
    """Validate generated secret tokens."""

    def test_default(self) -> None:
        secret = generate_secret()
        assert len(secret) == 64
        assert re.fullmatch(r"[A-Za-z0-9_-]+", secret)

    @pytest.mark.parametrize("length", [0, -1, 129])
    def test_out_of_range_length(self, length: int) -> None:
        assert len(generate_secret(length=length)) == 64

    def test_custom_length(self) -> None:
        assert len(generate_secret(length=16)) == 16
        assert len(generate_secret(length=128)) == 128

    def test_custom_encoding(self) -> None:
        secret = generate_secret(encoding=lambda raw: raw.hex(), length=10)
        assert len(secret) == 10
        assert re.fullmatch(r"[0-9a-f]+", secret)

    def test_unique(self) -> None:
        assert generate_secret() != generate_secret()
