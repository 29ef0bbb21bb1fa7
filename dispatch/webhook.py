"""Webhook update source -- FastAPI endpoint plus a uvicorn-backed server.

The endpoint accepts one update per request.  Only protocol failures
(wrong method, wrong secret, undecodable body) are answered with an error
status; a failing handler still gets ``200`` so the platform does not
redeliver the update.

A handler may answer with a :class:`~dispatch.updates.Piggyback` call,
which is written into the response body instead of being sent as a
separate request.
"""

from __future__ import annotations

import asyncio
import base64
import hmac
import secrets
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Tuple
from urllib.parse import urlsplit

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError
from starlette.routing import Route

from botapi.exceptions import VariantError
from botapi.inputs import InputFile
from botapi.models import Update
from core.logger import BotLogger
from dispatch.context import Context
from dispatch.updates import UpdateHandler

logger = BotLogger.get_logger()

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

DEFAULT_SECRET_LENGTH = 64
MAX_SECRET_LENGTH = 128


class WebhookError(Exception):
    """Protocol-level failure of a webhook request."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def response(self) -> JSONResponse:
        return JSONResponse({"error": self.message}, status_code=self.status)


ErrorHook = Callable[[Request, WebhookError], Awaitable[None]]


# ── Endpoint ─────────────────────────────────────────────────────────────────


class WebhookHandler:
    """HTTP endpoint feeding webhook requests to an update handler.

    Args:
        ctx: Context every update is handled in.
        handler: Update handler (a :class:`~dispatch.bot.Bot` or a
            :class:`~dispatch.handler.Handler`).
        secret: Expected value of the secret-token header; empty disables
            the check.
        on_error: Awaited with the request and the error for every
            protocol failure.
    """

    def __init__(
        self,
        ctx: Context,
        handler: UpdateHandler,
        secret: str = "",
        on_error: Optional[ErrorHook] = None,
    ) -> None:
        self.ctx = ctx
        self.handler = handler
        self.secret = secret
        self.on_error = on_error

    def route(self, path: str) -> Route:
        """Starlette route for *path* accepting every method (others get 405 here)."""
        return Route(path, endpoint=self.endpoint, methods=ROUTE_METHODS, name="telegram_webhook")

    async def endpoint(self, request: Request) -> Response:
        if request.method != "POST":
            return await self._fail(request, WebhookError(405, "wrong http method (POST is required)"))

        if self.secret:
            token = request.headers.get(SECRET_HEADER, "")
            if not hmac.compare_digest(token.encode("utf-8"), self.secret.encode("utf-8")):
                return await self._fail(request, WebhookError(403, "wrong secret token"))

        body = await request.body()
        try:
            update = Update.model_validate_json(body)
        except (ValidationError, VariantError) as exc:
            return await self._fail(request, WebhookError(400, f"invalid update: {exc}"))

        try:
            call = await self.handler.handle(self.ctx, update)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Webhook handler failed", extra={"update_id": update.update_id, "context": self.ctx.name})
            return Response(status_code=200)

        if call is None:
            return Response(status_code=200)

        content_type, data = call.encode()
        logger.debug("Answering webhook with piggyback call", extra={"update_id": update.update_id, "api_method": call.method})
        if isinstance(data, bytes):
            return Response(content=data, status_code=200, media_type=content_type)
        return StreamingResponse(data, status_code=200, media_type=content_type)

    async def _fail(self, request: Request, error: WebhookError) -> Response:
        logger.warning("Rejected webhook request", extra={"status": error.status, "error": error.message, "context": self.ctx.name})
        if self.on_error is not None:
            await self.on_error(request, error)
        return error.response()


# ── Server ───────────────────────────────────────────────────────────────────


@dataclass
class WebhookConfig:
    """Webhook registration and listener settings.

    ``path`` defaults to the path of ``url``; ``listen`` is ``host:port``.
    """

    url: str
    listen: str = "0.0.0.0:8443"
    path: str = ""
    cert_file: str = ""
    key_file: str = ""
    secret: str = ""
    ip_address: str = ""
    max_connections: int = 0
    drop_pending: bool = False

    def __post_init__(self) -> None:
        if self.cert_file and not self.key_file:
            raise ValueError("certificate file without key file")
        if self.key_file and not self.cert_file:
            raise ValueError("key file without certificate file")
        if not self.path:
            self.path = urlsplit(self.url).path or "/"

    @property
    def address(self) -> Tuple[str, int]:
        host, _, port = self.listen.rpartition(":")
        try:
            return host or "0.0.0.0", int(port)
        except ValueError:
            raise ValueError(f"invalid listen address {self.listen!r}") from None


class WebhookServer:
    """Registers the webhook and serves it with uvicorn until the context ends.

    ``app`` is a regular FastAPI application; extra routes can be added to
    it before :meth:`run`.
    """

    def __init__(self, config: WebhookConfig, app: Optional[FastAPI] = None) -> None:
        self.config = config
        self.app = app or FastAPI(title="tgwire-webhook", docs_url=None, redoc_url=None, openapi_url=None)
        self.server: Optional[uvicorn.Server] = None
        self.endpoint: Optional[WebhookHandler] = None

    def mount(self, ctx: Context, handler: UpdateHandler, on_error: Optional[ErrorHook] = None) -> WebhookHandler:
        """Attach a :class:`WebhookHandler` at the configured path.

        The route is added once; mounting again rebinds the existing
        endpoint to the new context and handler.
        """
        if self.endpoint is None:
            self.endpoint = WebhookHandler(ctx, handler, self.config.secret, on_error)
            self.app.router.routes.append(self.endpoint.route(self.config.path))
            return self.endpoint
        self.endpoint.ctx = ctx
        self.endpoint.handler = handler
        self.endpoint.on_error = on_error
        return self.endpoint

    async def register(self, ctx: Context, handler: UpdateHandler) -> bool:
        """Call ``setWebhook`` with the configured URL, certificate and options."""
        certificate = InputFile.from_path(self.config.cert_file) if self.config.cert_file else None
        stream = certificate.reader if certificate is not None else None
        try:
            return await ctx.api.set_webhook(
                self.config.url,
                certificate=certificate,
                ip_address=self.config.ip_address,
                max_connections=self.config.max_connections,
                allowed_updates=handler.allowed(),
                drop_pending_updates=self.config.drop_pending,
                secret_token=self.config.secret,
                scope=ctx.scope,
            )
        finally:
            if stream is not None:
                stream.close()

    async def run(self, ctx: Context, handler: UpdateHandler) -> None:
        """Register the webhook and serve until *ctx* is cancelled or expires.

        The listener is shut down gracefully; errors from the server
        propagate.
        """
        self.mount(ctx, handler)
        await self.register(ctx, handler)

        host, port = self.config.address
        config = uvicorn.Config(
            self.app,
            host=host,
            port=port,
            ssl_certfile=self.config.cert_file or None,
            ssl_keyfile=self.config.key_file or None,
            log_level="warning",
        )
        self.server = uvicorn.Server(config)
        server_task = asyncio.create_task(self.server.serve())
        waiter = asyncio.ensure_future(ctx.scope.wait())
        logger.info("Webhook server started", extra={"context": ctx.name, "path": self.config.path, "port": port})
        try:
            await asyncio.wait({server_task, waiter}, timeout=ctx.scope.remaining(), return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            self.server.should_exit = True
            await server_task
            logger.info("Webhook server stopped", extra={"context": ctx.name})


# ── Secret generator ─────────────────────────────────────────────────────────


def _urlsafe(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def generate_secret(encoding: Optional[Callable[[bytes], str]] = None, length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Return a random secret token of *length* characters.

    *encoding* turns random bytes into text; the default is unpadded
    URL-safe base64, whose alphabet (``A-Z a-z 0-9 _ -``) is what the
    platform accepts for secret tokens.  A length of 0 or above 128 is
    replaced by 64.
    """
    if length <= 0 or length > MAX_SECRET_LENGTH:
        length = DEFAULT_SECRET_LENGTH
    encode = encoding or _urlsafe
    return encode(secrets.token_bytes(length))[:length]
