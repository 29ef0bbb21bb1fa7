"""BotAPI -- transport adapter for the Telegram Bot API.

Every method call goes through :meth:`BotAPI.request`:

1. the URL is ``api_url + token + "/" + method``;
2. the payload picks its own encoding (form or streamed multipart);
3. the blocking POST runs in a worker thread (:func:`asyncio.to_thread`),
   raced against an optional cancellation scope;
4. the JSON envelope is decoded and the result validated as the requested
   type.

Failures surface as one of :class:`~botapi.exceptions.HTTPError`,
:class:`~botapi.exceptions.JSONError` or
:class:`~botapi.exceptions.APIException`; cancellation and deadlines are
re-raised unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, BinaryIO, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from botapi.exceptions import APIException, HTTPError, JSONError, VariantError
from botapi.http import HTTPClient, RequestsHTTP
from botapi.inputs import Inputtable
from botapi.methods import DeleteWebhook, GetFile, GetMe, GetUpdates, GetWebhookInfo, SetWebhook
from botapi.models import File, Response, Update, User, WebhookInfo
from botapi.payload import Payload

if TYPE_CHECKING:
    from dispatch.context import CancelScope

DEFAULT_API_URL = "https://api.telegram.org/bot"
DEFAULT_FILE_URL = "https://api.telegram.org/file/bot"

# Child of the project logger so records share its JSON handlers.
_api_logger = logging.getLogger("tgwire.botapi")


class Empty:
    """Result marker: the call's result is discarded without validation."""


class BotAPI:
    """Client for one bot.

    Args:
        token: Bot token issued by @BotFather.
        api_url: Base URL for method calls; the token is appended to it.
        file_url: Base URL for file downloads; the token is appended to it.
        http: Blocking HTTP collaborator, :class:`RequestsHTTP` by default.

    Raises:
        ValueError: If *token* is empty.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        file_url: str = DEFAULT_FILE_URL,
        http: Optional[HTTPClient] = None,
    ) -> None:
        if not token:
            raise ValueError("bot token must not be empty")
        self._token = token
        self.api_url = api_url
        self.file_url = file_url
        self.http: HTTPClient = http or RequestsHTTP()
        self._adapters: Dict[Any, TypeAdapter] = {}

    def __repr__(self) -> str:
        return f"BotAPI(api_url={self.api_url!r})"

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _mask(self, url: str) -> str:
        return url.replace(self._token, "<token>")

    def _adapter(self, result: Any) -> TypeAdapter:
        adapter = self._adapters.get(result)
        if adapter is None:
            adapter = self._adapters[result] = TypeAdapter(result)
        return adapter

    @staticmethod
    async def _guarded(call: Any, scope: Optional["CancelScope"]) -> Any:
        if scope is None:
            return await call
        return await scope.guard(call)

    # ------------------------------------------------------------------
    #  Core
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        payload: Optional[Payload] = None,
        result: Any = Empty,
        scope: Optional["CancelScope"] = None,
    ) -> Any:
        """Call *method* and return its result validated as *result*.

        Raises:
            HTTPError: The request did not produce a response.
            JSONError: The response could not be decoded.
            APIException: The envelope carried ``ok=false``.
            asyncio.CancelledError: *scope* was cancelled.
            TimeoutError: The deadline of *scope* expired.
        """
        if payload is None:
            payload = Payload()
        params, files = payload.snapshot()
        url = f"{self.api_url}{self._token}/{method}"
        content_type, body = payload.encode()

        _api_logger.debug("Calling Bot API method", extra={"api_method": method, "params": sorted(params), "files": sorted(files)})
        try:
            status, data = await self._guarded(
                asyncio.to_thread(self.http.post, url, content_type, body), scope
            )
        except (asyncio.CancelledError, TimeoutError):
            raise
        except Exception as exc:
            _api_logger.warning("Bot API transport error", extra={"api_method": method, "error": type(exc).__name__})
            raise HTTPError(method, params, files, cause=exc, url=self._mask(url), redact=self._token) from exc

        try:
            envelope = Response.model_validate_json(data)
        except ValidationError as exc:
            raise JSONError(method, params, files, cause=exc, status=status, response=data) from exc

        if not envelope.ok:
            error = APIException.from_response(envelope, method, params, files)
            _api_logger.info("Bot API error", extra={"api_method": method, "error_code": error.error_code, "description": error.description})
            raise error

        if result is Empty:
            return None
        try:
            return self._adapter(result).validate_python(envelope.result)
        except (ValidationError, VariantError) as exc:
            raise JSONError(method, params, files, cause=exc, status=status, response=data) from exc

    async def download(self, path: str, scope: Optional["CancelScope"] = None) -> BinaryIO:
        """Open the file at *path* (``File.file_path``) for reading.

        The caller owns the returned stream and must close it.

        Raises:
            HTTPError: On transport failure or a non-200 status.
        """
        url = f"{self.file_url}{self._token}/{path}"
        params = {"path": path}
        try:
            status, stream = await self._guarded(asyncio.to_thread(self.http.get, url), scope)
        except (asyncio.CancelledError, TimeoutError):
            raise
        except Exception as exc:
            raise HTTPError("download", params, cause=exc, url=self._mask(url), redact=self._token) from exc
        if status != 200:
            stream.close()
            raise HTTPError("download", params, status=status, url=self._mask(url))
        return stream

    async def download_bytes(self, path: str, scope: Optional["CancelScope"] = None) -> bytes:
        """Download the file at *path* completely."""
        stream = await self.download(path, scope)
        try:
            return await self._guarded(asyncio.to_thread(stream.read), scope)
        finally:
            stream.close()

    # ------------------------------------------------------------------
    #  Convenience methods
    # ------------------------------------------------------------------

    async def _call(self, call: Any, scope: Optional["CancelScope"]) -> Any:
        return await self.request(call.METHOD, Payload.from_object(call), call.RESULT, scope)

    async def get_me(self, scope: Optional["CancelScope"] = None) -> User:
        """A simple method for testing your bot's auth token."""
        return await self._call(GetMe(), scope)

    async def get_updates(
        self,
        offset: int = 0,
        limit: int = 0,
        timeout: int = 0,
        allowed_updates: Optional[List[str]] = None,
        scope: Optional["CancelScope"] = None,
    ) -> List[Update]:
        """Receive incoming updates using long polling."""
        return await self._call(GetUpdates(offset, limit, timeout, allowed_updates), scope)

    async def set_webhook(
        self,
        url: str,
        certificate: Optional[Inputtable] = None,
        ip_address: str = "",
        max_connections: int = 0,
        allowed_updates: Optional[List[str]] = None,
        drop_pending_updates: bool = False,
        secret_token: str = "",
        scope: Optional["CancelScope"] = None,
    ) -> bool:
        """Specify a URL and receive incoming updates via an outgoing webhook."""
        call = SetWebhook(
            url=url,
            certificate=certificate,
            ip_address=ip_address,
            max_connections=max_connections,
            allowed_updates=allowed_updates,
            drop_pending_updates=drop_pending_updates,
            secret_token=secret_token,
        )
        return await self._call(call, scope)

    async def delete_webhook(self, drop_pending_updates: bool = False, scope: Optional["CancelScope"] = None) -> bool:
        """Remove webhook integration to switch back to :meth:`get_updates`."""
        return await self._call(DeleteWebhook(drop_pending_updates), scope)

    async def get_webhook_info(self, scope: Optional["CancelScope"] = None) -> WebhookInfo:
        return await self._call(GetWebhookInfo(), scope)

    async def get_file(self, file_id: str, scope: Optional["CancelScope"] = None) -> File:
        """Resolve a ``file_id`` to a :class:`~botapi.models.File` ready for :meth:`download`."""
        return await self._call(GetFile(file_id), scope)
