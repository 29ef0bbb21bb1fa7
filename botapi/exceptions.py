"""Exception hierarchy for the Bot API transport.

Every failure of a method call is one of:

* :class:`HTTPError` — the request never produced a usable response
  (DNS, connect, TLS, read failures, non-200 downloads);
* :class:`JSONError` — a response arrived but could not be decoded;
* :class:`APIException` — the envelope said ``ok=false``.

Cancellation and deadlines are not wrapped: they surface as
:class:`asyncio.CancelledError` and :class:`TimeoutError`.
"""

from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional


def http_status(code: int) -> str:
    """Return ``"<code> <reason>"`` for logging, tolerating unknown codes."""
    try:
        return f"{code} {HTTPStatus(code).phrase}"
    except ValueError:
        return str(code)


class BotAPIError(Exception):
    """Base class for errors raised while calling a Bot API method.

    Attributes:
        method: Bot API method name, e.g. ``sendMessage``.
        params: Snapshot of the textual parameters sent with the call.
        files: Snapshot of the multipart uploads (field → logical file name).
        cause: The underlying exception, when there is one.
    """

    def __init__(
        self,
        method: str,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, str]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.method = method
        self.params: Dict[str, str] = dict(params or {})
        self.files: Dict[str, str] = dict(files or {})
        self.cause = cause
        super().__init__(self._reason())

    def _reason(self) -> str:
        return str(self.cause) if self.cause is not None else "request failed"

    def format_data(self) -> str:
        """Render the parameter list: ``k=v`` pairs, then one line per upload."""
        parts = [f"{k}={v} " for k, v in self.params.items()]
        parts.extend(f"\n[file] {field}: {name}" for field, name in self.files.items())
        return "".join(parts)

    def __str__(self) -> str:
        return f"{self._reason()}\n{self.method} {self.format_data()}"


class HTTPError(BotAPIError):
    """Transport-level failure: the remote could not be reached or refused the request.

    ``url`` never contains the bot token; when *redact* is given every
    occurrence of it is masked in the rendered cause as well (transport
    libraries tend to echo the request path).
    """

    def __init__(
        self,
        method: str,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, str]] = None,
        cause: Optional[BaseException] = None,
        status: int = 0,
        url: str = "",
        redact: str = "",
    ) -> None:
        self.status = status
        self.url = url
        self.detail = ""
        if cause is not None:
            self.detail = str(cause)
            if redact:
                self.detail = self.detail.replace(redact, "<token>")
        super().__init__(method, params, files, cause)

    def _reason(self) -> str:
        reason = f"http {self.url} ({http_status(self.status)})"
        if self.detail:
            reason += f": {self.detail}"
        return reason


class JSONError(BotAPIError):
    """The response body could not be decoded into the expected shape.

    Attributes:
        status: HTTP status code of the response.
        response: Raw response bytes, for diagnostics.
    """

    def __init__(
        self,
        method: str,
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, str]] = None,
        cause: Optional[BaseException] = None,
        status: int = 0,
        response: bytes = b"",
    ) -> None:
        self.status = status
        self.response = response
        super().__init__(method, params, files, cause)

    def __str__(self) -> str:
        return f"{self._reason()}\n{http_status(self.status)} {self.method} {self.format_data()}"


class APIException(BotAPIError):
    """The Bot API answered with ``ok=false``.

    Two API exceptions compare equal when they carry the same
    ``error_code``, so ``exc == APIException.from_code(429)`` is the way to
    test for a specific failure.

    Attributes:
        error_code: Numeric error code (mirrors the HTTP status).
        description: Human-readable description from the remote.
        migrate_to_chat_id: Set when the group was migrated to a supergroup.
        retry_after: Seconds to wait before repeating the request (flood control).
    """

    def __init__(
        self,
        error_code: int,
        description: str = "",
        method: str = "",
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, str]] = None,
        migrate_to_chat_id: Optional[int] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        self.error_code = error_code
        self.description = description or "Unknown error"
        self.migrate_to_chat_id = migrate_to_chat_id
        self.retry_after = retry_after
        super().__init__(method, params, files)

    @classmethod
    def from_code(cls, error_code: int) -> "APIException":
        """Build a bare exception usable as a comparison target."""
        return cls(error_code)

    @classmethod
    def from_response(
        cls,
        response: Any,
        method: str = "",
        params: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, str]] = None,
    ) -> "APIException":
        """Build from a decoded envelope (:class:`botapi.models.Response`)."""
        parameters = response.parameters
        return cls(
            error_code=response.error_code or 0,
            description=response.description or "",
            method=method,
            params=params,
            files=files,
            migrate_to_chat_id=parameters.migrate_to_chat_id if parameters else None,
            retry_after=parameters.retry_after if parameters else None,
        )

    def _reason(self) -> str:
        return f"API error {self.error_code}: {self.description}"

    def __eq__(self, other: object) -> bool:
        code = getattr(other, "error_code", None)
        if isinstance(other, APIException) or (code is not None and hasattr(other, "description")):
            return self.error_code == code
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.error_code)


class VariantError(ValueError):
    """A discriminated-union payload carried an identifier nobody registered."""

    def __init__(self, family: str, identifier: Any) -> None:
        self.family = family
        self.identifier = identifier
        super().__init__(f"{family}: unknown variant identifier {identifier!r}")
