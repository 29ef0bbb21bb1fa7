"""HTTP collaborator used by :class:`~botapi.client.BotAPI`.

The transport only needs two blocking operations, described by
:class:`HTTPClient`.  They are run in worker threads via
:func:`asyncio.to_thread`, so an implementation must be safe for
concurrent use.  :class:`RequestsHTTP` is the default implementation on
top of a shared :class:`requests.Session`.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Iterable, Optional, Protocol, Tuple, Union

import requests

Body = Union[bytes, Iterable[bytes]]


class HTTPClient(Protocol):
    """Blocking HTTP operations the Bot API transport relies on."""

    def post(self, url: str, content_type: str, body: Body) -> Tuple[int, bytes]:
        """Send *body* and return ``(status, response bytes)``."""
        ...

    def get(self, url: str) -> Tuple[int, BinaryIO]:
        """Start a download and return ``(status, body stream)``; the caller closes the stream."""
        ...


class ResponseStream(io.RawIOBase):
    """Readable view of a streamed :class:`requests.Response`.

    Closing the stream releases the underlying connection.
    """

    def __init__(self, response: requests.Response) -> None:
        self._response = response
        self._raw = response.raw
        self._raw.decode_content = True

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[override]
        data = self._raw.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        return n

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class RequestsHTTP:
    """:class:`HTTPClient` backed by a :class:`requests.Session`.

    The read timeout must stay above the long-poll timeout passed to
    ``getUpdates``, otherwise every idle poll fails as a transport error.
    """

    _DEFAULT_TIMEOUT: Tuple[float, float] = (10.0, 60.0)

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Union[float, Tuple[float, float]] = _DEFAULT_TIMEOUT,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout

    def post(self, url: str, content_type: str, body: Body) -> Tuple[int, bytes]:
        headers = {"Content-Type": content_type} if content_type else {}
        response = self._session.post(url, data=body, headers=headers, timeout=self._timeout)
        with response:
            return response.status_code, response.content

    def get(self, url: str) -> Tuple[int, BinaryIO]:
        response = self._session.get(url, stream=True, timeout=self._timeout)
        return response.status_code, io.BufferedReader(ResponseStream(response))

    def close(self) -> None:
        self._session.close()
