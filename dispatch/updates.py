"""Shared vocabulary of the update sources.

An update handler receives the context of the source plus one decoded
:class:`~botapi.models.Update` and may return a :class:`Piggyback` call.
The long-poller executes a returned call through the API; the webhook
receiver writes it into the HTTP response instead of opening a separate
connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol, Tuple, runtime_checkable

from botapi.client import Empty
from botapi.models import Update
from botapi.payload import Body, Payload

if TYPE_CHECKING:
    from dispatch.context import Context


@dataclass
class Piggyback:
    """A method call answered in place of an outbound request."""

    method: str
    payload: Payload = field(default_factory=Payload)

    @classmethod
    def from_call(cls, call: Any) -> "Piggyback":
        """Build from a method record of :mod:`botapi.methods`."""
        return cls(call.METHOD, Payload.from_object(call))

    def encode(self) -> Tuple[str, Body]:
        """Return ``(content_type, body)`` with ``method=<name>`` added to the parameters."""
        self.payload.set("method", self.method, force=True)
        return self.payload.encode()

    async def execute(self, ctx: "Context", result: Any = Empty) -> Any:
        """Send the call as a regular request through *ctx*."""
        return await ctx.request(self.method, self.payload, result)


@runtime_checkable
class UpdateHandler(Protocol):
    """Anything that can process one update for an update source."""

    async def handle(self, ctx: "Context", update: Update) -> Optional[Piggyback]: ...  # noqa: E704

    def allowed(self) -> List[str]: ...  # noqa: E704


class FilteredHandler:
    """Passes an update to *handler* only when ``keep(update)`` is true."""

    def __init__(self, handler: UpdateHandler, keep: Callable[[Update], bool]) -> None:
        self.handler = handler
        self.keep = keep

    def allowed(self) -> List[str]:
        return self.handler.allowed()

    async def handle(self, ctx: "Context", update: Update) -> Optional[Piggyback]:
        if not self.keep(update):
            return None
        return await self.handler.handle(ctx, update)


def filter_updates(handler: UpdateHandler, keep: Optional[Callable[[Update], bool]]) -> UpdateHandler:
    """Wrap *handler* with the predicate *keep*; ``None`` returns it unchanged."""
    if keep is None:
        return handler
    return FilteredHandler(handler, keep)
