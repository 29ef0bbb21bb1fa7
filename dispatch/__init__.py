"""Update dispatch -- contexts, update sources, routers and the handler table."""

from dispatch.bot import Bot
from dispatch.context import (
    CancelScope,
    ChatContext,
    ChatMemberContext,
    Context,
    MessageContext,
    MessageID,
    UserContext,
)
from dispatch.handler import Handler
from dispatch.longpoll import LongPoller, PollState
from dispatch.query import (
    CallbackAnswer,
    InlineAnswer,
    PreCheckoutAnswer,
    QueryContext,
    ShippingAnswer,
    WebAppAnswer,
)
from dispatch.router import CallbackRouter, PollRouter, Router
from dispatch.updates import FilteredHandler, Piggyback, UpdateHandler, filter_updates
from dispatch.webhook import WebhookConfig, WebhookError, WebhookHandler, WebhookServer, generate_secret

__all__ = [
    "Bot",
    "CancelScope",
    "ChatContext",
    "ChatMemberContext",
    "Context",
    "MessageContext",
    "MessageID",
    "UserContext",
    "Handler",
    "LongPoller",
    "PollState",
    "CallbackAnswer",
    "InlineAnswer",
    "PreCheckoutAnswer",
    "QueryContext",
    "ShippingAnswer",
    "WebAppAnswer",
    "CallbackRouter",
    "PollRouter",
    "Router",
    "FilteredHandler",
    "Piggyback",
    "UpdateHandler",
    "filter_updates",
    "WebhookConfig",
    "WebhookError",
    "WebhookHandler",
    "WebhookServer",
    "generate_secret",
]
