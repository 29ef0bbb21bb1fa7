"""Parameter records for Bot API methods.

Each record is a dataclass marshalled into a :class:`~botapi.payload.Payload`
by its field tags (``metadata={"tg": "name,opts"}``); a field without a tag
is sent under its own name.  ``METHOD`` names the remote method and
``RESULT`` the type its result is validated as::

    call = SendMessage(chat_id=100, text="hi")
    message = await api.request(call.METHOD, Payload.from_object(call), call.RESULT)

Only the methods the dispatch layer and the example bot use are declared
here; any other method can be called with a hand-built payload.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional, Union

from botapi.inputs import InputMedia, Inputtable
from botapi.models import (
    BotCommand,
    BotCommandScope,
    File,
    Message,
    MessageEntity,
    ReplyMarkup,
    ReplyParameters,
    Update,
    User,
    UserProfilePhotos,
    WebhookInfo,
)

ChatID = Union[int, str]


def _embed() -> Any:
    return field(default_factory=SendOptions, metadata={"tg": ",embed"})


# ── Shared options ───────────────────────────────────────────────────────────


@dataclass
class SendOptions:
    """Options common to every ``send*`` method, embedded into their records."""

    business_connection_id: str = ""
    message_thread_id: int = 0
    disable_notification: bool = False
    protect_content: bool = False
    message_effect_id: str = ""
    reply_parameters: Optional[ReplyParameters] = None
    reply_markup: Optional[ReplyMarkup] = None


# ── Updates ──────────────────────────────────────────────────────────────────


@dataclass
class GetUpdates:
    METHOD: ClassVar[str] = "getUpdates"
    RESULT: ClassVar[Any] = List[Update]

    offset: int = 0
    limit: int = 0
    timeout: int = 0
    allowed_updates: Optional[List[str]] = None


@dataclass
class SetWebhook:
    METHOD: ClassVar[str] = "setWebhook"
    RESULT: ClassVar[Any] = bool

    url: str
    certificate: Optional[Inputtable] = None
    ip_address: str = ""
    max_connections: int = 0
    allowed_updates: Optional[List[str]] = None
    drop_pending_updates: bool = False
    secret_token: str = ""


@dataclass
class DeleteWebhook:
    METHOD: ClassVar[str] = "deleteWebhook"
    RESULT: ClassVar[Any] = bool

    drop_pending_updates: bool = False


@dataclass
class GetWebhookInfo:
    METHOD: ClassVar[str] = "getWebhookInfo"
    RESULT: ClassVar[Any] = WebhookInfo


@dataclass
class GetMe:
    METHOD: ClassVar[str] = "getMe"
    RESULT: ClassVar[Any] = User


# ── Files ────────────────────────────────────────────────────────────────────


@dataclass
class GetFile:
    METHOD: ClassVar[str] = "getFile"
    RESULT: ClassVar[Any] = File

    file_id: str


@dataclass
class GetUserProfilePhotos:
    METHOD: ClassVar[str] = "getUserProfilePhotos"
    RESULT: ClassVar[Any] = UserProfilePhotos

    user_id: int
    offset: int = 0
    limit: int = 0


# ── Messages ─────────────────────────────────────────────────────────────────


@dataclass
class SendMessage:
    METHOD: ClassVar[str] = "sendMessage"
    RESULT: ClassVar[Any] = Message

    chat_id: ChatID
    text: str
    parse_mode: str = ""
    entities: Optional[List[MessageEntity]] = None
    options: SendOptions = _embed()


@dataclass
class SendPhoto:
    METHOD: ClassVar[str] = "sendPhoto"
    RESULT: ClassVar[Any] = Message

    chat_id: ChatID
    photo: Inputtable
    caption: str = ""
    parse_mode: str = ""
    caption_entities: Optional[List[MessageEntity]] = None
    has_spoiler: bool = False
    options: SendOptions = _embed()


@dataclass
class SendDocument:
    METHOD: ClassVar[str] = "sendDocument"
    RESULT: ClassVar[Any] = Message

    chat_id: ChatID
    document: Inputtable
    thumbnail: Optional[Inputtable] = None
    caption: str = ""
    parse_mode: str = ""
    disable_content_type_detection: bool = False
    options: SendOptions = _embed()


@dataclass
class SendMediaGroup:
    METHOD: ClassVar[str] = "sendMediaGroup"
    RESULT: ClassVar[Any] = List[Message]

    chat_id: ChatID
    media: List[InputMedia]
    options: SendOptions = _embed()


@dataclass
class SendChatAction:
    METHOD: ClassVar[str] = "sendChatAction"
    RESULT: ClassVar[Any] = bool

    chat_id: ChatID
    action: str
    message_thread_id: int = 0
    business_connection_id: str = ""


@dataclass
class EditMessageText:
    METHOD: ClassVar[str] = "editMessageText"
    RESULT: ClassVar[Any] = Union[Message, bool]

    text: str
    parse_mode: str = ""
    entities: Optional[List[MessageEntity]] = None
    reply_markup: Optional[ReplyMarkup] = None


@dataclass
class EditMessageReplyMarkup:
    METHOD: ClassVar[str] = "editMessageReplyMarkup"
    RESULT: ClassVar[Any] = Union[Message, bool]

    reply_markup: Optional[ReplyMarkup] = None


@dataclass
class DeleteMessage:
    METHOD: ClassVar[str] = "deleteMessage"
    RESULT: ClassVar[Any] = bool


# ── Chat members ─────────────────────────────────────────────────────────────


@dataclass
class BanChatMember:
    METHOD: ClassVar[str] = "banChatMember"
    RESULT: ClassVar[Any] = bool

    until_date: int = 0
    revoke_messages: bool = False


@dataclass
class UnbanChatMember:
    METHOD: ClassVar[str] = "unbanChatMember"
    RESULT: ClassVar[Any] = bool

    only_if_banned: bool = False


@dataclass
class ApproveChatJoinRequest:
    METHOD: ClassVar[str] = "approveChatJoinRequest"
    RESULT: ClassVar[Any] = bool


@dataclass
class DeclineChatJoinRequest:
    METHOD: ClassVar[str] = "declineChatJoinRequest"
    RESULT: ClassVar[Any] = bool


# ── Bot settings ─────────────────────────────────────────────────────────────


@dataclass
class SetMyCommands:
    METHOD: ClassVar[str] = "setMyCommands"
    RESULT: ClassVar[Any] = bool

    commands: List[BotCommand]
    scope: Optional[BotCommandScope] = None
    language_code: str = ""
