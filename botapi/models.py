"""Pydantic data models for the Telegram Bot API wire format.

Every class corresponds to an object of the Bot API.  Plain records are
ordinary :class:`pydantic.BaseModel` subclasses; "one-of" objects are
:class:`~botapi.variants.VariantFamily` registries whose alternatives are
:class:`~botapi.variants.Variant` subclasses, e.g.::

    member = CHAT_MEMBER.decode({"status": "kicked", "user": {...}, "until_date": 0})
    isinstance(member, ChatMemberBanned)  # True

Fields holding a family value use the family's annotated alias
(``ChatMember``, ``MessageOrigin``, ``ReactionType`` …) so they validate and
serialize through the codec.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field

from botapi.variants import Variant, VariantFamily

# ── Tagged families ──────────────────────────────────────────────────────────

CHAT_MEMBER = VariantFamily("ChatMember", discriminator="status")
MESSAGE_ORIGIN = VariantFamily("MessageOrigin")
REACTION_TYPE = VariantFamily("ReactionType")
BACKGROUND_FILL = VariantFamily("BackgroundFill")
BACKGROUND_TYPE = VariantFamily("BackgroundType")
PAID_MEDIA = VariantFamily("PaidMedia")
REVENUE_WITHDRAWAL_STATE = VariantFamily("RevenueWithdrawalState")
TRANSACTION_PARTNER = VariantFamily("TransactionPartner")
STORY_AREA_TYPE = VariantFamily("StoryAreaType")
OWNED_GIFT = VariantFamily("OwnedGift")
CHAT_BOOST_SOURCE = VariantFamily("ChatBoostSource", discriminator="source")
MENU_BUTTON = VariantFamily("MenuButton")
BOT_COMMAND_SCOPE = VariantFamily("BotCommandScope")
PASSPORT_ELEMENT_ERROR = VariantFamily("PassportElementError", discriminator="source")

ChatMember = CHAT_MEMBER.annotated
MessageOrigin = MESSAGE_ORIGIN.annotated
ReactionType = REACTION_TYPE.annotated
BackgroundFill = BACKGROUND_FILL.annotated
BackgroundType = BACKGROUND_TYPE.annotated
PaidMedia = PAID_MEDIA.annotated
RevenueWithdrawalState = REVENUE_WITHDRAWAL_STATE.annotated
TransactionPartner = TRANSACTION_PARTNER.annotated
StoryAreaType = STORY_AREA_TYPE.annotated
OwnedGift = OWNED_GIFT.annotated
ChatBoostSource = CHAT_BOOST_SOURCE.annotated
MenuButton = MENU_BUTTON.annotated
BotCommandScope = BOT_COMMAND_SCOPE.annotated
PassportElementError = PASSPORT_ELEMENT_ERROR.annotated


# ── Envelope ─────────────────────────────────────────────────────────────────


class ResponseParameters(BaseModel):
    """Describes why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None

    model_config = {"populate_by_name": True}


class Response(BaseModel):
    """Envelope wrapping the result of every Bot API method call.

    ``result`` is kept raw; the caller validates it as the expected type.
    """

    ok: bool
    result: Any = None
    error_code: Optional[int] = None
    description: Optional[str] = None
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}


class Error(BaseModel):
    """Error model from Telegram Bot API."""

    ok: bool = False
    error_code: int
    description: str
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}


class WebhookInfo(BaseModel):
    """Contains information about the current status of a webhook."""

    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    last_synchronization_error_date: Optional[int] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None

    model_config = {"populate_by_name": True}


# ── Users and chats ──────────────────────────────────────────────────────────


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    is_premium: Optional[bool] = None
    can_join_groups: Optional[bool] = None
    can_read_all_group_messages: Optional[bool] = None
    supports_inline_queries: Optional[bool] = None
    can_connect_to_business: Optional[bool] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_forum: Optional[bool] = None

    model_config = {"populate_by_name": True}

    @property
    def is_private(self) -> bool:
        return self.type == "private"

    @property
    def is_group(self) -> bool:
        return self.type in ("group", "supergroup")

    @property
    def is_channel(self) -> bool:
        return self.type == "channel"


class ChatPhoto(BaseModel):
    """This object represents a chat photo."""

    small_file_id: str
    small_file_unique_id: str
    big_file_id: str
    big_file_unique_id: str

    model_config = {"populate_by_name": True}


class ChatPermissions(BaseModel):
    """Describes actions that a non-administrator user is allowed to take in a chat."""

    can_send_messages: Optional[bool] = None
    can_send_audios: Optional[bool] = None
    can_send_documents: Optional[bool] = None
    can_send_photos: Optional[bool] = None
    can_send_videos: Optional[bool] = None
    can_send_polls: Optional[bool] = None
    can_send_other_messages: Optional[bool] = None
    can_add_web_page_previews: Optional[bool] = None
    can_change_info: Optional[bool] = None
    can_invite_users: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ChatLocation(BaseModel):
    """Represents a location to which a chat is connected."""

    location: Location
    address: str

    model_config = {"populate_by_name": True}


class ChatInviteLink(BaseModel):
    """Represents an invite link for a chat."""

    invite_link: str
    creator: User
    creates_join_request: bool
    is_primary: bool
    is_revoked: bool
    name: Optional[str] = None
    expire_date: Optional[int] = None
    member_limit: Optional[int] = None
    pending_join_request_count: Optional[int] = None

    model_config = {"populate_by_name": True}


class UserProfilePhotos(BaseModel):
    """This object represent a user's profile pictures."""

    total_count: int
    photos: List[List[PhotoSize]]

    model_config = {"populate_by_name": True}


# ── Chat members (status family) ─────────────────────────────────────────────


@CHAT_MEMBER.register("creator")
class ChatMemberOwner(Variant):
    """Represents a chat member that owns the chat and has all administrator privileges."""

    user: User
    is_anonymous: bool = False
    custom_title: Optional[str] = None


@CHAT_MEMBER.register("administrator")
class ChatMemberAdministrator(Variant):
    """Represents a chat member that has some additional privileges."""

    user: User
    can_be_edited: bool = False
    is_anonymous: bool = False
    can_manage_chat: bool = False
    can_delete_messages: bool = False
    can_manage_video_chats: bool = False
    can_restrict_members: bool = False
    can_promote_members: bool = False
    can_change_info: bool = False
    can_invite_users: bool = False
    can_post_messages: Optional[bool] = None
    can_edit_messages: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None
    custom_title: Optional[str] = None


@CHAT_MEMBER.register("member")
class ChatMemberMember(Variant):
    """Represents a chat member that has no additional privileges or restrictions."""

    user: User
    until_date: Optional[int] = None


@CHAT_MEMBER.register("restricted")
class ChatMemberRestricted(Variant):
    """Represents a chat member that is under certain restrictions in the chat. Supergroups only."""

    user: User
    is_member: bool = False
    can_send_messages: bool = False
    can_send_audios: bool = False
    can_send_documents: bool = False
    can_send_photos: bool = False
    can_send_videos: bool = False
    can_send_polls: bool = False
    can_send_other_messages: bool = False
    can_add_web_page_previews: bool = False
    can_change_info: bool = False
    can_invite_users: bool = False
    can_pin_messages: bool = False
    until_date: int = 0


@CHAT_MEMBER.register("left")
class ChatMemberLeft(Variant):
    """Represents a chat member that isn't currently a member of the chat, but may join it themselves."""

    user: User


@CHAT_MEMBER.register("kicked")
class ChatMemberBanned(Variant):
    """Represents a chat member that was banned in the chat and can't return to the chat or view chat messages."""

    user: User
    until_date: int = 0


class ChatMemberUpdated(BaseModel):
    """This object represents changes in the status of a chat member."""

    chat: Chat
    from_field: User = Field(..., alias="from")
    date: int
    old_chat_member: ChatMember
    new_chat_member: ChatMember
    invite_link: Optional[ChatInviteLink] = None
    via_join_request: Optional[bool] = None
    via_chat_folder_invite_link: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ChatJoinRequest(BaseModel):
    """Represents a join request sent to a chat."""

    chat: Chat
    from_field: User = Field(..., alias="from")
    user_chat_id: int
    date: int
    bio: Optional[str] = None
    invite_link: Optional[ChatInviteLink] = None

    model_config = {"populate_by_name": True}


# ── Message origin ───────────────────────────────────────────────────────────


@MESSAGE_ORIGIN.register("user")
class MessageOriginUser(Variant):
    """The message was originally sent by a known user."""

    date: int
    sender_user: User


@MESSAGE_ORIGIN.register("hidden_user")
class MessageOriginHiddenUser(Variant):
    """The message was originally sent by an unknown user."""

    date: int
    sender_user_name: str


@MESSAGE_ORIGIN.register("chat")
class MessageOriginChat(Variant):
    """The message was originally sent on behalf of a chat to a group chat."""

    date: int
    sender_chat: Chat
    author_signature: Optional[str] = None


@MESSAGE_ORIGIN.register("channel")
class MessageOriginChannel(Variant):
    """The message was originally sent to a channel chat."""

    date: int
    chat: Chat
    message_id: int
    author_signature: Optional[str] = None


# ── Reactions ────────────────────────────────────────────────────────────────


@REACTION_TYPE.register("emoji")
class ReactionTypeEmoji(Variant):
    """The reaction is based on an emoji."""

    emoji: str


@REACTION_TYPE.register("custom_emoji")
class ReactionTypeCustomEmoji(Variant):
    """The reaction is based on a custom emoji."""

    custom_emoji_id: str


@REACTION_TYPE.register("paid")
class ReactionTypePaid(Variant):
    """The reaction is paid."""


class ReactionCount(BaseModel):
    """Represents a reaction added to a message along with the number of times it was added."""

    type: ReactionType
    total_count: int

    model_config = {"populate_by_name": True}


class MessageReactionUpdated(BaseModel):
    """Represents a change of a reaction on a message performed by a user."""

    chat: Chat
    message_id: int
    user: Optional[User] = None
    actor_chat: Optional[Chat] = None
    date: int
    old_reaction: List[ReactionType] = []
    new_reaction: List[ReactionType] = []

    model_config = {"populate_by_name": True}


class MessageReactionCountUpdated(BaseModel):
    """Represents reaction changes on a message with anonymous reactions."""

    chat: Chat
    message_id: int
    date: int
    reactions: List[ReactionCount] = []

    model_config = {"populate_by_name": True}


# ── Chat backgrounds ─────────────────────────────────────────────────────────


@BACKGROUND_FILL.register("solid")
class BackgroundFillSolid(Variant):
    """The background is filled using the selected color."""

    color: int


@BACKGROUND_FILL.register("gradient")
class BackgroundFillGradient(Variant):
    """The background is a gradient fill."""

    top_color: int
    bottom_color: int
    rotation_angle: int = 0


@BACKGROUND_FILL.register("freeform_gradient")
class BackgroundFillFreeformGradient(Variant):
    """The background is a freeform gradient that rotates after every message in the chat."""

    colors: List[int]


@BACKGROUND_TYPE.register("fill")
class BackgroundTypeFill(Variant):
    """The background is automatically filled based on the selected colors."""

    fill: BackgroundFill
    dark_theme_dimming: int = 0


@BACKGROUND_TYPE.register("wallpaper")
class BackgroundTypeWallpaper(Variant):
    """The background is a wallpaper in the JPEG format."""

    document: Document
    dark_theme_dimming: int = 0
    is_blurred: Optional[bool] = None
    is_moving: Optional[bool] = None


@BACKGROUND_TYPE.register("pattern")
class BackgroundTypePattern(Variant):
    """The background is a PNG or TGV pattern combined with the chosen fill."""

    document: Document
    fill: BackgroundFill
    intensity: int = 0
    is_inverted: Optional[bool] = None
    is_moving: Optional[bool] = None


@BACKGROUND_TYPE.register("chat_theme")
class BackgroundTypeChatTheme(Variant):
    """The background is taken directly from a built-in chat theme."""

    theme_name: str


class ChatBackground(BaseModel):
    """This object represents a chat background."""

    type: BackgroundType

    model_config = {"populate_by_name": True}


# ── Files and media ──────────────────────────────────────────────────────────


class PhotoSize(BaseModel):
    """This object represents one size of a photo or a file / sticker thumbnail."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Animation(BaseModel):
    """This object represents an animation file (GIF or H.264/MPEG-4 AVC video without sound)."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    duration: int
    thumbnail: Optional[PhotoSize] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Audio(BaseModel):
    """This object represents an audio file to be treated as music by the Telegram clients."""

    file_id: str
    file_unique_id: str
    duration: int
    performer: Optional[str] = None
    title: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    thumbnail: Optional[PhotoSize] = None

    model_config = {"populate_by_name": True}


class Document(BaseModel):
    """This object represents a general file (as opposed to photos, voice messages and audio files)."""

    file_id: str
    file_unique_id: str
    thumbnail: Optional[PhotoSize] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Video(BaseModel):
    """This object represents a video file."""

    file_id: str
    file_unique_id: str
    width: int
    height: int
    duration: int
    thumbnail: Optional[PhotoSize] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class VideoNote(BaseModel):
    """This object represents a video message."""

    file_id: str
    file_unique_id: str
    length: int
    duration: int
    thumbnail: Optional[PhotoSize] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Voice(BaseModel):
    """This object represents a voice note."""

    file_id: str
    file_unique_id: str
    duration: int
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Sticker(BaseModel):
    """This object represents a sticker."""

    file_id: str
    file_unique_id: str
    type: str
    width: int
    height: int
    is_animated: bool
    is_video: bool
    thumbnail: Optional[PhotoSize] = None
    emoji: Optional[str] = None
    set_name: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class File(BaseModel):
    """This object represents a file ready to be downloaded.

    The file can be downloaded with :meth:`botapi.client.BotAPI.download`
    using ``file_path``.
    """

    file_id: str
    file_unique_id: str
    file_size: Optional[int] = None
    file_path: Optional[str] = None

    model_config = {"populate_by_name": True}


@PAID_MEDIA.register("preview")
class PaidMediaPreview(Variant):
    """The paid media isn't available before the payment."""

    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None


@PAID_MEDIA.register("photo")
class PaidMediaPhoto(Variant):
    """The paid media is a photo."""

    photo: List[PhotoSize]


@PAID_MEDIA.register("video")
class PaidMediaVideo(Variant):
    """The paid media is a video."""

    video: Video


class PaidMediaInfo(BaseModel):
    """Describes the paid media added to a message."""

    star_count: int
    paid_media: List[PaidMedia]

    model_config = {"populate_by_name": True}


# ── Misc message content ─────────────────────────────────────────────────────


class Contact(BaseModel):
    """This object represents a phone contact."""

    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    user_id: Optional[int] = None
    vcard: Optional[str] = None

    model_config = {"populate_by_name": True}


class Dice(BaseModel):
    """This object represents an animated emoji that displays a random value."""

    emoji: str
    value: int

    model_config = {"populate_by_name": True}


class Location(BaseModel):
    """This object represents a point on the map."""

    longitude: float
    latitude: float
    horizontal_accuracy: Optional[float] = None
    live_period: Optional[int] = None
    heading: Optional[int] = None
    proximity_alert_radius: Optional[int] = None

    model_config = {"populate_by_name": True}


class Venue(BaseModel):
    """This object represents a venue."""

    location: Location
    title: str
    address: str
    foursquare_id: Optional[str] = None
    foursquare_type: Optional[str] = None
    google_place_id: Optional[str] = None
    google_place_type: Optional[str] = None

    model_config = {"populate_by_name": True}


class PollOption(BaseModel):
    """This object contains information about one answer option in a poll."""

    text: str
    voter_count: int

    model_config = {"populate_by_name": True}


class Poll(BaseModel):
    """This object contains information about a poll."""

    id: str
    question: str
    options: List[PollOption]
    total_voter_count: int
    is_closed: bool
    is_anonymous: bool
    type: str
    allows_multiple_answers: bool
    correct_option_id: Optional[int] = None
    explanation: Optional[str] = None
    open_period: Optional[int] = None
    close_date: Optional[int] = None

    model_config = {"populate_by_name": True}


class PollAnswer(BaseModel):
    """This object represents an answer of a user in a non-anonymous poll."""

    poll_id: str
    voter_chat: Optional[Chat] = None
    user: Optional[User] = None
    option_ids: List[int]

    model_config = {"populate_by_name": True}


class MessageEntity(BaseModel):
    """This object represents one special entity in a text message. For example, hashtags, usernames, URLs, etc."""

    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None
    language: Optional[str] = None
    custom_emoji_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class LinkPreviewOptions(BaseModel):
    """Describes the options used for link preview generation."""

    is_disabled: Optional[bool] = None
    url: Optional[str] = None
    prefer_small_media: Optional[bool] = None
    prefer_large_media: Optional[bool] = None
    show_above_text: Optional[bool] = None

    model_config = {"populate_by_name": True}


class WebAppInfo(BaseModel):
    """Describes a Web App."""

    url: str

    model_config = {"populate_by_name": True}


class WebAppData(BaseModel):
    """Describes data sent from a Web App to the bot."""

    data: str
    button_text: str

    model_config = {"populate_by_name": True}


class SentWebAppMessage(BaseModel):
    """Describes an inline message sent by a Web App on behalf of a user."""

    inline_message_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class Game(BaseModel):
    """This object represents a game."""

    title: str
    description: str
    photo: List[PhotoSize]
    text: Optional[str] = None
    text_entities: Optional[List[MessageEntity]] = None
    animation: Optional[Animation] = None

    model_config = {"populate_by_name": True}


class MessageId(BaseModel):
    """This object represents a unique message identifier."""

    message_id: int

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message.

    A message the bot can no longer access arrives with ``date == 0``; only
    ``chat``, ``message_id`` and ``date`` are meaningful then, see
    :attr:`is_inaccessible`.
    """

    message_id: int
    date: int
    chat: Chat
    message_thread_id: Optional[int] = None
    from_field: Optional[User] = Field(None, alias="from")
    sender_chat: Optional[Chat] = None
    business_connection_id: Optional[str] = None
    forward_origin: Optional[MessageOrigin] = None
    is_topic_message: Optional[bool] = None
    is_automatic_forward: Optional[bool] = None
    reply_to_message: Optional[Message] = None
    via_bot: Optional[User] = None
    edit_date: Optional[int] = None
    has_protected_content: Optional[bool] = None
    media_group_id: Optional[str] = None
    author_signature: Optional[str] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    link_preview_options: Optional[LinkPreviewOptions] = None
    animation: Optional[Animation] = None
    audio: Optional[Audio] = None
    document: Optional[Document] = None
    paid_media: Optional[PaidMediaInfo] = None
    photo: Optional[List[PhotoSize]] = None
    sticker: Optional[Sticker] = None
    video: Optional[Video] = None
    video_note: Optional[VideoNote] = None
    voice: Optional[Voice] = None
    caption: Optional[str] = None
    caption_entities: Optional[List[MessageEntity]] = None
    has_media_spoiler: Optional[bool] = None
    contact: Optional[Contact] = None
    dice: Optional[Dice] = None
    game: Optional[Game] = None
    poll: Optional[Poll] = None
    venue: Optional[Venue] = None
    location: Optional[Location] = None
    new_chat_members: Optional[List[User]] = None
    left_chat_member: Optional[User] = None
    new_chat_title: Optional[str] = None
    new_chat_photo: Optional[List[PhotoSize]] = None
    delete_chat_photo: Optional[bool] = None
    group_chat_created: Optional[bool] = None
    supergroup_chat_created: Optional[bool] = None
    channel_chat_created: Optional[bool] = None
    migrate_to_chat_id: Optional[int] = None
    migrate_from_chat_id: Optional[int] = None
    pinned_message: Optional[Message] = None
    invoice: Optional[Invoice] = None
    successful_payment: Optional[SuccessfulPayment] = None
    chat_background_set: Optional[ChatBackground] = None
    connected_website: Optional[str] = None
    web_app_data: Optional[WebAppData] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None

    model_config = {"populate_by_name": True}

    @property
    def is_inaccessible(self) -> bool:
        return self.date == 0


class BusinessConnection(BaseModel):
    """Describes the connection of the bot with a business account."""

    id: str
    user: User
    user_chat_id: int
    date: int
    can_reply: Optional[bool] = None
    is_enabled: bool

    model_config = {"populate_by_name": True}


class BusinessMessagesDeleted(BaseModel):
    """Received when messages are deleted from a connected business account."""

    business_connection_id: str
    chat: Chat
    message_ids: List[int]

    model_config = {"populate_by_name": True}


# ── Keyboards ────────────────────────────────────────────────────────────────


class KeyboardButton(BaseModel):
    """This object represents one button of the reply keyboard."""

    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None
    web_app: Optional[WebAppInfo] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardMarkup(BaseModel):
    """This object represents a custom keyboard with reply options."""

    keyboard: List[List[KeyboardButton]]
    is_persistent: Optional[bool] = None
    resize_keyboard: Optional[bool] = None
    one_time_keyboard: Optional[bool] = None
    input_field_placeholder: Optional[str] = None
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ReplyKeyboardRemove(BaseModel):
    """Upon receiving a message with this object, Telegram clients will remove the current custom keyboard."""

    remove_keyboard: bool = True
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ForceReply(BaseModel):
    """Upon receiving a message with this object, Telegram clients will display a reply interface to the user."""

    force_reply: bool = True
    input_field_placeholder: Optional[str] = None
    selective: Optional[bool] = None

    model_config = {"populate_by_name": True}


class LoginUrl(BaseModel):
    """This object represents a parameter of the inline keyboard button used to automatically authorize a user."""

    url: str
    forward_text: Optional[str] = None
    bot_username: Optional[str] = None
    request_write_access: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardButton(BaseModel):
    """This object represents one button of an inline keyboard. Exactly one of the optional fields must be used."""

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    web_app: Optional[WebAppInfo] = None
    login_url: Optional[LoginUrl] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None
    pay: Optional[bool] = None

    model_config = {"populate_by_name": True}


class InlineKeyboardMarkup(BaseModel):
    """This object represents an inline keyboard that appears right next to the message it belongs to."""

    inline_keyboard: List[List[InlineKeyboardButton]]

    model_config = {"populate_by_name": True}


ReplyMarkup = Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply]


class ReplyParameters(BaseModel):
    """Describes reply parameters for the message that is being sent."""

    message_id: int
    chat_id: Optional[Union[int, str]] = None
    allow_sending_without_reply: Optional[bool] = None
    quote: Optional[str] = None

    model_config = {"populate_by_name": True}


# ── Queries ──────────────────────────────────────────────────────────────────


class CallbackQuery(BaseModel):
    """This object represents an incoming callback query from a callback button in an inline keyboard."""

    id: str
    from_field: User = Field(..., alias="from")
    chat_instance: str
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None
    game_short_name: Optional[str] = None

    model_config = {"populate_by_name": True}


class InlineQuery(BaseModel):
    """This object represents an incoming inline query."""

    id: str
    from_field: User = Field(..., alias="from")
    query: str
    offset: str
    chat_type: Optional[str] = None
    location: Optional[Location] = None

    model_config = {"populate_by_name": True}


class ChosenInlineResult(BaseModel):
    """Represents a result of an inline query that was chosen by the user and sent to their chat partner."""

    result_id: str
    from_field: User = Field(..., alias="from")
    query: str
    location: Optional[Location] = None
    inline_message_id: Optional[str] = None

    model_config = {"populate_by_name": True}


# ── Payments ─────────────────────────────────────────────────────────────────


class LabeledPrice(BaseModel):
    """This object represents a portion of the price for goods or services."""

    label: str
    amount: int

    model_config = {"populate_by_name": True}


class Invoice(BaseModel):
    """This object contains basic information about an invoice."""

    title: str
    description: str
    start_parameter: str
    currency: str
    total_amount: int

    model_config = {"populate_by_name": True}


class ShippingAddress(BaseModel):
    """This object represents a shipping address."""

    country_code: str
    state: str
    city: str
    street_line1: str
    street_line2: str
    post_code: str

    model_config = {"populate_by_name": True}


class OrderInfo(BaseModel):
    """This object represents information about an order."""

    name: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    shipping_address: Optional[ShippingAddress] = None

    model_config = {"populate_by_name": True}


class ShippingOption(BaseModel):
    """This object represents one shipping option."""

    id: str
    title: str
    prices: List[LabeledPrice]

    model_config = {"populate_by_name": True}


class SuccessfulPayment(BaseModel):
    """This object contains basic information about a successful payment."""

    currency: str
    total_amount: int
    invoice_payload: str
    telegram_payment_charge_id: str
    provider_payment_charge_id: str
    shipping_option_id: Optional[str] = None
    order_info: Optional[OrderInfo] = None

    model_config = {"populate_by_name": True}


class ShippingQuery(BaseModel):
    """This object contains information about an incoming shipping query."""

    id: str
    from_field: User = Field(..., alias="from")
    invoice_payload: str
    shipping_address: ShippingAddress

    model_config = {"populate_by_name": True}


class PreCheckoutQuery(BaseModel):
    """This object contains information about an incoming pre-checkout query."""

    id: str
    from_field: User = Field(..., alias="from")
    currency: str
    total_amount: int
    invoice_payload: str
    shipping_option_id: Optional[str] = None
    order_info: Optional[OrderInfo] = None

    model_config = {"populate_by_name": True}


class PaidMediaPurchased(BaseModel):
    """This object contains information about a paid media purchase."""

    from_field: User = Field(..., alias="from")
    paid_media_payload: str

    model_config = {"populate_by_name": True}


@REVENUE_WITHDRAWAL_STATE.register("pending")
class RevenueWithdrawalStatePending(Variant):
    """The withdrawal is in progress."""


@REVENUE_WITHDRAWAL_STATE.register("succeeded")
class RevenueWithdrawalStateSucceeded(Variant):
    """The withdrawal succeeded."""

    date: int
    url: str


@REVENUE_WITHDRAWAL_STATE.register("failed")
class RevenueWithdrawalStateFailed(Variant):
    """The withdrawal failed and the transaction was refunded."""


@TRANSACTION_PARTNER.register("user")
class TransactionPartnerUser(Variant):
    """Describes a transaction with a user."""

    user: User
    invoice_payload: Optional[str] = None
    paid_media: Optional[List[PaidMedia]] = None


@TRANSACTION_PARTNER.register("fragment")
class TransactionPartnerFragment(Variant):
    """Describes a withdrawal transaction with Fragment."""

    withdrawal_state: Optional[RevenueWithdrawalState] = None


@TRANSACTION_PARTNER.register("telegram_ads")
class TransactionPartnerTelegramAds(Variant):
    """Describes a withdrawal transaction to the Telegram Ads platform."""


@TRANSACTION_PARTNER.register("other")
class TransactionPartnerOther(Variant):
    """Describes a transaction with an unknown source or recipient."""


class StarTransaction(BaseModel):
    """Describes a Telegram Star transaction."""

    id: str
    amount: int
    date: int
    source: Optional[TransactionPartner] = None
    receiver: Optional[TransactionPartner] = None

    model_config = {"populate_by_name": True}


class StarTransactions(BaseModel):
    """Contains a list of Telegram Star transactions."""

    transactions: List[StarTransaction]

    model_config = {"populate_by_name": True}


# ── Gifts ────────────────────────────────────────────────────────────────────


class Gift(BaseModel):
    """This object represents a gift that can be sent by the bot."""

    id: str
    sticker: Sticker
    star_count: int
    upgrade_star_count: Optional[int] = None
    total_count: Optional[int] = None
    remaining_count: Optional[int] = None

    model_config = {"populate_by_name": True}


class UniqueGift(BaseModel):
    """This object describes a unique gift that was upgraded from a regular gift."""

    base_name: str
    name: str
    number: int

    model_config = {"populate_by_name": True}


@OWNED_GIFT.register("regular")
class OwnedGiftRegular(Variant):
    """Describes a regular gift owned by a user or a chat."""

    gift: Gift
    send_date: int
    owned_gift_id: Optional[str] = None
    sender_user: Optional[User] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    is_private: Optional[bool] = None
    is_saved: Optional[bool] = None
    can_be_upgraded: Optional[bool] = None
    was_refunded: Optional[bool] = None
    convert_star_count: Optional[int] = None
    prepaid_upgrade_star_count: Optional[int] = None


@OWNED_GIFT.register("unique")
class OwnedGiftUnique(Variant):
    """Describes a unique gift received and owned by a user or a chat."""

    gift: UniqueGift
    send_date: int
    owned_gift_id: Optional[str] = None
    sender_user: Optional[User] = None
    is_saved: Optional[bool] = None
    can_be_transferred: Optional[bool] = None
    transfer_star_count: Optional[int] = None
    next_transfer_date: Optional[int] = None


class OwnedGifts(BaseModel):
    """Contains the list of gifts received and owned by a user or a chat."""

    total_count: int
    gifts: List[OwnedGift]
    next_offset: Optional[str] = None

    model_config = {"populate_by_name": True}


# ── Stories ──────────────────────────────────────────────────────────────────


class StoryAreaPosition(BaseModel):
    """Describes the position of a clickable area within a story."""

    x_percentage: float
    y_percentage: float
    width_percentage: float
    height_percentage: float
    rotation_angle: float
    corner_radius_percentage: float

    model_config = {"populate_by_name": True}


@STORY_AREA_TYPE.register("location")
class StoryAreaTypeLocation(Variant):
    """Describes a story area pointing to a location."""

    latitude: float
    longitude: float


@STORY_AREA_TYPE.register("suggested_reaction")
class StoryAreaTypeSuggestedReaction(Variant):
    """Describes a story area pointing to a suggested reaction."""

    reaction_type: ReactionType
    is_dark: Optional[bool] = None
    is_flipped: Optional[bool] = None


@STORY_AREA_TYPE.register("link")
class StoryAreaTypeLink(Variant):
    """Describes a story area pointing to an HTTP or tg:// link."""

    url: str


@STORY_AREA_TYPE.register("weather")
class StoryAreaTypeWeather(Variant):
    """Describes a story area containing weather information."""

    temperature: float
    emoji: str
    background_color: int


@STORY_AREA_TYPE.register("unique_gift")
class StoryAreaTypeUniqueGift(Variant):
    """Describes a story area pointing to a unique gift."""

    name: str


class StoryArea(BaseModel):
    """Describes a clickable area on a story media."""

    position: StoryAreaPosition
    type: StoryAreaType

    model_config = {"populate_by_name": True}


# ── Chat boosts ──────────────────────────────────────────────────────────────


@CHAT_BOOST_SOURCE.register("premium")
class ChatBoostSourcePremium(Variant):
    """The boost was obtained by subscribing to Telegram Premium or by gifting a Telegram Premium subscription."""

    user: User


@CHAT_BOOST_SOURCE.register("gift_code")
class ChatBoostSourceGiftCode(Variant):
    """The boost was obtained by the creation of Telegram Premium gift codes to boost a chat."""

    user: User


@CHAT_BOOST_SOURCE.register("giveaway")
class ChatBoostSourceGiveaway(Variant):
    """The boost was obtained by the creation of a Telegram Premium or a Telegram Star giveaway."""

    giveaway_message_id: int
    user: Optional[User] = None
    prize_star_count: Optional[int] = None
    is_unclaimed: Optional[bool] = None


class ChatBoost(BaseModel):
    """This object contains information about a chat boost."""

    boost_id: str
    add_date: int
    expiration_date: int
    source: ChatBoostSource

    model_config = {"populate_by_name": True}


class ChatBoostUpdated(BaseModel):
    """This object represents a boost added to a chat or changed."""

    chat: Chat
    boost: ChatBoost

    model_config = {"populate_by_name": True}


class ChatBoostRemoved(BaseModel):
    """This object represents a boost removed from a chat."""

    chat: Chat
    boost_id: str
    remove_date: int
    source: ChatBoostSource

    model_config = {"populate_by_name": True}


# ── Bot settings ─────────────────────────────────────────────────────────────


class BotCommand(BaseModel):
    """This object represents a bot command."""

    command: str
    description: str

    model_config = {"populate_by_name": True}


@MENU_BUTTON.register("commands")
class MenuButtonCommands(Variant):
    """Represents a menu button, which opens the bot's list of commands."""


@MENU_BUTTON.register("web_app")
class MenuButtonWebApp(Variant):
    """Represents a menu button, which launches a Web App."""

    text: str
    web_app: WebAppInfo


@MENU_BUTTON.register("default")
class MenuButtonDefault(Variant):
    """Describes that no specific value for the menu button was set."""


@BOT_COMMAND_SCOPE.register("default")
class BotCommandScopeDefault(Variant):
    """Default commands are used if no commands with a narrower scope are specified for the user."""


@BOT_COMMAND_SCOPE.register("all_private_chats")
class BotCommandScopeAllPrivateChats(Variant):
    """Covers all private chats."""


@BOT_COMMAND_SCOPE.register("all_group_chats")
class BotCommandScopeAllGroupChats(Variant):
    """Covers all group and supergroup chats."""


@BOT_COMMAND_SCOPE.register("all_chat_administrators")
class BotCommandScopeAllChatAdministrators(Variant):
    """Covers all group and supergroup chat administrators."""


@BOT_COMMAND_SCOPE.register("chat")
class BotCommandScopeChat(Variant):
    """Covers a specific chat."""

    chat_id: Union[int, str]


@BOT_COMMAND_SCOPE.register("chat_administrators")
class BotCommandScopeChatAdministrators(Variant):
    """Covers all administrators of a specific group or supergroup chat."""

    chat_id: Union[int, str]


@BOT_COMMAND_SCOPE.register("chat_member")
class BotCommandScopeChatMember(Variant):
    """Covers a specific member of a group or supergroup chat."""

    chat_id: Union[int, str]
    user_id: int


# ── Passport element errors ──────────────────────────────────────────────────


@PASSPORT_ELEMENT_ERROR.register("data")
class PassportElementErrorDataField(Variant):
    """Represents an issue in one of the data fields that was provided by the user."""

    type: str
    field_name: str
    data_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("front_side")
class PassportElementErrorFrontSide(Variant):
    """Represents an issue with the front side of a document."""

    type: str
    file_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("reverse_side")
class PassportElementErrorReverseSide(Variant):
    """Represents an issue with the reverse side of a document."""

    type: str
    file_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("selfie")
class PassportElementErrorSelfie(Variant):
    """Represents an issue with the selfie with a document."""

    type: str
    file_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("file")
class PassportElementErrorFile(Variant):
    """Represents an issue with a document scan."""

    type: str
    file_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("files")
class PassportElementErrorFiles(Variant):
    """Represents an issue with a list of scans."""

    type: str
    file_hashes: List[str]
    message: str


@PASSPORT_ELEMENT_ERROR.register("translation_file")
class PassportElementErrorTranslationFile(Variant):
    """Represents an issue with one of the files that constitute the translation of a document."""

    type: str
    file_hash: str
    message: str


@PASSPORT_ELEMENT_ERROR.register("translation_files")
class PassportElementErrorTranslationFiles(Variant):
    """Represents an issue with the translated version of a document."""

    type: str
    file_hashes: List[str]
    message: str


@PASSPORT_ELEMENT_ERROR.register("unspecified")
class PassportElementErrorUnspecified(Variant):
    """Represents an issue in an unspecified place."""

    type: str
    element_hash: str
    message: str


# ── Update ───────────────────────────────────────────────────────────────────


class Update(BaseModel):
    """This object represents an incoming update. At most **one** of the optional parameters can be present in any given update."""

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None
    business_connection: Optional[BusinessConnection] = None
    business_message: Optional[Message] = None
    edited_business_message: Optional[Message] = None
    deleted_business_messages: Optional[BusinessMessagesDeleted] = None
    callback_query: Optional[CallbackQuery] = None
    message_reaction: Optional[MessageReactionUpdated] = None
    message_reaction_count: Optional[MessageReactionCountUpdated] = None
    inline_query: Optional[InlineQuery] = None
    chosen_inline_result: Optional[ChosenInlineResult] = None
    shipping_query: Optional[ShippingQuery] = None
    pre_checkout_query: Optional[PreCheckoutQuery] = None
    purchased_paid_media: Optional[PaidMediaPurchased] = None
    poll: Optional[Poll] = None
    poll_answer: Optional[PollAnswer] = None
    my_chat_member: Optional[ChatMemberUpdated] = None
    chat_member: Optional[ChatMemberUpdated] = None
    chat_join_request: Optional[ChatJoinRequest] = None
    chat_boost: Optional[ChatBoostUpdated] = None
    removed_chat_boost: Optional[ChatBoostRemoved] = None

    model_config = {"populate_by_name": True}

    def kind(self) -> Optional[str]:
        """Return the name of the populated field, or ``None`` for an empty update."""
        for name in UPDATE_KINDS:
            if getattr(self, name) is not None:
                return name
        return None


# Declaration order of the update kinds, as accepted by ``allowed_updates``.
UPDATE_KINDS = tuple(name for name in Update.model_fields if name != "update_id")


# ── Finalisation ─────────────────────────────────────────────────────────────

for _family in (
    CHAT_MEMBER,
    MESSAGE_ORIGIN,
    REACTION_TYPE,
    BACKGROUND_FILL,
    BACKGROUND_TYPE,
    PAID_MEDIA,
    REVENUE_WITHDRAWAL_STATE,
    TRANSACTION_PARTNER,
    STORY_AREA_TYPE,
    OWNED_GIFT,
    CHAT_BOOST_SOURCE,
    MENU_BUTTON,
    BOT_COMMAND_SCOPE,
    PASSPORT_ELEMENT_ERROR,
):
    _family.seal()

for _model in list(globals().values()):
    if isinstance(_model, type) and issubclass(_model, BaseModel) and _model.__module__ == __name__:
        _model.model_rebuild()
