"""Upload descriptors and the send-only input objects that reference them.

A file argument is one of:

* :class:`FileID` — a file already stored on the Telegram servers;
* :class:`FileURL` — a URL Telegram downloads itself;
* :class:`InputFile` — a local stream uploaded as a multipart part.

Input media and inline-query results are untagged sums: every alternative
carries its ``type`` statically (see :class:`~botapi.variants.TypedInput`).
Objects that may hold an :class:`InputFile` implement :class:`Inputter` so
the payload builder can attach their streams before serializing them; the
JSON then references the stream as ``attach://<label>``.
"""

from __future__ import annotations

import io
import os
from typing import Any, BinaryIO, List, Optional, Protocol, Tuple, Union, runtime_checkable

from pydantic import BaseModel

from botapi.models import InlineKeyboardMarkup, LabeledPrice, LinkPreviewOptions, MessageEntity
from botapi.variants import TypedInput

ATTACH_PREFIX = "attach://"


# ── Upload descriptors ───────────────────────────────────────────────────────


class FileID(str):
    """Identifier of a file that has already been uploaded to Telegram."""

    __slots__ = ()


class FileURL(str):
    """HTTP URL of a file that Telegram downloads without an upload."""

    __slots__ = ()


class InputFile:
    """Contents of a local file to be uploaded.

    The stream is read at most once, by the multipart encoder, and closed
    afterwards.  Re-sending requires a fresh :class:`InputFile`; adding a
    sent one to another payload raises :class:`ValueError`.

    Attributes:
        name: Logical file name sent in the multipart part.
        reader: Binary stream with the contents, ``None`` once consumed.
        sent: Whether the stream has been handed to an encoded request.
        field: Multipart field the file is attached under, when referenced
            from a structured value.
    """

    def __init__(self, name: str, reader: Optional[BinaryIO] = None) -> None:
        self.name = name
        self.reader = reader
        self.field = ""
        self.sent = False

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "InputFile":
        return cls(name, io.BytesIO(data))

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "InputFile":
        """Open *path* for reading; the file is closed once uploaded."""
        return cls(os.path.basename(os.fspath(path)), open(path, "rb"))

    def mark_sent(self) -> None:
        self.reader = None
        self.sent = True

    def as_attachment(self, field: str) -> "InputFile":
        """Link the file to the multipart *field* so JSON can reference it."""
        self.field = field
        return self

    @property
    def sentinel(self) -> str:
        return ATTACH_PREFIX + self.field

    def __json__(self) -> str:
        if not self.field:
            raise ValueError(f"InputFile {self.name!r} is referenced from JSON but not attached")
        return self.sentinel

    def __repr__(self) -> str:
        return f"InputFile(name={self.name!r}, field={self.field!r})"


Inputtable = Union[FileID, FileURL, InputFile, str]


def file_data(upload: Inputtable) -> Tuple[str, Optional[BinaryIO]]:
    """Return ``(name_or_identifier, stream)`` for any upload descriptor."""
    if isinstance(upload, InputFile):
        return upload.name, upload.reader
    return str(upload), None


@runtime_checkable
class Inputter(Protocol):
    """Structured value that may embed local uploads."""

    def uploads(self) -> List[InputFile]: ...  # noqa: E704


# ── Input media ──────────────────────────────────────────────────────────────


class InputMedia(TypedInput):
    """Base of the content of a media message to be sent."""

    media: Any
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    caption_entities: Optional[List[MessageEntity]] = None

    def uploads(self) -> List[InputFile]:
        candidates = (self.media, getattr(self, "thumbnail", None))
        return [item for item in candidates if isinstance(item, InputFile)]


class InputMediaPhoto(InputMedia):
    """Represents a photo to be sent."""

    TYPE = "photo"

    show_caption_above_media: Optional[bool] = None
    has_spoiler: Optional[bool] = None


class InputMediaVideo(InputMedia):
    """Represents a video to be sent."""

    TYPE = "video"

    thumbnail: Any = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    supports_streaming: Optional[bool] = None
    has_spoiler: Optional[bool] = None


class InputMediaAnimation(InputMedia):
    """Represents an animation file (GIF or H.264/MPEG-4 AVC video without sound) to be sent."""

    TYPE = "animation"

    thumbnail: Any = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    has_spoiler: Optional[bool] = None


class InputMediaAudio(InputMedia):
    """Represents an audio file to be treated as music to be sent."""

    TYPE = "audio"

    thumbnail: Any = None
    duration: Optional[int] = None
    performer: Optional[str] = None
    title: Optional[str] = None


class InputMediaDocument(InputMedia):
    """Represents a general file to be sent."""

    TYPE = "document"

    thumbnail: Any = None
    disable_content_type_detection: Optional[bool] = None


class InputPaidMediaPhoto(TypedInput):
    """The paid media to send is a photo."""

    TYPE = "photo"

    media: Any

    def uploads(self) -> List[InputFile]:
        return [self.media] if isinstance(self.media, InputFile) else []


class InputPaidMediaVideo(TypedInput):
    """The paid media to send is a video."""

    TYPE = "video"

    media: Any
    thumbnail: Any = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[int] = None
    supports_streaming: Optional[bool] = None

    def uploads(self) -> List[InputFile]:
        return [item for item in (self.media, self.thumbnail) if isinstance(item, InputFile)]


# ── Input message content ────────────────────────────────────────────────────


class InputTextMessageContent(BaseModel):
    """Represents the content of a text message to be sent as the result of an inline query."""

    message_text: str
    parse_mode: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    link_preview_options: Optional[LinkPreviewOptions] = None

    model_config = {"populate_by_name": True}


class InputLocationMessageContent(BaseModel):
    """Represents the content of a location message to be sent as the result of an inline query."""

    latitude: float
    longitude: float
    horizontal_accuracy: Optional[float] = None
    live_period: Optional[int] = None

    model_config = {"populate_by_name": True}


class InputVenueMessageContent(BaseModel):
    """Represents the content of a venue message to be sent as the result of an inline query."""

    latitude: float
    longitude: float
    title: str
    address: str
    foursquare_id: Optional[str] = None
    google_place_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class InputContactMessageContent(BaseModel):
    """Represents the content of a contact message to be sent as the result of an inline query."""

    phone_number: str
    first_name: str
    last_name: Optional[str] = None
    vcard: Optional[str] = None

    model_config = {"populate_by_name": True}


class InputInvoiceMessageContent(BaseModel):
    """Represents the content of an invoice message to be sent as the result of an inline query."""

    title: str
    description: str
    payload: str
    currency: str
    prices: List[LabeledPrice]
    provider_token: Optional[str] = None

    model_config = {"populate_by_name": True}


InputMessageContent = Union[
    InputTextMessageContent,
    InputLocationMessageContent,
    InputVenueMessageContent,
    InputContactMessageContent,
    InputInvoiceMessageContent,
]


# ── Inline query results ─────────────────────────────────────────────────────


class InlineQueryResult(TypedInput):
    """Base of one result of an inline query."""

    id: str
    reply_markup: Optional[InlineKeyboardMarkup] = None
    input_message_content: Optional[InputMessageContent] = None


class InlineQueryResultArticle(InlineQueryResult):
    """Represents a link to an article or web page."""

    TYPE = "article"

    title: str
    url: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None


class InlineQueryResultPhoto(InlineQueryResult):
    """Represents a link to a photo."""

    TYPE = "photo"

    photo_url: str
    thumbnail_url: str
    photo_width: Optional[int] = None
    photo_height: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class InlineQueryResultGif(InlineQueryResult):
    """Represents a link to an animated GIF file."""

    TYPE = "gif"

    gif_url: str
    thumbnail_url: str
    gif_width: Optional[int] = None
    gif_height: Optional[int] = None
    gif_duration: Optional[int] = None
    title: Optional[str] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class InlineQueryResultVideo(InlineQueryResult):
    """Represents a link to a page containing an embedded video player or a video file."""

    TYPE = "video"

    video_url: str
    mime_type: str
    thumbnail_url: str
    title: str
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    video_width: Optional[int] = None
    video_height: Optional[int] = None
    video_duration: Optional[int] = None
    description: Optional[str] = None


class InlineQueryResultAudio(InlineQueryResult):
    """Represents a link to an MP3 audio file."""

    TYPE = "audio"

    audio_url: str
    title: str
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    performer: Optional[str] = None
    audio_duration: Optional[int] = None


class InlineQueryResultDocument(InlineQueryResult):
    """Represents a link to a file."""

    TYPE = "document"

    title: str
    document_url: str
    mime_type: str
    caption: Optional[str] = None
    parse_mode: Optional[str] = None
    description: Optional[str] = None


class InlineQueryResultLocation(InlineQueryResult):
    """Represents a location on a map."""

    TYPE = "location"

    latitude: float
    longitude: float
    title: str
    live_period: Optional[int] = None


class InlineQueryResultVenue(InlineQueryResult):
    """Represents a venue."""

    TYPE = "venue"

    latitude: float
    longitude: float
    title: str
    address: str
    foursquare_id: Optional[str] = None


class InlineQueryResultContact(InlineQueryResult):
    """Represents a contact with a phone number."""

    TYPE = "contact"

    phone_number: str
    first_name: str
    last_name: Optional[str] = None


class InlineQueryResultGame(InlineQueryResult):
    """Represents a Game."""

    TYPE = "game"

    game_short_name: str


class InlineQueryResultCachedPhoto(InlineQueryResult):
    """Represents a link to a photo stored on the Telegram servers."""

    TYPE = "photo"

    photo_file_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class InlineQueryResultCachedSticker(InlineQueryResult):
    """Represents a link to a sticker stored on the Telegram servers."""

    TYPE = "sticker"

    sticker_file_id: str


class InlineQueryResultCachedDocument(InlineQueryResult):
    """Represents a link to a file stored on the Telegram servers."""

    TYPE = "document"

    title: str
    document_file_id: str
    description: Optional[str] = None
    caption: Optional[str] = None
    parse_mode: Optional[str] = None


class InlineQueryResultsButton(BaseModel):
    """Represents a button to be shown above inline query results."""

    text: str
    web_app: Optional[Any] = None
    start_parameter: Optional[str] = None

    model_config = {"populate_by_name": True}
