"""Request payload builder.

A :class:`Payload` accumulates the parameters of one Bot API call:

* ``params`` — textual parameters, keyed by parameter name;
* ``files`` — local uploads, keyed by multipart field name.

Typed setters drop zero values unless forced so that unset optional
arguments never reach the wire.  Dataclasses describing a method's
arguments are marshalled with :meth:`Payload.add_object`, driven by
per-field tags::

    @dataclass
    class SendMessage:
        chat_id: int
        text: str
        message_thread_id: int = 0
        reply_markup: Optional[ReplyMarkup] = None
        entities: list = field(default=None, metadata={"tg": "entities"})

    payload = Payload.from_object(SendMessage(chat_id=100, text="hi"))
    payload.encode()  # ("application/x-www-form-urlencoded", b"chat_id=100&text=hi")

A payload is built and consumed by a single call; it is not safe for
concurrent use.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any, BinaryIO, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

from botapi.inputs import FileID, FileURL, Inputter, InputFile, Inputtable, file_data
from botapi.variants import dump_json

TAG_NAMESPACE = "tg"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

UPLOAD_CONTENT_TYPE = "application/octet-stream"

_RENDER_URL = "http://localhost/"

Body = Union[bytes, Iterator[bytes]]

_UPLOAD_TYPES = (FileID, FileURL, InputFile)


def camel_to_snake(name: str) -> str:
    """``replyMarkup`` → ``reply_markup``; snake-case input is returned unchanged."""
    out = []
    for i, ch in enumerate(name):
        if ch.isupper() and i != 0:
            out.append("_")
        out.append(ch.lower())
    return "".join(out)


class Payload:
    """Parameters and uploads of a single Bot API call."""

    def __init__(self) -> None:
        self.params: Dict[str, str] = {}
        self.files: Dict[str, InputFile] = {}
        self._attach_counter = 0

    @classmethod
    def from_object(cls, obj: Any, namespace: str = TAG_NAMESPACE) -> "Payload":
        return cls().add_object(obj, namespace)

    def __repr__(self) -> str:
        return f"Payload(params={self.params!r}, files={list(self.files)!r})"

    def __contains__(self, key: str) -> bool:
        return key in self.params or key in self.files

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.params.get(key, default)

    # ── typed setters ────────────────────────────────────────────────────

    def set(self, key: str, value: str, force: bool = False) -> "Payload":
        """Store *value*; empty text is dropped unless *force*."""
        if value != "" or force:
            self.params[key] = value
        return self

    def set_int(self, key: str, value: int, force: bool = False) -> "Payload":
        if value != 0 or force:
            self.set(key, str(int(value)))
        return self

    def set_uint(self, key: str, value: int, force: bool = False) -> "Payload":
        if value < 0:
            raise ValueError(f"{key}: unsigned value expected, got {value}")
        return self.set_int(key, value, force)

    def set_float(self, key: str, value: float, force: bool = False) -> "Payload":
        if value != 0 or force:
            self.set(key, f"{value:.6f}")
        return self

    def set_bool(self, key: str, value: bool, force: bool = False) -> "Payload":
        if value or force:
            self.set(key, "true" if value else "false")
        return self

    def set_json(self, key: str, value: Any) -> "Payload":
        """Store the JSON text of *value*; ``None`` is skipped."""
        if value is not None:
            self.set(key, dump_json(value))
        return self

    # ── uploads ──────────────────────────────────────────────────────────

    def set_file(self, key: str, upload: Optional[Inputtable]) -> "Payload":
        """Store an upload descriptor.

        Identifiers and URLs become ordinary parameters; a local stream is
        registered as the multipart field *key*.
        """
        if upload is None:
            return self
        if isinstance(upload, InputFile):
            _check_unsent(upload)
            self.files[key] = upload
            return self
        self.params[key] = str(upload)
        return self

    def attach(self, upload: Optional[Inputtable]) -> Optional[Inputtable]:
        """Register a local stream under a fresh ``attach-<n>`` field.

        Identifiers and URLs are returned unchanged; they are referenced
        verbatim from the enclosing JSON.
        """
        if not isinstance(upload, InputFile):
            return upload
        _check_unsent(upload)
        self._attach_counter += 1
        field = f"attach-{self._attach_counter}"
        self.files[field] = upload.as_attachment(field)
        return upload

    def set_input(self, key: str, obj: Any) -> "Payload":
        """Attach every upload nested in *obj* (or a list of them), then store its JSON."""
        if obj is None:
            return self
        items = obj if isinstance(obj, (list, tuple)) else [obj]
        for item in items:
            if isinstance(item, Inputter):
                for upload in item.uploads():
                    self.attach(upload)
        return self.set_json(key, list(obj) if isinstance(obj, tuple) else obj)

    # ── structural marshal ───────────────────────────────────────────────

    def add_object(self, obj: Any, namespace: str = TAG_NAMESPACE) -> "Payload":
        """Marshal the fields of a dataclass into this payload.

        Objects providing ``marshal_payload(payload)`` marshal themselves.
        """
        _marshal(self, obj, namespace)
        return self

    # ── copying ──────────────────────────────────────────────────────────

    def copy(self) -> "Payload":
        """Return a new payload with a copy of the textual parameters."""
        dup = Payload()
        dup.params = dict(self.params)
        return dup

    def merge_into(self, dst: "Payload") -> "Payload":
        """Copy parameters into *dst* without overwriting keys it already has."""
        for key, value in self.params.items():
            dst.params.setdefault(key, value)
        return dst

    def snapshot(self) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Return ``(params, {field: file name})`` for diagnostics."""
        return dict(self.params), {field: upload.name for field, upload in self.files.items()}

    # ── encoding ─────────────────────────────────────────────────────────

    def encode(self) -> Tuple[str, Body]:
        """Return ``(content_type, body)``.

        Without local uploads the body is the URL-encoded parameter map.
        Otherwise it is a lazily produced ``multipart/form-data`` stream
        rendered by httpx: a generator of byte chunks that reads each
        upload exactly once and closes it afterwards.  Uploads without a
        stream are written as plain fields holding their name.
        """
        if not self.files:
            return FORM_CONTENT_TYPE, urlencode(self.params).encode("ascii")

        data = dict(self.params)
        files: Dict[str, Tuple[str, BinaryIO, str]] = {}
        streamed = []
        for field, upload in self.files.items():
            _check_unsent(upload)
            name, reader = file_data(upload)
            if reader is None:
                data[field] = name
                continue
            files[field] = (name, reader, UPLOAD_CONTENT_TYPE)
            streamed.append(upload)

        # Only the rendered body and its headers are used, never the URL.
        request = httpx.Request("POST", _RENDER_URL, data=data, files=files)
        for upload in streamed:
            upload.mark_sent()
        readers = [reader for _, reader, _ in files.values()]
        return request.headers["Content-Type"], _stream(request.stream, readers)


def _stream(chunks: Iterable[bytes], readers: List[BinaryIO]) -> Iterator[bytes]:
    try:
        yield from chunks
    finally:
        for reader in readers:
            reader.close()


def _check_unsent(upload: Any) -> None:
    if isinstance(upload, InputFile) and upload.sent:
        raise ValueError(f"InputFile {upload.name!r} was already uploaded")


# ── Tag-driven marshalling ───────────────────────────────────────────────────


def _parse_tag(tag: str) -> Tuple[str, Tuple[str, ...]]:
    name, *opts = tag.split(",") if tag else [""]
    return name.strip(), tuple(opt.strip() for opt in opts)


def _marshal(dst: Payload, obj: Any, namespace: str) -> None:
    if obj is None:
        return
    hook = getattr(obj, "marshal_payload", None)
    if callable(hook):
        hook(dst)
        return
    if isinstance(obj, BaseModel):
        _marshal_model(dst, obj)
        return
    if not dataclasses.is_dataclass(obj) or isinstance(obj, type):
        raise TypeError(f"cannot marshal {type(obj).__name__}: not a dataclass")

    for field in dataclasses.fields(obj):
        if field.name.startswith("_"):
            continue
        value = getattr(obj, field.name)
        if namespace == "json":
            name, opts = field.metadata.get("json", field.name), ()
        else:
            name, opts = _parse_tag(field.metadata.get(namespace, ""))
        if name in ("-", "_"):
            continue
        if "embed" in opts and not name:
            _marshal(dst, value, "json" if "json" in opts else namespace)
            continue
        if value is None:
            continue
        force = "force" in opts or field.default is None
        _set_value(dst, name or camel_to_snake(field.name), value, force)


def _marshal_model(dst: Payload, model: BaseModel) -> None:
    for name, info in type(model).model_fields.items():
        value = getattr(model, name)
        if value is None:
            continue
        _set_value(dst, info.alias or name, value, info.default is None)


def _set_value(dst: Payload, name: str, value: Any, force: bool) -> None:
    if isinstance(value, bool):
        dst.set_bool(name, value, force)
    elif isinstance(value, int):
        dst.set_int(name, value, force)
    elif isinstance(value, float):
        dst.set_float(name, value, force)
    elif isinstance(value, _UPLOAD_TYPES):
        dst.set_file(name, value)
    elif isinstance(value, Enum):
        dst.set(name, str(value.value), force)
    elif isinstance(value, str):
        dst.set(name, value, force)
    elif isinstance(value, Inputter):
        dst.set_input(name, value)
    elif isinstance(value, (list, tuple)):
        if value and all(isinstance(item, _UPLOAD_TYPES) for item in value):
            # One field holds one upload; several would overwrite each other.
            if len(value) > 1:
                raise ValueError(f"{name!r} takes a single upload, got {len(value)}")
            dst.set_file(name, value[0])
            return
        dst.set_input(name, list(value))
    elif isinstance(value, (dict, BaseModel)) or dataclasses.is_dataclass(value):
        dst.set_json(name, value)
    else:
        raise TypeError(f"unsupported field type {type(value).__name__} for {name!r}")
