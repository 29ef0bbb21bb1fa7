"""Serialization of "one-of" objects and the platform JSON encoder.

The Bot API models sums of records as flat JSON objects: a discriminator
field (``type``, ``status``, ``source`` …) whose value selects the
alternative, merged with the alternative's own fields.  Two flavours exist:

* untagged sums that we only ever *send* (input media, inline-query
  results): each alternative knows its identifier statically, see
  :class:`TypedInput`;
* tagged families that the remote sends back (chat member status, message
  origin, reaction type …): a :class:`VariantFamily` maps each identifier
  to a pydantic model and decodes by peeking at the discriminator.

Both produce their flat form with :func:`merge_json`.
"""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Annotated, Any, Callable, ClassVar, Dict, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, BeforeValidator, PlainSerializer

from botapi.exceptions import VariantError

_SEPARATORS = (",", ":")

V = TypeVar("V", bound="Variant")


# ── JSON encoding ────────────────────────────────────────────────────────────


def merge_json(*parts: str) -> str:
    """Splice serialized JSON objects into one flat object.

    The closing brace of the accumulated text is replaced with a comma and
    the opening brace of the next part is dropped.  Empty objects are
    skipped so no dangling comma is produced.
    """
    data = ""
    for part in parts:
        if part == "{}":
            continue
        if not data:
            data = part
        else:
            data = data[:-1] + "," + part[1:]
    return data or "{}"


def to_jsonable(value: Any) -> Any:
    """``default`` hook for :func:`json.dumps` covering the SDK's own types.

    * objects with ``__json__`` (upload descriptors, typed inputs) serialize
      themselves;
    * pydantic models dump by alias without ``None`` fields;
    * dataclasses dump their non-``None`` fields (shallow, streams are not copied);
    * enums dump their value.
    """
    hook = getattr(value, "__json__", None)
    if callable(hook):
        return hook()
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: getattr(value, f.name)
            for f in dataclasses.fields(value)
            if getattr(value, f.name) is not None
        }
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_json(value: Any) -> str:
    """Serialize *value* to compact JSON text the way the Bot API expects it."""
    return json.dumps(value, default=to_jsonable, separators=_SEPARATORS, ensure_ascii=False)


# ── Untagged sums ────────────────────────────────────────────────────────────


class TypedInput(BaseModel):
    """Base for send-only alternatives whose identifier is known statically.

    Subclasses set ``TYPE``; serialization emits ``{"type": TYPE}`` merged
    with the model's own non-``None`` fields.
    """

    TYPE: ClassVar[str] = ""

    model_config = {"populate_by_name": True, "arbitrary_types_allowed": True}

    def __json__(self) -> Dict[str, Any]:
        head = dump_json({"type": self.TYPE})
        body = dump_json(self.model_dump(by_alias=True, exclude_none=True))
        return json.loads(merge_json(head, body))


# ── Tagged families ──────────────────────────────────────────────────────────


class Variant(BaseModel):
    """Base for alternatives registered in a :class:`VariantFamily`."""

    __variant_id__: ClassVar[str] = ""
    __family__: ClassVar[Optional["VariantFamily"]] = None

    model_config = {"populate_by_name": True}

    @property
    def variant_id(self) -> str:
        """The discriminator value this alternative is registered under."""
        return type(self).__variant_id__

    def __json__(self) -> Dict[str, Any]:
        family = type(self).__family__
        if family is None:
            return self.model_dump(by_alias=True, exclude_none=True)
        return family.dump(self)


class VariantFamily:
    """Registry of the alternatives of one tagged union.

    Usage::

        reaction_types = VariantFamily("ReactionType")

        @reaction_types.register("emoji")
        class ReactionTypeEmoji(Variant):
            emoji: str

        reaction_types.seal()
        value = reaction_types.decode({"type": "emoji", "emoji": "👍"})

    After :meth:`seal` the registry is immutable.  Model fields holding a
    family value are declared with :attr:`annotated`.
    """

    def __init__(self, name: str, discriminator: str = "type") -> None:
        self.name = name
        self.discriminator = discriminator
        self._registry: Dict[str, Type[Variant]] = {}
        self._sealed = False

    def __repr__(self) -> str:
        return f"VariantFamily({self.name!r}, discriminator={self.discriminator!r})"

    # ── registration ─────────────────────────────────────────────────────

    def register(self, identifier: str) -> Callable[[Type[V]], Type[V]]:
        """Class decorator binding *identifier* to the decorated model."""
        def decorator(cls: Type[V]) -> Type[V]:
            if self._sealed:
                raise RuntimeError(f"{self.name}: registry is sealed")
            if identifier in self._registry:
                raise ValueError(f"{self.name}: duplicate identifier {identifier!r}")
            cls.__variant_id__ = identifier
            cls.__family__ = self
            self._registry[identifier] = cls
            return cls
        return decorator

    def seal(self) -> None:
        self._sealed = True

    def identifiers(self) -> Tuple[str, ...]:
        return tuple(self._registry)

    def new(self, identifier: Any) -> Type[Variant]:
        """Return the model registered for *identifier*.

        Raises:
            VariantError: If nothing is registered under *identifier*.
        """
        try:
            return self._registry[identifier]
        except (KeyError, TypeError):
            raise VariantError(self.name, identifier) from None

    # ── codec ────────────────────────────────────────────────────────────

    def decode(self, data: Any) -> Variant:
        """Materialise the alternative selected by the discriminator of *data*.

        *data* may be a mapping, JSON text/bytes, or an already decoded
        alternative of this family.
        """
        if isinstance(data, Variant):
            self._check(data)
            return data
        if isinstance(data, (str, bytes, bytearray)):
            data = json.loads(data)
        if not isinstance(data, dict):
            raise ValueError(f"{self.name}: expected a JSON object, got {type(data).__name__}")
        cls = self.new(data.get(self.discriminator))
        return cls.model_validate(data)

    def encode(self, value: Variant) -> str:
        """Serialize *value* as ``{discriminator: id, …fields}``."""
        self._check(value)
        head = dump_json({self.discriminator: value.variant_id})
        body = dump_json(value.model_dump(by_alias=True, exclude_none=True))
        return merge_json(head, body)

    def dump(self, value: Variant) -> Dict[str, Any]:
        return json.loads(self.encode(value))

    @property
    def annotated(self) -> Any:
        """Annotated type for pydantic fields holding a value of this family."""
        return Annotated[
            Variant,
            BeforeValidator(self.decode),
            PlainSerializer(self.dump, return_type=dict),
        ]

    def _check(self, value: Variant) -> None:
        if type(value).__family__ is not self:
            raise TypeError(f"{type(value).__name__} is not a member of {self.name}")
