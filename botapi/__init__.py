"""Telegram Bot API transport — payloads, wire models, variant codec and client.

Usage::

    from botapi import BotAPI, Payload, APIException
    from botapi.models import Message

    api = BotAPI(token)
    payload = Payload().set_int("chat_id", 100).set("text", "hi")
    message = await api.request("sendMessage", payload, Message)

This package must NEVER import from ``dispatch/`` at runtime.
"""

from botapi.client import DEFAULT_API_URL, DEFAULT_FILE_URL, BotAPI, Empty
from botapi.exceptions import APIException, BotAPIError, HTTPError, JSONError, VariantError
from botapi.inputs import FileID, FileURL, InputFile
from botapi.payload import Payload

__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_FILE_URL",
    "BotAPI",
    "Empty",
    "APIException",
    "BotAPIError",
    "HTTPError",
    "JSONError",
    "VariantError",
    "FileID",
    "FileURL",
    "InputFile",
    "Payload",
]
