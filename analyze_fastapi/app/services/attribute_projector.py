"""Projection of token attributes into response fields."""

import json
import logging
from typing import Any

from fastapi.encoders import jsonable_encoder

from analyze_fastapi.app.models import OutputOptions

logger = logging.getLogger(__name__)

_BYTE_TYPES = (bytes, bytearray, memoryview)


def decamelize(key: str) -> str:
    """Convert a mixed-case attribute key to lowercase underscore form.

    Every uppercase letter opens a new ``_``-prefixed segment unless nothing
    has been written yet, spaces become ``_`` and any other non-letter is
    dropped.

    Args:
        key: The attribute key, e.g. ``"PositionLength"``.

    Returns:
        The normalized key, e.g. ``"position_length"``.
    """
    buf: list[str] = []
    for char in key:
        if char.isupper():
            if buf:
                buf.append("_")
            buf.append(char.lower())
        elif char == " ":
            buf.append("_")
        elif char.isalpha():
            buf.append(char.lower())
    return "".join(buf)


def bytes_to_text(value: bytes | bytearray | memoryview) -> str:
    """Render raw bytes as bracketed hex octets, e.g. ``[68 69]``."""
    return "[" + " ".join(f"{octet:02x}" for octet in bytes(value)) + "]"


def project(key: str, value: Any, options: OutputOptions) -> tuple[str, Any] | None:
    """Decide whether an attribute is emitted and normalize its value.

    Args:
        key: The attribute key as published by the token stream.
        value: The attribute value.
        options: Caller-selected output fields.

    Returns:
        The ``(normalized_key, normalized_value)`` pair, or None when the
        attribute is not enabled or its value cannot be rendered.
    """
    try:
        name = decamelize(key)
        if not options.enables(name):
            return None
        if isinstance(value, _BYTE_TYPES):
            value = bytes_to_text(value)
        encoded = jsonable_encoder(value)
        json.dumps(encoded, allow_nan=False)
        return name, encoded
    except Exception:
        logger.warning("Failed to write %s:%r", key, value, exc_info=True)
        return None
