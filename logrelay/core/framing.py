"""Line framing for raw process output."""

from __future__ import annotations

import re
from typing import Any

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(buffer: str) -> list[str]:
    """Split *buffer* into complete lines.

    Every line the supervisor forwards is newline-terminated, so the
    fragment after the last newline is always empty and is dropped
    without being inspected.  A buffer that does not end in a newline
    therefore loses its final fragment.

    >>> split_lines("a\\r\\nb\\n")
    ['a', 'b']
    """
    parts = _LINE_BREAK.split(buffer)
    parts.pop()
    return parts


def decode_payload(data: Any, encoding: str = "utf-8") -> str:
    """Turn a bus payload into text, replacing undecodable bytes."""
    if data is None:
        return ""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data).decode(encoding, errors="replace")
    return str(data)
