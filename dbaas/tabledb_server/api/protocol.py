"""
Wire framing for the TableDB stream protocol.

Request: one UTF-8 statement per received chunk.
Response: one compact JSON value followed by a newline.
"""

from __future__ import annotations

import json
from typing import Union

from ..execute import ParseFailure, Result

RESPONSE_TERMINATOR = b"\n"
INVALID_UTF8_MESSAGE = "statement is not valid UTF-8"


def decode_statement(chunk: bytes) -> Union[str, ParseFailure]:
    """Decode a received chunk, or return the failure to send back."""
    try:
        return chunk.decode("utf-8")
    except UnicodeDecodeError:
        return ParseFailure(INVALID_UTF8_MESSAGE)


def encode_result(result: Result) -> bytes:
    """Encode a Result as one newline-terminated JSON line."""
    body = json.dumps(result.to_payload(), separators=(",", ":"), ensure_ascii=False)
    return body.encode("utf-8") + RESPONSE_TERMINATOR
