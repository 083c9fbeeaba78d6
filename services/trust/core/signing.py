"""
Where: services/trust/core/signing.py
What: HMAC-SHA256, base64url and canonical JSON primitives shared by tokens and events.
Why: Every comparison of attacker-visible data goes through one constant-time path.
"""

import hashlib
import hmac
import json
from typing import Any, Optional, Union

from jwt.utils import base64url_decode, base64url_encode

BytesLike = Union[str, bytes]


def _to_bytes(value: BytesLike) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8", "surrogatepass")


def hmac_sha256(secret: BytesLike, message: BytesLike) -> bytes:
    """Return the raw HMAC-SHA256 digest of message keyed by secret."""
    return hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).digest()


def b64url_encode(data: bytes) -> str:
    """Unpadded base64url text."""
    return base64url_encode(data).decode("ascii")


def b64url_decode(segment: BytesLike) -> bytes:
    """
    Decode unpadded base64url.

    Raises:
        binascii.Error: segment length cannot be valid base64
    """
    return base64url_decode(segment)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def encode_json_segment(value: Any) -> str:
    """
    Serialize value as compact JSON and encode it as a token segment.

    Key order is preserved and non-ASCII text is emitted as UTF-8, so the
    output matches what a JavaScript `JSON.stringify` peer produces.
    """
    serialized = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return b64url_encode(serialized.encode("utf-8"))


def decode_json_segment(segment: str) -> Optional[Any]:
    """Decode a token segment back to JSON. Returns None if it is not valid."""
    try:
        raw = b64url_decode(segment)
        return json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return None


def constant_time_equals(left: BytesLike, right: BytesLike) -> bool:
    """
    Compare two values without leaking where they differ.

    Lengths are checked first; unequal lengths return False without touching
    the contents.
    """
    if not isinstance(left, (str, bytes)) or not isinstance(right, (str, bytes)):
        return False
    left_bytes = _to_bytes(left)
    right_bytes = _to_bytes(right)
    if len(left_bytes) != len(right_bytes):
        return False
    return hmac.compare_digest(left_bytes, right_bytes)


def constant_time_hex_equals(left: str, right: str) -> bool:
    """Compare two hex digests by their decoded bytes. Invalid hex never matches."""
    try:
        left_bytes = bytes.fromhex(left)
        right_bytes = bytes.fromhex(right)
    except (TypeError, ValueError):
        return False
    return constant_time_equals(left_bytes, right_bytes)
