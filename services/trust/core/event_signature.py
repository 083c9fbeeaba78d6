"""
Where: services/trust/core/event_signature.py
What: Sign and verify timestamp+nonce bound inter-service event bodies.
Why: Workers and game servers authenticate callbacks with a shared secret.
"""

from typing import Union

from .exceptions import ConfigurationError
from .signing import constant_time_hex_equals, hmac_sha256


def _signing_input(timestamp_seconds: int, nonce: str, raw_body: Union[str, bytes]) -> bytes:
    prefix = f"{timestamp_seconds}.{nonce}.".encode("utf-8")
    if isinstance(raw_body, bytes):
        return prefix + raw_body
    return prefix + raw_body.encode("utf-8")


def sign_event_payload(
    secret: str,
    timestamp_seconds: int,
    nonce: str,
    raw_body: Union[str, bytes],
) -> str:
    """
    Sign `"{timestamp}.{nonce}.{raw_body}"` with HMAC-SHA256.

    raw_body must be the exact serialization sent on the wire; re-serializing
    JSON on the receiving side breaks verification.

    Returns:
        64-character lowercase hex digest

    Raises:
        ConfigurationError: secret is empty or timestamp is not an integer
    """
    if not isinstance(secret, str) or not secret:
        raise ConfigurationError("event signing secret is required")
    if not isinstance(timestamp_seconds, int) or isinstance(timestamp_seconds, bool):
        raise ConfigurationError("timestamp_seconds must be an integer")
    return hmac_sha256(secret, _signing_input(timestamp_seconds, nonce, raw_body)).hex()


def verify_event_signature(
    secret: str,
    timestamp_seconds: int,
    nonce: str,
    raw_body: Union[str, bytes],
    signature: str,
) -> bool:
    """Recompute the event signature and compare it in constant time."""
    if not isinstance(secret, str) or not secret or not isinstance(signature, str):
        return False
    expected = sign_event_payload(secret, timestamp_seconds, nonce, raw_body)
    return constant_time_hex_equals(expected, signature.strip().lower())
