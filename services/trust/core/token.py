"""
Where: services/trust/core/token.py
What: Issue and verify compact HS256 tokens carrying expiry and identity claims.
Why: Services share one codec so tokens minted by one are accepted by another.

Verification order is fixed: secret, shape, signature, header, payload,
claims, expiry. Nothing decoded from the token is trusted before the
signature matches.
"""

import logging
import time
import uuid
from typing import Any, Dict, Mapping, Optional

from ..models.token import RESERVED_CLAIMS, TokenRejection, TokenVerification
from .exceptions import ConfigurationError
from .signing import (
    b64url_encode,
    constant_time_equals,
    decode_json_segment,
    encode_json_segment,
    hmac_sha256,
)

logger = logging.getLogger("trust.token")

ALGORITHM = "HS256"
TOKEN_TYPE = "JWT"
_HEADER = {"alg": ALGORITHM, "typ": TOKEN_TYPE}


def _now_seconds() -> int:
    return int(time.time())


def _sign_segments(signing_input: str, secret: str) -> str:
    return b64url_encode(hmac_sha256(secret, signing_input))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def issue_token(
    payload: Mapping[str, Any],
    secret: str,
    *,
    expires_in_seconds: int,
    issued_at_seconds: Optional[int] = None,
    token_id: Optional[str] = None,
) -> str:
    """
    Issue a signed token.

    Args:
        payload: caller claims (JSON-representable values)
        secret: HMAC signing key
        expires_in_seconds: TTL; exp is always iat + TTL
        issued_at_seconds: iat override (defaults to now)
        token_id: jti override (defaults to a random UUID)

    Returns:
        `header.payload.signature`, every segment unpadded base64url

    Raises:
        ConfigurationError: secret is empty, TTL is not a positive integer or
            token_id is not a string
        TypeError: payload is not a mapping or holds non-JSON values
    """
    if not isinstance(secret, str) or not secret:
        raise ConfigurationError("token secret is required")
    if (
        not isinstance(expires_in_seconds, int)
        or isinstance(expires_in_seconds, bool)
        or expires_in_seconds <= 0
    ):
        raise ConfigurationError("expires_in_seconds must be a positive integer")
    if not isinstance(payload, Mapping):
        raise TypeError(f"payload must be a mapping, got {type(payload).__name__}")
    if token_id is not None and not isinstance(token_id, str):
        raise ConfigurationError("token_id must be a string")

    issued_at = _now_seconds() if issued_at_seconds is None else int(issued_at_seconds)
    jti = token_id if token_id is not None else str(uuid.uuid4())

    body: Dict[str, Any] = {k: v for k, v in payload.items() if k not in RESERVED_CLAIMS}
    body["iat"] = issued_at
    body["exp"] = issued_at + expires_in_seconds
    body["jti"] = jti

    signing_input = f"{encode_json_segment(_HEADER)}.{encode_json_segment(body)}"
    return f"{signing_input}.{_sign_segments(signing_input, secret)}"


def verify_token(
    token: str,
    secret: str,
    *,
    now_seconds: Optional[float] = None,
) -> TokenVerification:
    """
    Verify a token and return its claims or a rejection reason.

    Never raises for malformed or hostile input; the first failing check
    decides the reason.
    """
    verdict = _verify(token, secret, now_seconds)
    if not verdict.ok:
        logger.debug("Token rejected", extra={"reason": verdict.reason.value})
    return verdict


def _verify(token: Any, secret: Any, now_seconds: Optional[float]) -> TokenVerification:
    if not isinstance(secret, str) or not secret:
        return TokenVerification.reject(TokenRejection.MISSING_SECRET)

    if not isinstance(token, str):
        return TokenVerification.reject(TokenRejection.INVALID_FORMAT)
    parts = token.split(".")
    if len(parts) != 3:
        return TokenVerification.reject(TokenRejection.INVALID_FORMAT)

    header_segment, payload_segment, signature_segment = parts
    expected = _sign_segments(f"{header_segment}.{payload_segment}", secret)
    if not constant_time_equals(expected, signature_segment):
        return TokenVerification.reject(TokenRejection.INVALID_SIGNATURE)

    header = decode_json_segment(header_segment)
    if (
        not isinstance(header, dict)
        or header.get("alg") != ALGORITHM
        or header.get("typ") != TOKEN_TYPE
    ):
        return TokenVerification.reject(TokenRejection.INVALID_HEADER)

    payload = decode_json_segment(payload_segment)
    if not isinstance(payload, dict):
        return TokenVerification.reject(TokenRejection.INVALID_PAYLOAD)

    if (
        not _is_number(payload.get("iat"))
        or not _is_number(payload.get("exp"))
        or not isinstance(payload.get("jti"), str)
    ):
        return TokenVerification.reject(TokenRejection.INVALID_CLAIMS)

    now = _now_seconds() if now_seconds is None else now_seconds
    # Expired at the exact exp second.
    if payload["exp"] <= now:
        return TokenVerification.reject(TokenRejection.EXPIRED)

    return TokenVerification.accept(payload)
