"""
Where: services/trust/events.py
What: Authenticate signed run events received over HTTP and sign outbound ones.
Why: The core only computes signatures; freshness and replay checks live here.
"""

import logging
import re
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from cachetools import TLRUCache

from .config import TrustConfig
from .core.event_signature import sign_event_payload, verify_event_signature
from .core.exceptions import ConfigurationError, EventAuthError
from .core.signing import constant_time_equals

logger = logging.getLogger("trust.events")

TIMESTAMP_HEADER = "x-run-event-timestamp"
NONCE_HEADER = "x-run-event-nonce"
SIGNATURE_HEADER = "x-run-event-signature"
SERVER_KEY_HEADER = "x-game-server-key"

NONCE_MIN_LENGTH = 16
NONCE_MAX_LENGTH = 128
_NONCE_PATTERN = re.compile(r"^[A-Za-z0-9._:-]+$")
_SIGNATURE_PATTERN = re.compile(r"^[a-f0-9]{64}$")
# Bounded so int() never sees an oversized digit string.
_TIMESTAMP_PATTERN = re.compile(r"^[0-9]{1,15}$")


@dataclass(frozen=True)
class EventHeaders:
    timestamp: int
    nonce: str
    signature: str


class ReplayGuard:
    """
    In-memory record of consumed event nonces.

    Each nonce is remembered until max(timestamp, now) + max_age_seconds, which
    outlives every timestamp the freshness window would still accept.
    Entries beyond max_entries are evicted early, so size it above the
    expected event rate times the window.
    """

    def __init__(
        self,
        max_age_seconds: int,
        max_entries: int = 100_000,
        timer: Callable[[], float] = time.time,
    ):
        if max_age_seconds <= 0:
            raise ConfigurationError("max_age_seconds must be positive")
        self.max_age_seconds = max_age_seconds
        self._timer = timer
        self._seen = TLRUCache(
            maxsize=max_entries, ttu=lambda _key, expires_at, _now: expires_at, timer=timer
        )
        self._lock = threading.Lock()

    def consume(self, nonce: str, timestamp: int) -> bool:
        """
        Record a nonce.

        Returns:
            True if the nonce was new, False if it was already consumed
        """
        with self._lock:
            if nonce in self._seen:
                return False
            expires_at = max(timestamp, self._timer()) + self.max_age_seconds
            self._seen[nonce] = expires_at
            return True

    def __len__(self) -> int:
        return len(self._seen)


def _lower_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    return {str(k).lower(): v for k, v in headers.items()}


def _single(value: Any) -> Optional[str]:
    # Repeated headers arrive as lists and are never trusted.
    if not value or not isinstance(value, str):
        return None
    return value


def parse_event_headers(headers: Mapping[str, Any]) -> EventHeaders:
    """
    Read and validate the signature headers of an inbound event.

    Raises:
        EventAuthError: a header is missing or malformed (401)
    """
    lowered = _lower_headers(headers)

    raw_timestamp = _single(lowered.get(TIMESTAMP_HEADER))
    if raw_timestamp is None:
        raise EventAuthError("missing_timestamp")
    raw_timestamp = raw_timestamp.strip()
    if not _TIMESTAMP_PATTERN.match(raw_timestamp) or int(raw_timestamp) <= 0:
        raise EventAuthError("invalid_timestamp")

    raw_nonce = _single(lowered.get(NONCE_HEADER))
    if raw_nonce is None:
        raise EventAuthError("missing_nonce")
    nonce = raw_nonce.strip()
    if (
        len(nonce) < NONCE_MIN_LENGTH
        or len(nonce) > NONCE_MAX_LENGTH
        or not _NONCE_PATTERN.match(nonce)
    ):
        raise EventAuthError("invalid_nonce")

    raw_signature = _single(lowered.get(SIGNATURE_HEADER))
    if raw_signature is None:
        raise EventAuthError("missing_signature")
    signature = raw_signature.strip().lower()
    if not _SIGNATURE_PATTERN.match(signature):
        raise EventAuthError("invalid_signature")

    return EventHeaders(timestamp=int(raw_timestamp), nonce=nonce, signature=signature)


def check_server_key(headers: Mapping[str, Any], server_key: str) -> None:
    """
    Require the `x-game-server-key` header to equal server_key.

    Raises:
        EventAuthError: header missing, repeated or wrong (401)
    """
    provided = _single(_lower_headers(headers).get(SERVER_KEY_HEADER))
    if provided is None or not constant_time_equals(provided, server_key):
        raise EventAuthError("invalid_server_key")


def authenticate_event(
    headers: Mapping[str, Any],
    raw_body: Union[str, bytes],
    secret: str,
    *,
    max_age_seconds: int,
    now_seconds: Optional[int] = None,
    replay_guard: Optional[ReplayGuard] = None,
    server_key: Optional[str] = None,
    signature_required: bool = True,
) -> Optional[EventHeaders]:
    """
    Authenticate an inbound signed event.

    Checks run in order: server key (when given), header shape, timestamp
    freshness, signature, nonce reuse. The nonce is consumed only after the
    signature matches.

    Returns:
        The parsed signature headers, or None when signature_required is False

    Raises:
        ConfigurationError: secret is empty while signatures are required
        EventAuthError: 401 for bad keys or bad/stale signatures, 409 for replays
    """
    if server_key:
        check_server_key(headers, server_key)

    if not signature_required:
        return None

    if not secret:
        raise ConfigurationError("event signing secret is required")

    parsed = parse_event_headers(headers)

    now = int(time.time()) if now_seconds is None else now_seconds
    if abs(now - parsed.timestamp) > max_age_seconds:
        raise EventAuthError("signature_expired")

    if not verify_event_signature(
        secret, parsed.timestamp, parsed.nonce, raw_body, parsed.signature
    ):
        raise EventAuthError("invalid_signature")

    if replay_guard is not None and not replay_guard.consume(parsed.nonce, parsed.timestamp):
        logger.warning("Replayed run event rejected", extra={"nonce": parsed.nonce})
        raise EventAuthError("replay_detected", status_code=409)

    return parsed


def authenticate_run_event(
    headers: Mapping[str, Any],
    raw_body: Union[str, bytes],
    config: TrustConfig,
    *,
    now_seconds: Optional[int] = None,
    replay_guard: Optional[ReplayGuard] = None,
) -> Optional[EventHeaders]:
    """
    Authenticate a run event using the service settings.

    Without GAME_SERVER_WEBHOOK_KEY no check is made. With it, the server key
    header is always required and the signature only when
    RUN_EVENTS_SIGNATURE_REQUIRED is set.
    """
    key = config.GAME_SERVER_WEBHOOK_KEY.get_secret_value()
    if not key:
        return None
    return authenticate_event(
        headers,
        raw_body,
        key,
        max_age_seconds=config.RUN_EVENTS_SIGNATURE_MAX_AGE_SECONDS,
        now_seconds=now_seconds,
        replay_guard=replay_guard,
        server_key=key,
        signature_required=config.RUN_EVENTS_SIGNATURE_REQUIRED,
    )


def build_event_headers(
    secret: str,
    raw_body: Union[str, bytes],
    timestamp_seconds: Optional[int] = None,
    nonce: Optional[str] = None,
    server_key: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build the signature headers for an outbound event.

    raw_body must be the exact bytes that will be sent. server_key, when
    given, is sent as `x-game-server-key`.
    """
    timestamp = int(time.time()) if timestamp_seconds is None else timestamp_seconds
    nonce = nonce if nonce is not None else secrets.token_hex(16)
    signature = sign_event_payload(secret, timestamp, nonce, raw_body)
    headers = {
        TIMESTAMP_HEADER: str(timestamp),
        NONCE_HEADER: nonce,
        SIGNATURE_HEADER: signature,
    }
    if server_key:
        headers[SERVER_KEY_HEADER] = server_key
    return headers
