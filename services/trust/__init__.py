"""
Shared trust primitives for the run platform services.

Token codec and event signer live in `core`; `auth` and `events` layer the
service-level token profiles and inbound event checks on top of them.
"""

from .core import (
    ConfigurationError,
    EventAuthError,
    TrustError,
    issue_token,
    sign_event_payload,
    verify_event_signature,
    verify_token,
)
from .models import TokenClaims, TokenRejection, TokenVerification

__all__ = [
    "issue_token",
    "verify_token",
    "sign_event_payload",
    "verify_event_signature",
    "TokenClaims",
    "TokenRejection",
    "TokenVerification",
    "TrustError",
    "ConfigurationError",
    "EventAuthError",
]
