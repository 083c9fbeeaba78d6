"""
Core logic package.

Provides the stateless signing primitives: token codec and event signer.
"""

from .event_signature import sign_event_payload, verify_event_signature
from .exceptions import ConfigurationError, EventAuthError, TrustError
from .token import issue_token, verify_token

__all__ = [
    "issue_token",
    "verify_token",
    "sign_event_payload",
    "verify_event_signature",
    "TrustError",
    "ConfigurationError",
    "EventAuthError",
]
