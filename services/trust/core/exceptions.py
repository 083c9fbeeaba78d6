"""
Custom exception classes.

Setup faults and caller-layer authentication failures. Routine token
verification failures are returned as data and never raised.
"""


class TrustError(Exception):
    """Base exception class for the trust library."""

    pass


class ConfigurationError(TrustError):
    """Raised when signing is attempted with invalid configuration."""

    pass


class EventAuthError(TrustError):
    """Raised when an inbound signed event fails authentication."""

    def __init__(self, reason: str, status_code: int = 401):
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Event authentication failed ({status_code}): {reason}")
