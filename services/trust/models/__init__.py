"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .token import (
    RESERVED_CLAIMS,
    TokenClaims,
    TokenRejection,
    TokenVerification,
)

__all__ = [
    "RESERVED_CLAIMS",
    "TokenClaims",
    "TokenRejection",
    "TokenVerification",
]
