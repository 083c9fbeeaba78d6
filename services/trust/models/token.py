"""
Token verification models.

Standardizes the verdict returned by the token codec.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

ClaimsModelT = TypeVar("ClaimsModelT", bound=BaseModel)

# Claim names owned by the codec; caller values are always replaced.
RESERVED_CLAIMS = ("iat", "exp", "jti")


class TokenRejection(str, Enum):
    """Closed set of reasons a token can fail verification."""

    MISSING_SECRET = "missing_secret"
    INVALID_FORMAT = "invalid_format"
    INVALID_SIGNATURE = "invalid_signature"
    INVALID_HEADER = "invalid_header"
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_CLAIMS = "invalid_claims"
    EXPIRED = "expired"


class TokenClaims(BaseModel):
    """Base claims present in every issued token. Caller claims ride along as extras."""

    model_config = ConfigDict(extra="allow", frozen=True)

    iat: int
    exp: int
    jti: str


class TokenVerification(BaseModel):
    """
    Result of verifying a token.

    `ok` is the discriminant: successful verdicts carry the full claim set,
    failed ones carry exactly one reason.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    claims: Optional[Dict[str, Any]] = None
    reason: Optional[TokenRejection] = None

    @model_validator(mode="after")
    def _check_discriminant(self) -> "TokenVerification":
        if self.ok and (self.claims is None or self.reason is not None):
            raise ValueError("accepted verdict requires claims and no reason")
        if not self.ok and (self.reason is None or self.claims is not None):
            raise ValueError("rejected verdict requires a reason and no claims")
        return self

    @classmethod
    def accept(cls, claims: Dict[str, Any]) -> "TokenVerification":
        return cls(ok=True, claims=claims)

    @classmethod
    def reject(cls, reason: TokenRejection) -> "TokenVerification":
        return cls(ok=False, reason=reason)

    def claims_as(self, model: Type[ClaimsModelT] = TokenClaims) -> ClaimsModelT:
        """
        Validate the accepted claims into a typed model.

        Raises:
            ValueError: the verdict is a rejection
            pydantic.ValidationError: the claims do not fit the model
        """
        if not self.ok or self.claims is None:
            raise ValueError(f"Token was rejected: {self.reason.value if self.reason else None}")
        return model.model_validate(self.claims)
