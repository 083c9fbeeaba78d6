"""
Authentication token profiles.

Issues and checks the two token kinds the services exchange: access tokens
for API clients and join tokens that admit an account into a run.

Note:
    These helpers return None on rejection. Map that to an HTTP 401 or a
    socket close in the caller.
"""

import uuid
from dataclasses import dataclass
from typing import Optional

from .core.token import issue_token, verify_token

ACCESS_TOKEN_TYPE = "access"
JOIN_TOKEN_TYPE = "join"


@dataclass(frozen=True)
class JoinClaims:
    run_id: str
    account_id: Optional[str]
    jti: str
    exp: int


def extract_bearer_token(value: Optional[str]) -> Optional[str]:
    """
    Extract the token from an `Authorization: Bearer <token>` value.

    Returns:
        The token, or None when the value is empty or uses another scheme
    """
    if not value:
        return None
    parts = value.strip().split(None, 1)
    if len(parts) != 2:
        return None
    scheme, token = parts
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def issue_access_token(account_id: str, secret: str, expires_in_seconds: int) -> str:
    """Issue an access token whose subject is the account ID."""
    return issue_token(
        {"sub": account_id, "type": ACCESS_TOKEN_TYPE},
        secret,
        expires_in_seconds=expires_in_seconds,
    )


def verify_access_token(
    token: str, secret: str, now_seconds: Optional[float] = None
) -> Optional[str]:
    """
    Verify an access token and return the account ID.

    Args:
        token: Bearer token (with scheme or token only)
        secret: access token signing secret

    Returns:
        Account ID (None on verification failure)
    """
    if not token:
        return None
    if " " in token.strip():
        token = extract_bearer_token(token)
        if token is None:
            return None

    verdict = verify_token(token, secret, now_seconds=now_seconds)
    if not verdict.ok:
        return None

    claims = verdict.claims
    account_id = claims.get("sub")
    if claims.get("type") != ACCESS_TOKEN_TYPE or not isinstance(account_id, str):
        return None
    return account_id if _is_uuid(account_id) else None


def issue_join_token(
    run_id: str, account_id: str, secret: str, expires_in_seconds: int
) -> str:
    """Issue a short-lived token admitting account_id into run_id."""
    return issue_token(
        {"run_id": run_id, "account_id": account_id, "type": JOIN_TOKEN_TYPE},
        secret,
        expires_in_seconds=expires_in_seconds,
    )


def verify_join_token(
    token: str,
    secret: str,
    run_id: Optional[str] = None,
    now_seconds: Optional[float] = None,
) -> Optional[JoinClaims]:
    """
    Verify a join token.

    When run_id is given the token must have been issued for that run.
    """
    verdict = verify_token(token, secret, now_seconds=now_seconds)
    if not verdict.ok:
        return None

    claims = verdict.claims
    token_run_id = claims.get("run_id")
    if claims.get("type") != JOIN_TOKEN_TYPE or not isinstance(token_run_id, str):
        return None
    if run_id is not None and run_id != token_run_id:
        return None

    account_id = claims.get("account_id")
    return JoinClaims(
        run_id=token_run_id,
        account_id=account_id if isinstance(account_id, str) else None,
        jti=claims["jti"],
        exp=int(claims["exp"]),
    )
