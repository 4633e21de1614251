# Overview: Service-layer operations for bearer tokens; signs and verifies JWT claims.

"""
Stateless Token Service

Tokens are HS256-signed JWTs carrying the user id and role, valid for
JWT_EXPIRES_MINUTES (one hour by default). Nothing is stored server-side:
verification is a signature + expiry check, and logout is a client concern.
"""

from dataclasses import dataclass
from datetime import timedelta

from flask import current_app
from jose import JWTError, jwt

from stockroom.time_utils import utcnow


class TokenError(Exception):
    """Raised when a token is malformed, tampered with or expired."""
    pass


@dataclass(frozen=True)
class Claims:
    """
    Decoded identity of the caller.

    Passed explicitly into every service operation that needs attribution
    or a role gate.
    """
    user_id: int
    role: str

    def to_dict(self) -> dict:
        return {"id": self.user_id, "role": self.role}


def _secret() -> str:
    return current_app.config["JWT_SECRET"]


def _algorithm() -> str:
    return current_app.config.get("JWT_ALGORITHM", "HS256")


def issue_token(claims: Claims, expires_in: timedelta | None = None) -> str:
    """Sign claims into a time-limited bearer token."""
    if expires_in is None:
        expires_in = timedelta(minutes=current_app.config.get("JWT_EXPIRES_MINUTES", 60))

    now = utcnow()
    payload = {
        "id": claims.user_id,
        "role": claims.role,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, _secret(), algorithm=_algorithm())


def verify_token(token: str) -> Claims:
    """
    Verify signature and expiry and return the embedded claims.

    Raises TokenError for any invalid, expired or incomplete token.
    """
    if not token:
        raise TokenError("Access denied")

    try:
        payload = jwt.decode(token, _secret(), algorithms=[_algorithm()])
    except JWTError:
        raise TokenError("Invalid token")

    user_id = payload.get("id")
    role = payload.get("role")
    if user_id is None or not role:
        raise TokenError("Invalid token")

    try:
        return Claims(user_id=int(user_id), role=str(role))
    except (TypeError, ValueError):
        raise TokenError("Invalid token")
