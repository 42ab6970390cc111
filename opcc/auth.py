"""
Caller identity.

The session cookie `token` carries a signed, timestamped payload
{id, email, name, role}. Signing uses itsdangerous so the payload can be
trusted without a database round-trip; issuing the cookie (login) is
handled elsewhere and only needs issue_session_token().
"""

import logging
from dataclasses import asdict, dataclass
from typing import Annotated, Any

from fastapi import Cookie, Depends
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from opcc.config import settings
from opcc.models.failure import AuthenticationError

logger = logging.getLogger(__name__)

SESSION_COOKIE = "token"
SESSION_SALT = "opcc-session"


@dataclass(frozen=True, slots=True)
class Identity:
    """The authenticated caller."""

    id: int
    email: str
    name: str
    role: str


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(settings.session_secret, salt=SESSION_SALT)


def issue_session_token(identity: Identity) -> str:
    """Sign an identity into a cookie value."""
    return _serializer().dumps(asdict(identity))


def _identity_from_payload(payload: Any) -> Identity:
    if not isinstance(payload, dict):
        raise AuthenticationError("Invalid token payload.", "INVALID_TOKEN_PAYLOAD")
    if payload.get("id") is None or not payload.get("email") or not payload.get("role"):
        raise AuthenticationError("Invalid token payload.", "INVALID_TOKEN_PAYLOAD")
    try:
        user_id = int(payload["id"])
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid token payload.", "INVALID_TOKEN_PAYLOAD") from e
    return Identity(
        id=user_id,
        email=str(payload["email"]),
        name=str(payload.get("name") or ""),
        role=str(payload["role"]),
    )


def read_session_token(token: str) -> Identity:
    """
    Verify a cookie value and return the identity it carries.

    Raises:
        AuthenticationError: If the token is expired, tampered with, or
            its payload is missing required fields
    """
    try:
        payload = _serializer().loads(token, max_age=settings.session_max_age)
    except SignatureExpired as e:
        raise AuthenticationError("Token has expired.", "TOKEN_EXPIRED") from e
    except BadSignature as e:
        logger.info("Rejected session token: %s", type(e).__name__)
        raise AuthenticationError("Malformed token.", "MALFORMED_TOKEN") from e
    return _identity_from_payload(payload)


async def get_current_user(
    token: Annotated[str | None, Cookie(alias=SESSION_COOKIE)] = None,
) -> Identity:
    """FastAPI dependency: the authenticated caller, or 401."""
    if not token:
        raise AuthenticationError("Access denied. No token provided.", "NO_TOKEN")
    return read_session_token(token)


CurrentUser = Annotated[Identity, Depends(get_current_user)]
