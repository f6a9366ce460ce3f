from __future__ import annotations

from typing import Any

import jwt

from laundrmate.application.exceptions import AuthError
from laundrmate.domain.entities.session import Role, Session

_USER_ID_CLAIMS = ("id", "user_id", "userId", "sub")


def decode_claims(token: str) -> dict[str, Any]:
    """Read the payload of a JWT. The signature is the server's concern."""
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Unreadable token: {e}") from e


def session_from_token(token: str, fallback_role: Role | None = None) -> Session:
    claims = decode_claims(token)
    raw_role = claims.get("role")
    try:
        role = Role(str(raw_role).lower()) if raw_role is not None else (fallback_role or Role.user)
    except ValueError as e:
        raise AuthError(f"Unknown role in token: {raw_role}") from e
    user_id = next((claims[key] for key in _USER_ID_CLAIMS if claims.get(key) is not None), None)
    return Session(token=token, role=role, user_id=user_id)
