"""Bearer token helpers used to identify the acting user."""
from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from wtf_dial.core.errors import UnauthorizedError
from wtf_dial.core.settings import settings
from wtf_dial.db.time import utcnow


def create_access_token(user_id: int, extra_claims: dict[str, str] | None = None) -> str:
    """Create a JWT access token whose subject is the user's identifier."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int:
    """Return the user identifier carried by ``token``.

    Raises:
        UnauthorizedError: If the token is malformed, expired or has no subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise UnauthorizedError("Could not validate credentials.") from err

    subject = payload.get("sub")
    if subject is None:
        raise UnauthorizedError("Could not validate credentials.")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise UnauthorizedError("Could not validate credentials.") from err
