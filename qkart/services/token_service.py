from datetime import timedelta
from typing import Optional

from shared.utils import create_access_token, verify_token, settings
from qkart.models import UserDB
from qkart.schemas import Token


def generate_auth_tokens(user: UserDB, expires_delta: Optional[timedelta] = None) -> Token:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_ACCESS_EXPIRATION_MINUTES)
    access_token, expires = create_access_token(user.id, expires_delta)
    return Token(access_token=access_token, expires=expires)


def verify_access_token(token: str) -> dict:
    """Decode an access token; raises 401 when it is invalid, expired or of another type."""
    return verify_token(token)
