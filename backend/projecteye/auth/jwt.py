"""JWT verification.

Tokens are issued by the identity service; this API only verifies them.
"""
from jose import JWTError, jwt

from projecteye.config import get_settings

settings = get_settings()


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
