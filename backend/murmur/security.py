"""
Murmur Backend — Password Hashing & Session Tokens
====================================================

What:  bcrypt password hashing (passlib) and signed session tokens (python-jose).
Who:   AuthService, UserService (password change), and the session dependency.

Token format:
    HS256 JWT with claims {"sub": "<user uuid>", "iat": ..., "exp": ...}.
    Validity: settings.access_token_expire_minutes (default 60). The cookie
    that carries it lives longer (15 days), so an expired token inside a
    live cookie is expected and handled by the session dependency.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from murmur.config import settings


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class TokenExpired(Exception):
    """The token signature is valid but `exp` has passed."""


class TokenInvalid(Exception):
    """The token is malformed, forged, or carries no usable subject."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a plaintext password against a stored bcrypt hash.

    Returns False (never raises) for a malformed stored hash.
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def create_access_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a session token for `user_id`.

    Args:
        user_id: Subject of the token
        expires_delta: Override the configured validity (tests use negative
                       deltas to mint already-expired tokens)
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> uuid.UUID:
    """
    Verify a session token and return its subject.

    Raises:
        TokenExpired: signature valid, token past `exp`
        TokenInvalid: anything else (bad signature, garbage, missing/odd `sub`)
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise TokenExpired(str(e)) from e
    except JWTError as e:
        raise TokenInvalid(str(e)) from e

    subject = payload.get("sub")
    if not subject:
        raise TokenInvalid("token has no subject")
    try:
        return uuid.UUID(subject)
    except (TypeError, ValueError) as e:
        raise TokenInvalid("token subject is not a user id") from e
