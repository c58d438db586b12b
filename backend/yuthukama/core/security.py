from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, VerifyMismatchError
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from yuthukama.core.config import settings
from yuthukama.db.session import get_db


_ph = PasswordHasher(
    time_cost=2,
    memory_cost=65536,  # 64 MB
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    return _ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return _ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError):
        return False


def create_access_token(subject: str, extra: dict | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)).timestamp()),
    }
    if extra:
        payload.update(extra)

    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a bearer token.

    Raises:
        ExpiredSignatureError: token is past its exp claim
        JWTError: token is malformed or the signature does not match
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
    )


def new_reset_token() -> tuple[str, str]:
    """Return (token for the email link, sha256 hex digest to store)."""
    token = secrets.token_hex(20)
    return token, hash_reset_token(token)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_db),
):
    """
    Dependency: Extract JWT token, verify it, and fetch User object from DB.
    Expects: Authorization: Bearer <token>
    Returns: User object
    Raises: HTTPException 401 if token missing/invalid/expired or user not found
    """
    from yuthukama.models.user import User  # avoid circular imports

    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authorized, no token provided")

    try:
        payload = decode_access_token(credentials.credentials)
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except JWTError:
        raise _unauthorized("Invalid token")

    sub = payload.get("sub")
    if not sub or not str(sub).isdigit():
        raise _unauthorized("Invalid token payload")

    user = db.get(User, int(sub))
    if not user:
        raise _unauthorized("User not found")

    return user
