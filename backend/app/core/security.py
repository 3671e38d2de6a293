from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import bcrypt
from jose import jwt, JWTError
from starlette.concurrency import run_in_threadpool

from app.core.config import settings

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class CallerIdentity:
    """User fields embedded in an access token at issuance."""
    id: str
    username: str
    email: str


def create_access_token(user: Any, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user: Object exposing ``id``, ``username`` and ``email``
        expires_delta: Optional expiration time delta (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "id": str(user.id),
        "username": user.username,
        "email": user.email,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[CallerIdentity]:
    """Verify signature and expiry; return the embedded identity or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("id")
    username = payload.get("username")
    email = payload.get("email")
    if not user_id or not username or not email:
        return None
    return CallerIdentity(id=str(user_id), username=username, email=email)


def resolve_identity(headers: Mapping[str, str]) -> Optional[CallerIdentity]:
    """
    Recover the caller identity from an ``Authorization: Bearer <token>`` header.

    Missing header, another scheme, or a token failing verification all
    yield None. Never raises.
    """
    header = headers.get("authorization") or headers.get("Authorization") or ""
    if not header.startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    if not token:
        return None
    return decode_access_token(token)


def _prepare_password(password: str) -> bytes:
    """Encode and truncate to the 72-byte bcrypt limit."""
    return password.encode('utf-8')[:72]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            _prepare_password(plain_password),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    salt = bcrypt.gensalt(rounds=10)
    hashed = bcrypt.hashpw(_prepare_password(password), salt)
    return hashed.decode('utf-8')


async def hash_password_async(password: str) -> str:
    """bcrypt is CPU bound; keep it off the event loop."""
    return await run_in_threadpool(get_password_hash, password)


async def verify_password_async(plain_password: str, hashed_password: str) -> bool:
    return await run_in_threadpool(verify_password, plain_password, hashed_password)
