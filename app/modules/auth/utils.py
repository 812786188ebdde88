from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
import jwt
from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)

def verify_password(plain: str, hashed: str) -> bool:
    """Verify a hashed password against a plain password."""
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token with an expiration time.
    If expires_delta is not provided, it defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT; raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.APP_SECRET_STRING, algorithms=[settings.ALGORITHM])


def has_permission(role: str, allowed_sections: Iterable[str], resource: str, action: str) -> bool:
    """
    Resolve a permission for `resource:action`.

    ADMIN always passes. Otherwise the user's sections must contain the exact
    permission, the `resource:*` wildcard, or the legacy bare section name.
    """
    if role == "ADMIN":
        return True

    sections = set(allowed_sections or [])
    return (
        f"{resource}:{action}" in sections
        or f"{resource}:*" in sections
        or resource in sections
    )
