from datetime import datetime, timedelta, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from jose import jwt

from twistlist.config.settings import settings

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """
    Hashes a password with Argon2id.
    """
    return _password_hasher.hash(password)


def verify_password(hashed_password: str, password: str) -> bool:
    """
    Checks a plaintext password against a stored Argon2 hash.
    Returns False on mismatch or when the stored hash is unreadable.
    """
    try:
        return _password_hasher.verify(hashed_password, password)
    except (VerificationError, InvalidHashError):
        return False


def create_access_token(user_id: int, email: str, expires_minutes: Optional[int] = None) -> str:
    """
    Signs a session token carrying the user's id (as `sub`) and email.
    """
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verifies signature and expiry. Raises jose.JWTError on failure.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
