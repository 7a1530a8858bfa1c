"""
Security Module

Passwords are bcrypt hashes (passlib); sessions are HS256 JWTs (python-jose).

A token names its user in `sub` and copies role and agency_id for
clients that want them. The API never trusts those copies: the user row
is reloaded on every request, so a demotion or a deleted user takes
effect on the next call.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from agencyhub.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # users created without a password cannot log in
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(claims: Dict[str, Any], lifetime: Optional[timedelta] = None) -> str:
    """Sign `claims` with an issue time and an expiry (ACCESS_TOKEN_EXPIRE_MINUTES by default)."""
    issued_at = datetime.utcnow()
    lifetime = lifetime or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = dict(claims, iat=issued_at, exp=issued_at + lifetime)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_user_token(user, lifetime: Optional[timedelta] = None) -> str:
    return create_access_token(
        {"sub": user.id, "role": user.role, "agency_id": user.agency_id},
        lifetime,
    )


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Payload of a valid token; None for a bad signature, garbage or an expired token."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
