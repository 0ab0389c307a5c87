# backend/app/auth.py
"""
Credentials and bearer tokens for the GymBook API.

Passwords are stored as bcrypt hashes. Tokens are HS256 JWTs carrying the
user id in ``sub``; sign-up and sign-in issue them, every protected route
verifies them.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from jwt import PyJWTError
from passlib.context import CryptContext

from .core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_dummy_hash: Optional[str] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for a mismatch or an unreadable stored hash."""
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except (ValueError, TypeError) as exc:
        logger.error("Password verification failed: %s", exc)
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def burn_password_check(plain_password: str) -> None:
    """Spend one bcrypt verification so unknown emails take as long as known ones."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = get_password_hash("gymbook-unknown-account")
    verify_password(plain_password, _dummy_hash)


def _signing_key() -> str:
    return settings.secret_key.get_secret_value()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises ``PyJWTError`` on any failure."""
    return cast(Dict[str, Any], jwt.decode(token, _signing_key(), algorithms=[settings.algorithm]))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``data`` (which must carry ``sub``) with an ``exp`` claim added."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    token = cast(str, jwt.encode(claims, _signing_key(), algorithm=settings.algorithm))
    logger.info("Issued access token for user %s", data.get("sub"))
    return token


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """Resolve the caller's user id from the Authorization header or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    try:
        claims = decode_access_token(credentials.credentials)
    except PyJWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        raise _unauthorized("Could not validate credentials") from exc

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        logger.warning("Bearer token has no subject")
        raise _unauthorized("Could not validate credentials")

    return subject
