"""Single-admin authentication: bcrypt password check and HS256 bearer tokens.

There is exactly one admin account, configured through ``ADMIN_USERNAME`` and
``ADMIN_PASSWORD_HASH``. A successful login yields a signed token carrying a
fixed ``role`` claim; ``require_admin`` guards every management route with it.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
import logging
import re

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from config import (
    ADMIN_USERNAME,
    ADMIN_PASSWORD_HASH,
    JWT_SECRET,
    JWT_ALGORITHM,
    JWT_EXPIRES_IN,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

security = HTTPBearer(auto_error=False)

_UNITS = (
    (("ms", "msec", "msecs", "millisecond", "milliseconds"), 0.001),
    (("s", "sec", "secs", "second", "seconds"), 1),
    (("m", "min", "mins", "minute", "minutes"), 60),
    (("h", "hr", "hrs", "hour", "hours"), 3600),
    (("d", "day", "days"), 86400),
    (("w", "week", "weeks"), 7 * 86400),
    (("y", "yr", "yrs", "year", "years"), 365.25 * 86400),
)
_UNIT_SECONDS = {alias: seconds for aliases, seconds in _UNITS for alias in aliases}
_DURATION = re.compile(r"^\s*(\d*\.?\d+)\s*([a-z]*)\s*$", re.IGNORECASE)


def parse_expires_in(value: str) -> timedelta:
    """Turn '8h', '1.5h', '2 days', '1w' or a bare number of seconds into a timedelta."""
    match = _DURATION.match(str(value))
    unit = match.group(2).lower() if match else ""
    if not match or (unit and unit not in _UNIT_SECONDS):
        raise ValueError(f"Unrecognised token lifetime: {value!r}")
    lifetime = timedelta(seconds=float(match.group(1)) * _UNIT_SECONDS.get(unit, 1))
    if lifetime <= timedelta(0):
        raise ValueError(f"Token lifetime must be positive: {value!r}")
    return lifetime


def validate_settings():
    """Fail at startup on a token lifetime every login would trip over."""
    parse_expires_in(JWT_EXPIRES_IN)


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, password_hash: str) -> bool:
    return pwd_context.verify(plain, password_hash)


def is_login_configured() -> bool:
    return bool(ADMIN_PASSWORD_HASH and JWT_SECRET)


def authenticate(username: str, password: str) -> bool:
    """Check submitted credentials against the configured admin account.

    A wrong username still costs one hash verification so response timing
    does not reveal which half of the pair was wrong.
    """
    if username.lower() != ADMIN_USERNAME.lower():
        pwd_context.dummy_verify()
        return False
    return verify_password(password, ADMIN_PASSWORD_HASH)


def create_access_token(username: str, expires_in: Optional[str] = None) -> str:
    now = datetime.now(timezone.utc)
    lifetime = parse_expires_in(expires_in or JWT_EXPIRES_IN)
    payload = {
        "username": username,
        "role": ADMIN_ROLE,
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a token, returning its claims."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Return the admin token claims or raise 401."""
    if not JWT_SECRET:
        logger.error("JWT_SECRET is not set; admin routes are disabled.")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server misconfigured. Admin auth is unavailable.",
        )

    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Authentication required.")

    try:
        payload = decode_token(credentials.credentials)
    except ExpiredSignatureError:
        raise _unauthorized("Session expired. Please log in again.")
    except JWTError:
        raise _unauthorized("Invalid token. Please log in again.")

    if payload.get("role") != ADMIN_ROLE or not payload.get("username"):
        raise _unauthorized("Invalid token. Please log in again.")

    return payload
