# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  Account credentials and auth guards live here;
the reveal envelope codec lives in ``core.codec``.

Responsibilities
----------------
1. Password hashing / verification          (passlib pbkdf2_sha256)
2. JWT creation / decoding                  (PyJWT / HS256)
3. FastAPI dependency guards                (get_current_user, get_reveal_key)
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from core.codec import InvalidSessionKey, decode_session_key
from core.config import settings
from database import get_db
from models.user import User

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """
    Hash a plaintext password with PBKDF2-SHA256.

    The salt is embedded in the returned passlib hash string
    (``$pbkdf2-sha256$rounds$salt$checksum``).
    """
    return _pbkdf2.using(rounds=settings.password_hash_rounds).hash(plain)


def verify_password(plain: str, stored_hash: str) -> bool:
    """Constant-time verification against a hash from :func:`hash_password`."""
    return _pbkdf2.verify(plain, stored_hash)


# ---------------------------------------------------------------------------
# 2.  JWT – access tokens
# ---------------------------------------------------------------------------


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a JWT with HS256.

    *data* should contain at minimum: sub (username) and user_id.
    An ``exp`` claim is added automatically.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode["exp"] = expire
    return _jwt.encode(to_encode, settings.secret_key, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT.  Raises HTTP 401 on any failure (expired,
    bad signature, malformed).
    """
    try:
        return _jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except _jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )


# ---------------------------------------------------------------------------
# 3.  FastAPI dependency guards
# ---------------------------------------------------------------------------

# The tokenUrl is only used by the generated OpenAPI docs.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db=Depends(get_db),
):
    """
    Dependency: the active ``User`` the bearer token was issued to.

    The token's ``sub`` must still match the row's username.  Anything
    else (bad token, deleted or disabled account) is a 401.
    """
    payload = decode_access_token(token)
    user_id = payload.get("user_id")
    user = db.get(User, user_id) if isinstance(user_id, int) else None
    if user is None or not user.is_active or user.username != payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )
    return user


def get_reveal_key(
    x_reveal_key: Optional[str] = Header(default=None, alias="x-reveal-key"),
) -> bytes:
    """
    Dependency: decode the caller's session key from ``x-reveal-key``.

    Declare it *after* ``get_current_user`` so that a missing bearer token
    is reported as 401 before a missing key is reported as 400.
    """
    try:
        return decode_session_key(x_reveal_key or "")
    except InvalidSessionKey:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="invalid_reveal_key",
        )


# -- IP Address extraction ----------------------------------------------------


def get_client_ip(request: Request) -> str:
    """
    Client IP for audit rows: first X-Forwarded-For hop if present, else the
    socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"
