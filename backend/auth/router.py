# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth endpoints – registration, login, password checks.

Security notes
--------------
* Login returns the *same* error code whether the username doesn't exist or
  the password is wrong.  This prevents user-enumeration attacks.
* change-password verifies the current password first, so a stolen (but not
  yet expired) token alone cannot reset the password.
* Errors are reported as short codes in ``detail`` (``weak_password``,
  ``invalid_current_password`` ...) which the client maps to field errors.
"""

import re
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core.audit import audit
from core.config import settings
from core.logger import logger
from core.security import (
    verify_password,
    hash_password,
    create_access_token,
    get_current_user,
)
from models.user import User
from auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserInfoResponse,
    VerifyPasswordRequest,
)

router = APIRouter(prefix="/auth", tags=["auth"])

# Generic code used for both "no such user" and "wrong password"
_LOGIN_FAIL = "invalid_credentials"

_EMAIL_RE = re.compile(r".+@.+\..+")


def _bad_request(code: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=code)


def _issue_token(user: User) -> LoginResponse:
    token = create_access_token({"sub": user.username, "user_id": user.id})
    return LoginResponse(token=token, user=UserInfoResponse.model_validate(user))


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, request: Request, db: Session = Depends(get_db)):
    """Create an account and sign it in."""
    username = body.username.strip()
    if not username:
        raise _bad_request("invalid_username")
    if not _EMAIL_RE.match(body.email):
        raise _bad_request("invalid_email")
    if len(body.password) < settings.min_password_length:
        raise _bad_request("weak_password")

    if db.query(User).filter(User.username == username).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="username_taken")

    user = User(
        username=username,
        email=body.email,
        password_hash=hash_password(body.password),
        is_active=True,
        last_login=datetime.now(timezone.utc),
    )
    db.add(user)
    db.flush()
    audit(db, user.id, "user_register", f"username={username}", request)
    db.commit()
    db.refresh(user)

    logger.info("user registered | user=%d", user.id)
    return _issue_token(user)


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Authenticate and return a signed JWT."""
    user = db.query(User).filter(User.username == body.username).first()

    # Unified failure path – no information leaks about whether the user exists
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=_LOGIN_FAIL)

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="account_disabled")

    user.last_login = datetime.now(timezone.utc)
    audit(db, user.id, "user_login", None, request)
    db.commit()
    db.refresh(user)
    return _issue_token(user)


# ---------------------------------------------------------------------------
# POST /auth/verify-password
# ---------------------------------------------------------------------------


@router.post("/verify-password")
def verify_current_password(
    body: VerifyPasswordRequest,
    current_user: User = Depends(get_current_user),
):
    if not verify_password(body.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_current_password",
        )
    return {"ok": True}


# ---------------------------------------------------------------------------
# PUT /auth/change-password
# ---------------------------------------------------------------------------


@router.put("/change-password")
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Change the authenticated user's login password."""
    if not verify_password(body.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_current_password",
        )
    if len(body.new_password) < settings.min_password_length:
        raise _bad_request("weak_password")

    current_user.password_hash = hash_password(body.new_password)
    audit(db, current_user.id, "user_update", "password=******", request)
    db.commit()
    return {"ok": True}


# ---------------------------------------------------------------------------
# GET /auth/me
# ---------------------------------------------------------------------------


@router.get("/me", response_model=UserInfoResponse)
def me(current_user: User = Depends(get_current_user)):
    """Return the authenticated user's public profile (no secrets)."""
    return current_user
