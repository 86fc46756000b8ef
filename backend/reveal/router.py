# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Reveal endpoints – the only place a stored secret leaves the server when
redact mode is on.

Protocol
--------
1. The client holds a per-session 256-bit key and sends it, base64, in the
   ``x-reveal-key`` header together with its bearer token.
2. The handler loads the caller's record, encrypts each stored secret under
   that key with AES-256-GCM (fresh nonce per call) and returns
   ``{iv, tag, data}`` envelopes.
3. The client decrypts locally.

The server does see the session key for the duration of the request; this
is not end-to-end encryption.  What it does guarantee is that secrets never
cross the wire in plaintext and that old envelopes become unreadable once
the client rotates its key.

Secrets that are not set are omitted from the response.  Nothing here
mutates state unless ``audit_reveals`` is switched on, and neither keys nor
plaintext are ever logged.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from core.audit import audit
from core.codec import Envelope, encrypt, generate_session_key
from core.config import settings
from core.logger import logger
from core.security import get_current_user, get_reveal_key, verify_password
from inventory.lookup import own_provider, own_server
from models.user import User
from preferences.store import load_document
from reveal.schemas import (
    BarkKeyResponse,
    ProviderSecretResponse,
    RevealSessionRequest,
    RevealSessionResponse,
    ServerSecretsResponse,
    SmtpPasswordResponse,
    WhoisKeyResponse,
)

router = APIRouter(prefix="/reveal", tags=["reveal"])


def _wrap(plaintext: Optional[str], key: bytes) -> Optional[Envelope]:
    """Envelope for a stored secret, or None when nothing is stored."""
    if not plaintext:
        return None
    return encrypt(key, plaintext)


def _record(db: Session, user: User, what: str, fields: list, request: Request) -> None:
    logger.info("reveal %s | user=%d fields=%s", what, user.id, fields)
    if settings.audit_reveals and fields:
        audit(db, user.id, "secret_reveal", f"{what}: " + ", ".join(fields), request)
        db.commit()


# ---------------------------------------------------------------------------
# GET /reveal/servers/{id}
# ---------------------------------------------------------------------------


@router.get(
    "/servers/{server_id}",
    response_model=ServerSecretsResponse,
    response_model_exclude_none=True,
)
def reveal_server(
    server_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
    db: Session = Depends(get_db),
):
    server = own_server(server_id, current_user.id, db)
    out = ServerSecretsResponse(
        panel_password=_wrap(server.password, key),
        ssh_password=_wrap(server.ssh_password, key),
        provider_password=_wrap(server.provider_password, key),
    )
    _record(db, current_user, f"server={server_id}", sorted(out.model_dump(exclude_none=True)), request)
    return out


# ---------------------------------------------------------------------------
# GET /reveal/providers/{id}
# ---------------------------------------------------------------------------


@router.get(
    "/providers/{provider_id}",
    response_model=ProviderSecretResponse,
    response_model_exclude_none=True,
)
def reveal_provider(
    provider_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
    db: Session = Depends(get_db),
):
    provider = own_provider(provider_id, current_user.id, db)
    out = ProviderSecretResponse(password=_wrap(provider.password, key))
    _record(db, current_user, f"provider={provider_id}", sorted(out.model_dump(exclude_none=True)), request)
    return out


# ---------------------------------------------------------------------------
# GET /reveal/settings/*
# ---------------------------------------------------------------------------


@router.get("/settings/key", response_model=WhoisKeyResponse, response_model_exclude_none=True)
@router.get("/settings/whois-key", response_model=WhoisKeyResponse, response_model_exclude_none=True)
def reveal_whois_key(
    request: Request,
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
    db: Session = Depends(get_db),
):
    doc = load_document(db, current_user.id)
    out = WhoisKeyResponse(whois_api_key=_wrap(doc.whois_api_key, key))
    _record(db, current_user, "settings", sorted(out.model_dump(exclude_none=True)), request)
    return out


@router.get("/settings/bark-key", response_model=BarkKeyResponse, response_model_exclude_none=True)
def reveal_bark_key(
    request: Request,
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
    db: Session = Depends(get_db),
):
    doc = load_document(db, current_user.id)
    out = BarkKeyResponse(bark_key=_wrap(doc.notifications.bark.key, key))
    _record(db, current_user, "settings", sorted(out.model_dump(exclude_none=True)), request)
    return out


@router.get(
    "/settings/smtp-password",
    response_model=SmtpPasswordResponse,
    response_model_exclude_none=True,
)
def reveal_smtp_password(
    request: Request,
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
    db: Session = Depends(get_db),
):
    doc = load_document(db, current_user.id)
    out = SmtpPasswordResponse(smtp_password=_wrap(doc.notifications.smtp.password, key))
    _record(db, current_user, "settings", sorted(out.model_dump(exclude_none=True)), request)
    return out


# ---------------------------------------------------------------------------
# GET /reveal/test  – check token + key without touching any record
# ---------------------------------------------------------------------------


@router.get("/test")
def reveal_test(
    current_user: User = Depends(get_current_user),
    key: bytes = Depends(get_reveal_key),
):
    return {"ok": True}


# ---------------------------------------------------------------------------
# POST /reveal/session  – step-up: mint a key after re-checking the password
# ---------------------------------------------------------------------------


@router.post("/session", response_model=RevealSessionResponse)
def reveal_session(
    body: RevealSessionRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Return a fresh random session key once the caller proves they still
    know their password.  The key is not stored server-side.
    """
    if not verify_password(body.current_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_current_password",
        )
    return RevealSessionResponse(key=generate_session_key())
