# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Settings endpoints – WHOIS API access and notification channels.

The WHOIS API key, the Bark device key and the SMTP password are secrets:
reads go through the redaction policy and writes through the merge rule.
Use /reveal/settings/* to read them back.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database import get_db
from core.audit import audit
from core.logger import logger
from core.redaction import RedactionPolicy, get_redaction_policy
from core.security import get_current_user
from models.user import User
from preferences.schemas import SETTINGS_SECRETS, SETTINGS_SECRET_PATHS, SettingsUpdate
from preferences.store import apply_update, load_document, save_document

router = APIRouter(prefix="/settings", tags=["settings"])


def redacted_settings(doc, policy: RedactionPolicy) -> dict:
    return policy.apply(doc.model_dump(mode="json", by_alias=True), SETTINGS_SECRETS)


@router.get("")
def get_settings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    return redacted_settings(load_document(db, current_user.id), policy)


@router.put("")
def update_settings(
    body: SettingsUpdate,
    request: Request,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    policy: RedactionPolicy = Depends(get_redaction_policy),
):
    """
    Partial update.  Omitted keys are left alone; for the three secret
    fields ``"__KEEP__"`` keeps, ``""`` clears and any other string replaces.
    """
    doc, changed = apply_update(load_document(db, current_user.id), body)
    save_document(db, current_user.id, doc)

    detail = ", ".join(
        f"{p}=******" if p in SETTINGS_SECRET_PATHS else p for p in changed
    )
    audit(db, current_user.id, "settings_update", detail or None, request)
    db.commit()

    logger.info("settings updated | user=%d changed=%s", current_user.id, changed)
    return redacted_settings(doc, policy)
