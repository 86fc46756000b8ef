# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Audit helper.  Adds an ``AuditLog`` row to the current session; the caller
commits it together with the change being audited.

*detail* must never carry a secret value – name the field instead
(``password=******``).
"""

from typing import Optional

from fastapi import Request
from sqlalchemy.orm import Session

from core.security import get_client_ip
from models.audit_log import AuditLog


def audit(
    db: Session,
    user_id: Optional[int],
    action: str,
    detail: Optional[str] = None,
    request: Optional[Request] = None,
) -> None:
    db.add(AuditLog(
        user_id=user_id,
        action=action,
        detail=detail,
        request_ip=get_client_ip(request) if request is not None else None,
    ))


def mask_changes(changed: list, secret_names: set) -> str:
    """Render a list of changed attribute names with secrets masked."""
    return ", ".join(
        f"{name}=******" if name in secret_names else name for name in changed
    )
