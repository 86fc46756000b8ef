# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""Load, merge and persist a user's ``UserSettingsDocument``."""

from typing import List, Tuple

from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.merge import SecretMergeError, merge_secret
from models.user_settings import UserSettings
from preferences.schemas import (
    SCHEMA_VERSION,
    SETTINGS_SECRET_PATHS,
    SettingsUpdate,
    UserSettingsDocument,
)


def load_document(db: Session, user_id: int) -> UserSettingsDocument:
    """Stored document, or the defaults for a user who never saved settings."""
    row = db.get(UserSettings, user_id)
    if row is None:
        return UserSettingsDocument()
    return UserSettingsDocument.model_validate_json(row.document)


def save_document(db: Session, user_id: int, doc: UserSettingsDocument) -> None:
    """Upsert the row.  The caller commits."""
    row = db.get(UserSettings, user_id)
    if row is None:
        row = UserSettings(user_id=user_id)
        db.add(row)
    row.schema_version = SCHEMA_VERSION
    row.document = doc.model_dump_json()


def apply_update(
    doc: UserSettingsDocument, update: SettingsUpdate
) -> Tuple[UserSettingsDocument, List[str]]:
    """
    Merge *update* into *doc*.

    Only keys present in the payload are considered.  Plain fields are
    replaced when non-null; secret fields go through the merge rule.
    Returns the new document and the dotted paths that changed.
    """
    changed: List[str] = []
    merged = _merge(doc, update, "", changed)
    return merged, changed


def _merge(current: BaseModel, update: BaseModel, prefix: str, changed: List[str]) -> BaseModel:
    values = {}
    for name in update.model_fields_set:
        incoming = getattr(update, name)
        stored = getattr(current, name)
        path = prefix + name

        if isinstance(incoming, BaseModel):
            values[name] = _merge(stored, incoming, path + ".", changed)
            continue

        if path in SETTINGS_SECRET_PATHS:
            try:
                new = merge_secret(stored, incoming)
            except SecretMergeError as exc:
                raise SecretMergeError(exc.code, path) from None
        elif incoming is None:
            continue
        else:
            new = incoming

        if new != stored:
            values[name] = new
            changed.append(path)
    return current.model_copy(update=values)
