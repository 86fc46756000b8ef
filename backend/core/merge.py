# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Write-path merge rule for secret fields.

For each secret field of an update payload:

    key absent            -> keep the stored value
    "__KEEP__"            -> keep the stored value
    ""                    -> clear (stored value becomes "")
    any other string      -> replace
    null / non-string     -> rejected with ``invalid_secret_value``

"Absent" and the sentinel deliberately mean the same thing, for every
record type.  The client sends the sentinel for fields the user did not
touch, so it never has to replay a secret it has not revealed.
"""

from typing import Any, Iterable, Optional

from pydantic import BaseModel

KEEP_SENTINEL = "__KEEP__"


class SecretMergeError(ValueError):
    """A secret field value the merge rule cannot resolve."""

    def __init__(self, code: str, field: str = ""):
        super().__init__(f"{code}: {field}" if field else code)
        self.code = code
        self.field = field


def merge_secret(stored: Optional[str], incoming: Any, provided: bool = True) -> Optional[str]:
    """Resolve one secret field; returns the value to store."""
    if not provided or incoming == KEEP_SENTINEL:
        return stored
    if not isinstance(incoming, str):
        raise SecretMergeError("invalid_secret_value")
    return incoming


def merge_secrets(target: Any, payload: BaseModel, fields: Iterable[str]) -> list:
    """
    Apply :func:`merge_secret` to each attribute in *fields* of *target*
    (an ORM row or any attribute bag), reading the incoming values from a
    pydantic *payload*.  ``model_fields_set`` tells an omitted key apart from
    an explicit ``null``.

    Returns the names of the fields whose stored value changed.
    """
    changed = []
    sent = payload.model_fields_set
    for name in fields:
        stored = getattr(target, name, None)
        try:
            merged = merge_secret(stored, getattr(payload, name, None), name in sent)
        except SecretMergeError as exc:
            raise SecretMergeError(exc.code, name) from None
        if merged != stored:
            setattr(target, name, merged)
            changed.append(name)
    return changed
