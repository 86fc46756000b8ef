# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Edit-form state for secret fields.

Each secret field carries an ``edited`` flag.  Untouched fields render as
a placeholder and are sent as ``"__KEEP__"``; edited fields render what
the user typed and are sent as-is, so an edited-then-emptied field sends
``""`` and clears the stored secret.  ``mark_saved`` resets every flag once
the server has accepted the save.
"""

from typing import Dict, Iterable

from core.merge import KEEP_SENTINEL

PLACEHOLDER = "********"


class SecretEditState:
    def __init__(self, fields: Iterable[str], placeholder: str = PLACEHOLDER):
        self.fields = tuple(fields)
        self.placeholder = placeholder
        self._edited: Dict[str, bool] = {f: False for f in self.fields}
        self._values: Dict[str, str] = {f: "" for f in self.fields}

    def _check(self, field: str) -> None:
        if field not in self._edited:
            raise KeyError(field)

    def edit(self, field: str, value: str) -> None:
        self._check(field)
        if value == KEEP_SENTINEL:
            # The sentinel cannot be stored as a secret.
            raise ValueError(f"{KEEP_SENTINEL!r} is reserved and cannot be used as a secret")
        self._edited[field] = True
        self._values[field] = value

    def clear(self, field: str) -> None:
        self.edit(field, "")

    def revert(self, field: str) -> None:
        self._check(field)
        self._edited[field] = False
        self._values[field] = ""

    def is_edited(self, field: str) -> bool:
        self._check(field)
        return self._edited[field]

    def input_value(self, field: str) -> str:
        """What the input box holds: blank unless the user typed something."""
        self._check(field)
        return self._values[field] if self._edited[field] else ""

    def input_placeholder(self, field: str, has_value: bool) -> str:
        self._check(field)
        if self._edited[field] or not has_value:
            return ""
        return self.placeholder

    def payload(self) -> Dict[str, str]:
        return {
            f: (self._values[f] if self._edited[f] else KEEP_SENTINEL)
            for f in self.fields
        }

    def mark_saved(self) -> None:
        for f in self.fields:
            self._edited[f] = False
            self._values[f] = ""
