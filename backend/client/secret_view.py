# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Display state of one secret field.

    hidden -> (reveal) -> loading -> revealed
                                  -> error     (retry re-requests a fresh envelope)

A field without a stored secret displays ``-``; a field flagged as set whose
reveal comes back empty ends in ``error`` (``reveal_missing``).  ``copy_text`` reveals
first when needed and never hands out the placeholder.  Decryption
failures and transport failures end in the same recoverable ``error``
state but carry different codes.
"""

import enum
from typing import Callable, Optional

import httpx

from client.errors import ApiError, DecryptionError, Unauthorized

PLACEHOLDER = "••••••••"
ABSENT = "-"


class RevealState(enum.Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    REVEALED = "revealed"
    ERROR = "error"


class SecretView:
    def __init__(
        self,
        has_value: bool,
        fetch: Callable[[], Optional[str]],
        placeholder: str = PLACEHOLDER,
    ):
        self.has_value = has_value
        self.placeholder = placeholder
        self._fetch = fetch
        self.state = RevealState.HIDDEN
        self.value: Optional[str] = None
        self.error: Optional[str] = None

    def display(self) -> str:
        if self.state is RevealState.REVEALED:
            return self.value or ABSENT
        if not self.has_value:
            return ABSENT
        if self.state is RevealState.LOADING:
            return "..."
        if self.state is RevealState.ERROR:
            return "!"
        return self.placeholder

    def reveal(self) -> Optional[str]:
        self.state = RevealState.LOADING
        self.error = None
        try:
            value = self._fetch()
        except DecryptionError:
            return self._fail("decrypt_failed")
        except Unauthorized:
            return self._fail("unauthorized")
        except (ApiError, httpx.HTTPError):
            return self._fail("network_failed")
        if value is None and self.has_value:
            # flagged as set but nothing came back
            return self._fail("reveal_missing")
        self.value = value
        self.state = RevealState.REVEALED
        return value

    retry = reveal

    def hide(self) -> None:
        self.state = RevealState.HIDDEN
        self.value = None

    def toggle(self) -> None:
        if self.state is RevealState.REVEALED:
            self.hide()
        else:
            self.reveal()

    def copy_text(self) -> Optional[str]:
        """Text for the clipboard: the real secret, or None if there is none."""
        if self.state is not RevealState.REVEALED:
            self.reveal()
        if self.state is not RevealState.REVEALED:
            return None
        return self.value or None

    def _fail(self, code: str) -> None:
        self.state = RevealState.ERROR
        self.value = None
        self.error = code
        return None
