# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Per-session reveal key.

One 256-bit key per client session, created lazily on the first reveal and
destroyed on logout.  It lives in a volatile slot (process memory by
default) and is never written anywhere durable.

If the OS random source fails, ``generate_session_key`` raises and so does
``get_or_create``; there is no weaker fallback.  A slot that fails to
*store* the key is tolerated: the key is still returned and the next call
simply generates another one, which costs one extra round-trip.
"""

import logging
from typing import Optional

from core.codec import InvalidSessionKey, decode_session_key, generate_session_key

log = logging.getLogger("serdo.client")


class MemorySlot:
    """In-process storage for one value."""

    def __init__(self):
        self._value: Optional[str] = None

    def get(self) -> Optional[str]:
        return self._value

    def set(self, value: str) -> None:
        self._value = value

    def delete(self) -> None:
        self._value = None


class SessionKeyStore:
    def __init__(self, slot=None):
        self._slot = slot if slot is not None else MemorySlot()

    def current(self) -> Optional[str]:
        """The stored key if it is present and well-formed, else None."""
        key = self._slot.get()
        if not key:
            return None
        try:
            decode_session_key(key)
        except InvalidSessionKey:
            log.warning("discarding malformed session key")
            return None
        return key

    def get_or_create(self) -> str:
        key = self.current()
        if key:
            return key
        key = generate_session_key()
        try:
            self._slot.set(key)
        except OSError:
            log.warning("session key could not be stored; it will be regenerated on next use")
        return key

    def adopt(self, key_b64: str) -> None:
        """Install a key minted by the server (POST /reveal/session)."""
        decode_session_key(key_b64)
        self._slot.set(key_b64)

    def destroy(self) -> None:
        self._slot.delete()
