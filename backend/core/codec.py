# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
AES-256-GCM envelope codec for the reveal channel.

The server encrypts a stored secret under the caller's session key and the
client decrypts it locally.  Both sides import this module, so it must not
depend on application settings or the database.

Envelope
--------
``{"iv": b64(12-byte nonce), "tag": b64(16-byte GCM tag), "data": b64(ct)}``

The session key travels to the server in the ``x-reveal-key`` header of each
reveal call.  The server holds it only for the duration of that request; the
secret itself never crosses the wire in plaintext.
"""

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel

KEY_SIZE   = 32   # AES-256
NONCE_SIZE = 12   # 96-bit nonce per NIST SP 800-38D
TAG_SIZE   = 16


class DecryptionError(ValueError):
    """Envelope could not be opened: wrong key, tampered or malformed."""


class InvalidSessionKey(ValueError):
    """A session key that is not base64 of exactly 32 bytes."""


class Envelope(BaseModel):
    iv: str
    tag: str
    data: str


# ---------------------------------------------------------------------------
# Session keys
# ---------------------------------------------------------------------------


def generate_session_key() -> str:
    """Return a fresh base64-encoded 256-bit key from the OS CSPRNG."""
    return base64.b64encode(secrets.token_bytes(KEY_SIZE)).decode("ascii")


def decode_session_key(key_b64: str) -> bytes:
    """
    Decode and validate a base64 session key.

    Raises ``InvalidSessionKey`` for empty input, invalid base64 or any
    length other than 32 bytes.
    """
    if not key_b64:
        raise InvalidSessionKey("session key is empty")
    try:
        key = base64.b64decode(key_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSessionKey("session key is not valid base64") from exc
    if len(key) != KEY_SIZE:
        raise InvalidSessionKey(f"session key must be {KEY_SIZE} bytes, got {len(key)}")
    return key


# ---------------------------------------------------------------------------
# Encrypt / decrypt
# ---------------------------------------------------------------------------


def encrypt(key: bytes, plaintext: str) -> Envelope:
    """
    Encrypt *plaintext* under *key*.

    Every call draws a new random nonce, so two envelopes of the same secret
    under the same key are never identical.
    """
    iv = secrets.token_bytes(NONCE_SIZE)
    ct_and_tag = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = ct_and_tag[:-TAG_SIZE], ct_and_tag[-TAG_SIZE:]
    return Envelope(
        iv=base64.b64encode(iv).decode("ascii"),
        tag=base64.b64encode(tag).decode("ascii"),
        data=base64.b64encode(ciphertext).decode("ascii"),
    )


def decrypt(key: bytes, envelope: Envelope) -> str:
    """
    Open an envelope produced by :func:`encrypt`.

    Raises ``DecryptionError`` if anything about the envelope is off; a
    wrong plaintext is never returned.
    """
    try:
        iv = base64.b64decode(envelope.iv, validate=True)
        tag = base64.b64decode(envelope.tag, validate=True)
        ciphertext = base64.b64decode(envelope.data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("envelope is not valid base64") from exc

    if len(iv) != NONCE_SIZE or len(tag) != TAG_SIZE:
        raise DecryptionError("envelope has a malformed nonce or tag")

    try:
        aesgcm = AESGCM(key)
    except ValueError as exc:
        raise DecryptionError("session key has the wrong size") from exc

    try:
        plaintext = aesgcm.decrypt(iv, ciphertext + tag, None)
    except InvalidTag as exc:
        raise DecryptionError("decryption failed – wrong key or tampered envelope") from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("decrypted payload is not UTF-8") from exc
