"""
Symmetric encryption for session tokens and one-way hashing for secrets.

Tokens are AES-256-GCM: a fresh 12 byte nonce per message, prepended to
the ciphertext, the pair encoded as unpadded base64url so it can travel
in a cookie. Passwords and API tokens are stored as passlib hashes.
"""
import base64
import binascii
import os
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from passlib.context import CryptContext

from app.config import decode_key, settings

NONCE_LENGTH = 12

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class DecryptionError(ValueError):
    """The value was not produced by ``encrypt`` with the current key."""


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def random_token(length: int = 32) -> str:
    """``length`` random bytes as base64url text."""
    return _b64encode(os.urandom(length))


def _cipher(key: Optional[bytes]) -> AESGCM:
    return AESGCM(key if key is not None else decode_key(settings.ENCRYPTION_KEY))


def encrypt(data: str, key: Optional[bytes] = None) -> str:
    nonce = os.urandom(NONCE_LENGTH)
    ciphertext = _cipher(key).encrypt(nonce, data.encode("utf-8"), None)
    return _b64encode(nonce + ciphertext)


def decrypt(token: str, key: Optional[bytes] = None) -> str:
    try:
        raw = _b64decode(token)
    except (binascii.Error, ValueError, UnicodeEncodeError) as exc:
        raise DecryptionError("token is not base64url") from exc
    if len(raw) <= NONCE_LENGTH:
        raise DecryptionError("token is too short")

    nonce, ciphertext = raw[:NONCE_LENGTH], raw[NONCE_LENGTH:]
    try:
        plaintext = _cipher(key).decrypt(nonce, ciphertext, None)
    except InvalidTag as exc:
        raise DecryptionError("token failed authentication") from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("token payload is not text") from exc


def hash_secret(secret: str) -> str:
    return pwd_context.hash(secret)


def verify_secret(secret: str, hashed: str) -> bool:
    return pwd_context.verify(secret, hashed)
