"""
Unit tests for token encryption, secret hashing and key configuration.
"""
import base64
import os

import pytest
from pydantic import ValidationError

from app.config import Settings, decode_key
from app.crypto import (
    NONCE_LENGTH,
    DecryptionError,
    decrypt,
    encrypt,
    hash_secret,
    random_token,
    verify_secret,
)


def _flip_last_byte(token: str) -> str:
    raw = bytearray(base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)))
    raw[-1] ^= 0x01
    return base64.urlsafe_b64encode(bytes(raw)).rstrip(b"=").decode("ascii")


class TestEncryption:
    def test_round_trip(self):
        assert decrypt(encrypt("7;nonce;1700000000")) == "7;nonce;1700000000"

    def test_fresh_nonce_per_message(self):
        assert encrypt("same text") != encrypt("same text")

    def test_token_is_cookie_safe(self):
        token = encrypt("x" * 100)
        assert "=" not in token
        assert "+" not in token and "/" not in token

    def test_nonce_is_prepended(self):
        token = encrypt("")
        raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
        # nonce + 16 byte GCM tag, no payload
        assert len(raw) == NONCE_LENGTH + 16

    def test_tampered_token_rejected(self):
        with pytest.raises(DecryptionError):
            decrypt(_flip_last_byte(encrypt("7;nonce;1700000000")))

    def test_wrong_key_rejected(self):
        token = encrypt("hello", key=os.urandom(32))
        with pytest.raises(DecryptionError):
            decrypt(token, key=os.urandom(32))

    def test_explicit_key_round_trip(self):
        key = os.urandom(32)
        assert decrypt(encrypt("hello", key=key), key=key) == "hello"

    @pytest.mark.parametrize("garbage", ["", "abc", "!!!!", "é"])
    def test_garbage_rejected(self, garbage):
        with pytest.raises(DecryptionError):
            decrypt(garbage)


class TestSecrets:
    def test_hash_verifies(self):
        hashed = hash_secret("secret")
        assert hashed != "secret"
        assert verify_secret("secret", hashed)
        assert not verify_secret("Secret", hashed)

    def test_random_token_length(self):
        token = random_token(32)
        assert len(base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))) == 32
        assert random_token() != random_token()


class TestKeyConfig:
    def test_decode_key_without_padding(self):
        assert decode_key("MDEyMzQ1Njc4OWFiY2RlZjAxMjM0NTY3ODlhYmNkZWY") == b"0123456789abcdef" * 2

    def test_short_key_rejected(self):
        with pytest.raises(ValidationError):
            Settings(ENCRYPTION_KEY=base64.urlsafe_b64encode(b"too short").decode())

    def test_valid_key_accepted(self):
        key = base64.urlsafe_b64encode(os.urandom(32)).decode()
        assert Settings(ENCRYPTION_KEY=key).ENCRYPTION_KEY == key
