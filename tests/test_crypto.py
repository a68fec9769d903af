"""
Tests for passphrase encryption of paste bodies.
"""
import base64

import pytest

from pastebin import crypto
from pastebin.errors import DecryptionError


class TestCipher:
    """Encrypt/decrypt behaviour"""

    @pytest.mark.parametrize("plaintext", ["", "hello", "multi\nline\ttext", "ünïcødé ✓ 🔥", "x" * 5000])
    def test_round_trip(self, plaintext):
        ciphertext = crypto.encrypt(plaintext, "correct horse")
        assert crypto.decrypt(ciphertext, "correct horse") == plaintext

    def test_ciphertext_is_self_describing_and_salted(self):
        first = crypto.encrypt("same text", "pw")
        second = crypto.encrypt("same text", "pw")

        assert first.startswith(crypto.VERSION_PREFIX)
        assert first != second
        assert "same text" not in first

    def test_wrong_passphrase_rejected(self):
        ciphertext = crypto.encrypt("secret", "right")
        with pytest.raises(DecryptionError):
            crypto.decrypt(ciphertext, "wrong")

    @pytest.mark.parametrize("garbage", [
        "",
        "not encrypted at all",
        "v1:!!!not-base64!!!",
        "v1:" + base64.urlsafe_b64encode(b"short").decode(),
    ])
    def test_malformed_ciphertext_rejected(self, garbage):
        with pytest.raises(DecryptionError):
            crypto.decrypt(garbage, "pw")

    def test_tampered_ciphertext_rejected(self):
        ciphertext = crypto.encrypt("secret", "pw")
        raw = bytearray(base64.urlsafe_b64decode(ciphertext[len(crypto.VERSION_PREFIX):]))
        raw[-1] ^= 0x01
        tampered = crypto.VERSION_PREFIX + base64.urlsafe_b64encode(bytes(raw)).decode()

        with pytest.raises(DecryptionError):
            crypto.decrypt(tampered, "pw")
