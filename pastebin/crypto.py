"""
Passphrase encryption for paste bodies.

Ciphertext format: "v1:" + urlsafe base64 of salt (16) + nonce (12) +
AES-GCM ciphertext and tag. Only the passphrase is needed to decrypt.
"""
import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from pastebin.config import settings
from pastebin.errors import DecryptionError

VERSION_PREFIX = "v1:"
SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16


# ---------- KEY DERIVATION ----------

def derive_key(passphrase: str, salt: bytes, iterations: int = None) -> bytes:
    """
    PBKDF2-HMAC-SHA256 → 32-byte AES-256 key
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations or settings.KDF_ITERATIONS,
    )
    return kdf.derive(passphrase.encode("utf-8"))


# ---------- ENCRYPTION ----------

def encrypt(plaintext: str, passphrase: str) -> str:
    """
    Encrypt text under a passphrase. A fresh salt and nonce are drawn per call,
    so encrypting the same text twice gives different ciphertexts.
    """
    salt = os.urandom(SALT_SIZE)
    nonce = os.urandom(NONCE_SIZE)
    aesgcm = AESGCM(derive_key(passphrase, salt))
    ciphertext = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
    payload = base64.urlsafe_b64encode(salt + nonce + ciphertext).decode("ascii")
    return VERSION_PREFIX + payload


def decrypt(ciphertext: str, passphrase: str) -> str:
    """
    Decrypt a string produced by encrypt().

    Raises:
        DecryptionError: wrong passphrase or malformed ciphertext
    """
    if not ciphertext or not ciphertext.startswith(VERSION_PREFIX):
        raise DecryptionError("unrecognised ciphertext format")

    try:
        raw = base64.urlsafe_b64decode(ciphertext[len(VERSION_PREFIX):].encode("ascii"))
    except (binascii.Error, ValueError) as e:
        raise DecryptionError("ciphertext is not valid base64") from e

    if len(raw) < SALT_SIZE + NONCE_SIZE + TAG_SIZE:
        raise DecryptionError("ciphertext is truncated")

    salt = raw[:SALT_SIZE]
    nonce = raw[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    body = raw[SALT_SIZE + NONCE_SIZE:]

    try:
        plaintext = AESGCM(derive_key(passphrase, salt)).decrypt(nonce, body, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        raise DecryptionError("decryption failed") from e
