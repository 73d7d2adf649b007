"""Password-based masking of module cipher keys.

The output matches jasypt's ``BasicTextEncryptor`` (PBEWithMD5AndDES, 1000
iterations, 8-byte random salt, base64 of ``salt + ciphertext``), which is
what the STEP server uses to read the ``CipherKey`` of a module
configuration file.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.decrepit.ciphers.algorithms import TripleDES
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, modes

from step_osis.core.exceptions import ConfigurationError


ITERATIONS = 1000
SALT_SIZE = 8
BLOCK_SIZE = 64


def _derive(password: str, salt: bytes, iterations: int = ITERATIONS) -> tuple[bytes, bytes]:
    # PKCS#5 v1.5 PBKDF1 with MD5: first half is the DES key, second half the IV.
    digest = password.encode("utf-8") + salt
    for _ in range(iterations):
        digest = hashlib.md5(digest).digest()  # noqa: S324
    return digest[:8], digest[8:16]


def _cipher(password: str, salt: bytes) -> Cipher:
    key, iv = _derive(password, salt)
    # K1 = K2 = K3 makes EDE TripleDES compute single DES.
    return Cipher(TripleDES(key * 3), modes.CBC(iv))


def obfuscate_key(key: str, password: str, *, salt: bytes | None = None) -> str:
    """Return the masked form of ``key`` for the module configuration file."""
    if not password:
        raise ConfigurationError("An obfuscation key is required to mask the module key.")
    salt = salt if salt is not None else os.urandom(SALT_SIZE)
    if len(salt) != SALT_SIZE:
        raise ConfigurationError(f"Salt must be {SALT_SIZE} bytes long.")

    padder = padding.PKCS7(BLOCK_SIZE).padder()
    plaintext = padder.update(key.encode("utf-8")) + padder.finalize()
    encryptor = _cipher(password, salt).encryptor()
    ciphertext = encryptor.update(plaintext) + encryptor.finalize()
    return base64.b64encode(salt + ciphertext).decode("ascii")


def reveal_key(token: str, password: str) -> str:
    """Recover the key masked by :func:`obfuscate_key`."""
    try:
        raw = base64.b64decode(token.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ConfigurationError("Masked key is not valid base64.") from exc
    if len(raw) <= SALT_SIZE or (len(raw) - SALT_SIZE) % (BLOCK_SIZE // 8):
        raise ConfigurationError("Masked key has an invalid length.")

    salt, ciphertext = raw[:SALT_SIZE], raw[SALT_SIZE:]
    decryptor = _cipher(password, salt).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
    try:
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except ValueError as exc:
        raise ConfigurationError("Unable to reveal the masked key; check the obfuscation key.") from exc


__all__ = ["obfuscate_key", "reveal_key"]
