"""AES-256 helpers for encrypting claim text at rest."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass

from cryptography.hazmat.primitives.ciphers.aead import AESGCM


NONCE_SIZE = 12
KEY_SIZE = 32


@dataclass
class CryptoService:
    """Encrypts and decrypts text using AES-256-GCM.

    Callers may bind a ciphertext to its record with ``associated_data``
    (for claims, the claim id), so a stored value copied onto another row
    fails authentication on decrypt.
    """

    key: bytes

    @classmethod
    def from_base64_key(cls, key_b64: str) -> "CryptoService":
        key = base64.urlsafe_b64decode(key_b64.encode("utf-8"))
        if len(key) != KEY_SIZE:
            raise RuntimeError("Encryption key must decode to 32 bytes for AES-256.")
        return cls(key=key)

    @staticmethod
    def generate_base64_key() -> str:
        """Generate a base64-encoded 32-byte key."""
        return base64.urlsafe_b64encode(os.urandom(KEY_SIZE)).decode("utf-8")

    def encrypt_text(self, plain_text: str, associated_data: bytes | None = None) -> bytes:
        """Encrypt UTF-8 text and return nonce+ciphertext bytes."""
        nonce = os.urandom(NONCE_SIZE)
        cipher_text = AESGCM(self.key).encrypt(nonce, plain_text.encode("utf-8"), associated_data)
        return nonce + cipher_text

    def decrypt_text(self, encrypted: bytes, associated_data: bytes | None = None) -> str:
        """Decrypt nonce+ciphertext bytes into UTF-8 text."""
        nonce = encrypted[:NONCE_SIZE]
        cipher_text = encrypted[NONCE_SIZE:]
        plain = AESGCM(self.key).decrypt(nonce, cipher_text, associated_data)
        return plain.decode("utf-8")


def claim_binding(claim_id: int) -> bytes:
    """Associated data tying an encrypted reason to one claim row."""
    return f"claim:{claim_id}".encode("utf-8")


def mask_identity(identity: str) -> str:
    """Mask a principal identity except its first 6 and last 4 characters."""
    if len(identity) <= 10:
        return identity[:2] + "*" * max(len(identity) - 2, 0)
    return f"{identity[:6]}…{identity[-4:]}"
