"""Tests for encryption helpers."""

import pytest
from cryptography.exceptions import InvalidTag

from policy_ledger.core.crypto import CryptoService, claim_binding, mask_identity


def test_encrypt_decrypt_round_trip() -> None:
    crypto = CryptoService.from_base64_key(CryptoService.generate_base64_key())

    cipher = crypto.encrypt_text("storm damage", claim_binding(1))

    assert crypto.decrypt_text(cipher, claim_binding(1)) == "storm damage"


def test_ciphertext_bound_to_claim() -> None:
    crypto = CryptoService.from_base64_key(CryptoService.generate_base64_key())
    cipher = crypto.encrypt_text("storm damage", claim_binding(1))

    with pytest.raises(InvalidTag):
        crypto.decrypt_text(cipher, claim_binding(2))


def test_short_key_rejected() -> None:
    with pytest.raises(RuntimeError):
        CryptoService.from_base64_key("c2hvcnQ=")


def test_mask_identity() -> None:
    assert mask_identity("0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db") == "0x4B20…02db"
    assert mask_identity("alice") == "al***"
