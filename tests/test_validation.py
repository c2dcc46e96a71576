"""Tests for validation rules."""

import pytest

from policy_ledger.core.errors import InvalidArgumentError
from policy_ledger.core.validation import (
    MAX_AMOUNT,
    ZERO_ADDRESS,
    is_null_identity,
    validate_claim_amount,
    validate_end_date,
    validate_identity,
    validate_payment,
    validate_positive_amount,
    validate_reason,
)


def test_null_identities() -> None:
    assert is_null_identity(None)
    assert is_null_identity("")
    assert is_null_identity("  ")
    assert is_null_identity(ZERO_ADDRESS)
    assert not is_null_identity("0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db")


def test_validate_identity_returns_value_unchanged() -> None:
    assert validate_identity("0xAbC", "holder") == "0xAbC"
    with pytest.raises(InvalidArgumentError):
        validate_identity(None, "holder")
    with pytest.raises(InvalidArgumentError):
        validate_identity(123, "holder")


def test_validate_positive_amount() -> None:
    assert validate_positive_amount(1, "premium_amount") == 1
    for bad in (0, -1, 2.5, "10", True, None):
        with pytest.raises(InvalidArgumentError):
            validate_positive_amount(bad, "premium_amount")


def test_validate_claim_amount_bounded_by_coverage() -> None:
    assert validate_claim_amount(1000, 1000) == 1000
    with pytest.raises(InvalidArgumentError):
        validate_claim_amount(1001, 1000)
    with pytest.raises(InvalidArgumentError):
        validate_claim_amount(0, 1000)


def test_validate_payment_exact_match() -> None:
    assert validate_payment(100, 100) == 100
    with pytest.raises(InvalidArgumentError):
        validate_payment(99, 100)
    with pytest.raises(InvalidArgumentError):
        validate_payment(101, 100)


def test_invalid_argument_is_value_error() -> None:
    with pytest.raises(ValueError):
        validate_payment(1, 2)


def test_validate_reason_accepts_free_text() -> None:
    assert validate_reason("") == ""
    assert validate_reason("  flood damage  ") == "  flood damage  "
    with pytest.raises(InvalidArgumentError):
        validate_reason(None)


def test_validate_positive_amount_upper_bound() -> None:
    assert validate_positive_amount(MAX_AMOUNT, "coverage_amount") == MAX_AMOUNT
    for bad in (MAX_AMOUNT + 1, 2**64):
        with pytest.raises(InvalidArgumentError):
            validate_positive_amount(bad, "coverage_amount")


def test_validate_end_date_range() -> None:
    assert validate_end_date(MAX_AMOUNT) == MAX_AMOUNT
    with pytest.raises(InvalidArgumentError):
        validate_end_date(MAX_AMOUNT + 1)
