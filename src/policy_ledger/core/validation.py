"""Input validation rules for policy and claim operations."""

from __future__ import annotations

from policy_ledger.core.errors import InvalidArgumentError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Largest value a SQLite INTEGER column holds.
MAX_AMOUNT = 2**63 - 1


def is_null_identity(identity: str | None) -> bool:
    """Return True for a missing, blank, or all-zero principal identity."""
    if identity is None:
        return True
    if not isinstance(identity, str):
        return False
    stripped = identity.strip()
    return not stripped or stripped.lower() == ZERO_ADDRESS


def validate_identity(identity: str | None, field_name: str) -> str:
    """Validate a non-null principal identity and return it unchanged."""
    if identity is not None and not isinstance(identity, str):
        raise InvalidArgumentError(f"{field_name} must be a string identity.")
    if is_null_identity(identity):
        raise InvalidArgumentError(f"{field_name} must be a non-null identity.")
    return identity


def validate_positive_amount(value: int, field_name: str) -> int:
    """Validate a strictly positive integer amount in the smallest currency unit."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{field_name} must be an integer.")
    if value <= 0:
        raise InvalidArgumentError(f"{field_name} must be greater than zero.")
    if value > MAX_AMOUNT:
        raise InvalidArgumentError(f"{field_name} must not exceed {MAX_AMOUNT}.")
    return value


def validate_claim_amount(claim_amount: int, coverage_amount: int) -> int:
    """Validate a claim amount against the coverage of its policy."""
    validate_positive_amount(claim_amount, "claim_amount")
    if claim_amount > coverage_amount:
        raise InvalidArgumentError(
            f"claim_amount {claim_amount} exceeds coverage amount {coverage_amount}."
        )
    return claim_amount


def validate_payment(amount: int, premium_amount: int) -> int:
    """Require a payment that exactly matches the premium."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidArgumentError("payment amount must be an integer.")
    if amount != premium_amount:
        raise InvalidArgumentError(
            f"payment amount {amount} must equal premium amount {premium_amount}."
        )
    return amount


def validate_reason(reason: str) -> str:
    """Claim reasons are free text; only the type is checked."""
    if not isinstance(reason, str):
        raise InvalidArgumentError("reason must be text.")
    return reason


def validate_end_date(end_date: int) -> int:
    """Reject validity windows ending past the storable timestamp range."""
    if end_date > MAX_AMOUNT:
        raise InvalidArgumentError("policy_duration puts the end date out of range.")
    return end_date
