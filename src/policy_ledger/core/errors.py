"""Typed ledger failures surfaced to callers."""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for rejected ledger operations."""

    kind = "LedgerError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(LedgerError, LookupError):
    """Referenced policy or claim identifier is unknown."""

    kind = "NotFound"


class UnauthorizedError(LedgerError, PermissionError):
    """Caller lacks the required role or is not the record holder."""

    kind = "Unauthorized"


class InvalidArgumentError(LedgerError, ValueError):
    kind = "InvalidArgument"


class InvalidStateError(LedgerError):
    kind = "InvalidState"


class ExpiredError(LedgerError):
    kind = "Expired"


class AlreadySettledError(LedgerError):
    kind = "AlreadySettled"
