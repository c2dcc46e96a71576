"""Capabilities checked before mutating the ledger."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    OWNER = "owner"
    INSURER = "insurer"
