"""Claim domain models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Claim:
    """Stored claim record against exactly one policy."""

    id: int
    policy_id: int
    claim_amount: int
    reason: str
    is_settled: bool = False
