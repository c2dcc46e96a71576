"""Policy domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DAY_SECONDS = 86400


class PolicyStatus(str, Enum):
    """Lifecycle states of a policy.

    Only Active, PremiumPaid, UnderClaim, ClaimApproved and ClaimSettled are
    produced by registry operations. The rest are valid stored values with
    no transition leading into them.
    """

    PENDING = "Pending"
    ACTIVE = "Active"
    PREMIUM_PAID = "PremiumPaid"
    UNDER_CLAIM = "UnderClaim"
    CLAIM_APPROVED = "ClaimApproved"
    CLAIM_SETTLED = "ClaimSettled"
    CLAIM_REJECTED = "ClaimRejected"
    EXPIRED = "Expired"
    CANCELLED = "Cancelled"
    LAPSED = "Lapsed"


# States from which premiums may be paid and claims submitted.
OPEN_STATUSES = frozenset({PolicyStatus.ACTIVE, PolicyStatus.PREMIUM_PAID})


def compute_end_date(start_date: int, policy_duration: int) -> int:
    """Return the end timestamp: start plus the duration plus one grace day."""
    return start_date + (policy_duration + 1) * DAY_SECONDS


@dataclass
class Policy:
    """Stored policy record."""

    id: int
    holder: str
    premium_amount: int
    coverage_amount: int
    start_date: int
    end_date: int
    policy_duration: int
    status: PolicyStatus

    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    def is_expired_at(self, timestamp: int) -> bool:
        return timestamp > self.end_date
