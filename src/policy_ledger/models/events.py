"""Notifications emitted once per committed ledger operation."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class LedgerEvent:
    """Base for committed-operation notifications.

    ``entity`` and ``entity_id`` identify the journal row the event is
    recorded under.
    """

    name: ClassVar[str] = "LedgerEvent"
    entity: ClassVar[str] = "ledger"

    @property
    def entity_id(self) -> int | None:
        return None

    def to_detail(self) -> dict[str, Any]:
        return {"event": self.name, **asdict(self)}


@dataclass(frozen=True)
class InsurerAuthorized(LedgerEvent):
    name: ClassVar[str] = "InsurerAuthorized"
    entity: ClassVar[str] = "insurer"

    insurer: str


@dataclass(frozen=True)
class InsurerRevoked(LedgerEvent):
    name: ClassVar[str] = "InsurerRevoked"
    entity: ClassVar[str] = "insurer"

    insurer: str


@dataclass(frozen=True)
class PolicyIssued(LedgerEvent):
    name: ClassVar[str] = "PolicyIssued"
    entity: ClassVar[str] = "policy"

    policy_id: int
    holder: str
    premium_amount: int
    coverage_amount: int

    @property
    def entity_id(self) -> int:
        return self.policy_id


@dataclass(frozen=True)
class PremiumPaid(LedgerEvent):
    name: ClassVar[str] = "PremiumPaid"
    entity: ClassVar[str] = "policy"

    policy_id: int
    amount: int

    @property
    def entity_id(self) -> int:
        return self.policy_id


@dataclass(frozen=True)
class ClaimSubmitted(LedgerEvent):
    name: ClassVar[str] = "ClaimSubmitted"
    entity: ClassVar[str] = "claim"

    claim_id: int
    policy_id: int
    claim_amount: int

    @property
    def entity_id(self) -> int:
        return self.claim_id


@dataclass(frozen=True)
class ClaimApproved(LedgerEvent):
    name: ClassVar[str] = "ClaimApproved"
    entity: ClassVar[str] = "claim"

    claim_id: int

    @property
    def entity_id(self) -> int:
        return self.claim_id


@dataclass(frozen=True)
class ClaimPaid(LedgerEvent):
    name: ClassVar[str] = "ClaimPaid"
    entity: ClassVar[str] = "claim"

    claim_id: int
    amount: int

    @property
    def entity_id(self) -> int:
        return self.claim_id
