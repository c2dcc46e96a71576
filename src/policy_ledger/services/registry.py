"""Insurance registry: role-gated policy and claim state machine."""

from __future__ import annotations

import functools
import logging
import time
from typing import Callable

from policy_ledger.core.crypto import mask_identity
from policy_ledger.core.errors import (
    AlreadySettledError,
    ExpiredError,
    InvalidStateError,
    LedgerError,
    UnauthorizedError,
)
from policy_ledger.core.validation import (
    is_null_identity,
    validate_claim_amount,
    validate_end_date,
    validate_identity,
    validate_payment,
    validate_positive_amount,
    validate_reason,
)
from policy_ledger.models.claim import Claim
from policy_ledger.models.events import (
    ClaimApproved,
    ClaimPaid,
    ClaimSubmitted,
    InsurerAuthorized,
    InsurerRevoked,
    LedgerEvent,
    PolicyIssued,
    PremiumPaid,
)
from policy_ledger.models.policy import Policy, PolicyStatus, compute_end_date
from policy_ledger.models.roles import Role
from policy_ledger.repositories.audit_repository import AuditRepository
from policy_ledger.repositories.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

EventListener = Callable[[LedgerEvent], None]


def _logs_rejections(method):
    """Log rejected operations with their failure kind before re-raising."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except LedgerError as error:
            logger.info("%s rejected [%s]: %s", method.__name__, error.kind, error)
            raise

    return wrapper


class InsuranceRegistry:
    """Coordinates policy and claim use cases on top of the ledger store.

    Each mutating operation authorizes the caller, then loads, validates, and
    writes its records inside a single store transaction together with its
    journal row. Events reach subscribers only after that transaction commits.
    """

    def __init__(
        self,
        store: LedgerStore,
        audit_repo: AuditRepository,
        clock: Callable[[], int] | None = None,
    ):
        self._store = store
        self._audit_repo = audit_repo
        self._clock = clock or (lambda: int(time.time()))
        self._listeners: list[EventListener] = []

    @property
    def owner(self) -> str:
        return self._store.owner

    def subscribe(self, listener: EventListener) -> None:
        """Register a callable invoked with each committed event."""
        self._listeners.append(listener)

    def has_role(self, caller: str | None, role: Role) -> bool:
        """Return True when ``caller`` holds ``role``."""
        if not isinstance(caller, str) or is_null_identity(caller):
            return False
        if role is Role.OWNER:
            return caller == self._store.owner
        if role is Role.INSURER:
            return self._store.is_insurer(caller)
        return False

    def _require_role(self, caller: str | None, role: Role) -> None:
        if not self.has_role(caller, role):
            raise UnauthorizedError(f"Caller is not the {role.value}.")

    @staticmethod
    def _require_holder(caller: str | None, policy: Policy) -> None:
        if caller != policy.holder:
            raise UnauthorizedError(f"Caller is not the holder of policy {policy.id}.")

    def _publish(self, event: LedgerEvent) -> None:
        logger.info("%s %s", event.name, event.to_detail())
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # pylint: disable=broad-except
                # Subscriber boundary: the operation is already committed.
                logger.exception("Event listener failed for %s", event.name)

    # Insurer management

    @_logs_rejections
    def authorize_insurer(self, caller: str, insurer: str) -> None:
        """Grant the insurer role. Owner only; idempotent."""
        with self._store.transaction():
            self._require_role(caller, Role.OWNER)
            validate_identity(insurer, "insurer")
            self._store.set_insurer(insurer, True)
            event = InsurerAuthorized(insurer=insurer)
            self._audit_repo.record_event(event)
        self._publish(event)

    @_logs_rejections
    def revoke_insurer(self, caller: str, insurer: str) -> None:
        """Withdraw the insurer role. Owner only; idempotent."""
        with self._store.transaction():
            self._require_role(caller, Role.OWNER)
            validate_identity(insurer, "insurer")
            self._store.set_insurer(insurer, False)
            event = InsurerRevoked(insurer=insurer)
            self._audit_repo.record_event(event)
        self._publish(event)

    def is_authorized_insurer(self, insurer: str) -> bool:
        return self._store.is_insurer(insurer)

    # Policies

    @_logs_rejections
    def issue_policy(
        self,
        caller: str,
        holder: str,
        premium_amount: int,
        coverage_amount: int,
        policy_duration: int,
    ) -> int:
        """Create an Active policy for ``holder`` and return its id."""
        with self._store.transaction():
            self._require_role(caller, Role.INSURER)
            validate_identity(holder, "holder")
            validate_positive_amount(premium_amount, "premium_amount")
            validate_positive_amount(coverage_amount, "coverage_amount")
            validate_positive_amount(policy_duration, "policy_duration")

            start_date = self._clock()
            end_date = validate_end_date(compute_end_date(start_date, policy_duration))
            policy = Policy(
                id=self._store.allocate_policy_id(),
                holder=holder,
                premium_amount=premium_amount,
                coverage_amount=coverage_amount,
                start_date=start_date,
                end_date=end_date,
                policy_duration=policy_duration,
                status=PolicyStatus.ACTIVE,
            )
            self._store.put_policy(policy)
            self._store.append_holder_policy(holder, policy.id)
            event = PolicyIssued(
                policy_id=policy.id,
                holder=holder,
                premium_amount=premium_amount,
                coverage_amount=coverage_amount,
            )
            self._audit_repo.record_event(event)
        self._publish(event)
        return policy.id

    @_logs_rejections
    def pay_premium(self, caller: str, policy_id: int, amount: int) -> None:
        """Record the holder's premium payment; repeat payments are accepted."""
        with self._store.transaction():
            policy = self._store.get_policy(policy_id)
            self._require_holder(caller, policy)
            if not policy.is_open():
                raise InvalidStateError(
                    f"Policy {policy_id} is {policy.status.value}; premiums are not accepted."
                )
            validate_payment(amount, policy.premium_amount)

            self._store.add_premium_received(amount)
            policy.status = PolicyStatus.PREMIUM_PAID
            self._store.put_policy(policy)
            event = PremiumPaid(policy_id=policy_id, amount=amount)
            self._audit_repo.record_event(event)
        self._publish(event)

    def get_policy(self, policy_id: int) -> Policy:
        return self._store.get_policy(policy_id)

    def get_user_policies(self, user: str) -> list[int]:
        return self._store.list_holder_policies(user)

    def premiums_received(self) -> int:
        """Total of accepted premium payments held in custody."""
        return self._store.premiums_received()

    # Claims

    @_logs_rejections
    def submit_claim(self, caller: str, policy_id: int, claim_amount: int, reason: str) -> int:
        """File a claim against an open, unexpired policy and return its id."""
        with self._store.transaction():
            policy = self._store.get_policy(policy_id)
            self._require_holder(caller, policy)
            if not policy.is_open():
                raise InvalidStateError(
                    f"Policy {policy_id} is {policy.status.value}; claims are not accepted."
                )
            if policy.is_expired_at(self._clock()):
                raise ExpiredError(f"Policy {policy_id} expired at {policy.end_date}.")
            validate_claim_amount(claim_amount, policy.coverage_amount)
            validate_reason(reason)

            policy.status = PolicyStatus.UNDER_CLAIM
            self._store.put_policy(policy)
            claim = Claim(
                id=self._store.allocate_claim_id(),
                policy_id=policy_id,
                claim_amount=claim_amount,
                reason=reason,
            )
            self._store.put_claim(claim)
            self._store.append_holder_claim(caller, claim.id)
            event = ClaimSubmitted(
                claim_id=claim.id,
                policy_id=policy_id,
                claim_amount=claim_amount,
            )
            self._audit_repo.record_event(event)
        self._publish(event)
        return claim.id

    def _load_open_claim(self, claim_id: int, expected: PolicyStatus) -> tuple[Claim, Policy]:
        claim = self._store.get_claim(claim_id)
        policy = self._store.get_policy(claim.policy_id)
        if claim.is_settled:
            raise AlreadySettledError(f"Claim {claim_id} is already settled.")
        if policy.status is not expected:
            raise InvalidStateError(
                f"Policy {policy.id} is {policy.status.value}; expected {expected.value}."
            )
        return claim, policy

    @_logs_rejections
    def approve_claim(self, caller: str, claim_id: int) -> None:
        """Approve a claim whose policy is under claim. Insurer only."""
        with self._store.transaction():
            self._require_role(caller, Role.INSURER)
            _, policy = self._load_open_claim(claim_id, PolicyStatus.UNDER_CLAIM)

            policy.status = PolicyStatus.CLAIM_APPROVED
            self._store.put_policy(policy)
            event = ClaimApproved(claim_id=claim_id)
            self._audit_repo.record_event(event)
        self._publish(event)

    @_logs_rejections
    def pay_claim(self, caller: str, claim_id: int) -> None:
        """Settle an approved claim. Insurer only.

        Settlement is bookkeeping: the claim is marked settled and the policy
        closed, no funds leave custody.
        """
        with self._store.transaction():
            self._require_role(caller, Role.INSURER)
            claim, policy = self._load_open_claim(claim_id, PolicyStatus.CLAIM_APPROVED)

            claim.is_settled = True
            policy.status = PolicyStatus.CLAIM_SETTLED
            self._store.put_claim(claim)
            self._store.put_policy(policy)
            event = ClaimPaid(claim_id=claim_id, amount=claim.claim_amount)
            self._audit_repo.record_event(event)
        logger.debug("Claim %s settled for holder %s", claim_id, mask_identity(policy.holder))
        self._publish(event)

    def get_claim(self, claim_id: int) -> Claim:
        return self._store.get_claim(claim_id)

    def get_user_claims(self, user: str) -> list[int]:
        return self._store.list_holder_claims(user)
