"""Ledger store: authoritative storage for policies, claims, and insurers."""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from typing import Iterator

from policy_ledger.core.crypto import CryptoService, claim_binding
from policy_ledger.core.errors import InvalidArgumentError, NotFoundError
from policy_ledger.core.validation import MAX_AMOUNT
from policy_ledger.models.claim import Claim
from policy_ledger.models.policy import Policy, PolicyStatus
from policy_ledger.repositories.db_pool import ThreadLocalConnection


class LedgerStore:
    """Keyed access to ledger records, holder indices, and counters.

    Every mutating caller is expected to run inside ``transaction()``. Each
    store instance holds its own writer lock for the duration of it; writers
    on other store instances or processes are serialized by SQLite
    ``BEGIN IMMEDIATE``.
    """

    def __init__(self, pool: ThreadLocalConnection, crypto_service: CryptoService):
        self._pool = pool
        self._crypto = crypto_service
        self._write_lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Serialize one read-modify-write unit against the ledger."""
        with self._write_lock:
            with self._pool.transaction():
                yield

    @property
    def owner(self) -> str:
        row = self._pool.fetchone("SELECT owner FROM ledger_meta WHERE id = 1")
        if not row:
            raise RuntimeError("Ledger is not initialized.")
        return row["owner"]

    @staticmethod
    def _to_policy(row: sqlite3.Row) -> Policy:
        return Policy(
            id=row["id"],
            holder=row["holder"],
            premium_amount=row["premium_amount"],
            coverage_amount=row["coverage_amount"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            policy_duration=row["policy_duration"],
            status=PolicyStatus(row["status"]),
        )

    def get_policy(self, policy_id: int) -> Policy:
        """Fetch one policy or raise NotFoundError."""
        row = self._pool.fetchone(
            """
            SELECT
                id,
                holder,
                premium_amount,
                coverage_amount,
                start_date,
                end_date,
                policy_duration,
                status
            FROM policies
            WHERE id = ?
            """,
            (policy_id,),
        )
        if not row:
            raise NotFoundError(f"Policy {policy_id} does not exist.")
        return self._to_policy(row)

    def put_policy(self, policy: Policy) -> None:
        """Insert a policy, or update the status of an existing one."""
        self._pool.execute(
            """
            INSERT INTO policies (
                id,
                holder,
                premium_amount,
                coverage_amount,
                start_date,
                end_date,
                policy_duration,
                status
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                status = excluded.status,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                policy.id,
                policy.holder,
                policy.premium_amount,
                policy.coverage_amount,
                policy.start_date,
                policy.end_date,
                policy.policy_duration,
                policy.status.value,
            ),
        )

    def get_claim(self, claim_id: int) -> Claim:
        """Fetch one claim with its decrypted reason or raise NotFoundError."""
        row = self._pool.fetchone(
            """
            SELECT id, policy_id, claim_amount, reason_encrypted, is_settled
            FROM claims
            WHERE id = ?
            """,
            (claim_id,),
        )
        if not row:
            raise NotFoundError(f"Claim {claim_id} does not exist.")
        return Claim(
            id=row["id"],
            policy_id=row["policy_id"],
            claim_amount=row["claim_amount"],
            reason=self._crypto.decrypt_text(row["reason_encrypted"], claim_binding(row["id"])),
            is_settled=bool(row["is_settled"]),
        )

    def put_claim(self, claim: Claim) -> None:
        """Insert a claim, or update the settlement flag of an existing one."""
        self._pool.execute(
            """
            INSERT INTO claims (id, policy_id, claim_amount, reason_encrypted, is_settled)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                is_settled = excluded.is_settled,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                claim.id,
                claim.policy_id,
                claim.claim_amount,
                self._crypto.encrypt_text(claim.reason, claim_binding(claim.id)),
                int(claim.is_settled),
            ),
        )

    def append_holder_policy(self, holder: str, policy_id: int) -> None:
        self._pool.execute(
            "INSERT INTO holder_policies (holder, policy_id) VALUES (?, ?)",
            (holder, policy_id),
        )

    def append_holder_claim(self, holder: str, claim_id: int) -> None:
        self._pool.execute(
            "INSERT INTO holder_claims (holder, claim_id) VALUES (?, ?)",
            (holder, claim_id),
        )

    def list_holder_policies(self, holder: str) -> list[int]:
        """Return the holder's policy ids in issuance order."""
        rows = self._pool.fetchall(
            "SELECT policy_id FROM holder_policies WHERE holder = ? ORDER BY seq ASC",
            (holder,),
        )
        return [int(row["policy_id"]) for row in rows]

    def list_holder_claims(self, holder: str) -> list[int]:
        """Return the holder's claim ids in submission order."""
        rows = self._pool.fetchall(
            "SELECT claim_id FROM holder_claims WHERE holder = ? ORDER BY seq ASC",
            (holder,),
        )
        return [int(row["claim_id"]) for row in rows]

    def is_insurer(self, identity: str) -> bool:
        row = self._pool.fetchone(
            "SELECT authorized FROM insurers WHERE insurer = ?",
            (identity,),
        )
        return bool(row["authorized"]) if row else False

    def set_insurer(self, identity: str, authorized: bool) -> None:
        self._pool.execute(
            """
            INSERT INTO insurers (insurer, authorized) VALUES (?, ?)
            ON CONFLICT(insurer) DO UPDATE SET
                authorized = excluded.authorized,
                updated_at = CURRENT_TIMESTAMP
            """,
            (identity, int(authorized)),
        )

    def _allocate(self, column: str) -> int:
        with self.transaction():
            row = self._pool.fetchone(f"SELECT {column} AS next_id FROM ledger_meta WHERE id = 1")
            if not row:
                raise RuntimeError("Ledger is not initialized.")
            allocated = int(row["next_id"])
            self._pool.execute(f"UPDATE ledger_meta SET {column} = ? WHERE id = 1", (allocated + 1,))
        return allocated

    def allocate_policy_id(self) -> int:
        """Atomically reserve and return the next policy id."""
        return self._allocate("next_policy_id")

    def allocate_claim_id(self) -> int:
        """Atomically reserve and return the next claim id."""
        return self._allocate("next_claim_id")

    def peek_next_policy_id(self) -> int:
        row = self._pool.fetchone("SELECT next_policy_id FROM ledger_meta WHERE id = 1")
        return int(row["next_policy_id"]) if row else 1

    def peek_next_claim_id(self) -> int:
        row = self._pool.fetchone("SELECT next_claim_id FROM ledger_meta WHERE id = 1")
        return int(row["next_claim_id"]) if row else 1

    def add_premium_received(self, amount: int) -> None:
        """Add a payment to the custody counter, refusing totals SQLite cannot hold."""
        with self.transaction():
            total = self.premiums_received() + amount
            if total > MAX_AMOUNT:
                raise InvalidArgumentError(
                    f"Premium payment of {amount} would overflow the custody counter."
                )
            self._pool.execute(
                "UPDATE ledger_meta SET premiums_received = ? WHERE id = 1",
                (total,),
            )

    def premiums_received(self) -> int:
        row = self._pool.fetchone("SELECT premiums_received FROM ledger_meta WHERE id = 1")
        return int(row["premiums_received"]) if row else 0
