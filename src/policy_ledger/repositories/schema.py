"""Database schema management."""

from __future__ import annotations

from policy_ledger.core.validation import is_null_identity
from policy_ledger.repositories.db_pool import ThreadLocalConnection


def initialize_schema(pool: ThreadLocalConnection, owner: str) -> None:
    """Create required tables and fix the ledger owner on first initialization."""
    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS ledger_meta (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            owner TEXT NOT NULL,
            next_policy_id INTEGER NOT NULL DEFAULT 1,
            next_claim_id INTEGER NOT NULL DEFAULT 1,
            premiums_received INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS policies (
            id INTEGER PRIMARY KEY,
            holder TEXT NOT NULL,
            premium_amount INTEGER NOT NULL CHECK (premium_amount > 0),
            coverage_amount INTEGER NOT NULL CHECK (coverage_amount > 0),
            start_date INTEGER NOT NULL,
            end_date INTEGER NOT NULL,
            policy_duration INTEGER NOT NULL CHECK (policy_duration > 0),
            status TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            CHECK (end_date > start_date)
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS claims (
            id INTEGER PRIMARY KEY,
            policy_id INTEGER NOT NULL,
            claim_amount INTEGER NOT NULL CHECK (claim_amount > 0),
            reason_encrypted BLOB NOT NULL,
            is_settled INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (policy_id) REFERENCES policies(id) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS holder_policies (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            holder TEXT NOT NULL,
            policy_id INTEGER NOT NULL,
            FOREIGN KEY (policy_id) REFERENCES policies(id) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS holder_claims (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            holder TEXT NOT NULL,
            claim_id INTEGER NOT NULL,
            FOREIGN KEY (claim_id) REFERENCES claims(id) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS insurers (
            insurer TEXT PRIMARY KEY,
            authorized INTEGER NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            action TEXT NOT NULL,
            entity TEXT NOT NULL,
            entity_id INTEGER,
            detail TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute("CREATE INDEX IF NOT EXISTS idx_holder_policies_holder ON holder_policies(holder)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_holder_claims_holder ON holder_claims(holder)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_claims_policy ON claims(policy_id)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_audit_logs_entity ON audit_logs(entity, entity_id)")

    _initialize_owner(pool, owner)


def _initialize_owner(pool: ThreadLocalConnection, owner: str) -> None:
    """Store the owner once; later starts must name the same owner."""
    if is_null_identity(owner):
        raise RuntimeError("Ledger owner must be configured with a non-null identity.")

    with pool.transaction():
        pool.execute("INSERT OR IGNORE INTO ledger_meta (id, owner) VALUES (1, ?)", (owner,))
        row = pool.fetchone("SELECT owner FROM ledger_meta WHERE id = 1")

    if row["owner"] != owner:
        raise RuntimeError(
            "Configured ledger owner does not match the owner recorded at initialization."
        )
