"""Event journal repository."""

from __future__ import annotations

import json
from typing import Any

from policy_ledger.models.events import LedgerEvent
from policy_ledger.repositories.db_pool import ThreadLocalConnection


class AuditRepository:
    """Persists one journal row per committed ledger event."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def add_log(self, action: str, entity: str, entity_id: int | None, detail: str) -> None:
        """Insert a journal record."""
        self._pool.execute(
            """
            INSERT INTO audit_logs (action, entity, entity_id, detail)
            VALUES (?, ?, ?, ?)
            """,
            (action, entity, entity_id, detail),
        )

    def record_event(self, event: LedgerEvent) -> None:
        """Journal a ledger event under its entity."""
        self.add_log(
            event.name,
            event.entity,
            event.entity_id,
            json.dumps(event.to_detail(), ensure_ascii=False, sort_keys=True),
        )

    def list_logs(
        self,
        limit: int = 200,
        offset: int = 0,
        action: str | None = None,
        entity: str | None = None,
        entity_id: int | None = None,
    ) -> list[dict[str, Any]]:
        """List journal rows, oldest first, with optional filters."""
        where_clauses: list[str] = []
        params: list[Any] = []

        if action:
            where_clauses.append("action = ?")
            params.append(action)
        if entity:
            where_clauses.append("entity = ?")
            params.append(entity)
        if entity_id is not None:
            where_clauses.append("entity_id = ?")
            params.append(entity_id)

        where_sql = ""
        if where_clauses:
            where_sql = "WHERE " + " AND ".join(where_clauses)

        rows = self._pool.fetchall(
            f"""
            SELECT id, action, entity, entity_id, detail, created_at
            FROM audit_logs
            {where_sql}
            ORDER BY id ASC
            LIMIT ? OFFSET ?
            """,
            tuple(params + [limit, offset]),
        )
        return [dict(row) for row in rows]
