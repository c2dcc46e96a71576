"""Application dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from policy_ledger.core.config import AppConfig, ensure_runtime_keys, get_required_env, load_config
from policy_ledger.core.crypto import CryptoService
from policy_ledger.repositories.audit_repository import AuditRepository
from policy_ledger.repositories.db_pool import ThreadLocalConnection
from policy_ledger.repositories.ledger_store import LedgerStore
from policy_ledger.repositories.schema import initialize_schema
from policy_ledger.services.csv_import_service import PolicyImportService
from policy_ledger.services.registry import InsuranceRegistry


@dataclass
class ServiceContainer:
    """Wires repositories and services."""

    config: AppConfig
    pool: ThreadLocalConnection
    store: LedgerStore
    registry: InsuranceRegistry
    import_service: PolicyImportService
    audit_repo: AuditRepository


def build_services(
    config: AppConfig,
    crypto: CryptoService,
    clock: Callable[[], int] | None = None,
) -> ServiceContainer:
    """Open the database, initialize the schema, and wire services."""
    pool = ThreadLocalConnection(config)
    initialize_schema(pool, config.ledger.owner)

    audit_repo = AuditRepository(pool)
    store = LedgerStore(pool, crypto)
    registry = InsuranceRegistry(store, audit_repo, clock=clock)

    return ServiceContainer(
        config=config,
        pool=pool,
        store=store,
        registry=registry,
        import_service=PolicyImportService(registry),
        audit_repo=audit_repo,
    )


def build_container(config_path: Path | None = None) -> ServiceContainer:
    """Load configuration and keys, then build dependencies."""
    config = load_config(config_path)
    ensure_runtime_keys(config.database.path)
    encryption_key = get_required_env(config.encryption.key_env)
    crypto = CryptoService.from_base64_key(encryption_key)
    return build_services(config, crypto)
