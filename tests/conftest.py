"""Shared fixtures for ledger tests."""

from __future__ import annotations

import pytest

from policy_ledger.core.config import (
    AppConfig,
    DatabaseConfig,
    EncryptionConfig,
    LedgerConfig,
    LoggingConfig,
)
from policy_ledger.core.container import build_services
from policy_ledger.core.crypto import CryptoService
from policy_ledger.repositories import db_pool

OWNER = "0x5B38Da6a701c568545dCfcB03FcB875f56beddC4"
INSURER = "0xAb8483F64d9C6d1EcF9b849Ae677dD3315835cb2"
HOLDER = "0x4B20993Bc481177ec7E8f571ceCaE8A9e22C02db"
OTHER = "0x78731D3Ca6b7E34aC0F824c42a7cC18A495cabaB"

START_TIME = 1_700_000_000


class FakeClock:
    """Controllable Unix-seconds clock."""

    def __init__(self, now: int = START_TIME):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def build_config(tmp_path, owner: str = OWNER) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(
            path=str(tmp_path / "ledger.db"),
            key_env="POLICY_LEDGER_DB_KEY",
            allow_sqlite_fallback=True,
        ),
        encryption=EncryptionConfig(key_env="POLICY_LEDGER_ENCRYPTION_KEY"),
        ledger=LedgerConfig(owner=owner),
        logging=LoggingConfig(level="INFO"),
    )


@pytest.fixture(autouse=True)
def plain_sqlite(monkeypatch):
    monkeypatch.setattr(db_pool, "SQLCIPHER_AVAILABLE", False)


@pytest.fixture
def crypto() -> CryptoService:
    return CryptoService.from_base64_key(CryptoService.generate_base64_key())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def services(tmp_path, crypto, clock):
    container = build_services(build_config(tmp_path), crypto, clock=clock)
    yield container
    container.pool.close_connection()


@pytest.fixture
def registry(services):
    return services.registry


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def insurer(registry) -> str:
    registry.authorize_insurer(OWNER, INSURER)
    return INSURER


@pytest.fixture
def policy_id(registry, insurer) -> int:
    return registry.issue_policy(insurer, HOLDER, 100, 1000, 30)
