"""Configuration loader for ledger, database, and key settings."""

from __future__ import annotations

import os
import secrets
import sys
from dataclasses import dataclass
from pathlib import Path

import yaml

from policy_ledger.core.crypto import CryptoService


@dataclass(frozen=True)
class DatabaseConfig:
    path: str
    key_env: str
    allow_sqlite_fallback: bool
    busy_timeout_seconds: float = 5.0


@dataclass(frozen=True)
class EncryptionConfig:
    key_env: str


@dataclass(frozen=True)
class LedgerConfig:
    owner: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    encryption: EncryptionConfig
    ledger: LedgerConfig
    logging: LoggingConfig


DEFAULT_CONFIG_REL_PATH = Path("config/ledger.yaml")
DEFAULT_DB_KEY_ENV = "POLICY_LEDGER_DB_KEY"
DEFAULT_ENCRYPTION_KEY_ENV = "POLICY_LEDGER_ENCRYPTION_KEY"
CONFIG_PATH_ENV = "POLICY_LEDGER_CONFIG_PATH"
RUNTIME_ENV_REL_PATH = Path("config/runtime.env")
_RUNTIME_ENV_LOADED = False


def _split_key_value(raw_line: str) -> tuple[str, str] | None:
    """Parse a shell or PowerShell key assignment line."""
    line = raw_line.strip()
    if not line or line.startswith("#"):
        return None

    if line.startswith("$env:"):
        line = line[len("$env:") :]
    elif line.startswith("export "):
        line = line[len("export ") :]

    if "=" not in line:
        return None

    key, value = line.split("=", 1)
    key = key.strip()
    value = value.strip()
    if not key:
        return None

    if (value.startswith("'") and value.endswith("'")) or (
        value.startswith('"') and value.endswith('"')
    ):
        value = value[1:-1]

    return key, value


def _project_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[3]


def _unique_paths(paths: list[Path]) -> list[Path]:
    unique: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        unique.append(resolved)
    return unique


def _iter_env_candidates() -> list[Path]:
    """Return candidate files that may contain runtime keys."""
    paths: list[Path] = []
    for root in (Path.cwd(), _project_root()):
        paths.extend(
            [
                root / ".env.local",
                root / ".env.local.ps1",
                root / RUNTIME_ENV_REL_PATH,
            ]
        )
    return _unique_paths(paths)


def _load_env_from_file(path: Path) -> None:
    """Load KEY=VALUE lines from a local file without overriding the environment."""
    if not path.exists() or not path.is_file():
        return
    with path.open("r", encoding="utf-8") as file:
        for line in file:
            parsed = _split_key_value(line)
            if not parsed:
                continue
            key, value = parsed
            if key not in os.environ:
                os.environ[key] = value


def _runtime_root() -> Path:
    """Return writable root for runtime env creation."""
    return _project_root()


def _runtime_env_path() -> Path:
    return _runtime_root() / RUNTIME_ENV_REL_PATH


def _write_runtime_env(db_key: str, encryption_key: str) -> None:
    """Persist generated runtime keys in config/runtime.env."""
    path = _runtime_env_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        (
            f"{DEFAULT_DB_KEY_ENV}='{db_key}'\n"
            f"{DEFAULT_ENCRYPTION_KEY_ENV}='{encryption_key}'\n"
        ),
        encoding="utf-8",
    )


def _existing_db_candidates(config_db_path: str | None = None) -> list[Path]:
    """Return DB paths whose presence means encrypted data already exists."""
    candidates: list[Path] = []
    if config_db_path:
        db_path = Path(config_db_path)
        if not db_path.is_absolute():
            db_path = Path.cwd() / db_path
        candidates.append(db_path)
    return _unique_paths(candidates)


def _ensure_runtime_env_loaded() -> None:
    """Load local env files once per process."""
    global _RUNTIME_ENV_LOADED
    if _RUNTIME_ENV_LOADED:
        return
    for path in _iter_env_candidates():
        _load_env_from_file(path)
    _RUNTIME_ENV_LOADED = True


def _bootstrap_default_keys_if_needed(config_db_path: str | None = None) -> None:
    """Generate keys for a fresh ledger when no key source exists."""
    db_key = os.getenv(DEFAULT_DB_KEY_ENV)
    encryption_key = os.getenv(DEFAULT_ENCRYPTION_KEY_ENV)
    if db_key and encryption_key:
        return

    has_existing_db = any(path.exists() for path in _existing_db_candidates(config_db_path))
    if has_existing_db and not _runtime_env_path().exists():
        raise RuntimeError(
            "Runtime key file is missing while the ledger database exists. "
            f"Restore the key file or set {DEFAULT_DB_KEY_ENV}/{DEFAULT_ENCRYPTION_KEY_ENV}."
        )

    db_key = db_key or secrets.token_urlsafe(48)
    encryption_key = encryption_key or CryptoService.generate_base64_key()
    os.environ[DEFAULT_DB_KEY_ENV] = db_key
    os.environ[DEFAULT_ENCRYPTION_KEY_ENV] = encryption_key
    _write_runtime_env(db_key, encryption_key)


def ensure_runtime_keys(config_db_path: str | None = None) -> None:
    """Ensure runtime keys are loaded or bootstrapped for a configured DB path."""
    _ensure_runtime_env_loaded()
    _bootstrap_default_keys_if_needed(config_db_path)


def resolve_default_config_path() -> Path:
    """Resolve configuration path from the environment, cwd, or project root."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates = [
        Path.cwd() / DEFAULT_CONFIG_REL_PATH,
        _project_root() / DEFAULT_CONFIG_REL_PATH,
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return candidates[0]


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML."""
    path = config_path or resolve_default_config_path()
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file) or {}

    try:
        return AppConfig(
            database=DatabaseConfig(
                path=str(raw["db"]["path"]),
                key_env=str(raw["db"].get("key_env", DEFAULT_DB_KEY_ENV)),
                allow_sqlite_fallback=bool(raw["db"].get("allow_sqlite_fallback", False)),
                busy_timeout_seconds=float(raw["db"].get("busy_timeout_seconds", 5.0)),
            ),
            encryption=EncryptionConfig(
                key_env=str(raw.get("encryption", {}).get("key_env", DEFAULT_ENCRYPTION_KEY_ENV)),
            ),
            ledger=LedgerConfig(
                owner=str(raw["ledger"]["owner"]),
            ),
            logging=LoggingConfig(
                level=str(raw.get("logging", {}).get("level", "INFO")),
            ),
        )
    except KeyError as error:
        raise RuntimeError(f"Missing required config key {error} in {path}") from error


def get_required_env(name: str) -> str:
    """Return a required environment variable or raise a clear error."""
    _ensure_runtime_env_loaded()
    if name in {DEFAULT_DB_KEY_ENV, DEFAULT_ENCRYPTION_KEY_ENV}:
        _bootstrap_default_keys_if_needed()
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Required environment variable is missing: {name}")
    return value
