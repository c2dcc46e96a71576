"""Command line tests."""

from __future__ import annotations

import json
import logging

import pytest

from conftest import HOLDER, INSURER, OTHER, OWNER
from policy_ledger.core import config as app_config
from policy_ledger.core.crypto import CryptoService
from policy_ledger.main import main


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    path = tmp_path / "ledger.yaml"
    path.write_text(
        "db:\n"
        f"  path: '{tmp_path / 'cli.db'}'\n"
        "  allow_sqlite_fallback: true\n"
        "ledger:\n"
        f"  owner: '{OWNER}'\n"
        "logging:\n"
        "  level: WARNING\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("POLICY_LEDGER_DB_KEY", "test-db-key")
    monkeypatch.setenv("POLICY_LEDGER_ENCRYPTION_KEY", CryptoService.generate_base64_key())
    monkeypatch.setattr(app_config, "_RUNTIME_ENV_LOADED", True)
    yield str(path)
    logging.getLogger("policy_ledger").handlers.clear()


def run_cli(config_path: str, caller: str | None, *args: str) -> int:
    argv = ["--config", config_path]
    if caller:
        argv += ["--as", caller]
    return main(argv + list(args))


def test_cli_lifecycle(config_path, capsys) -> None:
    assert run_cli(config_path, OWNER, "authorize-insurer", INSURER) == 0
    assert run_cli(config_path, INSURER, "issue-policy", HOLDER, "100", "1000", "30") == 0
    assert run_cli(config_path, HOLDER, "pay-premium", "1", "100") == 0
    assert run_cli(config_path, HOLDER, "submit-claim", "1", "500", "flood") == 0
    assert run_cli(config_path, INSURER, "approve-claim", "1") == 0
    assert run_cli(config_path, INSURER, "pay-claim", "1") == 0
    capsys.readouterr()

    assert run_cli(config_path, None, "policy", "1") == 0
    policy = json.loads(capsys.readouterr().out)
    assert policy["status"] == "ClaimSettled"
    assert policy["holder"] == HOLDER

    assert run_cli(config_path, None, "claim", "1") == 0
    claim = json.loads(capsys.readouterr().out)
    assert claim == {
        "id": 1,
        "policy_id": 1,
        "claim_amount": 500,
        "reason": "flood",
        "is_settled": True,
    }

    assert run_cli(config_path, None, "user-policies", HOLDER) == 0
    assert json.loads(capsys.readouterr().out) == [1]
    assert run_cli(config_path, None, "premiums") == 0
    assert capsys.readouterr().out.strip() == "100"

    assert run_cli(config_path, None, "events") == 0
    actions = [line.split("\t")[1] for line in capsys.readouterr().out.strip().splitlines()]
    assert actions == [
        "InsurerAuthorized",
        "PolicyIssued",
        "PremiumPaid",
        "ClaimSubmitted",
        "ClaimApproved",
        "ClaimPaid",
    ]


def test_cli_reports_ledger_errors(config_path, capsys) -> None:
    assert run_cli(config_path, OTHER, "issue-policy", HOLDER, "100", "1000", "30") == 1
    assert "error [Unauthorized]" in capsys.readouterr().err

    assert run_cli(config_path, None, "policy", "9") == 1
    assert "error [NotFound]" in capsys.readouterr().err


def test_cli_import_policies(config_path, tmp_path, capsys) -> None:
    csv_path = tmp_path / "policies.csv"
    csv_path.write_text(
        "holder,premium_amount,coverage_amount,policy_duration\n"
        f"{HOLDER},100,1000,30\n"
        f"{OTHER},0,1000,30\n",
        encoding="utf-8",
    )
    run_cli(config_path, OWNER, "authorize-insurer", INSURER)
    capsys.readouterr()

    assert run_cli(config_path, INSURER, "import-policies", str(csv_path)) == 0
    out = capsys.readouterr().out
    assert "created=1 failed=1" in out
    assert "row 3:" in out
