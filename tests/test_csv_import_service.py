"""Tests for CSV policy import."""

from __future__ import annotations

import csv

import pytest

from conftest import HOLDER, OTHER
from policy_ledger.core.errors import InvalidArgumentError
from policy_ledger.models.policy import PolicyStatus

HEADERS = ["holder", "premium_amount", "coverage_amount", "policy_duration"]


def write_csv(path, rows, headers=HEADERS) -> str:
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(headers)
        writer.writerows(rows)
    return str(path)


def test_import_policies(tmp_path, services, registry, insurer) -> None:
    csv_path = write_csv(
        tmp_path / "policies.csv",
        [
            [HOLDER, "100", "1000", "30"],
            [OTHER, "250", "5000", "365"],
        ],
    )

    result = services.import_service.import_policies(insurer, csv_path)

    assert result.created_count == 2
    assert result.failed_count == 0
    assert result.policy_ids == [1, 2]
    assert registry.get_user_policies(OTHER) == [2]
    assert registry.get_policy(2).coverage_amount == 5000
    assert registry.get_policy(2).status is PolicyStatus.ACTIVE


def test_import_policies_reports_bad_rows(tmp_path, services, registry, insurer) -> None:
    csv_path = write_csv(
        tmp_path / "policies.csv",
        [
            [HOLDER, "abc", "1000", "30"],
            ["", "100", "1000", "30"],
            [HOLDER, "100", "0", "30"],
            [HOLDER, "100", "1000", "30"],
        ],
    )

    result = services.import_service.import_policies(insurer, csv_path)

    assert result.created_count == 1
    assert result.failed_count == 3
    assert result.error_messages[0].startswith("row 2:")
    assert result.policy_ids == [1]
    assert registry.get_user_policies(HOLDER) == [1]


def test_import_policies_counts_out_of_range_rows_as_failed(
    tmp_path, services, registry, insurer
) -> None:
    csv_path = write_csv(
        tmp_path / "policies.csv",
        [
            [HOLDER, "100", str(2**64), "30"],
            [HOLDER, "100", "1000", str(2 * 10**14)],
            [HOLDER, "100", "1000", "30"],
        ],
    )

    result = services.import_service.import_policies(insurer, csv_path)

    assert result.created_count == 1
    assert result.failed_count == 2
    assert registry.get_user_policies(HOLDER) == [1]


def test_import_policies_requires_insurer(tmp_path, services, registry) -> None:
    csv_path = write_csv(tmp_path / "policies.csv", [[HOLDER, "100", "1000", "30"]])

    result = services.import_service.import_policies(OTHER, csv_path)

    assert result.created_count == 0
    assert result.failed_count == 1
    assert "not the insurer" in result.error_messages[0]
    assert registry.get_user_policies(HOLDER) == []


def test_import_policies_missing_headers(tmp_path, services, insurer) -> None:
    csv_path = write_csv(tmp_path / "policies.csv", [[HOLDER, "100"]], headers=["holder", "premium"])

    with pytest.raises(InvalidArgumentError):
        services.import_service.import_policies(insurer, csv_path)
