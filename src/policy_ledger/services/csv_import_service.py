"""CSV import service for bulk policy issuance."""

from __future__ import annotations

import csv
from dataclasses import dataclass

from policy_ledger.core.errors import InvalidArgumentError, LedgerError
from policy_ledger.services.registry import InsuranceRegistry

POLICY_CSV_HEADERS = [
    "holder",
    "premium_amount",
    "coverage_amount",
    "policy_duration",
]

MAX_REPORTED_ERRORS = 10


@dataclass
class CsvImportResult:
    """Result summary for CSV imports."""

    created_count: int
    failed_count: int
    error_messages: list[str]
    policy_ids: list[int]


class PolicyImportService:
    """Issues one policy per CSV row through the registry."""

    def __init__(self, registry: InsuranceRegistry):
        self._registry = registry

    @staticmethod
    def _validate_headers(fieldnames: list[str] | None, required: list[str]) -> None:
        if fieldnames is None:
            raise InvalidArgumentError("CSV header row is missing.")
        missing = [header for header in required if header not in fieldnames]
        if missing:
            raise InvalidArgumentError(f"CSV headers missing: {', '.join(missing)}")

    @staticmethod
    def _parse_int(row: dict[str, str], field_name: str) -> int:
        raw = (row[field_name] or "").strip()
        try:
            return int(raw)
        except ValueError as error:
            raise InvalidArgumentError(f"{field_name} is not an integer: {raw!r}") from error

    def import_policies(self, caller: str, file_path: str) -> CsvImportResult:
        """Import policy CSV as ``caller`` and return success/failure counts."""
        created_count = 0
        failed_count = 0
        errors: list[str] = []
        policy_ids: list[int] = []

        with open(file_path, "r", encoding="utf-8-sig", newline="") as csv_file:
            reader = csv.DictReader(csv_file)
            self._validate_headers(reader.fieldnames, POLICY_CSV_HEADERS)

            for row_index, row in enumerate(reader, start=2):
                try:
                    policy_id = self._registry.issue_policy(
                        caller,
                        holder=(row["holder"] or "").strip(),
                        premium_amount=self._parse_int(row, "premium_amount"),
                        coverage_amount=self._parse_int(row, "coverage_amount"),
                        policy_duration=self._parse_int(row, "policy_duration"),
                    )
                    policy_ids.append(policy_id)
                    created_count += 1
                except (LedgerError, KeyError, TypeError) as error:
                    failed_count += 1
                    if len(errors) < MAX_REPORTED_ERRORS:
                        errors.append(f"row {row_index}: {error}")

        return CsvImportResult(
            created_count=created_count,
            failed_count=failed_count,
            error_messages=errors,
            policy_ids=policy_ids,
        )
