"""Command line entry point."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from policy_ledger.core.container import build_container
from policy_ledger.core.errors import LedgerError
from policy_ledger.core.logging import setup_logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="policy-ledger",
        description="Operate the insurance policy and claim ledger.",
    )
    parser.add_argument("--config", default=None, help="Path to ledger YAML config.")
    parser.add_argument(
        "--as",
        dest="caller",
        default=None,
        help="Principal identity performing the operation.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    for name in ("authorize-insurer", "revoke-insurer", "is-insurer"):
        command = commands.add_parser(name)
        command.add_argument("insurer")

    issue = commands.add_parser("issue-policy")
    issue.add_argument("holder")
    issue.add_argument("premium_amount", type=int)
    issue.add_argument("coverage_amount", type=int)
    issue.add_argument("policy_duration", type=int, help="Duration in days.")

    pay_premium = commands.add_parser("pay-premium")
    pay_premium.add_argument("policy_id", type=int)
    pay_premium.add_argument("amount", type=int)

    submit = commands.add_parser("submit-claim")
    submit.add_argument("policy_id", type=int)
    submit.add_argument("claim_amount", type=int)
    submit.add_argument("reason")

    for name in ("approve-claim", "pay-claim", "claim"):
        command = commands.add_parser(name)
        command.add_argument("claim_id", type=int)

    policy = commands.add_parser("policy")
    policy.add_argument("policy_id", type=int)

    for name in ("user-policies", "user-claims"):
        command = commands.add_parser(name)
        command.add_argument("user")

    commands.add_parser("premiums")

    events = commands.add_parser("events")
    events.add_argument("--limit", type=int, default=50)
    events.add_argument("--offset", type=int, default=0)
    events.add_argument("--action", default=None)

    import_policies = commands.add_parser("import-policies")
    import_policies.add_argument("csv_path")

    return parser


def _dispatch(args: argparse.Namespace, container) -> str:
    registry = container.registry
    caller = args.caller
    command = args.command

    if command == "authorize-insurer":
        registry.authorize_insurer(caller, args.insurer)
        return f"authorized {args.insurer}"
    if command == "revoke-insurer":
        registry.revoke_insurer(caller, args.insurer)
        return f"revoked {args.insurer}"
    if command == "is-insurer":
        return str(registry.is_authorized_insurer(args.insurer)).lower()
    if command == "issue-policy":
        policy_id = registry.issue_policy(
            caller,
            args.holder,
            args.premium_amount,
            args.coverage_amount,
            args.policy_duration,
        )
        return f"policy {policy_id}"
    if command == "pay-premium":
        registry.pay_premium(caller, args.policy_id, args.amount)
        return f"premium paid for policy {args.policy_id}"
    if command == "submit-claim":
        claim_id = registry.submit_claim(caller, args.policy_id, args.claim_amount, args.reason)
        return f"claim {claim_id}"
    if command == "approve-claim":
        registry.approve_claim(caller, args.claim_id)
        return f"claim {args.claim_id} approved"
    if command == "pay-claim":
        registry.pay_claim(caller, args.claim_id)
        return f"claim {args.claim_id} paid"
    if command == "policy":
        policy = registry.get_policy(args.policy_id)
        return json.dumps({**asdict(policy), "status": policy.status.value}, ensure_ascii=False)
    if command == "claim":
        return json.dumps(asdict(registry.get_claim(args.claim_id)), ensure_ascii=False)
    if command == "user-policies":
        return json.dumps(registry.get_user_policies(args.user))
    if command == "user-claims":
        return json.dumps(registry.get_user_claims(args.user))
    if command == "premiums":
        return str(registry.premiums_received())
    if command == "events":
        rows = container.audit_repo.list_logs(
            limit=args.limit,
            offset=args.offset,
            action=args.action,
        )
        return "\n".join(f"{row['id']}\t{row['action']}\t{row['detail']}" for row in rows)
    if command == "import-policies":
        result = container.import_service.import_policies(caller, args.csv_path)
        lines = [f"created={result.created_count} failed={result.failed_count}"]
        lines.extend(result.error_messages)
        return "\n".join(lines)
    raise ValueError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    """Run one ledger command and return the process exit code."""
    args = _build_parser().parse_args(argv)
    container = build_container(Path(args.config) if args.config else None)
    setup_logging(container.config.logging.level)

    try:
        output = _dispatch(args, container)
    except LedgerError as error:
        print(f"error [{error.kind}]: {error}", file=sys.stderr)
        return 1
    finally:
        container.pool.close_connection()

    if output:
        print(output)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
