"""Generate database and claim-encryption keys for the policy ledger."""

from __future__ import annotations

import argparse
import secrets
from pathlib import Path

from policy_ledger.core.config import DEFAULT_DB_KEY_ENV, DEFAULT_ENCRYPTION_KEY_ENV
from policy_ledger.core.crypto import CryptoService


def _render_line(name: str, value: str, env_format: str) -> str:
    if env_format == "powershell":
        return f"$env:{name}='{value}'"
    if env_format == "shell-export":
        return f"export {name}='{value}'"
    return f"{name}='{value}'"


def _render_lines(db_key: str, encryption_key: str, env_format: str) -> list[str]:
    return [
        _render_line(DEFAULT_DB_KEY_ENV, db_key, env_format),
        _render_line(DEFAULT_ENCRYPTION_KEY_ENV, encryption_key, env_format),
    ]


def main() -> None:
    """Generate keys and optionally write/print env lines."""
    parser = argparse.ArgumentParser(description="Generate policy ledger runtime keys.")
    parser.add_argument(
        "--write-env",
        default=None,
        help="Path to write generated keys. Omit to skip file output.",
    )
    parser.add_argument(
        "--format",
        choices=["shell", "shell-export", "powershell"],
        default="shell",
        help="Output format for written/printed lines.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Also print generated lines to stdout.",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing env file. Existing ledgers become unreadable.",
    )
    args = parser.parse_args()

    lines = _render_lines(
        secrets.token_urlsafe(48),
        CryptoService.generate_base64_key(),
        args.format,
    )

    if args.write_env:
        target_path = Path(args.write_env)
        if target_path.exists() and not args.force:
            print(f"[INFO] key file already exists: {target_path}")
            return
        target_path.parent.mkdir(parents=True, exist_ok=True)
        target_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        print(f"[INFO] key file written: {target_path}")

    if args.stdout:
        for line in lines:
            print(line)


if __name__ == "__main__":
    main()
