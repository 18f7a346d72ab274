"""Check that every account balance equals the sum of its transactions."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Report accounts whose balance disagrees with their ledger.",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only set the exit status; print nothing when the ledger is consistent.",
    )
    return parser.parse_args()


def print_mismatches(rows: Sequence[dict[str, Any]]) -> None:
    """Print mismatched accounts in a fixed-width table."""
    print(f"{len(rows)} account(s) out of balance:")
    print(f"{'account':>8}  {'balance':>12}  {'ledger':>12}  user")
    for row in rows:
        print(
            f"{row['account_id']:>8}  {row['balance']:>12}  "
            f"{row['ledger_total']:>12}  {row['user_id']}"
        )


def main() -> None:
    """CLI entry point."""
    args = parse_args()

    from classbank.services.ledger_service import LedgerService
    from classbank.utils.supabase_client import get_service_client

    mismatches = LedgerService(get_service_client()).reconcile()
    if mismatches:
        print_mismatches(mismatches)
        sys.exit(1)
    if not args.quiet:
        print("Ledger is consistent")


if __name__ == "__main__":
    main()
