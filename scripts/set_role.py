"""Grant or revoke the teacher role for an existing user."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Set the classroom role of a user in public.users.",
    )
    parser.add_argument(
        "user_id",
        type=str,
        help="Id of the user (the Supabase auth user id).",
    )
    parser.add_argument(
        "role",
        type=str,
        choices=["student", "teacher"],
        help="Role to assign. Students get an account if they lack one.",
    )
    return parser.parse_args()


def main() -> None:
    """CLI entry point."""
    args = parse_args()

    from classbank.services.user_service import UserService
    from classbank.utils.errors import AppError
    from classbank.utils.supabase_client import get_service_client

    try:
        user = UserService(get_service_client()).set_role(args.user_id, args.role)
    except AppError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    print(f"User {user['id']} is now a {user['role']}")


if __name__ == "__main__":
    main()
