"""Users, roles and the student roster."""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any

from classbank.services.common import SupabaseService, forget_user, map_rows_on_field
from classbank.services.ledger_service import LedgerService, present_account
from classbank.utils.errors import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from supabase import Client

logger = logging.getLogger(__name__)

ROLES = ("student", "teacher")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class StudentPrincipal:
    """Authenticated student, bound to the account they own."""

    user_id: str
    account_id: int
    role: str = "student"


@dataclass(frozen=True)
class TeacherPrincipal:
    """Authenticated teacher."""

    user_id: str
    role: str = "teacher"


Principal = StudentPrincipal | TeacherPrincipal


def _names_from_metadata(metadata: dict[str, Any]) -> tuple[str | None, str | None]:
    """Pick first/last name out of Supabase ``user_metadata``."""
    first = metadata.get("first_name") or metadata.get("given_name")
    last = metadata.get("last_name") or metadata.get("family_name")
    if not first:
        full_name = (metadata.get("full_name") or metadata.get("name") or "").strip()
        if full_name:
            first, _, rest = full_name.partition(" ")
            last = last or rest or None
    return first or None, last or None


class UserService:
    """Role resolution and student management."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.ledger = LedgerService(client)

    def get_user(self, user_id: str) -> dict[str, Any]:
        return self.db.get_user(user_id)

    def ensure_user(
        self,
        user_id: str,
        email: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return the users row for an authenticated id, creating it on first sign-in.

        New rows get the student role (and an account); teachers are promoted
        afterwards with ``scripts/set_role.py``.
        """
        try:
            return self.db.get_user(user_id)
        except NotFoundError:
            pass

        first_name, last_name = _names_from_metadata(metadata or {})
        created = self.db.insert_ignore(
            "users",
            {
                "id": user_id,
                "email": (email or "").strip().lower() or None,
                "first_name": first_name,
                "last_name": last_name,
                "role": "student",
            },
            on_conflict="id",
        )
        if created:
            logger.info("Registered user %s on first sign-in", user_id)
            self.ledger.ensure_account(user_id)
        return self.db.get_user(user_id)

    def get_principal(self, user_id: str) -> Principal:
        """Resolve the caller's role once, at the request boundary."""
        user = self.db.get_user(user_id)
        role = user.get("role")
        if role == "teacher":
            return TeacherPrincipal(user_id=str(user["id"]))
        if role == "student":
            account = self.ledger.ensure_account(str(user["id"]))
            return StudentPrincipal(user_id=str(user["id"]), account_id=int(account["id"]))
        raise ForbiddenError("Your account has no classroom role")

    def get_profile(self, user_id: str) -> dict[str, Any]:
        """Return the user row, with the account attached for students."""
        user = self.db.get_user(user_id)
        account = None
        if user.get("role") == "student":
            account = present_account(self.ledger.ensure_account(user_id))
        return {**user, "account": account}

    def get_student(self, student_id: str) -> dict[str, Any]:
        """Return a user that must exist and hold the student role."""
        rows = self.db.select_many("users", filters={"id": student_id}, limit=1)
        if not rows or rows[0].get("role") != "student":
            raise NotFoundError("Student")
        return rows[0]

    def list_students(self) -> list[dict[str, Any]]:
        """Return every student with their account, ordered by name."""
        students = self.db.select_all("users", filters={"role": "student"})
        accounts = {
            str(row["user_id"]): present_account(row) for row in self.db.select_all("accounts")
        }
        students.sort(
            key=lambda row: (
                (row.get("first_name") or "").lower(),
                (row.get("last_name") or "").lower(),
            )
        )
        return map_rows_on_field(students, accounts, key="id", out_key="account")

    def add_student(
        self,
        first_name: str,
        last_name: str,
        email: str | None = None,
    ) -> dict[str, Any]:
        """Enroll a student and open their zero-balance account."""
        first = (first_name or "").strip()
        last = (last_name or "").strip()
        if not first or not last:
            raise InvalidInputError("First and last name are required")

        normalized_email = (email or "").strip().lower() or None
        if normalized_email and not EMAIL_PATTERN.match(normalized_email):
            raise InvalidInputError("Email address is invalid")

        if normalized_email and self.db.select_many(
            "users", filters={"email": normalized_email}, limit=1
        ):
            raise ConflictError("A user with this email already exists", code="EMAIL_TAKEN")

        user = self.db.insert_one(
            "users",
            {
                "id": f"student_{uuid.uuid4().hex}",
                "email": normalized_email,
                "first_name": first,
                "last_name": last,
                "role": "student",
            },
        )
        account = self.ledger.ensure_account(str(user["id"]))
        logger.info("Enrolled student %s", user["id"])
        return {**user, "account": present_account(account)}

    def set_role(self, user_id: str, role: str) -> dict[str, Any]:
        """Change a user's role; students always end up with an account."""
        if role not in ROLES:
            raise InvalidInputError(f"Role must be one of: {', '.join(ROLES)}")

        rows = self.db.update("users", {"id": user_id}, {"role": role})
        if not rows:
            raise NotFoundError("User")
        forget_user(user_id)
        if role == "student":
            self.ledger.ensure_account(user_id)
        return rows[0]
