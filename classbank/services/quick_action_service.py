"""Reward and fine presets."""

from __future__ import annotations

import re
from typing import Any

from classbank.config import settings
from classbank.services.balance_mutator import QuickActionType
from classbank.services.common import SupabaseService
from classbank.services.ledger_service import present_money
from classbank.utils.errors import InvalidInputError, NotFoundError
from classbank.utils.money import format_amount, parse_amount
from supabase import Client

DEFAULT_REWARDS = [
    ("Class Helper", "10.00"),
    ("Green Folder Returned", "5.00"),
    ("All Paperwork Returned", "50.00"),
    ("Signed Forms Returned", "20.00"),
    ("Perfect Weekly Attendance", "20.00"),
]
DEFAULT_FINES = [
    ("Talking Back", "20.00"),
    ("Removed from Class", "50.00"),
    ("Cheating/Fighting/Office", "100.00"),
]


def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def default_actions() -> list[dict[str, str]]:
    """Return the built-in presets every teacher starts with."""
    presets = [(name, amount, QuickActionType.REWARD) for name, amount in DEFAULT_REWARDS]
    presets += [(name, amount, QuickActionType.FINE) for name, amount in DEFAULT_FINES]
    return [
        {"id": slugify(name), "name": name, "amount": amount, "type": kind.value}
        for name, amount, kind in presets
    ]


class QuickActionService:
    """Manage a teacher's custom presets and resolve any preset for use."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def list_actions(self, teacher_id: str) -> dict[str, list[dict[str, Any]]]:
        """Return built-in presets plus the teacher's own, ordered by name."""
        custom = self.db.select_many(
            "custom_quick_actions",
            filters={"teacher_id": teacher_id},
            order_by="name",
        )
        return {
            "defaults": default_actions() if settings.enable_default_quick_actions else [],
            "custom": [present_money(row, "amount") for row in custom],
        }

    def create_action(
        self,
        teacher_id: str,
        name: str,
        amount: str,
        action_type: str,
    ) -> dict[str, Any]:
        """Save a new preset owned by ``teacher_id``."""
        clean_name = (name or "").strip()
        if not clean_name:
            raise InvalidInputError("Name is required")
        value = parse_amount(amount)
        try:
            kind = QuickActionType(action_type)
        except ValueError as exc:
            raise InvalidInputError("Quick action type must be 'reward' or 'fine'") from exc

        row = self.db.insert_one(
            "custom_quick_actions",
            {
                "teacher_id": teacher_id,
                "name": clean_name,
                "amount": format_amount(value),
                "type": kind.value,
            },
        )
        return present_money(row, "amount")

    def delete_action(self, action_id: int, teacher_id: str) -> None:
        """Delete a preset; only its owner may do so."""
        removed = self.db.delete(
            "custom_quick_actions",
            {"id": action_id, "teacher_id": teacher_id},
        )
        if not removed:
            raise NotFoundError("Custom quick action")

    def resolve(self, action_ref: str, teacher_id: str) -> dict[str, Any]:
        """Find a preset by built-in slug or by custom id owned by the teacher."""
        ref = str(action_ref).strip()
        if settings.enable_default_quick_actions:
            for action in default_actions():
                if action["id"] == ref:
                    return action

        if not ref.isdigit():
            raise NotFoundError("Quick action")
        rows = self.db.select_many(
            "custom_quick_actions",
            filters={"id": int(ref), "teacher_id": teacher_id},
            limit=1,
        )
        if not rows:
            raise NotFoundError("Quick action")
        return present_money(rows[0], "amount")
