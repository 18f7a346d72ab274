"""Manual balance adjustments and quick actions for a single student."""

from __future__ import annotations

from typing import Any

from classbank.services import balance_mutator
from classbank.services.balance_mutator import AdjustmentDirection
from classbank.services.ledger_service import AppliedEntry, LedgerService
from classbank.services.quick_action_service import QuickActionService
from classbank.services.user_service import UserService
from classbank.utils.errors import InvalidInputError
from classbank.utils.money import format_amount, parse_amount
from supabase import Client


class AdjustmentService:
    """Teacher-initiated credits and debits."""

    def __init__(self, client: Client) -> None:
        self.ledger = LedgerService(client)
        self.users = UserService(client)
        self.quick_actions = QuickActionService(client)

    def _result(self, message: str, applied: AppliedEntry) -> dict[str, Any]:
        return {
            "message": message,
            "transaction": applied.transaction,
            "balance": format_amount(applied.balance),
        }

    def adjust_balance(
        self,
        student_id: str,
        amount: str,
        description: str,
        direction: str,
        actor_id: str,
    ) -> dict[str, Any]:
        """Add to or subtract from one student's balance."""
        value = parse_amount(amount)
        if not (description or "").strip():
            raise InvalidInputError("Description is required")
        try:
            direction = AdjustmentDirection(direction)
        except ValueError as exc:
            raise InvalidInputError("Type must be 'add' or 'subtract'") from exc

        self.users.get_student(student_id)
        account = self.ledger.get_account(student_id)
        applied = self.ledger.apply(
            account,
            lambda balance: balance_mutator.adjust(balance, value, description, direction),
            actor_id,
        )
        return self._result("Balance adjusted successfully", applied)

    def apply_quick_action(
        self,
        student_id: str,
        action_ref: str,
        actor_id: str,
    ) -> dict[str, Any]:
        """Apply a built-in or custom reward/fine preset to one student."""
        action = self.quick_actions.resolve(action_ref, actor_id)

        self.users.get_student(student_id)
        account = self.ledger.get_account(student_id)
        applied = self.ledger.apply(
            account,
            lambda balance: balance_mutator.quick_action(
                balance, action["amount"], action["type"], action["name"]
            ),
            actor_id,
        )
        verb = "Rewarded" if action["type"] == "reward" else "Fined"
        return self._result(f"{verb} {action['name']} (${action['amount']})", applied)
