"""Account and transaction persistence."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from classbank.config import settings
from classbank.services.balance_mutator import Mutation
from classbank.services.common import SupabaseService
from classbank.utils.errors import (
    AlreadyResolvedError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from classbank.utils.money import format_amount, to_decimal
from supabase import Client

logger = logging.getLogger(__name__)

APPLY_ENTRY_FUNCTION = "apply_ledger_entry"
REVIEW_WITHDRAWAL_FUNCTION = "review_withdrawal_request"
LEDGER_DRIFT_FUNCTION = "ledger_drift"


def present_money(row: dict[str, Any], *fields: str) -> dict[str, Any]:
    """Return a copy of ``row`` with numeric fields as fixed two-digit text."""
    payload = dict(row)
    for field in fields:
        if field in payload:
            payload[field] = format_amount(to_decimal(payload[field]))
    return payload


def present_account(row: dict[str, Any]) -> dict[str, Any]:
    return present_money(row, "balance")


def present_transaction(row: dict[str, Any]) -> dict[str, Any]:
    return present_money(row, "amount")


@dataclass(frozen=True)
class AppliedEntry:
    """Outcome of one committed read-modify-write on an account."""

    transaction: dict[str, Any]
    mutation: Mutation
    result: dict[str, Any]

    @property
    def balance(self) -> Decimal:
        return self.mutation.new_balance


class LedgerService:
    """Create and query accounts and their transactions."""

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def get_account(self, user_id: str) -> dict[str, Any]:
        """Return the account owned by ``user_id``."""
        return self.db.select_one("accounts", {"user_id": user_id}, not_found_label="Account")

    def get_account_by_id(self, account_id: int) -> dict[str, Any]:
        return self.db.select_one("accounts", {"id": account_id}, not_found_label="Account")

    def ensure_account(self, user_id: str) -> dict[str, Any]:
        """Create a zero-balance account if absent, otherwise return the existing one."""
        rows = self.db.select_many("accounts", filters={"user_id": user_id}, limit=1)
        if rows:
            return rows[0]

        # A concurrent request may open the same account first.
        created = self.db.insert_ignore(
            "accounts",
            {"user_id": user_id, "balance": "0.00"},
            on_conflict="user_id",
        )
        if created:
            logger.info("Opened account for user %s", user_id)
            return created[0]
        return self.get_account(user_id)

    def list_accounts(self) -> list[dict[str, Any]]:
        """Return the accounts of every student, ordered by account id."""
        students = {
            str(row["id"])
            for row in self.db.select_all("users", filters={"role": "student"}, columns="id")
        }
        return [
            row for row in self.db.select_all("accounts") if str(row["user_id"]) in students
        ]

    def list_transactions(
        self,
        account_id: int,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """Return an account's transactions newest first, with the total count."""
        rows = self.db.select_many(
            "transactions",
            filters={"account_id": account_id},
            order_by="created_at",
            descending=True,
            limit=limit,
            offset=offset,
        )
        total = self.db.count("transactions", {"account_id": account_id})
        return [present_transaction(row) for row in rows], total

    def apply(
        self,
        account: dict[str, Any],
        compute: Callable[[Decimal], Mutation | None],
        actor_id: str,
        function: str = APPLY_ENTRY_FUNCTION,
        extra_params: dict[str, Any] | None = None,
    ) -> AppliedEntry | None:
        """Run one read-modify-write on ``account`` as a single atomic unit.

        ``compute`` receives the stored balance and returns the mutation to
        persist, or ``None`` to leave the account alone. The database
        function only commits if the balance still equals the value
        ``compute`` saw; otherwise the account is re-read and ``compute``
        runs again, up to ``ledger_max_retries`` times.
        """
        attempts = max(1, settings.ledger_max_retries)
        current = account
        for attempt in range(1, attempts + 1):
            mutation = compute(to_decimal(current["balance"]))
            if mutation is None:
                return None

            params = {
                "p_account_id": current["id"],
                "p_expected_balance": format_amount(mutation.old_balance),
                "p_new_balance": format_amount(mutation.new_balance),
                "p_type": mutation.entry.type.value,
                "p_amount": format_amount(mutation.entry.amount),
                "p_description": mutation.entry.description,
                "p_created_by": actor_id,
            }
            result = self.db.rpc(function, {**params, **(extra_params or {})})
            if result.get("success"):
                return AppliedEntry(
                    transaction=present_transaction(result["transaction"]),
                    mutation=mutation,
                    result=result,
                )

            reason = str(result.get("reason") or "")
            if reason != "balance_changed":
                self.raise_for_reason(reason)

            logger.info(
                "Balance of account %s changed concurrently (attempt %s/%s)",
                current["id"],
                attempt,
                attempts,
            )
            current = self.get_account_by_id(current["id"])

        raise ConflictError(
            "Balance changed while updating, please retry",
            code="BALANCE_CONFLICT",
        )

    @staticmethod
    def raise_for_reason(reason: str) -> None:
        """Map a ledger function failure reason onto an API error."""
        if reason == "account_not_found":
            raise NotFoundError("Account")
        if reason == "request_not_found":
            raise NotFoundError("Withdrawal request")
        if reason == "already_resolved":
            raise AlreadyResolvedError()
        if reason == "balance_changed":
            raise ConflictError(
                "Balance changed while updating, please retry",
                code="BALANCE_CONFLICT",
            )
        raise InvalidInputError("Ledger update failed")

    def reconcile(self) -> list[dict[str, Any]]:
        """Return accounts whose balance differs from the sum of their transactions.

        The sums are computed by the ``ledger_drift`` database function so the
        check never depends on how many transaction rows PostgREST returns.
        """
        rows = self.db.rpc_rows(LEDGER_DRIFT_FUNCTION)
        return [
            {
                "account_id": row["account_id"],
                "user_id": row["user_id"],
                "balance": format_amount(to_decimal(row["balance"])),
                "ledger_total": format_amount(to_decimal(row["ledger_total"])),
            }
            for row in sorted(rows, key=lambda row: int(row["account_id"]))
        ]
