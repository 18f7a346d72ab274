"""Withdrawal request lifecycle."""

from __future__ import annotations

import logging
from typing import Any

from classbank.services import balance_mutator
from classbank.services.common import SupabaseService, map_rows_on_field
from classbank.services.ledger_service import (
    REVIEW_WITHDRAWAL_FUNCTION,
    LedgerService,
    present_account,
    present_money,
)
from classbank.services.user_service import StudentPrincipal
from classbank.utils.errors import (
    AlreadyResolvedError,
    InsufficientBalanceError,
    InvalidInputError,
    NotFoundError,
)
from classbank.utils.money import format_amount, parse_amount, to_decimal
from supabase import Client

logger = logging.getLogger(__name__)

REVIEW_STATUSES = {"approved", "denied"}


def present_request(row: dict[str, Any]) -> dict[str, Any]:
    return present_money(row, "amount")


class WithdrawalService:
    """Create, list and review withdrawal requests.

    A request moves from ``pending`` to ``approved`` or ``denied`` exactly
    once. The transition, the balance update and the withdrawal transaction
    of an approval are committed together by ``review_withdrawal_request``.
    """

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)
        self.ledger = LedgerService(client)

    def create_request(
        self,
        principal: StudentPrincipal,
        amount: str,
        reason: str,
    ) -> dict[str, Any]:
        """File a pending request against the student's own account."""
        value = parse_amount(amount)
        clean_reason = (reason or "").strip()
        if not clean_reason:
            raise InvalidInputError("Reason is required")

        account = self.ledger.get_account_by_id(principal.account_id)
        available = to_decimal(account["balance"])
        if value > available:
            raise InsufficientBalanceError(required=value, available=available)

        request = self.db.insert_one(
            "withdrawal_requests",
            {
                "account_id": principal.account_id,
                "amount": format_amount(value),
                "reason": clean_reason,
                "status": "pending",
            },
        )
        logger.info(
            "Withdrawal request %s filed for account %s", request["id"], principal.account_id
        )
        return present_request(request)

    def get_request(self, request_id: int) -> dict[str, Any]:
        rows = self.db.select_many("withdrawal_requests", filters={"id": request_id}, limit=1)
        if not rows:
            raise NotFoundError("Withdrawal request")
        return rows[0]

    def list_for_account(self, account_id: int) -> list[dict[str, Any]]:
        """Return a student's own requests, newest first."""
        rows = self.db.select_many(
            "withdrawal_requests",
            filters={"account_id": account_id},
            order_by="created_at",
            descending=True,
        )
        return [present_request(row) for row in rows]

    def list_pending(self) -> list[dict[str, Any]]:
        """Return pending requests newest first, with student and account attached."""
        rows = self.db.select_many(
            "withdrawal_requests",
            filters={"status": "pending"},
            order_by="created_at",
            descending=True,
        )
        accounts = {
            str(row["id"]): present_account(row)
            for row in self.db.select_in("accounts", "id", [r["account_id"] for r in rows])
        }
        requests = map_rows_on_field(
            [present_request(row) for row in rows], accounts, key="account_id", out_key="account"
        )

        users = self.db.get_users_map(
            str(request["account"]["user_id"]) for request in requests if request["account"]
        )
        for request in requests:
            account = request["account"]
            request["user"] = users.get(str(account["user_id"])) if account else None
        return requests

    def review(self, request_id: int, status: str, reviewer_id: str) -> dict[str, Any]:
        """Approve or deny a pending request."""
        if status not in REVIEW_STATUSES:
            raise InvalidInputError("Status must be 'approved' or 'denied'")

        request = self.get_request(request_id)
        if request["status"] != "pending":
            raise AlreadyResolvedError()

        if status == "denied":
            result = self.db.rpc(
                REVIEW_WITHDRAWAL_FUNCTION,
                {
                    "p_request_id": request_id,
                    "p_status": "denied",
                    "p_reviewer_id": reviewer_id,
                },
            )
            if not result.get("success"):
                LedgerService.raise_for_reason(str(result.get("reason") or ""))
            logger.info("Withdrawal request %s denied by %s", request_id, reviewer_id)
            return {
                "message": "Withdrawal request denied",
                "request": present_request(result["request"]),
                "transaction": None,
            }

        account = self.ledger.get_account_by_id(request["account_id"])
        applied = self.ledger.apply(
            account,
            lambda balance: balance_mutator.withdrawal(
                balance, to_decimal(request["amount"]), request["reason"]
            ),
            reviewer_id,
            function=REVIEW_WITHDRAWAL_FUNCTION,
            extra_params={
                "p_request_id": request_id,
                "p_status": "approved",
                "p_reviewer_id": reviewer_id,
            },
        )
        logger.info("Withdrawal request %s approved by %s", request_id, reviewer_id)
        return {
            "message": "Withdrawal request approved",
            "request": present_request(applied.result["request"]),
            "transaction": applied.transaction,
            "balance": format_amount(applied.balance),
        }
