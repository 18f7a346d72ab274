"""Class-wide paycheck distribution and rent collection."""

from __future__ import annotations

import logging
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import httpx

from classbank.config import settings
from classbank.services import balance_mutator
from classbank.services.balance_mutator import Mutation
from classbank.services.ledger_service import LedgerService
from classbank.utils.errors import AppError
from classbank.utils.money import format_amount, parse_amount
from supabase import Client

logger = logging.getLogger(__name__)


class PayrollService:
    """Apply one ledger rule to every student account.

    Each account is its own atomic unit: a failure on one account is logged
    and reported but never stops or rolls back the others.
    """

    def __init__(self, client: Client) -> None:
        self.ledger = LedgerService(client)

    def _run_batch(
        self,
        operation: str,
        compute: Callable[[Decimal], Mutation | None],
        actor_id: str,
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        transactions: list[dict[str, Any]] = []
        failed: list[dict[str, Any]] = []

        for account in self.ledger.list_accounts():
            try:
                applied = self.ledger.apply(account, compute, actor_id)
            except AppError as exc:
                logger.warning(
                    "%s skipped account %s: %s", operation, account["id"], exc.message
                )
                failed.append(
                    {"account_id": account["id"], "error": exc.message, "code": exc.code}
                )
                continue
            except httpx.HTTPError as exc:
                logger.warning("%s failed for account %s: %s", operation, account["id"], exc)
                failed.append(
                    {"account_id": account["id"], "error": str(exc), "code": "STORE_UNAVAILABLE"}
                )
                continue

            if applied is not None:
                transactions.append(applied.transaction)

        logger.info(
            "%s completed: %s affected, %s failed", operation, len(transactions), len(failed)
        )
        return transactions, failed

    def distribute_paycheck(self, amount: str, actor_id: str) -> dict[str, Any]:
        """Credit the same fixed amount to every student."""
        value = parse_amount(amount)
        description = settings.paycheck_description
        transactions, failed = self._run_batch(
            "paycheck",
            lambda balance: balance_mutator.paycheck(balance, value, description),
            actor_id,
        )
        return {
            "message": (
                f"Paycheck of ${format_amount(value)} distributed to "
                f"{len(transactions)} students"
            ),
            "transactions": transactions,
            "students_affected": len(transactions),
            "failed": failed,
        }

    def collect_rent(self, amount: str, actor_id: str) -> dict[str, Any]:
        """Deduct rent from every student with money, never below zero."""
        value = parse_amount(amount)
        description = settings.rent_description
        transactions, failed = self._run_batch(
            "rent",
            lambda balance: balance_mutator.rent(balance, value, description),
            actor_id,
        )
        return {
            "message": f"Monthly rent collected from {len(transactions)} students",
            "transactions": transactions,
            "students_affected": len(transactions),
            "failed": failed,
        }
