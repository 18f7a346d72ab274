"""Classroom-wide statistics for the teacher dashboard."""

from __future__ import annotations

from typing import Any

from classbank.services.common import SupabaseService
from classbank.utils.money import format_amount, to_decimal
from classbank.utils.time import days_ago
from supabase import Client

WEEKLY_WINDOW_DAYS = 7
CLASSROOM_TOTALS_FUNCTION = "classroom_totals"


class StatsService:
    """Read-only aggregates over users, accounts and transactions.

    Counts use PostgREST's exact count header and sums are computed by the
    ``classroom_totals`` database function, so neither is limited by the
    number of rows a single response may carry.
    """

    def __init__(self, client: Client) -> None:
        self.db = SupabaseService(client)

    def total_students(self) -> int:
        return self.db.count("users", {"role": "student"})

    def pending_requests(self) -> int:
        return self.db.count("withdrawal_requests", {"status": "pending"})

    def totals(self) -> dict[str, str]:
        """Money in circulation and paychecks issued during the trailing seven days."""
        since = days_ago(WEEKLY_WINDOW_DAYS).isoformat()
        result = self.db.rpc(CLASSROOM_TOTALS_FUNCTION, {"p_since": since})
        return {
            "total_balance": format_amount(to_decimal(result.get("total_balance"))),
            "weekly_total": format_amount(to_decimal(result.get("weekly_total"))),
        }

    def snapshot(self) -> dict[str, Any]:
        return {
            "total_students": self.total_students(),
            "pending_requests": self.pending_requests(),
            **self.totals(),
        }
