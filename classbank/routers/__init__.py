"""API router package."""

from classbank.routers import (
    auth,
    balance,
    payroll,
    quick_actions,
    stats,
    students,
    transactions,
    withdrawals,
)

__all__ = [
    "auth",
    "balance",
    "payroll",
    "quick_actions",
    "stats",
    "students",
    "transactions",
    "withdrawals",
]
