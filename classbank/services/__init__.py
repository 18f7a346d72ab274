"""Service package exports with lazy loading."""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "AdjustmentService": "classbank.services.adjustment_service",
    "LedgerService": "classbank.services.ledger_service",
    "PayrollService": "classbank.services.payroll_service",
    "QuickActionService": "classbank.services.quick_action_service",
    "StatsService": "classbank.services.stats_service",
    "SupabaseService": "classbank.services.common",
    "UserService": "classbank.services.user_service",
    "WithdrawalService": "classbank.services.withdrawal_service",
}

__all__ = sorted(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(_EXPORTS[name])
    return getattr(module, name)
