"""Shared request/response building blocks."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated

from pydantic import Field, StrictFloat, StrictInt, StrictStr

# Amounts travel as decimal text ("12.50"); plain JSON numbers are accepted
# and converted through their text form. Strict members keep booleans out.
AmountInput = Annotated[
    StrictStr | StrictInt | StrictFloat,
    Field(description="Positive amount, e.g. 12.50"),
]


class View(StrEnum):
    """Read views a client should refetch after a mutation."""

    STUDENTS = "students"
    STATS = "stats"
    TRANSACTIONS = "transactions"
    PENDING_REQUESTS = "pending_requests"
    WITHDRAWAL_REQUESTS = "withdrawal_requests"
    QUICK_ACTIONS = "quick_actions"


def invalidates(*views: View) -> list[str]:
    """Build the ``invalidates`` field attached to every mutation response."""
    return [view.value for view in views]
