"""Withdrawal request schemas."""

from pydantic import BaseModel, Field

from classbank.schemas.common import AmountInput


class WithdrawalRequestCreate(BaseModel):
    """Request body for a student asking to withdraw money."""

    amount: AmountInput
    reason: str = Field(..., min_length=1)


class WithdrawalReview(BaseModel):
    """Request body for approving or denying a request."""

    status: str = Field(..., pattern="^(approved|denied)$")
