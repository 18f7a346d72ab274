"""Ledger schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from classbank.schemas.common import AmountInput


class TransactionResponse(BaseModel):
    """A single ledger transaction."""

    id: int
    account_id: int
    type: str
    amount: str
    description: str
    created_by: str | None = None
    created_at: datetime


class TransactionListResponse(BaseModel):
    """A page of the caller's transactions."""

    transactions: list[TransactionResponse]
    total: int


class PaycheckCreate(BaseModel):
    """Request body for distributing a paycheck to every student."""

    amount: AmountInput


class RentCollect(BaseModel):
    """Request body for collecting rent from every student."""

    amount: AmountInput


class BalanceAdjust(BaseModel):
    """Request body for a manual adjustment of one student's balance."""

    student_id: str = Field(..., min_length=1)
    amount: AmountInput
    description: str = Field(..., min_length=1)
    type: str = Field(..., pattern="^(add|subtract)$")
