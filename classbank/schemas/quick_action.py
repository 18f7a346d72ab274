"""Quick action schemas."""

from pydantic import BaseModel, Field

from classbank.schemas.common import AmountInput


class QuickActionCreate(BaseModel):
    """Request body for saving a custom reward or fine."""

    name: str = Field(..., min_length=1, max_length=120)
    amount: AmountInput
    type: str = Field(..., pattern="^(reward|fine)$")


class QuickActionApply(BaseModel):
    """Request body for applying a preset to one student.

    ``action_id`` is a built-in slug (``class-helper``) or a custom id.
    """

    student_id: str = Field(..., min_length=1)
    action_id: str = Field(..., min_length=1)
