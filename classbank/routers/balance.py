"""Manual balance adjustment endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_teacher
from classbank.schemas.common import View, invalidates
from classbank.schemas.ledger import BalanceAdjust
from classbank.services.adjustment_service import AdjustmentService
from classbank.services.user_service import TeacherPrincipal
from supabase import Client

router = APIRouter()


@router.post("/adjust")
def adjust_balance(
    payload: BalanceAdjust,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Add to or subtract from one student's balance."""
    result = AdjustmentService(client).adjust_balance(
        student_id=payload.student_id,
        amount=payload.amount,
        description=payload.description,
        direction=payload.type,
        actor_id=principal.user_id,
    )
    return {**result, "invalidates": invalidates(View.STUDENTS, View.STATS, View.TRANSACTIONS)}
