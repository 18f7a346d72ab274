"""Class-wide paycheck and rent endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_teacher
from classbank.schemas.common import View, invalidates
from classbank.schemas.ledger import PaycheckCreate, RentCollect
from classbank.services.payroll_service import PayrollService
from classbank.services.user_service import TeacherPrincipal
from supabase import Client

router = APIRouter()


@router.post("/paycheck")
def distribute_paycheck(
    payload: PaycheckCreate,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Credit the same amount to every student."""
    result = PayrollService(client).distribute_paycheck(payload.amount, principal.user_id)
    return {**result, "invalidates": invalidates(View.STUDENTS, View.STATS, View.TRANSACTIONS)}


@router.post("/rent")
def collect_rent(
    payload: RentCollect,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Deduct rent from every student who has money."""
    result = PayrollService(client).collect_rent(payload.amount, principal.user_id)
    return {**result, "invalidates": invalidates(View.STUDENTS, View.STATS, View.TRANSACTIONS)}
