"""Withdrawal request endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_student, require_teacher
from classbank.schemas.common import View, invalidates
from classbank.schemas.withdrawal import WithdrawalRequestCreate, WithdrawalReview
from classbank.services.user_service import StudentPrincipal, TeacherPrincipal
from classbank.services.withdrawal_service import WithdrawalService
from supabase import Client

router = APIRouter()


@router.post("")
def create_withdrawal_request(
    payload: WithdrawalRequestCreate,
    principal: StudentPrincipal = Depends(require_student),
    client: Client = Depends(get_db_client),
) -> dict:
    """File a withdrawal request for the calling student."""
    request = WithdrawalService(client).create_request(
        principal=principal,
        amount=payload.amount,
        reason=payload.reason,
    )
    return {
        "request": request,
        "invalidates": invalidates(View.WITHDRAWAL_REQUESTS, View.PENDING_REQUESTS, View.STATS),
    }


@router.get("/mine")
def list_my_requests(
    principal: StudentPrincipal = Depends(require_student),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the calling student's own requests."""
    requests = WithdrawalService(client).list_for_account(principal.account_id)
    return {"requests": requests}


@router.get("/pending")
def list_pending_requests(
    _: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return every pending request with its student and account."""
    return {"requests": WithdrawalService(client).list_pending()}


@router.patch("/{request_id}")
def review_request(
    request_id: int,
    payload: WithdrawalReview,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Approve or deny a pending withdrawal request."""
    result = WithdrawalService(client).review(
        request_id=request_id,
        status=payload.status,
        reviewer_id=principal.user_id,
    )
    return {
        **result,
        "invalidates": invalidates(
            View.PENDING_REQUESTS,
            View.WITHDRAWAL_REQUESTS,
            View.STUDENTS,
            View.STATS,
            View.TRANSACTIONS,
        ),
    }
