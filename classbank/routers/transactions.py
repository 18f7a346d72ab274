"""Student transaction history endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from classbank.dependencies import get_db_client, require_student
from classbank.schemas.ledger import TransactionListResponse
from classbank.services.ledger_service import LedgerService
from classbank.services.user_service import StudentPrincipal
from supabase import Client

router = APIRouter()


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    principal: StudentPrincipal = Depends(require_student),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the calling student's transactions, newest first."""
    transactions, total = LedgerService(client).list_transactions(
        principal.account_id, limit=limit, offset=offset
    )
    return {"transactions": transactions, "total": total}
