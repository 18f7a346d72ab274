"""Teacher dashboard stats endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_teacher
from classbank.schemas.stats import StatsResponse
from classbank.services.stats_service import StatsService
from classbank.services.user_service import TeacherPrincipal
from supabase import Client

router = APIRouter()


@router.get("", response_model=StatsResponse)
def get_stats(
    _: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return student count, money in circulation, pending requests and weekly pay."""
    return StatsService(client).snapshot()
