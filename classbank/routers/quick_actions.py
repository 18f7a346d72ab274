"""Quick action endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_teacher
from classbank.schemas.common import View, invalidates
from classbank.schemas.quick_action import QuickActionApply, QuickActionCreate
from classbank.services.adjustment_service import AdjustmentService
from classbank.services.quick_action_service import QuickActionService
from classbank.services.user_service import TeacherPrincipal
from supabase import Client

router = APIRouter()


@router.get("")
def list_quick_actions(
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return built-in presets and the caller's custom presets."""
    return QuickActionService(client).list_actions(principal.user_id)


@router.post("")
def create_quick_action(
    payload: QuickActionCreate,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Save a custom reward or fine."""
    action = QuickActionService(client).create_action(
        teacher_id=principal.user_id,
        name=payload.name,
        amount=payload.amount,
        action_type=payload.type,
    )
    return {"action": action, "invalidates": invalidates(View.QUICK_ACTIONS)}


@router.post("/apply")
def apply_quick_action(
    payload: QuickActionApply,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Apply a preset to one student."""
    result = AdjustmentService(client).apply_quick_action(
        student_id=payload.student_id,
        action_ref=payload.action_id,
        actor_id=principal.user_id,
    )
    return {**result, "invalidates": invalidates(View.STUDENTS, View.STATS, View.TRANSACTIONS)}


@router.delete("/{action_id}")
def delete_quick_action(
    action_id: int,
    principal: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Delete one of the caller's custom presets."""
    QuickActionService(client).delete_action(action_id, principal.user_id)
    return {
        "message": "Custom action deleted successfully",
        "invalidates": invalidates(View.QUICK_ACTIONS),
    }
