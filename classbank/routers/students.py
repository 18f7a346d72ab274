"""Student roster endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from classbank.dependencies import get_db_client, require_teacher
from classbank.schemas.common import View, invalidates
from classbank.schemas.user import StudentCreate
from classbank.services.user_service import TeacherPrincipal, UserService
from supabase import Client

router = APIRouter()


@router.get("")
def list_students(
    _: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """List every student with their account balance."""
    return {"students": UserService(client).list_students()}


@router.post("")
def add_student(
    payload: StudentCreate,
    _: TeacherPrincipal = Depends(require_teacher),
    client: Client = Depends(get_db_client),
) -> dict:
    """Enroll a new student with an empty account."""
    student = UserService(client).add_student(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
    )
    return {"student": student, "invalidates": invalidates(View.STUDENTS, View.STATS)}
