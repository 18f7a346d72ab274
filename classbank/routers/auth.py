"""Authentication endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from classbank.dependencies import (
    get_authenticated_user,
    get_current_user_row,
    get_db_client,
    resolve_access_token,
    sync_user_row,
)
from classbank.services.user_service import UserService
from supabase import Client

router = APIRouter()


class AuthCallbackRequest(BaseModel):
    """Request body for auth callback endpoint."""

    access_token: str
    refresh_token: str


@router.post("/callback")
def auth_callback(
    payload: AuthCallbackRequest,
    client: Client = Depends(get_db_client),
) -> dict:
    """Validate the frontend's tokens and register the user on first sign-in."""
    user = resolve_access_token(payload.access_token)
    row = sync_user_row(user, client)
    return {"user": UserService(client).get_profile(str(row["id"]))}


@router.get("/session")
def auth_session(user: Any = Depends(get_authenticated_user)) -> dict:
    """Return the currently authenticated user."""
    return {"user": user}


@router.get("/user")
def auth_user(
    row: dict[str, Any] = Depends(get_current_user_row),
    client: Client = Depends(get_db_client),
) -> dict:
    """Return the caller's profile, with their account when they are a student."""
    return {"user": UserService(client).get_profile(str(row["id"]))}


@router.post("/signout")
def auth_signout() -> dict:
    """Return success for stateless sign-out handling."""
    return {"success": True}
