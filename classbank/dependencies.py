"""FastAPI dependency injection helpers."""

from __future__ import annotations

import threading
import time
from typing import Any

from fastapi import Depends, Header

from classbank.config import settings
from classbank.services.user_service import (
    Principal,
    StudentPrincipal,
    TeacherPrincipal,
    UserService,
)
from classbank.utils.errors import ForbiddenError, UnauthenticatedError
from classbank.utils.supabase_client import get_service_client, get_supabase_client
from supabase import Client

_token_cache: dict[str, tuple[float, Any]] = {}
_cache_lock = threading.Lock()


def _cache_get(cache: dict[Any, tuple[float, Any]], key: Any) -> Any | None:
    """Return a cache value when present and not expired."""
    now = time.monotonic()
    with _cache_lock:
        entry = cache.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if expires_at <= now:
            cache.pop(key, None)
            return None
        return value


def _cache_set(
    cache: dict[Any, tuple[float, Any]],
    key: Any,
    value: Any,
    ttl_seconds: int,
    max_entries: int,
) -> None:
    """Store a bounded cache value with TTL."""
    if ttl_seconds <= 0:
        return

    with _cache_lock:
        bounded_max_entries = max(1, max_entries)
        if len(cache) >= bounded_max_entries:
            oldest_key = next(iter(cache))
            cache.pop(oldest_key, None)
        cache[key] = (time.monotonic() + ttl_seconds, value)


def resolve_access_token(token: str) -> Any:
    """Validate a Supabase access token and return its auth user.

    Raises:
        UnauthenticatedError: 401 if the token cannot be validated.
    """
    cached_user = _cache_get(_token_cache, token)
    if cached_user is not None:
        return cached_user

    supabase = get_supabase_client()

    try:
        response = supabase.auth.get_user(token)
        if not response or not response.user:
            raise UnauthenticatedError("Invalid token")
        _cache_set(
            _token_cache,
            token,
            response.user,
            settings.auth_token_cache_ttl_seconds,
            settings.auth_token_cache_max_entries,
        )
        return response.user
    except UnauthenticatedError:
        raise
    except Exception as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc


def get_authenticated_user(authorization: str = Header(None)) -> Any:
    """Extract and validate a Supabase JWT from the Authorization header.

    Raises:
        UnauthenticatedError: 401 if the header is missing, malformed, or
            the token cannot be validated.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthenticatedError("Missing authorization header")

    return resolve_access_token(authorization.split(" ", 1)[1])


def get_current_user_id(user: Any) -> str:
    """Extract a stable user id string from the Supabase user object."""
    return str(user.id)


def get_db_client() -> Client:
    """Return the privileged Supabase client used by backend services."""
    return get_service_client()


def sync_user_row(user: Any, client: Client) -> dict[str, Any]:
    """Return the caller's users row, creating it on first sign-in."""
    return UserService(client).ensure_user(
        get_current_user_id(user),
        email=getattr(user, "email", None),
        metadata=getattr(user, "user_metadata", None),
    )


def get_current_user_row(
    user: Any = Depends(get_authenticated_user),
    client: Client = Depends(get_db_client),
) -> dict[str, Any]:
    """Resolve the authenticated caller to their users row."""
    return sync_user_row(user, client)


def get_current_principal(
    row: dict[str, Any] = Depends(get_current_user_row),
    client: Client = Depends(get_db_client),
) -> Principal:
    """Resolve the caller's classroom role once per request."""
    return UserService(client).get_principal(str(row["id"]))


def require_teacher(
    principal: Principal = Depends(get_current_principal),
) -> TeacherPrincipal:
    """Allow only teachers through."""
    if not isinstance(principal, TeacherPrincipal):
        raise ForbiddenError("Only teachers can perform this action")
    return principal


def require_student(
    principal: Principal = Depends(get_current_principal),
) -> StudentPrincipal:
    """Allow only students through."""
    if not isinstance(principal, StudentPrincipal):
        raise ForbiddenError("Only students can perform this action")
    return principal
