"""User-related schemas."""

from pydantic import BaseModel, Field


class StudentCreate(BaseModel):
    """Request body for enrolling a student."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str | None = None
