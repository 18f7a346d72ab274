"""Dashboard stats schemas."""

from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Classroom-wide aggregates."""

    total_students: int = 0
    total_balance: str = "0.00"
    pending_requests: int = 0
    weekly_total: str = "0.00"
