"""Admin dashboard schemas."""
from pydantic import BaseModel


class AdminStatsResponse(BaseModel):
    """Counts over the caller's own jobs."""
    total_jobs: int
    active_jobs: int
    total_applications: int
    pending_applications: int
    recent_applications: int  # last 7 days
    monthly_applications: int  # since the 1st of the current month
