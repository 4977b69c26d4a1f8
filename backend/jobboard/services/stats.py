"""Admin dashboard counts."""
from datetime import datetime, timedelta

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.job import Job, JobStatus
from jobboard.schemas.stats import AdminStatsResponse
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ForbiddenError

RECENT_WINDOW = timedelta(days=7)


async def get_admin_stats(db: AsyncSession, caller: CallerIdentity) -> AdminStatsResponse:
    """Job and application counts over the caller's own jobs."""
    if not caller.is_admin:
        raise ForbiddenError("Admin access required")
    
    now = datetime.utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    
    async def count_jobs(*conditions) -> int:
        result = await db.execute(
            select(func.count(Job.id)).where(Job.publisher_id == caller.id, *conditions)
        )
        return result.scalar_one()
    
    async def count_applications(*conditions) -> int:
        result = await db.execute(
            select(func.count(Application.id))
            .select_from(Application)
            .join(Job, Application.job_id == Job.id)
            .where(Job.publisher_id == caller.id, *conditions)
        )
        return result.scalar_one()
    
    return AdminStatsResponse(
        total_jobs=await count_jobs(),
        active_jobs=await count_jobs(Job.status == JobStatus.ACTIVE.value),
        total_applications=await count_applications(),
        pending_applications=await count_applications(
            Application.status == ApplicationStatus.PENDING.value
        ),
        recent_applications=await count_applications(
            Application.created_at >= now - RECENT_WINDOW
        ),
        monthly_applications=await count_applications(
            Application.created_at >= month_start
        ),
    )
