"""Admin dashboard endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database import get_db
from jobboard.api.auth import require_admin
from jobboard.schemas.stats import AdminStatsResponse
from jobboard.services.caller import CallerIdentity
from jobboard.services.stats import get_admin_stats

router = APIRouter()


@router.get("/stats", response_model=AdminStatsResponse)
async def read_admin_stats(
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Counts over the caller's jobs and their applications."""
    return await get_admin_stats(db, admin)
