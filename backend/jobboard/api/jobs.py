"""
Public job browsing endpoints.
Only ACTIVE jobs are visible here.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database import get_db
from jobboard.api.auth import get_caller
from jobboard.schemas.application import JobApplicationStatusResponse
from jobboard.schemas.job import PublicJobListResponse, PublicJobResponse
from jobboard.services.applications import get_application_status_for_job
from jobboard.services.caller import CallerIdentity
from jobboard.services.jobs import get_public_job, list_public_jobs

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=PublicJobListResponse)
async def list_jobs(
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    department: Optional[str] = Query(None, description="Exact department"),
    location: Optional[str] = Query(None, description="Case-insensitive partial location"),
    db: AsyncSession = Depends(get_db)
):
    """List ACTIVE jobs, newest first."""
    jobs = await list_public_jobs(db, search=search, department=department, location=location)
    return PublicJobListResponse(jobs=jobs)


@router.get("/{job_id}", response_model=PublicJobResponse)
async def get_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get one ACTIVE job."""
    return await get_public_job(db, job_id)


@router.get("/{job_id}/application-status", response_model=JobApplicationStatusResponse)
async def get_application_status(
    job_id: UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """Whether the caller has already applied to this job, with the application if so."""
    application = await get_application_status_for_job(db, caller, job_id)
    return JobApplicationStatusResponse(
        has_applied=application is not None,
        application=application,
    )
