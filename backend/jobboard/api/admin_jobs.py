"""
Admin job management endpoints.
Admins only ever see and change jobs they published.
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database import get_db
from jobboard.api.auth import require_admin
from jobboard.schemas.job import (
    AdminJobListResponse,
    JobCreate,
    JobMutationResponse,
    JobStatusUpdate,
)
from jobboard.services import jobs as job_service
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ServiceError
from jobboard.services.storage import ResumeStorage, get_resume_storage

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=AdminJobListResponse)
async def list_my_jobs(
    status: Optional[str] = Query(None, description="DRAFT | ACTIVE | CLOSED"),
    department: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=100),
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """List the caller's jobs in every status, newest first."""
    jobs = await job_service.list_admin_jobs(
        db, admin, status=status, department=department, search=search, limit=limit
    )
    return AdminJobListResponse(jobs=jobs)


@router.post("", response_model=JobMutationResponse, status_code=201)
async def create_job(
    job: JobCreate,
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a job posting owned by the caller.

    Required: title, department, location, description, requirements.
    resume_required defaults to true, custom_questions to [], status to DRAFT.
    """
    try:
        created = await job_service.create_job(db, admin, job)
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating job: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create job")
    
    return JobMutationResponse(message="Job created successfully", job=created)


@router.patch("/{job_id}", response_model=JobMutationResponse)
async def update_job_status(
    job_id: UUID,
    update: JobStatusUpdate,
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Change the status of one of the caller's jobs."""
    try:
        job = await job_service.update_job_status(db, admin, job_id, update.status)
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating job {job_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update job")
    
    return JobMutationResponse(message="Job status updated", job=job)


@router.delete("/{job_id}")
async def delete_job(
    job_id: UUID,
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    storage: ResumeStorage = Depends(get_resume_storage)
):
    """
    Delete one of the caller's jobs.
    
    Cascades to every application for the job and their action logs. There
    is no undo.
    """
    try:
        await job_service.delete_job(db, admin, job_id, storage)
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting job {job_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete job")
    
    return {"message": "Job deleted"}
