"""
Admin application review endpoints.

An application is visible here only to the admin who published its job;
for anyone else it does not exist (404).
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database import get_db
from jobboard.api.auth import require_admin
from jobboard.schemas.application import (
    AdminApplicationListResponse,
    ApplicationDetailResponse,
    ApplicationMutationResponse,
    StatusUpdateRequest,
)
from jobboard.services import applications as application_service
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ServiceError

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=AdminApplicationListResponse)
async def list_admin_applications(
    job_id: Optional[UUID] = Query(None),
    status: Optional[str] = Query(None, description="PENDING | ACCEPTED | REJECTED | ON_HOLD"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Applications to the caller's jobs plus per-status counts."""
    applications, pagination, stats = await application_service.list_admin_applications(
        db, admin, job_id=job_id, status=status, page=page, limit=limit
    )
    return AdminApplicationListResponse(
        applications=applications,
        pagination=pagination,
        stats=stats,
    )


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: UUID,
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Full application detail with the complete action log."""
    application = await application_service.get_admin_application(db, admin, application_id)
    return ApplicationDetailResponse(application=application)


@router.patch("/{application_id}", response_model=ApplicationMutationResponse)
async def update_application_status(
    application_id: UUID,
    update: StatusUpdateRequest,
    admin: CallerIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Transition an application's status.
    
    Any status may follow any other; every call appends an action log row.
    
    Returns:
        200: Updated application with its 5 most recent log rows
        400: Missing or unknown status
        404: Application not found (or not on one of the caller's jobs)
        409: Another reviewer changed the application concurrently
    """
    try:
        application = await application_service.transition_application(
            db, admin, application_id, update.status, update.notes
        )
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating application {application_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    
    return ApplicationMutationResponse(
        message="Application status updated successfully",
        application=application,
    )
