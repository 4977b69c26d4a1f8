"""
Profile endpoints: the caller's own profile and own applications.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from jobboard.database import get_db
from jobboard.api.auth import get_caller
from jobboard.schemas.application import ApplicationDetailResponse, MyApplicationsResponse
from jobboard.schemas.profile import ProfileUpdateRequest, ProfileResponse
from jobboard.services.applications import get_my_application, list_my_applications
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ServiceError
from jobboard.services.profile import get_profile, update_user_profile

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def read_profile(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """Get current user's profile."""
    return await get_profile(db, caller)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdateRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """Update profile information (partial update). Email cannot be changed here."""
    try:
        update_data = profile_data.model_dump(exclude_unset=True)
        profile = await update_user_profile(db, caller, update_data)
        logger.info(f"Profile updated for user {caller.email}")
        return profile
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error updating profile: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update profile")


@router.get("/profile/applications", response_model=MyApplicationsResponse)
async def read_my_applications(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """The caller's applications with their 5 most recent log rows and per-status counts."""
    applications, stats = await list_my_applications(db, caller)
    return MyApplicationsResponse(applications=applications, stats=stats)


@router.get("/profile/applications/{application_id}", response_model=ApplicationDetailResponse)
async def read_my_application(
    application_id: UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """One of the caller's applications with its complete action log."""
    application = await get_my_application(db, caller, application_id)
    return ApplicationDetailResponse(application=application)
