"""
Application submission and listing endpoints.

Submissions arrive either as JSON (`job_id`, `answers`, optional
`resume_url`) or as multipart/form-data with `answers` JSON-encoded and the
resume as a file part.
"""
import json
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from jobboard.database import get_db
from jobboard.api.auth import get_caller
from jobboard.schemas.application import (
    ApplicationListResponse,
    ApplicationMutationResponse,
    SubmitApplicationRequest,
)
from jobboard.services import applications as application_service
from jobboard.services.applications import ResumeUpload
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ForbiddenError, ServiceError, ValidationError
from jobboard.services.storage import ResumeStorage, get_resume_storage

logger = logging.getLogger(__name__)
router = APIRouter()


async def _read_multipart(request: Request) -> tuple[Optional[UUID], object, Optional[str], Optional[ResumeUpload]]:
    form = await request.form()

    raw_job_id = form.get("job_id")
    job_id = None
    if raw_job_id:
        try:
            job_id = UUID(str(raw_job_id))
        except ValueError:
            raise ValidationError("Invalid job ID")

    raw_answers = form.get("answers")
    answers = {}
    if raw_answers:
        try:
            answers = json.loads(raw_answers)
        except (TypeError, ValueError):
            raise ValidationError("Answers must be a JSON-encoded object")

    resume_url = form.get("resume_url") or None
    if isinstance(resume_url, UploadFile):
        raise ValidationError("resume_url must be a string")

    resume_file = None
    resume = form.get("resume")
    if isinstance(resume, UploadFile) and resume.filename:
        resume_file = ResumeUpload(
            filename=resume.filename,
            content=await resume.read(),
            content_type=resume.content_type,
        )

    return job_id, answers, resume_url, resume_file


async def _read_json(request: Request) -> tuple[Optional[UUID], object, Optional[str], None]:
    try:
        body = SubmitApplicationRequest.model_validate(await request.json())
    except SchemaValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False))
    except ValueError:
        raise ValidationError("Request body must be JSON")
    return body.job_id, body.answers, body.resume_url, None


@router.post("", response_model=ApplicationMutationResponse, status_code=201)
async def submit_application(
    request: Request,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: ResumeStorage = Depends(get_resume_storage)
):
    """
    Apply to an ACTIVE job.
    
    Returns:
        201: Application created with status PENDING
        400: Missing job id, job not accepting applications, own job,
             unanswered required question, missing or invalid resume
        403: Admins cannot apply
        404: Job not found
        409: Already applied to this job
        502: Resume storage failed
    """
    if caller.is_admin:
        raise ForbiddenError("Admins cannot apply to jobs")
    
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type:
        job_id, answers, resume_url, resume_file = await _read_multipart(request)
    else:
        job_id, answers, resume_url, resume_file = await _read_json(request)
    
    try:
        application = await application_service.submit_application(
            db,
            caller,
            job_id,
            answers,
            storage,
            resume_url=resume_url,
            resume_file=resume_file,
        )
    except ServiceError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error creating application: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")
    
    return ApplicationMutationResponse(
        message="Application submitted successfully",
        application=application,
    )


@router.get("", response_model=ApplicationListResponse)
async def list_applications(
    job_id: Optional[UUID] = Query(None),
    status: Optional[str] = Query(None, description="PENDING | ACCEPTED | REJECTED | ON_HOLD"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db)
):
    """
    List applications visible to the caller.
    
    Admins get applications to their own jobs, applicants their own.
    """
    applications, pagination = await application_service.list_applications(
        db, caller, job_id=job_id, status=status, page=page, limit=limit
    )
    return ApplicationListResponse(applications=applications, pagination=pagination)


@router.get("/{application_id}/resume")
async def download_resume(
    application_id: UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
    storage: ResumeStorage = Depends(get_resume_storage)
):
    """
    Download the resume attached to an application.
    
    Available to the applicant and to the admin who owns the job. Resumes
    hosted elsewhere are redirected to.
    """
    location = await application_service.get_resume_location(db, caller, application_id, storage)
    
    if isinstance(location, str):
        if location.startswith(("http://", "https://")):
            return RedirectResponse(location)
        raise HTTPException(status_code=404, detail="Resume file not found")
    
    return FileResponse(
        path=location,
        filename=location.name,
        media_type="application/octet-stream"
    )
