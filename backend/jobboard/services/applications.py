"""
Application lifecycle: submission, review status transitions and
tenant-scoped reads.

Admins only ever see applications to jobs they published; applicants only
their own. An application outside the caller's scope is reported exactly
like a missing one.
"""
import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.application_log import ApplicationLog
from jobboard.models.job import Job, JobStatus
from jobboard.schemas.application import (
    ApplicantSummary,
    ApplicationLogResponse,
    ApplicationResponse,
    ApplicationStats,
    JobSummary,
    Pagination,
)
from jobboard.schemas.job import UserSummary
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from jobboard.services.questions import find_unanswered_required
from jobboard.services.state_machine import (
    parse_status,
    record_submission,
    transition_application_status,
)
from jobboard.services.storage import ResumeStorage, StorageError, validate_resume_file

logger = logging.getLogger(__name__)

RECENT_LOG_LIMIT = 5
ALREADY_APPLIED = "You have already applied to this job"


@dataclass
class ResumeUpload:
    """A resume file received with a submission."""
    filename: str
    content: bytes
    content_type: Optional[str] = None


# ============================================================
# LOADING / RESPONSE BUILDING
# ============================================================

def _application_query():
    return select(Application).options(
        selectinload(Application.job).selectinload(Job.publisher),
        selectinload(Application.applicant),
    )


async def _load_application(db: AsyncSession, application_id: UUID) -> Application:
    result = await db.execute(
        _application_query()
        .where(Application.id == application_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _logs_for(
    db: AsyncSession,
    application_ids: list,
    limit: Optional[int] = RECENT_LOG_LIMIT
) -> dict:
    """Newest-first log rows per application id, at most `limit` each (None = all)."""
    if not application_ids:
        return {}
    result = await db.execute(
        select(ApplicationLog)
        .where(ApplicationLog.application_id.in_(application_ids))
        .order_by(ApplicationLog.created_at.desc(), ApplicationLog.id.desc())
    )
    grouped = defaultdict(list)
    for log in result.scalars().all():
        rows = grouped[log.application_id]
        if limit is None or len(rows) < limit:
            rows.append(log)
    return grouped


def build_application_response(
    application: Application,
    logs: list,
    include_applicant_profile: bool = False
) -> ApplicationResponse:
    """Build ApplicationResponse from a loaded Application and its log rows."""
    job = application.job
    applicant = application.applicant

    applicant_data = {
        "id": applicant.id,
        "name": applicant.name,
        "email": applicant.email,
    }
    if include_applicant_profile:
        applicant_data.update(
            phone=applicant.phone,
            location=applicant.location,
            bio=applicant.bio,
            skills=applicant.skills,
            experience=applicant.experience,
            education=applicant.education,
        )

    return ApplicationResponse(
        id=application.id,
        job_id=application.job_id,
        applicant_id=application.applicant_id,
        status=application.status,
        answers=application.answers or {},
        resume_url=application.resume_url,
        version=application.version,
        created_at=application.created_at,
        updated_at=application.updated_at,
        job=JobSummary(
            id=job.id,
            title=job.title,
            department=job.department,
            location=job.location,
            salary=job.salary,
            status=job.status,
            publisher=UserSummary.model_validate(job.publisher),
        ),
        applicant=ApplicantSummary(**applicant_data),
        action_logs=[ApplicationLogResponse.model_validate(log) for log in logs],
    )


async def _build_page(
    db: AsyncSession,
    query,
    count_query,
    page: int,
    limit: int,
    include_applicant_profile: bool
) -> tuple[list[ApplicationResponse], Pagination]:
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(
        query.order_by(Application.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    applications = result.scalars().all()
    logs = await _logs_for(db, [a.id for a in applications])

    items = [
        build_application_response(a, logs.get(a.id, []), include_applicant_profile)
        for a in applications
    ]
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
    return items, pagination


def _stats_from_counts(counts: dict) -> ApplicationStats:
    return ApplicationStats(
        total=sum(counts.values()),
        pending=counts.get(ApplicationStatus.PENDING.value, 0),
        accepted=counts.get(ApplicationStatus.ACCEPTED.value, 0),
        rejected=counts.get(ApplicationStatus.REJECTED.value, 0),
        on_hold=counts.get(ApplicationStatus.ON_HOLD.value, 0),
    )


def _require_admin(caller: CallerIdentity) -> None:
    if not caller.is_admin:
        raise ForbiddenError("Admin access required")


# ============================================================
# SUBMISSION
# ============================================================

async def _has_applied(db: AsyncSession, job_id: UUID, applicant_id: UUID) -> bool:
    result = await db.execute(
        select(Application.id).where(
            Application.job_id == job_id,
            Application.applicant_id == applicant_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def submit_application(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: Optional[UUID],
    answers: Optional[Any],
    storage: ResumeStorage,
    resume_url: Optional[str] = None,
    resume_file: Optional[ResumeUpload] = None
) -> ApplicationResponse:
    """
    Submit an application to an ACTIVE job.

    Every check runs before anything is stored. A resume file is uploaded
    before the application row is written; the application and its
    "Application submitted" log row are committed together.

    Raises:
        ForbiddenError: caller is an admin
        NotFoundError: job does not exist
        ValidationError: job not ACTIVE, own job, unanswered required
            question, missing or invalid resume
        ConflictError: caller already applied to this job
        UpstreamError: resume storage failed
    """
    if caller.is_admin:
        raise ForbiddenError("Admins cannot apply to jobs")

    if not job_id:
        raise ValidationError("Job ID is required")

    job = await db.get(Job, job_id)
    if not job:
        raise NotFoundError("Job not found")

    if job.status != JobStatus.ACTIVE.value:
        raise ValidationError("This job is not currently accepting applications")

    if job.publisher_id == caller.id:
        raise ValidationError("You cannot apply to your own job posting")

    if await _has_applied(db, job.id, caller.id):
        raise ConflictError(ALREADY_APPLIED)

    if answers is None:
        answers = {}
    if not isinstance(answers, dict):
        raise ValidationError("Answers must be an object keyed by question")

    unanswered = find_unanswered_required(job.custom_questions, answers)
    if unanswered is not None:
        raise ValidationError(f'Question "{unanswered.get("question")}" is required')

    if job.resume_required and not resume_url and resume_file is None:
        raise ValidationError("Resume is required for this job application")

    if resume_url and storage.resolve_path(resume_url) is not None:
        # Local storage URLs are only ever issued by an upload
        raise ValidationError("Invalid resume URL")

    uploaded = False
    if resume_file is not None:
        validate_resume_file(resume_file.filename, len(resume_file.content))
        try:
            resume_url = storage.save(
                resume_file.content, resume_file.filename, caller.id, job.id
            )
        except StorageError as e:
            logger.error(f"Resume upload failed for job {job.id}: {str(e)}", exc_info=True)
            raise UpstreamError("Failed to upload resume. Please try again.")
        uploaded = True

    application = Application(
        job_id=job.id,
        applicant_id=caller.id,
        status=ApplicationStatus.PENDING.value,
        answers=answers,
        resume_url=resume_url or None,
    )
    db.add(application)

    try:
        await db.flush()
        record_submission(db, application)
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent submission for the same (job, applicant)
        await db.rollback()
        if uploaded:
            storage.delete(resume_url)
        logger.info(f"Duplicate application rejected by constraint: job {job_id}, applicant {caller.id}")
        raise ConflictError(ALREADY_APPLIED)
    except Exception:
        await db.rollback()
        if uploaded:
            storage.delete(resume_url)
        raise

    logger.info(f"Application {application.id} submitted to job {job_id} by {caller.email}")

    loaded = await _load_application(db, application.id)
    logs = await _logs_for(db, [loaded.id])
    return build_application_response(loaded, logs.get(loaded.id, []))


# ============================================================
# STATUS TRANSITIONS (admin)
# ============================================================

async def _get_owned_application(
    db: AsyncSession,
    caller: CallerIdentity,
    application_id: UUID
) -> Application:
    result = await db.execute(
        _application_query()
        .join(Job, Application.job_id == Job.id)
        .where(
            Application.id == application_id,
            Job.publisher_id == caller.id,
        )
        .execution_options(populate_existing=True)
    )
    application = result.scalar_one_or_none()
    if not application:
        raise NotFoundError("Application not found")
    return application


async def transition_application(
    db: AsyncSession,
    caller: CallerIdentity,
    application_id: UUID,
    status: Optional[str],
    notes: Optional[str] = None
) -> ApplicationResponse:
    """
    Set an application's status on behalf of the admin who owns its job.

    Returns the updated application with its 5 most recent log rows.

    Raises:
        ForbiddenError: caller is not an admin
        NotFoundError: application missing or belongs to another admin's job
        ValidationError: status missing or unknown
        ConflictError: a concurrent transition won
    """
    _require_admin(caller)
    application = await _get_owned_application(db, caller, application_id)
    to_status = parse_status(status)

    await transition_application_status(db, application, to_status, notes)

    loaded = await _load_application(db, application.id)
    logs = await _logs_for(db, [loaded.id])
    return build_application_response(loaded, logs.get(loaded.id, []))


# ============================================================
# READS
# ============================================================

async def list_applications(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: Optional[UUID] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> tuple[list[ApplicationResponse], Pagination]:
    """Applications visible to the caller: own-jobs' for admins, own for applicants."""
    query = _application_query()
    count_query = select(func.count(Application.id)).select_from(Application)

    if caller.is_admin:
        query = query.join(Job, Application.job_id == Job.id).where(Job.publisher_id == caller.id)
        count_query = count_query.join(Job, Application.job_id == Job.id).where(
            Job.publisher_id == caller.id
        )
    else:
        query = query.where(Application.applicant_id == caller.id)
        count_query = count_query.where(Application.applicant_id == caller.id)

    if job_id:
        query = query.where(Application.job_id == job_id)
        count_query = count_query.where(Application.job_id == job_id)
    if status:
        status_value = parse_status(status).value
        query = query.where(Application.status == status_value)
        count_query = count_query.where(Application.status == status_value)

    return await _build_page(
        db, query, count_query, page, limit, include_applicant_profile=caller.is_admin
    )


async def get_admin_stats_for_applications(db: AsyncSession, caller: CallerIdentity) -> ApplicationStats:
    """Per-status counts across every application to the caller's jobs."""
    result = await db.execute(
        select(Application.status, func.count(Application.id))
        .join(Job, Application.job_id == Job.id)
        .where(Job.publisher_id == caller.id)
        .group_by(Application.status)
    )
    return _stats_from_counts(dict(result.all()))


async def list_admin_applications(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: Optional[UUID] = None,
    status: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> tuple[list[ApplicationResponse], Pagination, ApplicationStats]:
    """Admin review queue plus aggregate counts."""
    _require_admin(caller)
    items, pagination = await list_applications(db, caller, job_id, status, page, limit)
    stats = await get_admin_stats_for_applications(db, caller)
    return items, pagination, stats


async def get_admin_application(
    db: AsyncSession,
    caller: CallerIdentity,
    application_id: UUID
) -> ApplicationResponse:
    """Full detail, including the complete action log, for the owning admin."""
    _require_admin(caller)
    application = await _get_owned_application(db, caller, application_id)
    logs = await _logs_for(db, [application.id], limit=None)
    return build_application_response(
        application, logs.get(application.id, []), include_applicant_profile=True
    )


async def list_my_applications(
    db: AsyncSession,
    caller: CallerIdentity
) -> tuple[list[ApplicationResponse], ApplicationStats]:
    """Everything the caller applied to, newest first, with per-status counts."""
    result = await db.execute(
        _application_query()
        .where(Application.applicant_id == caller.id)
        .order_by(Application.created_at.desc())
    )
    applications = result.scalars().all()
    logs = await _logs_for(db, [a.id for a in applications])

    counts = defaultdict(int)
    for a in applications:
        counts[a.status] += 1

    items = [build_application_response(a, logs.get(a.id, [])) for a in applications]
    return items, _stats_from_counts(counts)


async def get_my_application(
    db: AsyncSession,
    caller: CallerIdentity,
    application_id: UUID
) -> ApplicationResponse:
    """One of the caller's own applications with its complete log."""
    result = await db.execute(
        _application_query().where(
            Application.id == application_id,
            Application.applicant_id == caller.id,
        )
    )
    application = result.scalar_one_or_none()
    if not application:
        raise NotFoundError("Application not found")

    logs = await _logs_for(db, [application.id], limit=None)
    return build_application_response(application, logs.get(application.id, []))


async def get_application_status_for_job(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: UUID
) -> Optional[ApplicationResponse]:
    """The caller's application to a job, or None if they have not applied."""
    result = await db.execute(
        _application_query().where(
            Application.job_id == job_id,
            Application.applicant_id == caller.id,
        )
    )
    application = result.scalar_one_or_none()
    if not application:
        return None

    logs = await _logs_for(db, [application.id])
    return build_application_response(application, logs.get(application.id, []))


async def get_resume_location(
    db: AsyncSession,
    caller: CallerIdentity,
    application_id: UUID,
    storage: ResumeStorage
) -> Union[str, Path]:
    """
    Where an application's resume can be fetched from.

    Visible to the applicant and to the admin who owns the job. Returns a
    local path for files this deployment stored, the URL otherwise.
    """
    result = await db.execute(
        _application_query().where(Application.id == application_id)
    )
    application = result.scalar_one_or_none()

    if not application or caller.id not in (application.applicant_id, application.job.publisher_id):
        raise NotFoundError("Application not found")

    if not application.resume_url:
        raise NotFoundError("No resume attached to this application")

    path = storage.resolve_path(application.resume_url)
    if path is None:
        return application.resume_url
    if not path.exists():
        logger.error(f"Resume file missing on disk: {path}")
        raise NotFoundError("Resume file not found")
    return path
