"""Job catalog business logic."""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from jobboard.models.application import Application
from jobboard.models.application_log import ApplicationLog
from jobboard.models.job import Job, JobStatus
from jobboard.schemas.job import (
    AdminJobResponse,
    JobCreate,
    JobResponse,
    PublicJobResponse,
    PublisherName,
    UserSummary,
)
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ForbiddenError, NotFoundError, ValidationError
from jobboard.services.storage import ResumeStorage

logger = logging.getLogger(__name__)

REQUIRED_JOB_FIELDS = ("title", "department", "location", "description", "requirements")


def _require_admin(caller: CallerIdentity) -> None:
    if not caller.is_admin:
        raise ForbiddenError("Admin access required")


def _parse_job_status(value: Optional[str]) -> JobStatus:
    if not value:
        raise ValidationError("Status is required")
    try:
        return JobStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


async def _application_counts(db: AsyncSession, job_ids: list) -> dict:
    if not job_ids:
        return {}
    result = await db.execute(
        select(Application.job_id, func.count(Application.id))
        .where(Application.job_id.in_(job_ids))
        .group_by(Application.job_id)
    )
    return dict(result.all())


def _admin_job_response(job: Job, application_count: int) -> AdminJobResponse:
    return AdminJobResponse(
        **JobResponse.model_validate(job).model_dump(),
        publisher=UserSummary.model_validate(job.publisher),
        application_count=application_count,
    )


def _public_job_response(job: Job, application_count: int) -> PublicJobResponse:
    return PublicJobResponse(
        **JobResponse.model_validate(job).model_dump(),
        publisher=PublisherName.model_validate(job.publisher),
        application_count=application_count,
    )


def _apply_text_filters(query, search: Optional[str], department: Optional[str]):
    if search:
        query = query.where(
            or_(
                Job.title.ilike(f"%{search}%"),
                Job.description.ilike(f"%{search}%"),
            )
        )
    if department:
        query = query.where(Job.department == department)
    return query


async def _load_job(db: AsyncSession, job_id: UUID) -> Job:
    result = await db.execute(
        select(Job)
        .options(selectinload(Job.publisher))
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _get_owned_job(db: AsyncSession, caller: CallerIdentity, job_id: UUID, verb: str) -> Job:
    """The caller's job; a missing job and someone else's job are both 403."""
    result = await db.execute(
        select(Job).options(selectinload(Job.publisher)).where(Job.id == job_id)
    )
    job = result.scalar_one_or_none()
    if not job or job.publisher_id != caller.id:
        logger.warning(f"Admin {caller.email} attempted to {verb} job {job_id} they do not own")
        raise ForbiddenError(f"You can only {verb} your own jobs")
    return job


# ============================================================
# ADMIN
# ============================================================

async def create_job(db: AsyncSession, caller: CallerIdentity, data: JobCreate) -> AdminJobResponse:
    """
    Publish a new job owned by the calling admin.

    Status defaults to DRAFT when the caller does not supply one, so a new
    job is not public until it is explicitly activated.
    """
    _require_admin(caller)

    values = data.model_dump()
    if any(not (values.get(field) or "").strip() for field in REQUIRED_JOB_FIELDS):
        raise ValidationError("Missing required fields")

    job = Job(
        title=data.title.strip(),
        department=data.department.strip(),
        location=data.location.strip(),
        salary=data.salary,
        description=data.description,
        requirements=data.requirements,
        resume_required=data.resume_required,
        custom_questions=[q.model_dump(exclude_none=True) for q in data.custom_questions],
        status=(data.status or JobStatus.DRAFT).value,
        publisher_id=caller.id,
    )
    db.add(job)
    await db.commit()
    job = await _load_job(db, job.id)

    logger.info(f"Created job {job.id}: {job.title} ({job.status}) by {caller.email}")
    return _admin_job_response(job, 0)


async def update_job_status(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: UUID,
    status: Optional[str]
) -> AdminJobResponse:
    """Set a job's status. Any status may follow any other."""
    _require_admin(caller)
    job = await _get_owned_job(db, caller, job_id, "update")
    new_status = _parse_job_status(status)

    previous = job.status
    job.status = new_status.value
    await db.commit()
    job = await _load_job(db, job.id)

    counts = await _application_counts(db, [job.id])
    logger.info(f"Job {job.id} status {previous} → {job.status}")
    return _admin_job_response(job, counts.get(job.id, 0))


async def delete_job(
    db: AsyncSession,
    caller: CallerIdentity,
    job_id: UUID,
    storage: ResumeStorage
) -> None:
    """
    Permanently delete a job with all its applications and their logs.

    Stored resumes of the deleted applications are removed after the
    database commit; a failed file removal is only logged.
    """
    _require_admin(caller)
    job = await _get_owned_job(db, caller, job_id, "delete")

    result = await db.execute(
        select(Application.id, Application.resume_url).where(Application.job_id == job.id)
    )
    rows = result.all()
    application_ids = [row[0] for row in rows]
    resume_urls = [row[1] for row in rows if row[1]]

    if application_ids:
        await db.execute(
            delete(ApplicationLog).where(ApplicationLog.application_id.in_(application_ids))
        )
        await db.execute(
            delete(Application).where(Application.job_id == job.id)
        )
    await db.execute(delete(Job).where(Job.id == job.id))
    await db.commit()

    logger.warning(f"Deleted job {job_id} and {len(application_ids)} applications")

    for url in resume_urls:
        storage.delete(url)


async def list_admin_jobs(
    db: AsyncSession,
    caller: CallerIdentity,
    status: Optional[str] = None,
    department: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None
) -> list[AdminJobResponse]:
    """The caller's own jobs in any status, newest first."""
    _require_admin(caller)

    query = (
        select(Job)
        .options(selectinload(Job.publisher))
        .where(Job.publisher_id == caller.id)
    )
    if status:
        query = query.where(Job.status == _parse_job_status(status).value)
    query = _apply_text_filters(query, search, department)
    query = query.order_by(Job.created_at.desc())
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    jobs = result.scalars().all()
    counts = await _application_counts(db, [j.id for j in jobs])
    return [_admin_job_response(j, counts.get(j.id, 0)) for j in jobs]


# ============================================================
# PUBLIC
# ============================================================

async def list_public_jobs(
    db: AsyncSession,
    search: Optional[str] = None,
    department: Optional[str] = None,
    location: Optional[str] = None
) -> list[PublicJobResponse]:
    """ACTIVE jobs, newest first."""
    query = (
        select(Job)
        .options(selectinload(Job.publisher))
        .where(Job.status == JobStatus.ACTIVE.value)
    )
    query = _apply_text_filters(query, search, department)
    if location:
        query = query.where(Job.location.ilike(f"%{location}%"))
    query = query.order_by(Job.created_at.desc())

    result = await db.execute(query)
    jobs = result.scalars().all()
    counts = await _application_counts(db, [j.id for j in jobs])

    logger.info(f"Listed {len(jobs)} jobs (filters: search={search}, department={department}, location={location})")
    return [_public_job_response(j, counts.get(j.id, 0)) for j in jobs]


async def get_public_job(db: AsyncSession, job_id: UUID) -> PublicJobResponse:
    """One ACTIVE job; anything else is reported as missing."""
    result = await db.execute(
        select(Job)
        .options(selectinload(Job.publisher))
        .where(Job.id == job_id, Job.status == JobStatus.ACTIVE.value)
    )
    job = result.scalar_one_or_none()
    if not job:
        raise NotFoundError("Job not found")

    counts = await _application_counts(db, [job.id])
    return _public_job_response(job, counts.get(job.id, 0))
