"""Application-related Pydantic schemas."""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from jobboard.schemas.job import UserSummary


class SubmitApplicationRequest(BaseModel):
    """JSON submission body (multipart submissions carry the same fields as form parts)."""
    job_id: Optional[UUID] = None
    answers: dict[str, Any] = Field(default_factory=dict)
    resume_url: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    """Admin status transition."""
    status: Optional[str] = None
    notes: Optional[str] = None


class ApplicationLogResponse(BaseModel):
    """One action log row."""
    id: int
    action: str
    previous_status: Optional[str] = None
    new_status: str
    notes: Optional[str] = None
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class JobSummary(BaseModel):
    """The job an application belongs to."""
    id: UUID
    title: str
    department: str
    location: str
    salary: Optional[str] = None
    status: str
    publisher: UserSummary


class ApplicantSummary(UserSummary):
    """Applicant; profile fields are only filled in for admin views."""
    phone: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    skills: Optional[str] = None
    experience: Optional[str] = None
    education: Optional[str] = None


class ApplicationResponse(BaseModel):
    """Application with its job, applicant and action log."""
    id: UUID
    job_id: UUID
    applicant_id: UUID
    status: str
    answers: dict[str, Any]
    resume_url: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    job: JobSummary
    applicant: ApplicantSummary
    action_logs: list[ApplicationLogResponse] = Field(default_factory=list)


class ApplicationMutationResponse(BaseModel):
    """Submit / status-change response."""
    message: str
    application: ApplicationResponse


class ApplicationDetailResponse(BaseModel):
    application: ApplicationResponse


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ApplicationStats(BaseModel):
    """Per-status counts."""
    total: int = 0
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    on_hold: int = 0


class ApplicationListResponse(BaseModel):
    applications: list[ApplicationResponse]
    pagination: Pagination


class AdminApplicationListResponse(ApplicationListResponse):
    stats: ApplicationStats


class MyApplicationsResponse(BaseModel):
    applications: list[ApplicationResponse]
    stats: ApplicationStats


class JobApplicationStatusResponse(BaseModel):
    """Has the caller applied to a given job."""
    has_applied: bool
    application: Optional[ApplicationResponse] = None
