"""Job-related Pydantic schemas."""
from datetime import datetime
from typing import Optional, Union
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from jobboard.models.job import JobStatus


class CustomQuestion(BaseModel):
    """An admin-defined question on the application form."""
    id: Optional[Union[int, str]] = None
    question: str = Field(min_length=1)
    required: bool = False


class UserSummary(BaseModel):
    """Who published a job / who applied."""
    id: UUID
    name: str
    email: str
    
    model_config = ConfigDict(from_attributes=True)


class PublisherName(BaseModel):
    """Publisher as shown on public listings."""
    name: str
    
    model_config = ConfigDict(from_attributes=True)


class JobCreate(BaseModel):
    """
    Schema for creating a job posting.
    
    Text fields are optional here so that a missing field is reported as
    400 "Missing required fields" by the service rather than a 422.
    """
    title: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    resume_required: bool = True
    custom_questions: list[CustomQuestion] = Field(default_factory=list)
    status: Optional[JobStatus] = None  # defaults to DRAFT


class JobStatusUpdate(BaseModel):
    """Schema for changing a job's status."""
    status: Optional[str] = None


class JobResponse(BaseModel):
    """Schema for job posting response."""
    id: UUID
    title: str
    department: str
    location: str
    salary: Optional[str] = None
    description: str
    requirements: str
    resume_required: bool
    custom_questions: list[CustomQuestion]
    status: str
    publisher_id: UUID
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class PublicJobResponse(JobResponse):
    """Job as listed to applicants."""
    publisher: PublisherName
    application_count: int = 0


class AdminJobResponse(JobResponse):
    """Job as listed to its publisher."""
    publisher: UserSummary
    application_count: int = 0


class PublicJobListResponse(BaseModel):
    jobs: list[PublicJobResponse]


class AdminJobListResponse(BaseModel):
    jobs: list[AdminJobResponse]


class JobMutationResponse(BaseModel):
    """Create / status-change response."""
    message: str
    job: AdminJobResponse
