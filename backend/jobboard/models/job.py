from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
import uuid

from jobboard.database import Base
from jobboard.database_types import GUID, JSON


class JobStatus(str, Enum):
    """Publication status of a job posting"""
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"  # Only ACTIVE jobs are public and accept applications
    CLOSED = "CLOSED"


class Job(Base):
    __tablename__ = "jobs"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    
    # Posting details
    title = Column(String(255), nullable=False)
    department = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    salary = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    requirements = Column(Text, nullable=False)
    
    # Application form
    resume_required = Column(Boolean, nullable=False, default=True)
    # Structure: [{"id": "q1", "question": "Why us?", "required": true}, ...]
    # "id" is optional; answers are keyed by str(id) or, without one, the question text
    custom_questions = Column(JSON, nullable=False, default=list)
    
    status = Column(String, nullable=False, default=JobStatus.DRAFT.value)
    
    # Owning admin, never reassigned
    publisher_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    # Relationships
    publisher = relationship("User")
    
    __table_args__ = (
        Index('idx_jobs_status_created', 'status', 'created_at'),
    )
