from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
import uuid

from jobboard.database import Base
from jobboard.database_types import GUID, JSON


class ApplicationStatus(str, Enum):
    """Review status of an application"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    ON_HOLD = "ON_HOLD"


class Application(Base):
    __tablename__ = "applications"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # Status only changes through services.state_machine
    status = Column(String, nullable=False, default=ApplicationStatus.PENDING.value)
    
    # Optimistic concurrency token, bumped on every status write
    version = Column(Integer, nullable=False, default=1)
    
    # Structure: {"<question id or question text>": "answer", ...}
    answers = Column(JSON, nullable=False, default=dict)
    resume_url = Column(String, nullable=True)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    # Relationships
    job = relationship("Job")
    applicant = relationship("User")
    
    __table_args__ = (
        # One application per applicant per job
        UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant'),
        
        Index('idx_applications_job_status', 'job_id', 'status'),
    )
