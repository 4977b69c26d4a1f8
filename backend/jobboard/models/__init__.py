"""Database models"""
from jobboard.models.user import User, UserRole
from jobboard.models.job import Job, JobStatus
from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.application_log import ApplicationLog

__all__ = [
    "User",
    "UserRole",
    "Job",
    "JobStatus",
    "Application",
    "ApplicationStatus",
    "ApplicationLog",
]
