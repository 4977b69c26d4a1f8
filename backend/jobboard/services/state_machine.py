"""
State machine for application review status.
ALL status writes and action log rows go through this module.
"""
import logging
from datetime import datetime
from typing import Dict, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update

from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.application_log import ApplicationLog
from jobboard.services.errors import ConflictError, ValidationError

# Configure logger
logger = logging.getLogger(__name__)


# Reviewers may move an application between any two statuses, including
# re-applying the current one; every write is still logged.
ALLOWED_TRANSITIONS: Dict[ApplicationStatus, list[ApplicationStatus]] = {
    status: list(ApplicationStatus) for status in ApplicationStatus
}

SUBMITTED_ACTION = "Application submitted"
SUBMITTED_NOTES = "Application submitted successfully"


class InvalidTransitionError(ValidationError):
    """Raised when an invalid status transition is attempted"""
    pass


def parse_status(value: Optional[Union[str, ApplicationStatus]]) -> ApplicationStatus:
    """
    Parse a requested status.

    Raises:
        ValidationError: missing or not one of the four known statuses
    """
    if value is None or value == "":
        raise ValidationError("Status is required")
    try:
        return ApplicationStatus(value)
    except ValueError:
        raise ValidationError("Invalid status")


def can_transition(from_status: ApplicationStatus, to_status: ApplicationStatus) -> bool:
    """Check if a transition is allowed without touching the database"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def status_change_action(from_status: ApplicationStatus, to_status: ApplicationStatus) -> str:
    return f"Status changed from {from_status.value} to {to_status.value}"


def default_transition_notes(to_status: ApplicationStatus) -> str:
    return f"Application {to_status.value.lower()} by admin"


def record_submission(db: AsyncSession, application: Application) -> ApplicationLog:
    """
    Add the creation log row for a new application.

    The caller commits, so the application and its log land in one transaction.
    """
    log = ApplicationLog(
        application_id=application.id,
        action=SUBMITTED_ACTION,
        previous_status=None,
        new_status=ApplicationStatus.PENDING.value,
        notes=SUBMITTED_NOTES,
    )
    db.add(log)
    return log


async def transition_application_status(
    db: AsyncSession,
    application: Application,
    to_status: ApplicationStatus,
    notes: Optional[str] = None
) -> ApplicationLog:
    """
    Move an application to a new status and append its log row.

    The status write is a compare-and-swap on `version`: if another request
    changed the application since it was read, nothing is written.

    Args:
        db: Database session
        application: The application as read by the caller (status and version are the expected values)
        to_status: Target status
        notes: Optional reviewer notes; a default is generated when empty

    Returns:
        The new ApplicationLog row

    Raises:
        InvalidTransitionError: If the transition is not allowed
        ConflictError: If the application changed underneath the caller
    """
    # Read before the UPDATE: a failed swap rolls back and expires `application`
    application_id = application.id
    expected_version = application.version
    from_status = ApplicationStatus(application.status)

    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(
            f"Invalid transition from {from_status.value} to {to_status.value}"
        )

    now = datetime.utcnow()
    result = await db.execute(
        update(Application)
        .where(
            Application.id == application_id,
            Application.version == expected_version,
        )
        .values(
            status=to_status.value,
            version=expected_version + 1,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        await db.rollback()
        logger.warning(
            f"Stale status write rejected for application {application_id} "
            f"(expected version {expected_version})"
        )
        raise ConflictError(
            "Application was updated by another request. Reload and try again."
        )

    log = ApplicationLog(
        application_id=application_id,
        action=status_change_action(from_status, to_status),
        previous_status=from_status.value,
        new_status=to_status.value,
        notes=notes or default_transition_notes(to_status),
        created_at=now,
    )
    db.add(log)
    await db.commit()
    await db.refresh(log)

    logger.info(
        f"Application status transition: {from_status.value} → {to_status.value}",
        extra={
            "application_id": str(application_id),
            "from_status": from_status.value,
            "to_status": to_status.value,
            "version": expected_version + 1,
        }
    )

    return log
