"""
Tests for the application status state machine.

Validates:
- Status parsing and the any-to-any transition table
- Log rows written for submissions and transitions
- Version compare-and-swap rejecting stale writers
"""
import pytest
import pytest_asyncio
from sqlalchemy import select, update

import jobboard.database

from jobboard.models.application import Application, ApplicationStatus
from jobboard.models.application_log import ApplicationLog
from jobboard.services.applications import _get_owned_application
from jobboard.services.caller import CallerIdentity
from jobboard.services.errors import ConflictError, ValidationError
from jobboard.services.state_machine import (
    ALLOWED_TRANSITIONS,
    SUBMITTED_ACTION,
    can_transition,
    default_transition_notes,
    parse_status,
    record_submission,
    transition_application_status,
)


@pytest_asyncio.fixture
async def application(db, active_job, applicant):
    """A freshly submitted application with its submission log row"""
    application = Application(
        job_id=active_job.id,
        applicant_id=applicant.id,
        status=ApplicationStatus.PENDING.value,
        answers={},
    )
    db.add(application)
    await db.flush()
    record_submission(db, application)
    await db.commit()
    await db.refresh(application)
    return application


async def _logs(db, application_id):
    result = await db.execute(
        select(ApplicationLog)
        .where(ApplicationLog.application_id == application_id)
        .order_by(ApplicationLog.id)
    )
    return result.scalars().all()


# =============================================================================
# Parsing / transition table
# =============================================================================

def test_parse_status_accepts_known_values():
    for status in ApplicationStatus:
        assert parse_status(status.value) is status


@pytest.mark.parametrize("value", [None, ""])
def test_parse_status_requires_value(value):
    with pytest.raises(ValidationError) as exc:
        parse_status(value)
    assert exc.value.message == "Status is required"


@pytest.mark.parametrize("value", ["HIRED", "pending", "accepted "])
def test_parse_status_rejects_unknown(value):
    with pytest.raises(ValidationError) as exc:
        parse_status(value)
    assert exc.value.message == "Invalid status"
    assert exc.value.status_code == 400


def test_every_transition_is_allowed():
    """Reviewers may move between any two statuses, including the same one"""
    for from_status in ApplicationStatus:
        assert set(ALLOWED_TRANSITIONS[from_status]) == set(ApplicationStatus)
        for to_status in ApplicationStatus:
            assert can_transition(from_status, to_status)


def test_default_notes():
    assert default_transition_notes(ApplicationStatus.ON_HOLD) == "Application on_hold by admin"
    assert default_transition_notes(ApplicationStatus.ACCEPTED) == "Application accepted by admin"


# =============================================================================
# Log rows
# =============================================================================

@pytest.mark.asyncio
async def test_submission_log_row(db, application):
    """Submission writes exactly one row with no previous status"""
    logs = await _logs(db, application.id)
    
    assert len(logs) == 1
    assert logs[0].action == SUBMITTED_ACTION
    assert logs[0].previous_status is None
    assert logs[0].new_status == "PENDING"
    assert logs[0].notes == "Application submitted successfully"


@pytest.mark.asyncio
async def test_transition_writes_status_and_log(db, application):
    """Test PENDING → ACCEPTED with reviewer notes"""
    log = await transition_application_status(
        db, application, ApplicationStatus.ACCEPTED, "Great fit"
    )
    
    assert log.action == "Status changed from PENDING to ACCEPTED"
    assert log.previous_status == "PENDING"
    assert log.new_status == "ACCEPTED"
    assert log.notes == "Great fit"
    
    db.expire_all()
    stored = await db.get(Application, application.id)
    assert stored.status == "ACCEPTED"
    assert stored.version == 2


@pytest.mark.asyncio
async def test_transition_default_notes(db, application):
    log = await transition_application_status(db, application, ApplicationStatus.REJECTED)
    assert log.notes == "Application rejected by admin"


@pytest.mark.asyncio
async def test_same_status_transition_is_logged(db, application):
    """Re-applying the current status still appends a row"""
    log = await transition_application_status(db, application, ApplicationStatus.PENDING)
    
    assert log.previous_status == "PENDING"
    assert log.new_status == "PENDING"
    assert len(await _logs(db, application.id)) == 2


@pytest.mark.asyncio
async def test_log_chain_follows_status(db, application):
    """Each row's previous_status is the prior row's new_status"""
    sequence = [
        ApplicationStatus.ON_HOLD,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.PENDING,
    ]
    for status in sequence:
        db.expire_all()
        current = await db.get(Application, application.id)
        await transition_application_status(db, current, status)
    
    logs = await _logs(db, application.id)
    assert len(logs) == len(sequence) + 1
    for previous, current in zip(logs, logs[1:]):
        assert current.previous_status == previous.new_status
    
    db.expire_all()
    stored = await db.get(Application, application.id)
    assert stored.status == logs[-1].new_status == "PENDING"
    assert stored.version == len(sequence) + 1


# =============================================================================
# Compare-and-swap
# =============================================================================

@pytest.mark.asyncio
async def test_stale_version_is_rejected(db, application):
    """A writer holding an old version loses and writes nothing"""
    stale_version = application.version
    await transition_application_status(db, application, ApplicationStatus.ACCEPTED)
    
    # Simulate a second reviewer who read the application before that write
    db.expire_all()
    current = await db.get(Application, application.id)
    current_version = current.version
    current.version = stale_version
    current.status = ApplicationStatus.PENDING.value
    db.expunge(current)
    
    with pytest.raises(ConflictError) as exc:
        await transition_application_status(db, current, ApplicationStatus.REJECTED)
    assert exc.value.status_code == 409
    
    stored = await db.get(Application, application.id)
    assert stored.status == "ACCEPTED"
    assert stored.version == current_version
    assert len(await _logs(db, application.id)) == 2


@pytest.mark.asyncio
async def test_concurrent_writer_wins_over_loaded_application(db, application, admin):
    """Application loaded the way the review endpoint loads it stays attached to the session"""
    loaded = await _get_owned_application(db, CallerIdentity.from_user(admin), application.id)
    assert loaded.version == 1
    
    # Another reviewer's transition lands first
    async with jobboard.database.AsyncSessionLocal() as other:
        await other.execute(
            update(Application)
            .where(Application.id == application.id)
            .values(status=ApplicationStatus.ON_HOLD.value, version=Application.version + 1)
        )
        await other.commit()
    
    with pytest.raises(ConflictError):
        await transition_application_status(db, loaded, ApplicationStatus.ACCEPTED, "Great fit")
    
    stored = await db.get(Application, application.id)
    assert stored.status == "ON_HOLD"
    assert stored.version == 2
    assert len(await _logs(db, application.id)) == 1
