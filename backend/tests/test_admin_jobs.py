"""
Tests for admin job management.

Tests:
- POST /api/admin/jobs (create, defaults, validation)
- GET /api/admin/jobs (own jobs only)
- PATCH /api/admin/jobs/{id} (status changes, ownership)
- DELETE /api/admin/jobs/{id} (cascade to applications, logs and resumes)
"""
import uuid

import pytest
from httpx import AsyncClient
from sqlalchemy import select, func

from jobboard.models.application import Application
from jobboard.models.application_log import ApplicationLog
from jobboard.models.job import Job

PDF_BYTES = b"%PDF-1.4\n%%EOF\n"

JOB_PAYLOAD = {
    "title": "Site Reliability Engineer",
    "department": "Operations",
    "location": "Remote",
    "salary": "$120k - $150k",
    "description": "Keep production healthy.",
    "requirements": "Linux, Kubernetes",
    "custom_questions": [
        {"id": 1, "question": "On-call experience?", "required": True},
        {"question": "Favourite pager sound?"},
    ],
}


async def _count(db, model, *conditions) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar_one()


# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_job_defaults(admin_client: AsyncClient, admin):
    """New jobs start as DRAFT with a required resume"""
    response = await admin_client.post("/api/admin/jobs", json=JOB_PAYLOAD)
    
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Job created successfully"
    job = data["job"]
    assert job["status"] == "DRAFT"
    assert job["resume_required"] is True
    assert job["publisher_id"] == str(admin.id)
    assert job["publisher"] == {"id": str(admin.id), "name": "Admin A", "email": "admin-a@example.com"}
    assert job["application_count"] == 0
    assert job["custom_questions"] == [
        {"id": 1, "question": "On-call experience?", "required": True},
        {"id": None, "question": "Favourite pager sound?", "required": False},
    ]


@pytest.mark.asyncio
async def test_create_active_job_is_public(admin_client: AsyncClient, async_client: AsyncClient):
    payload = dict(JOB_PAYLOAD, status="ACTIVE", resume_required=False)
    
    response = await admin_client.post("/api/admin/jobs", json=payload)
    assert response.status_code == 201
    job_id = response.json()["job"]["id"]
    
    public = await async_client.get(f"/api/jobs/{job_id}")
    assert public.status_code == 200
    assert public.json()["resume_required"] is False


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "department", "location", "description", "requirements"])
async def test_create_job_missing_field(admin_client: AsyncClient, db, field):
    payload = dict(JOB_PAYLOAD)
    payload[field] = "   " if field == "title" else None
    
    response = await admin_client.post("/api/admin/jobs", json=payload)
    
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields"
    assert await _count(db, Job) == 0


@pytest.mark.asyncio
async def test_applicant_cannot_create_job(applicant_client: AsyncClient):
    response = await applicant_client.post("/api/admin/jobs", json=JOB_PAYLOAD)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_job_requires_authentication(async_client: AsyncClient):
    response = await async_client.post("/api/admin/jobs", json=JOB_PAYLOAD)
    assert response.status_code == 401


# =============================================================================
# List
# =============================================================================

@pytest.mark.asyncio
async def test_list_only_own_jobs(admin_client: AsyncClient, make_job, admin, other_admin):
    await make_job(admin, title="Mine (active)")
    await make_job(admin, title="Mine (draft)", status="DRAFT")
    await make_job(other_admin, title="Theirs")
    
    response = await admin_client.get("/api/admin/jobs")
    
    assert response.status_code == 200
    titles = {job["title"] for job in response.json()["jobs"]}
    assert titles == {"Mine (active)", "Mine (draft)"}
    
    response = await admin_client.get("/api/admin/jobs", params={"status": "DRAFT"})
    assert [job["title"] for job in response.json()["jobs"]] == ["Mine (draft)"]


@pytest.mark.asyncio
async def test_list_rejects_unknown_status(admin_client: AsyncClient):
    response = await admin_client.get("/api/admin/jobs", params={"status": "ARCHIVED"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_includes_application_count(
    admin_client: AsyncClient, applicant_client: AsyncClient, active_job
):
    await applicant_client.post("/api/applications", json={"job_id": str(active_job.id), "answers": {}})
    
    response = await admin_client.get("/api/admin/jobs")
    assert response.json()["jobs"][0]["application_count"] == 1


# =============================================================================
# Status changes
# =============================================================================

@pytest.mark.asyncio
async def test_update_job_status(admin_client: AsyncClient, make_job, admin):
    job = await make_job(admin, status="DRAFT")
    
    response = await admin_client.patch(f"/api/admin/jobs/{job.id}", json={"status": "ACTIVE"})
    
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Job status updated"
    assert data["job"]["status"] == "ACTIVE"


@pytest.mark.asyncio
async def test_closed_job_stops_accepting(admin_client: AsyncClient, applicant_client: AsyncClient, active_job):
    await admin_client.patch(f"/api/admin/jobs/{active_job.id}", json={"status": "CLOSED"})
    
    response = await applicant_client.post(
        "/api/applications", json={"job_id": str(active_job.id), "answers": {}}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("body,detail", [
    ({}, "Status is required"),
    ({"status": "ARCHIVED"}, "Invalid status"),
])
async def test_update_job_status_validation(admin_client: AsyncClient, active_job, body, detail):
    response = await admin_client.patch(f"/api/admin/jobs/{active_job.id}", json=body)
    
    assert response.status_code == 400
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_other_admin_cannot_update_job(other_admin_client: AsyncClient, active_job, db):
    response = await other_admin_client.patch(
        f"/api/admin/jobs/{active_job.id}", json={"status": "CLOSED"}
    )
    
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only update your own jobs"
    
    db.expire_all()
    job = await db.get(Job, active_job.id)
    assert job.status == "ACTIVE"


@pytest.mark.asyncio
async def test_update_unknown_job(admin_client: AsyncClient):
    response = await admin_client.patch(f"/api/admin/jobs/{uuid.uuid4()}", json={"status": "ACTIVE"})
    assert response.status_code == 403


# =============================================================================
# Delete
# =============================================================================

@pytest.mark.asyncio
async def test_delete_job_cascades(
    admin_client: AsyncClient, applicant_client: AsyncClient, make_job, admin, db, resume_storage
):
    """Deleting a job removes its applications, their logs and stored resumes"""
    job = await make_job(admin, resume_required=True)
    response = await applicant_client.post(
        "/api/applications",
        data={"job_id": str(job.id)},
        files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")},
    )
    application = response.json()["application"]
    await admin_client.patch(
        f"/api/admin/applications/{application['id']}", json={"status": "ON_HOLD"}
    )
    stored = resume_storage.resolve_path(application["resume_url"])
    assert stored.exists()
    
    response = await admin_client.delete(f"/api/admin/jobs/{job.id}")
    
    assert response.status_code == 200
    assert response.json() == {"message": "Job deleted"}
    assert await _count(db, Job) == 0
    assert await _count(db, Application) == 0
    assert await _count(db, ApplicationLog) == 0
    assert not stored.exists()


@pytest.mark.asyncio
async def test_other_admin_cannot_delete_job(other_admin_client: AsyncClient, active_job, db):
    response = await other_admin_client.delete(f"/api/admin/jobs/{active_job.id}")
    
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only delete your own jobs"
    assert await _count(db, Job) == 1


@pytest.mark.asyncio
async def test_ownership_checked_before_status(other_admin_client: AsyncClient, active_job):
    """A non-owner is refused even when the requested status is invalid"""
    response = await other_admin_client.patch(
        f"/api/admin/jobs/{active_job.id}", json={"status": "ARCHIVED"}
    )
    
    assert response.status_code == 403
    assert response.json()["detail"] == "You can only update your own jobs"
