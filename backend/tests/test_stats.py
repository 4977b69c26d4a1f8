"""
Tests for the admin dashboard counts (GET /api/admin/stats).
"""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from jobboard.models.application import Application


@pytest.mark.asyncio
async def test_empty_stats(admin_client: AsyncClient):
    response = await admin_client.get("/api/admin/stats")
    
    assert response.status_code == 200
    assert response.json() == {
        "total_jobs": 0,
        "active_jobs": 0,
        "total_applications": 0,
        "pending_applications": 0,
        "recent_applications": 0,
        "monthly_applications": 0,
    }


@pytest.mark.asyncio
async def test_stats_scoped_to_own_jobs(
    admin_client: AsyncClient,
    applicant_client: AsyncClient,
    other_applicant_client: AsyncClient,
    make_job,
    admin,
    other_admin,
    db,
):
    mine = await make_job(admin)
    await make_job(admin, status="DRAFT")
    theirs = await make_job(other_admin)
    
    for client in (applicant_client, other_applicant_client):
        await client.post("/api/applications", json={"job_id": str(mine.id), "answers": {}})
    await applicant_client.post("/api/applications", json={"job_id": str(theirs.id), "answers": {}})
    
    listing = await admin_client.get("/api/admin/applications")
    first_id = listing.json()["applications"][0]["id"]
    await admin_client.patch(f"/api/admin/applications/{first_id}", json={"status": "REJECTED"})
    
    # Age one application out of the 7-day window
    await db.execute(
        update(Application)
        .where(Application.job_id == mine.id, Application.status == "PENDING")
        .values(created_at=datetime.utcnow() - timedelta(days=40))
    )
    await db.commit()
    
    response = await admin_client.get("/api/admin/stats")
    
    data = response.json()
    assert data["total_jobs"] == 2
    assert data["active_jobs"] == 1
    assert data["total_applications"] == 2
    assert data["pending_applications"] == 1
    assert data["recent_applications"] == 1
    assert data["monthly_applications"] == 1


@pytest.mark.asyncio
async def test_stats_require_admin(applicant_client: AsyncClient):
    response = await applicant_client.get("/api/admin/stats")
    assert response.status_code == 403
