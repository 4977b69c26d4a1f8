"""
Pytest fixtures for testing.
"""
import os

# Settings are read at import time; point them at the test database first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Callable

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from werkzeug.security import generate_password_hash

# Import database module BEFORE app to allow override
import jobboard.database
from jobboard.database import Base
# Import ALL models so Base.metadata knows about all tables
from jobboard.models import User, UserRole, Job, JobStatus, Application, ApplicationLog
from jobboard.services.storage import LocalResumeStorage, ResumeStorage, StorageError, get_resume_storage

# Now import app (after we can override database)
from jobboard.main import app as fastapi_app


# Test database URL (use in-memory SQLite for fast tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"
# Cheap hash so fixtures stay fast
TEST_PASSWORD_HASH = generate_password_hash(TEST_PASSWORD, method="pbkdf2:sha256:1000")

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


class FailingResumeStorage(ResumeStorage):
    """Storage backend whose uploads always fail."""
    
    def __init__(self):
        self.deleted = []
    
    def save(self, content, filename, applicant_id, job_id):
        raise StorageError("storage backend unavailable")
    
    def delete(self, url):
        self.deleted.append(url)


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database for each test.
    Ensures cleanup happens even if test fails.
    """
    # Use StaticPool to keep single connection alive and reuse it
    # This ensures all sessions see the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    
    # Create all tables FIRST
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    # THEN replace the app's engine and sessionmaker
    # This ensures get_db() uses sessions connected to DB with tables
    original_engine = jobboard.database.engine
    original_sessionmaker = jobboard.database.AsyncSessionLocal
    
    jobboard.database.engine = test_engine
    jobboard.database.AsyncSessionLocal = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    
    # Create session for direct test use
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    
    session = async_session()
    
    try:
        yield session
    finally:
        await session.close()
        
        async with test_engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        
        await test_engine.dispose()
        
        # Restore original engine
        jobboard.database.engine = original_engine
        jobboard.database.AsyncSessionLocal = original_sessionmaker


@pytest.fixture(autouse=True)
def resume_storage(tmp_path) -> LocalResumeStorage:
    """Route every upload into a per-test temp directory."""
    storage = LocalResumeStorage(tmp_path / "resumes", "/uploads/resumes")
    fastapi_app.dependency_overrides[get_resume_storage] = lambda: storage
    yield storage
    fastapi_app.dependency_overrides.pop(get_resume_storage, None)


@pytest.fixture
def failing_storage() -> FailingResumeStorage:
    """Make resume uploads fail for the duration of a test."""
    storage = FailingResumeStorage()
    fastapi_app.dependency_overrides[get_resume_storage] = lambda: storage
    return storage


@pytest_asyncio.fixture
async def async_client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Anonymous HTTP client.
    
    The db fixture already replaced jobboard.database.engine with test engine,
    so all endpoints will automatically use the test database.
    """
    transport = ASGITransport(app=fastapi_app)
    
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def make_user(db: AsyncSession) -> Callable:
    """Factory inserting a user whose password is TEST_PASSWORD."""
    
    async def _make_user(email: str, name: str = "Test User", role: UserRole = UserRole.USER, **profile) -> User:
        user = User(
            email=email,
            name=name,
            password_hash=TEST_PASSWORD_HASH,
            role=role,
            **profile
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    
    return _make_user


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin-a@example.com", "Admin A", UserRole.ADMIN)


@pytest_asyncio.fixture
async def other_admin(make_user) -> User:
    return await make_user("admin-b@example.com", "Admin B", UserRole.ADMIN)


@pytest_asyncio.fixture
async def applicant(make_user) -> User:
    return await make_user(
        "applicant@example.com",
        "Jane Applicant",
        phone="555-0100",
        location="Berlin",
        skills="Python, SQL",
    )


@pytest_asyncio.fixture
async def other_applicant(make_user) -> User:
    return await make_user("applicant-2@example.com", "Sam Applicant")


@pytest_asyncio.fixture
async def client_for(db: AsyncSession) -> AsyncGenerator[Callable, None]:
    """
    Factory returning a client signed in as the given user.
    
    Each user gets its own client so session cookies never mix.
    """
    clients = []
    
    async def _client_for(user: User) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test")
        clients.append(client)
        response = await client.post(
            "/api/auth/sign-in",
            json={"email": user.email, "password": TEST_PASSWORD}
        )
        assert response.status_code == 200, response.text
        return client
    
    yield _client_for
    
    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def admin_client(client_for, admin) -> AsyncClient:
    return await client_for(admin)


@pytest_asyncio.fixture
async def other_admin_client(client_for, other_admin) -> AsyncClient:
    return await client_for(other_admin)


@pytest_asyncio.fixture
async def applicant_client(client_for, applicant) -> AsyncClient:
    return await client_for(applicant)


@pytest_asyncio.fixture
async def other_applicant_client(client_for, other_applicant) -> AsyncClient:
    return await client_for(other_applicant)


@pytest_asyncio.fixture
async def make_job(db: AsyncSession) -> Callable:
    """Factory inserting a job directly, ACTIVE unless told otherwise."""
    
    async def _make_job(publisher: User, **overrides) -> Job:
        values = {
            "title": "Backend Engineer",
            "department": "Engineering",
            "location": "Remote",
            "salary": "100k",
            "description": "Build and run the API.",
            "requirements": "Python, SQL",
            "resume_required": False,
            "custom_questions": [],
            "status": JobStatus.ACTIVE.value,
        }
        values.update(overrides)
        job = Job(publisher_id=publisher.id, **values)
        db.add(job)
        await db.commit()
        await db.refresh(job)
        return job
    
    return _make_job


@pytest_asyncio.fixture
async def active_job(make_job, admin) -> Job:
    """ACTIVE job published by `admin`, no resume required, no questions."""
    return await make_job(admin)
