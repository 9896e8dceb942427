"""Pytest configuration and fixtures."""

import sys
import pytest
from pathlib import Path
from httpx import AsyncClient, ASGITransport

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.core.config import settings  # noqa: E402
from app.core.database import Base, build_engine, build_session_factory, get_db  # noqa: E402
from app.models import Application, Document, Task, User  # noqa: E402
from app.models.enums import RequirementCategory, RequirementType  # noqa: E402
from app.schemas.requirement import RequirementCreate  # noqa: E402
from app.services.requirements_service import RequirementsService  # noqa: E402
from app.services.requirements_template_service import RequirementsTemplateService  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def requirements_service(session):
    return RequirementsService(session)


@pytest.fixture
def template_service(session, requirements_service):
    return RequirementsTemplateService(session, requirements_service=requirements_service)


@pytest.fixture
async def application(session):
    application = Application(name="Stanford University", institution="Stanford")
    session.add(application)
    await session.flush()
    return application


@pytest.fixture
async def user(session):
    user = User(name="Template Author", email="author@example.com")
    session.add(user)
    await session.flush()
    return user


@pytest.fixture
async def task(session, application):
    task = Task(application_id=application.id, title="Ask Prof. Lee for a letter")
    session.add(task)
    await session.flush()
    return task


@pytest.fixture
async def document(session, tmp_path):
    document = Document(
        title="Transcript 2024",
        filename="transcript.pdf",
        sha256="a" * 64,
        mime_type="application/pdf",
        size_bytes=1024,
        stored_path=str(tmp_path / "transcript.pdf"),
    )
    session.add(document)
    await session.flush()
    return document


@pytest.fixture
def make_requirement(requirements_service):
    """Create a requirement on an application; defaults to an 'other' academic item."""
    async def _make(application_id, **fields):
        data = {
            "application_id": application_id,
            "requirement_type": RequirementType.OTHER,
            "category": RequirementCategory.ACADEMIC,
            "name": fields.pop("name", "Requirement"),
        }
        data.update(fields)
        return await requirements_service.create_requirement(RequirementCreate(**data))
    return _make


@pytest.fixture
async def client(session_factory, tmp_path, monkeypatch):
    """HTTP client against the app, bound to the per-test database."""
    monkeypatch.setattr(settings, "BUCKET_DIR", tmp_path / "bucket")

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
