"""Pytest configuration and fixtures."""
import os

# Point the app at SQLite before anything imports app.db.session
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.db.base_class import Base
from app.services.feature_flags import FeatureFlag, FeatureFlagName, FeatureFlagStore
from app.services.module_mapping import ModuleMappingTable


def make_flags(enabled: bool = True, rollout: dict | None = None, **kwargs) -> FeatureFlagStore:
    """Flag store with every flag set to ``enabled`` (rollouts overridable per flag)."""
    rollout = rollout or {}
    table = {
        name: FeatureFlag(
            name=name.value.lower(),
            enabled=enabled,
            description=f"test flag {name.value}",
            rollout_percentage=rollout.get(name, 100),
        )
        for name in FeatureFlagName
    }
    return FeatureFlagStore(table, **kwargs)


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(test_engine):
    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def project_factory(db):
    from app.models.project import Project

    def _create(name="demo", language="python", framework=None):
        project = Project(name=name, language=language, framework=framework, template="scratch")
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _create


@pytest.fixture
def storage_dir(tmp_path, monkeypatch):
    path = tmp_path / "projects"
    monkeypatch.setattr(settings, "PROJECT_STORAGE_DIR", str(path))
    monkeypatch.setattr(settings, "VERCEL", None)
    return path


@pytest.fixture
async def client(test_engine, storage_dir):
    """
    Async HTTP client against the FastAPI app with:
      - get_db overridden to the in-memory test database
      - feature flags all on, echo AI handlers
    """
    from app.main import app as fastapi_app
    from app.api import deps
    from app.services.ai_router import AIRouter

    TestSession = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def _override_get_db():
        session = TestSession()
        try:
            yield session
        finally:
            session.close()

    flags = make_flags(enabled=True)
    table = ModuleMappingTable()
    ai_router = AIRouter(flags=flags, mappings=table)

    fastapi_app.dependency_overrides[deps.get_db] = _override_get_db
    fastapi_app.dependency_overrides[deps.get_feature_flags] = lambda: flags
    fastapi_app.dependency_overrides[deps.get_module_table] = lambda: table
    fastapi_app.dependency_overrides[deps.get_ai_router] = lambda: ai_router

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()
