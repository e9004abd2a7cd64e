import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from core.config import Settings
from database import build_engine, create_schema, get_db
from main import app
from repository import CourseRepository


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(Settings(database_url=f"sqlite:///{tmp_path / 'courses.db'}"))
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return CourseRepository(db)


@pytest.fixture
def client(session_factory):
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    # Clean up override
    app.dependency_overrides.clear()
