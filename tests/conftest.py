"""
Pytest Configuration and Shared Fixtures
========================================

This module provides shared fixtures for all MedTrack tests.
Fixtures include database sessions, test clients, users, tokens, and mocks.
"""

import os
import sys
from datetime import datetime
from typing import Generator, Dict
from unittest.mock import MagicMock, AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Keep the application engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["LLM_API_KEY"] = ""

from database import Base, get_db
from models import User, Medicine, DoseLog, DoseStatus
from services.auth_service import AuthService, hash_password
from services.llm_service import LLMService
from api.deps import get_llm_service
from app import app

from tests import TEST_DATABASE_URL, TEST_USER_EMAIL, TEST_USER_PASSWORD


# ==================== DATABASE FIXTURES ====================

@pytest.fixture(scope="function")
def test_engine():
    """Create a test database engine with in-memory SQLite"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Create a test database session"""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client with database override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ==================== USER FIXTURES ====================

@pytest.fixture
def auth_service() -> AuthService:
    return AuthService()


def _create_user(db_session: Session, email: str, name: str, language: str = "en") -> User:
    user = User(
        email=email,
        password_hash=hash_password(TEST_USER_PASSWORD),
        name=name,
        language=language,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session: Session) -> User:
    """Create a test user"""
    return _create_user(db_session, TEST_USER_EMAIL, "Test User")


@pytest.fixture
def other_user(db_session: Session) -> User:
    """A second user whose records must stay invisible to test_user"""
    return _create_user(db_session, "someone.else@example.com", "Someone Else")


@pytest.fixture
def auth_headers(test_user: User, auth_service: AuthService) -> Dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.create_token(test_user)}"}


@pytest.fixture
def other_headers(other_user: User, auth_service: AuthService) -> Dict[str, str]:
    return {"Authorization": f"Bearer {auth_service.create_token(other_user)}"}


# ==================== RECORD FIXTURES ====================

@pytest.fixture
def test_medicine(db_session: Session, test_user: User) -> Medicine:
    """Create a test medicine with an 08:00 reminder"""
    medicine = Medicine(
        user_id=test_user.id,
        name="Lisinopril",
        dosage="10mg",
        frequency="Daily",
        time_of_day="Morning",
        instructions="Take with water",
        reminder_time="08:00",
    )
    db_session.add(medicine)
    db_session.commit()
    db_session.refresh(medicine)
    return medicine


@pytest.fixture
def other_medicine(db_session: Session, other_user: User) -> Medicine:
    medicine = Medicine(
        user_id=other_user.id,
        name="Warfarin",
        dosage="5mg",
        frequency="Daily",
        reminder_time="18:00",
    )
    db_session.add(medicine)
    db_session.commit()
    db_session.refresh(medicine)
    return medicine


@pytest.fixture
def test_dose_log(db_session: Session, test_user: User, test_medicine: Medicine) -> DoseLog:
    log = DoseLog(
        user_id=test_user.id,
        medicine_id=test_medicine.id,
        taken_at=datetime(2024, 3, 4, 8, 5),
        status=DoseStatus.TAKEN.value,
    )
    db_session.add(log)
    db_session.commit()
    db_session.refresh(log)
    return log


# ==================== LLM FIXTURES ====================

@pytest.fixture
def mock_llm_service():
    """Configured LLM client with canned async responses"""
    llm = MagicMock(spec=LLMService)
    llm.configured = True
    llm.model_name = "test-model"
    llm.parse_model_name = "test-model"
    llm.generate = AsyncMock(return_value="Test LLM response")
    llm.generate_json = AsyncMock(return_value={})
    llm.chat = AsyncMock(return_value="Test chat reply")
    return llm


@pytest.fixture
def assistant_client(client: TestClient, mock_llm_service) -> TestClient:
    """Test client whose assistant routes use mock_llm_service"""
    app.dependency_overrides[get_llm_service] = lambda: mock_llm_service
    return client


# ==================== MARKERS ====================

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "client: mark test as an API client test")
    config.addinivalue_line("markers", "database: mark test as requiring database")
