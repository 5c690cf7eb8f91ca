"""
Hostel Admin - Test Configuration and Fixtures
"""
import os
from typing import Callable, Generator, Optional

import pytest
from faker import Faker
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before the application reads its settings
os.environ["ENVIRONMENT"] = "development"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret-key-for-testing"
os.environ["PASSWORD_BCRYPT_ROUNDS"] = "4"
os.environ["SMS_PROVIDER"] = "console"
os.environ["AUDIT_ENABLED"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"

from hostel_admin.core.security import get_jwt_manager, get_password_hasher
from hostel_admin.db.base import Base, import_models
from hostel_admin.db.session import enable_sqlite_savepoints, get_db
from hostel_admin.main import app
from hostel_admin.models.user import User
from hostel_admin.schemas.common.enums import ContactType, UserRole, Vertical
from hostel_admin.services.config_service import ConfigService

fake = Faker("en_IN")

TEST_PASSWORD = "Password123"

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_savepoints(test_engine)
TestSessionLocal = sessionmaker(bind=test_engine, autocommit=False, autoflush=False)

import_models()


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh schema and session for each test"""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Test client sharing the test session with the fixtures"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _mobile() -> str:
    return "9" + fake.numerify("#########")


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory creating an active user with ``TEST_PASSWORD``"""
    def _make(
        role: UserRole,
        vertical: Optional[Vertical] = None,
        first_login: bool = False,
        is_active: bool = True,
        guardian_of: Optional[User] = None,
        email: Optional[str] = None,
        mobile: Optional[str] = None,
    ) -> User:
        user = User(
            full_name=fake.name(),
            email=email or fake.unique.email().lower(),
            mobile=mobile or _mobile(),
            password_hash=get_password_hasher().hash(TEST_PASSWORD),
            role=role,
            vertical=vertical,
            is_active=is_active,
            first_login=first_login,
            guardian_of_id=guardian_of.id if guardian_of else None,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def student(make_user) -> User:
    return make_user(UserRole.STUDENT, Vertical.BOYS)


@pytest.fixture
def superintendent(make_user) -> User:
    return make_user(UserRole.SUPERINTENDENT, Vertical.BOYS)


@pytest.fixture
def girls_superintendent(make_user) -> User:
    return make_user(UserRole.SUPERINTENDENT, Vertical.GIRLS)


@pytest.fixture
def trustee(make_user) -> User:
    return make_user(UserRole.TRUSTEE)


@pytest.fixture
def accounts(make_user) -> User:
    return make_user(UserRole.ACCOUNTS)


@pytest.fixture
def parent(make_user, student) -> User:
    return make_user(UserRole.PARENT, Vertical.BOYS, guardian_of=student)


def headers_for(user: User) -> dict:
    """Bearer headers for ``user``"""
    token = get_jwt_manager().create_access_token(
        user.id, user.role.value, user.vertical.value if user.vertical else None
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(student) -> dict:
    return headers_for(student)


@pytest.fixture
def superintendent_headers(superintendent) -> dict:
    return headers_for(superintendent)


@pytest.fixture
def trustee_headers(trustee) -> dict:
    return headers_for(trustee)


@pytest.fixture
def accounts_headers(accounts) -> dict:
    return headers_for(accounts)


@pytest.fixture
def parent_headers(parent) -> dict:
    return headers_for(parent)


@pytest.fixture
def applicant_mobile() -> str:
    return "9876543210"


@pytest.fixture
def applicant_headers(applicant_mobile) -> dict:
    """OTP session headers for an applicant who verified ``applicant_mobile`` for BOYS"""
    token = get_jwt_manager().create_otp_session_token(
        "verification-id", applicant_mobile, ContactType.PHONE.value, Vertical.BOYS.value
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def leave_types(db_session: Session) -> int:
    return ConfigService(db_session).seed_leave_types()
