import os

# Ensure JWT_SECRET exists before importing app.main (it calls require_jwt_secret() at import time).
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
# app.core.database builds its engine at import time; never point it at a real server in tests.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")


from datetime import date

import pytest
from botocore.exceptions import ClientError
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import importlib

from app.core.base import Base
from app.core import config as app_config
from app.core.security import create_access_token, hash_password

# Import models so they register with SQLAlchemy metadata.
from app.models.user import User, UserRole
from app.models.job import Job, JobStatus
from app.models.application import Application, ApplicationStatus
from app.models.application_note import ApplicationNote  # noqa: F401
from app.models.action_log import ActionLog  # noqa: F401

from app.core.database import get_db


@pytest.fixture(scope="session")
def db_engine():
    # In-memory SQLite for fast, isolated tests.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def db_session(db_engine):
    # Important: because we use an in-memory SQLite DB with StaticPool, the DB
    # persists across tests. Reset schema per test to avoid cross-test coupling.
    Base.metadata.drop_all(bind=db_engine)
    Base.metadata.create_all(bind=db_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client used by app.services.storage."""

    def __init__(self):
        self.objects: dict[str, dict] = {}
        self.deleted: list[str] = []
        self.fail_put_content_types: set[str] = set()
        self.fail_presign = False

    def put_object(self, Bucket, Key, Body, ContentType):  # noqa: N803
        if ContentType in self.fail_put_content_types:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject")
        self.objects[Key] = {"Bucket": Bucket, "Body": Body, "ContentType": ContentType}
        return {"ETag": '"fake"'}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):  # noqa: N803
        if self.fail_presign:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "boom"}}, "GeneratePresignedUrl")
        key = Params.get("Key", "")
        return f"https://example.invalid/presigned/{ClientMethod}?key={key}"

    def delete_object(self, Bucket, Key):  # noqa: N803
        self.objects.pop(Key, None)
        self.deleted.append(Key)
        return {"ok": True}


@pytest.fixture()
def pdf_bytes() -> bytes:
    return b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


@pytest.fixture()
def fake_s3():
    return FakeS3Client()


@pytest.fixture(autouse=True)
def _stub_s3(monkeypatch, fake_s3):
    """
    Stub the S3 client used by app.services.storage so tests never require AWS creds/network.
    """
    from app.services import storage as storage_service

    monkeypatch.setattr(storage_service, "_client", lambda: fake_s3)
    app_config.settings.S3_BUCKET_NAME = app_config.settings.S3_BUCKET_NAME or "test-bucket"
    app_config.settings.AWS_REGION = app_config.settings.AWS_REGION or "us-east-1"


@pytest.fixture(autouse=True)
def _reset_mutable_settings():
    """
    Tests sometimes tweak global settings (app_config.settings.*). Because that object is
    process-global, we must restore values after each test to avoid cross-test coupling.
    """
    keys = [
        "MAX_RESUME_BYTES",
        "RESUME_PREVIEW_ENABLED",
        "ENABLE_RATE_LIMITING",
        "PASSWORD_MIN_LENGTH",
        "S3_PREFIX",
    ]
    original = {k: getattr(app_config.settings, k) for k in keys}
    # Preview rendering is exercised explicitly in test_storage.py.
    app_config.settings.RESUME_PREVIEW_ENABLED = False
    try:
        yield
    finally:
        for k, v in original.items():
            setattr(app_config.settings, k, v)
        # Default all tests to "rate limiting disabled" unless a test explicitly reloads routes with it enabled.
        app_config.settings.ENABLE_RATE_LIMITING = False


@pytest.fixture()
def app(db_session):
    # Ensure settings has a JWT secret even if imported earlier.
    app_config.settings.JWT_SECRET = app_config.settings.JWT_SECRET or "test_jwt_secret"
    # Default to disabled for the general test suite.
    app_config.settings.ENABLE_RATE_LIMITING = False

    # IMPORTANT:
    # SlowAPI decorators bind at import time, so we reload the routes + app with rate limiting disabled
    # to avoid cross-test contamination (the rate limiting test reloads modules with it enabled).
    import app.routes.applications as applications_routes
    import app.main as main

    importlib.reload(applications_routes)
    importlib.reload(main)
    fastapi_app = main.app

    def override_get_db():
        yield db_session
    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def _make_user(db_session, *, email: str, name: str | None, role: UserRole, **profile) -> User:
    user = User(
        email=email,
        name=name,
        password_hash=hash_password("test_password_123"),
        role=role.value,
        is_active=True,
        **profile,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def users(db_session):
    """
    An admin reviewer and two distinct applicants.
    """
    admin = _make_user(db_session, email="hr@example.com", name="HR Reviewer", role=UserRole.ADMIN)
    applicant = _make_user(
        db_session,
        email="jane@example.com",
        name="Jane Candidate",
        role=UserRole.APPLICANT,
        phone="555-0100",
        location="Lisbon",
        experience="5 years",
        cover_letter="I would love to join.",
        previous_role="Backend Engineer",
        current_company="Initech",
        expected_salary="90k EUR",
        availability_date=date(2026, 12, 1),
    )
    other = _make_user(db_session, email="sam@example.com", name=None, role=UserRole.APPLICANT)
    return admin, applicant, other


@pytest.fixture()
def admin(users):
    return users[0]


@pytest.fixture()
def applicant(users):
    return users[1]


@pytest.fixture()
def make_job(db_session, admin):
    def _make_job(**overrides) -> Job:
        data = {
            "title": "Platform Engineer",
            "department": "Engineering",
            "location": "Remote",
            "description": "Build and run the platform.",
            "custom_fields": [
                {"id": "q1", "question": "Why do you want this role?"},
                {"id": "q2", "question": "Earliest start date?"},
            ],
            "status": JobStatus.ACTIVE.value,
            "created_by": admin.id,
        }
        data.update(overrides)
        job = Job(**data)
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make_job


@pytest.fixture()
def job(make_job):
    return make_job()


@pytest.fixture()
def make_application(db_session):
    def _make_application(job: Job, user: User, **overrides) -> Application:
        data = {
            "job_id": job.id,
            "user_id": user.id,
            "status": ApplicationStatus.PENDING.value,
            "answers": {"q1": "Because of the mission."},
        }
        data.update(overrides)
        application = Application(**data)
        db_session.add(application)
        db_session.commit()
        db_session.refresh(application)
        return application

    return _make_application


@pytest.fixture()
def client(app):
    """
    Unauthenticated client; pass auth_headers(user) to act as someone.
    """
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        token = create_access_token(subject=user.email, role=str(user.role))
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture()
def as_admin(auth_headers, admin):
    return auth_headers(admin)


@pytest.fixture()
def as_applicant(auth_headers, applicant):
    return auth_headers(applicant)
