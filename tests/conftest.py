import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DB_URL_STRING", "sqlite://")
os.environ["ENABLE_SCHEDULER"] = "false"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from qr_attendance.database.session import Base, get_db
from qr_attendance.exceptions import DependencyError
from qr_attendance.main import app
from qr_attendance.models import Admin, Student, Subject, Teacher, TeacherSubject
from qr_attendance.services import (
    AttendanceLedger,
    CredentialStore,
    DeviceRequestService,
    IdentityRegistry,
    SessionManager,
)
from qr_attendance.utils.notifier import get_notifier

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CLASSROOM = (12.9716, 77.5946)


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def send_otp(self, email, otp, user_type):
        self.sent.append((email, otp, user_type))

    def last_code(self, email):
        for sent_email, otp, _ in reversed(self.sent):
            if sent_email == email:
                return otp
        raise AssertionError(f"no OTP sent to {email}")


class FailingNotifier:
    def send_otp(self, email, otp, user_type):
        raise DependencyError("Failed to send OTP email. Please try again later.")


@pytest.fixture
def fixed_now():
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def credentials(db, notifier):
    return CredentialStore(db, notifier)


@pytest.fixture
def identity(db, credentials):
    return IdentityRegistry(db, credentials)


@pytest.fixture
def sessions(db):
    return SessionManager(db)


@pytest.fixture
def ledger(db, sessions):
    return AttendanceLedger(db, sessions)


@pytest.fixture
def device_requests(db):
    return DeviceRequestService(db)


def make_student(db, n=1, device_id=None, **overrides):
    student = Student(
        full_name=f"Student {n}",
        email=f"student{n}@college.edu",
        enrollment_number=f"ENR{n:03d}",
        branch="CSE",
        year="2",
        device_id=device_id or f"device-{n}",
        **overrides,
    )
    db.add(student)
    db.commit()
    db.refresh(student)
    return student


@pytest.fixture
def seeded(db):
    """One teacher assigned to one subject, a second unassigned subject, an admin."""
    teacher = Teacher(
        full_name="Dr. Anita Rao",
        email="anita.rao@college.edu",
        department="Computer Science",
        employee_id="EMP001",
    )
    other_teacher = Teacher(
        full_name="Prof. Vikram Shah",
        email="vikram.shah@college.edu",
        department="Electronics",
        employee_id="EMP002",
    )
    subject = Subject(
        subject_name="Data Structures",
        subject_code="CS201",
        department="Computer Science",
        semester=3,
        credits=4,
    )
    other_subject = Subject(
        subject_name="Digital Electronics",
        subject_code="EC202",
        department="Electronics",
        semester=3,
        credits=3,
    )
    admin = Admin(full_name="System Admin", email="admin@college.edu")
    db.add_all([teacher, other_teacher, subject, other_subject, admin])
    db.flush()
    db.add(TeacherSubject(teacher_id=teacher.id, subject_id=subject.id))
    db.add(TeacherSubject(teacher_id=other_teacher.id, subject_id=other_subject.id))
    db.commit()
    return {
        "teacher": teacher,
        "other_teacher": other_teacher,
        "subject": subject,
        "other_subject": other_subject,
        "admin": admin,
    }


@pytest.fixture
def client(db, notifier):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
