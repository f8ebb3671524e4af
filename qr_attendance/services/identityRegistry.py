import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qr_attendance.enums import OtpPurpose, Role
from qr_attendance.exceptions import (
    AuthError,
    DeviceMismatchError,
    DuplicateError,
    NotFoundError,
)
from qr_attendance.models import Admin, Student, Teacher
from qr_attendance.services.credentialStore import CredentialStore
from qr_attendance.utils.clock import utcnow

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Student, teacher and admin accounts.

    Students are bound to the single device they registered from; a login from
    any other device is refused before an OTP is ever sent.
    """

    def __init__(self, db: Session, credentials: CredentialStore):
        self.db = db
        self.credentials = credentials

    # ---------------------------- students: registration
    def ensure_student_available(
        self, email: str, enrollment_number: str, device_id: str
    ) -> None:
        existing = (
            self.db.query(Student)
            .filter(
                Student.is_verified.is_(True),
                or_(
                    Student.email == email,
                    Student.enrollment_number == enrollment_number,
                ),
            )
            .first()
        )
        if existing:
            raise DuplicateError(
                "Student with this email or enrollment number already exists"
            )

        if self.device_owner(device_id) is not None:
            raise DuplicateError("This device is already registered with another account")

    def device_owner(self, device_id: str) -> Optional[Student]:
        return self.db.query(Student).filter(Student.device_id == device_id).first()

    def register_student(self, profile: dict, *, now: Optional[datetime] = None) -> datetime:
        """Checks the profile can become an account and emails a registration OTP."""
        self.ensure_student_available(
            profile["email"], profile["enrollment_number"], profile["device_id"]
        )
        return self.credentials.issue(
            profile["email"],
            OtpPurpose.REGISTRATION,
            Role.STUDENT,
            profile=profile,
            now=now,
        )

    def complete_registration(
        self, email: str, otp: str, *, now: Optional[datetime] = None
    ) -> Student:
        pending = self.credentials.verify(
            email, otp, OtpPurpose.REGISTRATION, Role.STUDENT, now=now
        )

        # The pending row is gone at this point; re-check in case someone else
        # took the email, enrollment number or device in the meantime.
        self.ensure_student_available(
            pending.email, pending.enrollment_number, pending.device_id
        )
        student = Student(
            full_name=pending.full_name,
            email=pending.email,
            enrollment_number=pending.enrollment_number,
            branch=pending.branch,
            year=pending.year,
            device_id=pending.device_id,
            is_verified=True,
            created_at=now or utcnow(),
        )
        self.db.add(student)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError("Student with this email, enrollment number or device already exists")
        self.db.refresh(student)

        logger.info(f"Student {student.email} registered (id={student.id})")
        return student

    # ---------------------------- students: login
    def authenticate_student_login(self, email: str, device_id: str) -> Student:
        student = (
            self.db.query(Student)
            .filter(
                Student.email == email,
                Student.is_verified.is_(True),
                Student.is_active.is_(True),
            )
            .first()
        )
        if student is None:
            raise NotFoundError("Student not found. Please register first.")
        if student.device_id != device_id:
            logger.warning(f"Device mismatch on login for student {email}")
            raise DeviceMismatchError()
        return student

    def request_student_login(
        self, email: str, device_id: str, *, now: Optional[datetime] = None
    ) -> datetime:
        self.authenticate_student_login(email, device_id)
        return self.credentials.issue(
            email, OtpPurpose.LOGIN, Role.STUDENT, device_id=device_id, now=now
        )

    def verify_student_login(
        self, email: str, otp: str, device_id: str, *, now: Optional[datetime] = None
    ) -> Student:
        self.credentials.verify(
            email, otp, OtpPurpose.LOGIN, Role.STUDENT, device_id=device_id, now=now
        )
        student = self.authenticate_student_login(email, device_id)
        student.last_login = now or utcnow()
        self.db.commit()
        self.db.refresh(student)
        return student

    def require_active_student(self, student_id: int, device_id: Optional[str]) -> Student:
        """The caller's token must still carry the currently bound device."""
        student = self.db.get(Student, student_id)
        if student is None or not student.is_active:
            raise AuthError("Student account not found or inactive")
        if student.device_id != device_id:
            raise AuthError("Device binding has changed. Please log in again.")
        return student

    # ---------------------------- teachers
    def authenticate_teacher_login(self, email: str) -> Teacher:
        teacher = (
            self.db.query(Teacher)
            .filter(Teacher.email == email, Teacher.is_active.is_(True))
            .first()
        )
        if teacher is None:
            raise NotFoundError("Teacher not found or account is inactive")
        return teacher

    def request_teacher_login(self, email: str, *, now: Optional[datetime] = None) -> datetime:
        self.authenticate_teacher_login(email)
        return self.credentials.issue(email, OtpPurpose.LOGIN, Role.TEACHER, now=now)

    def verify_teacher_login(
        self, email: str, otp: str, *, now: Optional[datetime] = None
    ) -> Teacher:
        self.credentials.verify(email, otp, OtpPurpose.LOGIN, Role.TEACHER, now=now)
        teacher = self.authenticate_teacher_login(email)
        teacher.last_login = now or utcnow()
        self.db.commit()
        self.db.refresh(teacher)
        return teacher

    # ---------------------------- admins
    def authenticate_admin_login(self, email: str) -> Admin:
        admin = (
            self.db.query(Admin)
            .filter(Admin.email == email, Admin.is_active.is_(True))
            .first()
        )
        if admin is None:
            raise NotFoundError("Admin not found or account is inactive")
        return admin

    def request_admin_login(self, email: str, *, now: Optional[datetime] = None) -> datetime:
        self.authenticate_admin_login(email)
        return self.credentials.issue(email, OtpPurpose.LOGIN, Role.ADMIN, now=now)

    def verify_admin_login(self, email: str, otp: str, *, now: Optional[datetime] = None) -> Admin:
        self.credentials.verify(email, otp, OtpPurpose.LOGIN, Role.ADMIN, now=now)
        admin = self.authenticate_admin_login(email)
        admin.last_login = now or utcnow()
        self.db.commit()
        self.db.refresh(admin)
        return admin
