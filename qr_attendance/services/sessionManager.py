import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from qr_attendance import config
from qr_attendance.enums import SessionState
from qr_attendance.exceptions import InvalidSessionError, PermissionDeniedError
from qr_attendance.models import AttendanceRecord, QrSession, Subject, TeacherSubject
from qr_attendance.utils.clock import utcnow
from qr_attendance.utils.geolocation import validate_coordinates

logger = logging.getLogger(__name__)


def generate_session_id() -> str:
    # 128 random bits; the QR payload is effectively a bearer credential.
    return f"session_{secrets.token_urlsafe(16)}"


class SessionManager:
    """QR attendance sessions.

    A session is ACTIVE until its expiry passes (EXPIRED) or a newer session
    for the same teacher and subject replaces it (SUPERSEDED). Expiry is read
    lazily from ``expires_at``; the stored flag only records supersession.
    """

    def __init__(self, db: Session, *, ttl: Optional[timedelta] = None):
        self.db = db
        self.ttl = ttl or timedelta(minutes=config.SESSION_TTL_MINUTES)

    def assigned_subjects(self, teacher_id: int):
        return (
            self.db.query(Subject)
            .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
            .filter(TeacherSubject.teacher_id == teacher_id)
            .order_by(Subject.subject_name)
            .all()
        )

    def assigned_subject(self, teacher_id: int, subject_id: int, *, action: str = "take attendance for") -> Subject:
        subject = (
            self.db.query(Subject)
            .join(TeacherSubject, TeacherSubject.subject_id == Subject.id)
            .filter(TeacherSubject.teacher_id == teacher_id, Subject.id == subject_id)
            .first()
        )
        if subject is None:
            raise PermissionDeniedError(f"You are not authorized to {action} this subject")
        return subject

    def create_session(
        self,
        teacher_id: int,
        subject_id: int,
        latitude: float,
        longitude: float,
        *,
        now: Optional[datetime] = None,
    ) -> QrSession:
        validate_coordinates(latitude, longitude)
        self.assigned_subject(teacher_id, subject_id)
        now = now or utcnow()

        # Concurrent creations are last-write-wins: whichever commits last
        # stays active and the other is orphaned.
        superseded = self.db.execute(
            update(QrSession)
            .where(
                QrSession.teacher_id == teacher_id,
                QrSession.subject_id == subject_id,
                QrSession.is_active.is_(True),
            )
            .values(is_active=False)
        ).rowcount

        session = QrSession(
            session_id=generate_session_id(),
            teacher_id=teacher_id,
            subject_id=subject_id,
            latitude=latitude,
            longitude=longitude,
            created_at=now,
            expires_at=now + self.ttl,
            is_active=True,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(
            f"Teacher {teacher_id} opened session {session.session_id} for subject "
            f"{subject_id} (superseded {superseded})"
        )
        return session

    def list_active_sessions(self, teacher_id: int, *, now: Optional[datetime] = None):
        now = now or utcnow()
        rows = (
            self.db.query(
                QrSession,
                Subject.subject_name,
                Subject.subject_code,
                func.count(AttendanceRecord.id).label("student_count"),
            )
            .join(Subject, QrSession.subject_id == Subject.id)
            .outerjoin(AttendanceRecord, AttendanceRecord.qr_session_id == QrSession.id)
            .filter(
                QrSession.teacher_id == teacher_id,
                QrSession.is_active.is_(True),
                QrSession.expires_at > now,
            )
            .group_by(QrSession.id, Subject.subject_name, Subject.subject_code)
            .order_by(QrSession.created_at.desc())
            .all()
        )
        return [
            {
                "id": session.id,
                "session_id": session.session_id,
                "subject_id": session.subject_id,
                "subject_name": subject_name,
                "subject_code": subject_code,
                "created_at": session.created_at,
                "expires_at": session.expires_at,
                "student_count": student_count,
            }
            for session, subject_name, subject_code, student_count in rows
        ]

    @staticmethod
    def state_of(session: QrSession, now: Optional[datetime] = None) -> SessionState:
        now = now or utcnow()
        if session.expires_at <= now:
            return SessionState.EXPIRED
        if not session.is_active:
            return SessionState.SUPERSEDED
        return SessionState.ACTIVE

    def resolve_active(self, session_id: str, *, now: Optional[datetime] = None) -> QrSession:
        session = (
            self.db.query(QrSession).filter(QrSession.session_id == session_id).first()
        )
        if session is None or self.state_of(session, now) != SessionState.ACTIVE:
            raise InvalidSessionError()
        return session

    def total_sessions(self, teacher_id: int, subject_id: int) -> int:
        return (
            self.db.query(func.count(QrSession.id))
            .filter(QrSession.teacher_id == teacher_id, QrSession.subject_id == subject_id)
            .scalar()
        )

    def expire_stale(self, now: Optional[datetime] = None) -> int:
        """Clears the active flag on sessions past expiry. Reads never rely on this."""
        now = now or utcnow()
        count = self.db.execute(
            update(QrSession)
            .where(QrSession.is_active.is_(True), QrSession.expires_at <= now)
            .values(is_active=False)
        ).rowcount
        self.db.commit()
        return count
