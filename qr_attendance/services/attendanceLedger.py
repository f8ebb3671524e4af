import logging
import math
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qr_attendance import config
from qr_attendance.exceptions import ConflictError
from qr_attendance.models import AttendanceRecord, Student, Subject, Teacher
from qr_attendance.services.sessionManager import SessionManager
from qr_attendance.utils.clock import utcnow
from qr_attendance.utils.geolocation import validate_proximity

logger = logging.getLogger(__name__)

ALREADY_MARKED_MESSAGE = "Attendance already marked for this session"


def summarize_attendance(student_ids, total_classes: int) -> dict:
    """Aggregate stats for a teacher's subject.

    ``student_ids`` holds one entry per valid attendance record.
    Average attendance is records / (students * classes), as a percentage
    rounded half up; 0 when either factor is 0.
    """
    total_attendance = len(student_ids)
    total_students = len(set(student_ids))

    if total_students and total_classes:
        percentage = total_attendance / (total_students * total_classes) * 100
        average_attendance = math.floor(percentage + 0.5)
    else:
        average_attendance = 0

    return {
        "total_students": total_students,
        "total_classes": total_classes,
        "total_attendance": total_attendance,
        "average_attendance": average_attendance,
    }


class AttendanceLedger:
    def __init__(
        self,
        db: Session,
        sessions: SessionManager,
        *,
        max_distance: Optional[float] = None,
    ):
        self.db = db
        self.sessions = sessions
        self.max_distance = config.MAX_DISTANCE_METERS if max_distance is None else max_distance

    def mark_attendance(
        self,
        student_id: int,
        session_id: str,
        latitude: float,
        longitude: float,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or utcnow()
        session = self.sessions.resolve_active(session_id, now=now)

        distance = validate_proximity(
            latitude, longitude, session.latitude, session.longitude, self.max_distance
        )
        logger.info(
            f"Student {student_id} is {distance:.2f}m from anchor of {session.session_id}"
        )

        existing = (
            self.db.query(AttendanceRecord.id)
            .filter(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.qr_session_id == session.id,
            )
            .first()
        )
        if existing:
            raise ConflictError(ALREADY_MARKED_MESSAGE)

        record = AttendanceRecord(
            student_id=student_id,
            teacher_id=session.teacher_id,
            subject_id=session.subject_id,
            qr_session_id=session.id,
            student_latitude=latitude,
            student_longitude=longitude,
            distance_from_teacher=distance,
            is_valid=True,
            marked_at=now,
        )
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost the race against a concurrent scan for the same session.
            self.db.rollback()
            raise ConflictError(ALREADY_MARKED_MESSAGE)
        self.db.refresh(record)
        return record

    def student_attendance(self, student_id: int):
        rows = (
            self.db.query(
                AttendanceRecord,
                Subject.subject_name,
                Subject.subject_code,
                Teacher.full_name,
            )
            .join(Subject, AttendanceRecord.subject_id == Subject.id)
            .join(Teacher, AttendanceRecord.teacher_id == Teacher.id)
            .filter(
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.is_valid.is_(True),
            )
            .order_by(AttendanceRecord.marked_at.desc())
            .all()
        )
        return [
            {
                "id": record.id,
                "subject_id": record.subject_id,
                "subject_name": subject_name,
                "subject_code": subject_code,
                "teacher_name": teacher_name,
                "marked_at": record.marked_at,
                "attendance_date": record.marked_at.date(),
                "distance_from_teacher": record.distance_from_teacher,
            }
            for record, subject_name, subject_code, teacher_name in rows
        ]

    def attendance_report(self, teacher_id: int, subject_id: int) -> dict:
        subject = self.sessions.assigned_subject(teacher_id, subject_id, action="view")
        total_classes = self.sessions.total_sessions(teacher_id, subject_id)

        rows = (
            self.db.query(AttendanceRecord, Student)
            .join(Student, AttendanceRecord.student_id == Student.id)
            .filter(
                AttendanceRecord.subject_id == subject_id,
                AttendanceRecord.teacher_id == teacher_id,
                AttendanceRecord.is_valid.is_(True),
            )
            .order_by(AttendanceRecord.marked_at.desc())
            .all()
        )
        attendance = [
            {
                "id": record.id,
                "student_id": student.id,
                "full_name": student.full_name,
                "enrollment_number": student.enrollment_number,
                "email": student.email,
                "session_id": record.qr_session_id,
                "marked_at": record.marked_at,
                "distance_from_teacher": record.distance_from_teacher,
                "subject_name": subject.subject_name,
                "subject_code": subject.subject_code,
            }
            for record, student in rows
        ]
        stats = summarize_attendance([row["student_id"] for row in attendance], total_classes)
        logger.info(f"Report for teacher {teacher_id} subject {subject_id}: {stats}")

        return {"attendance": attendance, "stats": stats, "subject": subject}
