from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from qr_attendance.database.session import Base
from qr_attendance.utils.clock import utcnow


class AttendanceRecord(Base):
    __tablename__ = "attendance"
    # one record per student per session; concurrent duplicates fail here
    __table_args__ = (
        UniqueConstraint("student_id", "qr_session_id", name="uq_attendance_student_session"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
    qr_session_id = Column(Integer, ForeignKey("qr_sessions.id"), nullable=False)
    student_latitude = Column(Float, nullable=False)
    student_longitude = Column(Float, nullable=False)
    distance_from_teacher = Column(Float, nullable=False)
    is_valid = Column(Boolean, default=True, nullable=False)
    marked_at = Column(DateTime, default=utcnow, nullable=False)

    student = relationship("Student", back_populates="attendances")
    session = relationship("QrSession", back_populates="attendances")
    subject = relationship("Subject")
    teacher = relationship("Teacher")
