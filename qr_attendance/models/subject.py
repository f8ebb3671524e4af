from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from qr_attendance.database.session import Base


class Subject(Base):
    """Reference data, managed by administrators."""

    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject_name = Column(String(120), nullable=False)
    subject_code = Column(String(20), unique=True, nullable=False)
    department = Column(String(100))
    semester = Column(Integer)
    credits = Column(Integer)

    teachers = relationship("Teacher", secondary="teacher_subjects", back_populates="subjects")


class TeacherSubject(Base):
    __tablename__ = "teacher_subjects"
    __table_args__ = (UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Integer, ForeignKey("teachers.id"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), nullable=False)
