from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from qr_attendance.database.session import Base
from qr_attendance.utils.clock import utcnow


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, autoincrement=True, primary_key=True)
    full_name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=False)
    enrollment_number = Column(String(50), unique=True, nullable=False)
    branch = Column(String(60), nullable=False)
    year = Column(String(10), nullable=False)
    # one device per student, never shared
    device_id = Column(String(255), unique=True, nullable=False)
    is_verified = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login = Column(DateTime)

    attendances = relationship("AttendanceRecord", back_populates="student")
    device_requests = relationship("DeviceChangeRequest", back_populates="student")


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, autoincrement=True, primary_key=True)
    full_name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=False)
    department = Column(String(100))
    employee_id = Column(String(50), unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login = Column(DateTime)

    subjects = relationship("Subject", secondary="teacher_subjects", back_populates="teachers")
    sessions = relationship("QrSession", back_populates="teacher")


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, autoincrement=True, primary_key=True)
    full_name = Column(String(120), nullable=False)
    email = Column(String(120), unique=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_login = Column(DateTime)
