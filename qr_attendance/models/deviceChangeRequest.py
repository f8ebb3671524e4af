from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from qr_attendance.database.session import Base
from qr_attendance.utils.clock import utcnow


class DeviceChangeRequest(Base):
    __tablename__ = "device_change_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    current_device_id = Column(String(255), nullable=False)
    new_device_id = Column(String(255), nullable=False)
    reason = Column(Text)
    status = Column(String(15), default="pending", nullable=False)
    admin_id = Column(Integer, ForeignKey("admins.id"))
    admin_notes = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    decided_at = Column(DateTime)

    student = relationship("Student", back_populates="device_requests")
