from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from qr_attendance.database.session import Base
from qr_attendance.utils.clock import utcnow


class PendingRegistration(Base):
    """Profile submitted at registration, held until the emailed OTP is verified."""

    __tablename__ = "pending_registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(120), unique=True, nullable=False)
    full_name = Column(String(120), nullable=False)
    enrollment_number = Column(String(50), nullable=False)
    branch = Column(String(60), nullable=False)
    year = Column(String(10), nullable=False)
    device_id = Column(String(255), nullable=False)
    otp_hash = Column(String(255), nullable=False)
    otp_expiry = Column(DateTime, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class LoginOtp(Base):
    __tablename__ = "login_otps"
    __table_args__ = (UniqueConstraint("email", "user_type", name="uq_login_otp_email_type"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(120), nullable=False)
    user_type = Column(String(15), nullable=False)
    # only set for student logins
    device_id = Column(String(255))
    otp_hash = Column(String(255), nullable=False)
    otp_expiry = Column(DateTime, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
