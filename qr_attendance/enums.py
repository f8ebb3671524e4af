from enum import Enum


class Role(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class OtpPurpose(str, Enum):
    REGISTRATION = "registration"
    LOGIN = "login"


class SessionState(str, Enum):
    """Lifecycle of a QR session. EXPIRED and SUPERSEDED are terminal."""

    ACTIVE = "active"
    EXPIRED = "expired"
    SUPERSEDED = "superseded"


class DeviceRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
