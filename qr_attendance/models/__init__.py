from qr_attendance.models.account import Admin, Student, Teacher
from qr_attendance.models.attendanceRecord import AttendanceRecord
from qr_attendance.models.deviceChangeRequest import DeviceChangeRequest
from qr_attendance.models.otp import LoginOtp, PendingRegistration
from qr_attendance.models.qrSession import QrSession
from qr_attendance.models.subject import Subject, TeacherSubject

__all__ = [
    "Admin",
    "AttendanceRecord",
    "DeviceChangeRequest",
    "LoginOtp",
    "PendingRegistration",
    "QrSession",
    "Student",
    "Subject",
    "Teacher",
    "TeacherSubject",
]
