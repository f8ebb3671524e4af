from qr_attendance.services.attendanceLedger import AttendanceLedger, summarize_attendance
from qr_attendance.services.credentialStore import CredentialStore
from qr_attendance.services.deviceRequests import DeviceRequestService
from qr_attendance.services.identityRegistry import IdentityRegistry
from qr_attendance.services.sessionManager import SessionManager

__all__ = [
    "AttendanceLedger",
    "CredentialStore",
    "DeviceRequestService",
    "IdentityRegistry",
    "SessionManager",
    "summarize_attendance",
]
