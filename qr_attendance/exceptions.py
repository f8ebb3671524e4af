"""Error taxonomy shared by the services and the API boundary.

Services raise these; the handlers registered in ``main.py`` turn them into
``{"error": message}`` responses with the matching status code.
"""

from typing import Optional


class AttendanceError(Exception):
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(AttendanceError):
    default_message = "Invalid request"


class DuplicateError(AttendanceError):
    default_message = "Account already exists"


class AuthError(AttendanceError):
    status_code = 401
    default_message = "Could not validate user"


class PermissionDeniedError(AuthError):
    status_code = 403
    default_message = "Not enough permissions"


class DeviceMismatchError(AuthError):
    # Surfaced distinctly from "not found" so the student can ask for a device change.
    status_code = 404
    default_message = (
        "This device is not registered to your account. "
        "Request a device change to continue."
    )


class NotFoundError(AttendanceError):
    status_code = 404
    default_message = "Not found"


class ExpiredError(AttendanceError):
    default_message = "Invalid or expired OTP"


class InvalidSessionError(ExpiredError):
    default_message = "Invalid or expired QR session"


class ProximityError(AttendanceError):
    def __init__(self, distance: float, max_distance: float):
        self.distance = distance
        self.max_distance = max_distance
        super().__init__(
            f"You are too far from the teacher. Distance: {distance:.1f}m "
            f"(Max: {max_distance:g}m)"
        )

    def to_dict(self) -> dict:
        return {"error": self.message, "distance": round(self.distance, 2)}


class ConflictError(AttendanceError):
    default_message = "Attendance already marked for this session"


class DependencyError(AttendanceError):
    status_code = 503
    default_message = "A required service is unavailable. Please try again."
