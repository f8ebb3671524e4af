from fastapi import APIRouter
from starlette import status

from qr_attendance.api.auth import student_dependency
from qr_attendance.api.dependencies import (
    device_requests_dependency,
    identity_dependency,
    ledger_dependency,
)
from qr_attendance.schemas.attendance import MarkAttendanceRequest
from qr_attendance.schemas.serializers import serialize_device_request
from qr_attendance.schemas.student import DeviceChangeRequestCreate

router = APIRouter(prefix="/student", tags=["student"])


@router.get("/attendance")
def get_my_attendance(user: student_dependency, ledger: ledger_dependency):
    return {"attendance": ledger.student_attendance(user["user_id"])}


@router.post("/mark-attendance")
def mark_attendance(
    body: MarkAttendanceRequest,
    user: student_dependency,
    identity: identity_dependency,
    ledger: ledger_dependency,
):
    """Student endpoint for validating and recording attendance from a scanned QR."""
    identity.require_active_student(user["user_id"], user["device_id"])
    record = ledger.mark_attendance(
        user["user_id"], body.session_id, body.latitude, body.longitude
    )
    return {
        "message": "Attendance marked successfully",
        "distance": round(record.distance_from_teacher, 2),
    }


@router.post("/request-device-change", status_code=status.HTTP_201_CREATED)
def request_device_change(
    body: DeviceChangeRequestCreate,
    user: student_dependency,
    device_requests: device_requests_dependency,
):
    request = device_requests.request_device_change(
        user["user_id"], body.new_device_id, body.reason
    )
    return {
        "message": "Device change request submitted for admin approval",
        "request": serialize_device_request(request),
    }
