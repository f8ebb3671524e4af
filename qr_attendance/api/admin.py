from typing import Optional

from fastapi import APIRouter

from qr_attendance.api.auth import admin_dependency
from qr_attendance.api.dependencies import device_requests_dependency
from qr_attendance.enums import DeviceRequestStatus
from qr_attendance.schemas.admin import ProcessDeviceRequest
from qr_attendance.schemas.serializers import serialize_device_request

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/device-change-requests")
def list_device_change_requests(
    _: admin_dependency,
    device_requests: device_requests_dependency,
    status: Optional[DeviceRequestStatus] = None,
):
    requests = device_requests.list_requests(status)
    return {"requests": [serialize_device_request(r) for r in requests]}


@router.post("/process-device-request/{request_id}")
def process_device_request(
    request_id: int,
    body: ProcessDeviceRequest,
    user: admin_dependency,
    device_requests: device_requests_dependency,
):
    request = device_requests.decide(
        request_id, user["user_id"], body.action == "approve", body.admin_notes
    )
    return {
        "message": f"Device change request {request.status}",
        "request": serialize_device_request(request),
    }
