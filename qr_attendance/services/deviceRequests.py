import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from qr_attendance.enums import DeviceRequestStatus
from qr_attendance.exceptions import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)
from qr_attendance.models import DeviceChangeRequest, Student
from qr_attendance.utils.clock import utcnow

logger = logging.getLogger(__name__)


class DeviceRequestService:
    """Student requests to rebind their account to a new device.

    Requests are only ever decided by an administrator; nothing here lets a
    student approve their own request.
    """

    def __init__(self, db: Session):
        self.db = db

    def request_device_change(
        self,
        student_id: int,
        new_device_id: str,
        reason: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> DeviceChangeRequest:
        student = self.db.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student not found")

        new_device_id = (new_device_id or "").strip()
        if not new_device_id:
            raise ValidationError("New device ID is required")
        if new_device_id == student.device_id:
            raise ValidationError("This device is already bound to your account")

        pending = (
            self.db.query(DeviceChangeRequest)
            .filter(
                DeviceChangeRequest.student_id == student_id,
                DeviceChangeRequest.status == DeviceRequestStatus.PENDING.value,
            )
            .first()
        )
        if pending:
            raise ConflictError("You already have a pending device change request")

        self._ensure_device_free(new_device_id, student_id)

        request = DeviceChangeRequest(
            student_id=student_id,
            current_device_id=student.device_id,
            new_device_id=new_device_id,
            reason=reason,
            status=DeviceRequestStatus.PENDING.value,
            created_at=now or utcnow(),
        )
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"Device change request {request.id} created for student {student_id}")
        return request

    def list_requests(self, status: Optional[DeviceRequestStatus] = None):
        query = self.db.query(DeviceChangeRequest)
        if status is not None:
            query = query.filter(DeviceChangeRequest.status == status.value)
        return query.order_by(DeviceChangeRequest.created_at.desc()).all()

    def decide(
        self,
        request_id: int,
        admin_id: int,
        approve: bool,
        admin_notes: Optional[str] = None,
        *,
        now: Optional[datetime] = None,
    ) -> DeviceChangeRequest:
        request = self.db.get(DeviceChangeRequest, request_id)
        if request is None:
            raise NotFoundError("Device change request not found")
        if request.status != DeviceRequestStatus.PENDING.value:
            raise ConflictError(f"Request has already been {request.status}")

        if approve:
            self._ensure_device_free(request.new_device_id, request.student_id)
            student = self.db.get(Student, request.student_id)
            student.device_id = request.new_device_id
            request.status = DeviceRequestStatus.APPROVED.value
        else:
            request.status = DeviceRequestStatus.REJECTED.value

        request.admin_id = admin_id
        request.admin_notes = admin_notes
        request.decided_at = now or utcnow()
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError("This device is already registered with another account")
        self.db.refresh(request)

        logger.info(f"Device change request {request.id} {request.status} by admin {admin_id}")
        return request

    def _ensure_device_free(self, device_id: str, student_id: int):
        owner = self.db.query(Student).filter(Student.device_id == device_id).first()
        if owner is not None and owner.id != student_id:
            raise DuplicateError("This device is already registered with another account")
