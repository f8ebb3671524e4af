import pytest

from qr_attendance.enums import DeviceRequestStatus
from qr_attendance.exceptions import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    ValidationError,
)

from .conftest import make_student


def test_request_is_created_pending(db, device_requests):
    student = make_student(db, 1)

    request = device_requests.request_device_change(student.id, "new-phone", "Lost my phone")

    assert request.status == DeviceRequestStatus.PENDING.value
    assert request.current_device_id == "device-1"
    db.refresh(student)
    assert student.device_id == "device-1"


def test_same_device_rejected(db, device_requests):
    student = make_student(db, 1)
    with pytest.raises(ValidationError):
        device_requests.request_device_change(student.id, "device-1")


def test_only_one_pending_request(db, device_requests):
    student = make_student(db, 1)
    device_requests.request_device_change(student.id, "new-phone")
    with pytest.raises(ConflictError):
        device_requests.request_device_change(student.id, "newer-phone")


def test_device_bound_elsewhere_rejected(db, device_requests):
    student = make_student(db, 1)
    make_student(db, 2, device_id="taken")
    with pytest.raises(DuplicateError):
        device_requests.request_device_change(student.id, "taken")


def test_approval_rebinds_device(db, seeded, device_requests):
    student = make_student(db, 1)
    request = device_requests.request_device_change(student.id, "new-phone")

    decided = device_requests.decide(request.id, seeded["admin"].id, approve=True, admin_notes="ok")

    assert decided.status == DeviceRequestStatus.APPROVED.value
    assert decided.admin_id == seeded["admin"].id
    assert decided.decided_at is not None
    db.refresh(student)
    assert student.device_id == "new-phone"


def test_rejection_keeps_device(db, seeded, device_requests):
    student = make_student(db, 1)
    request = device_requests.request_device_change(student.id, "new-phone")

    device_requests.decide(request.id, seeded["admin"].id, approve=False)

    db.refresh(student)
    assert student.device_id == "device-1"


def test_request_decided_once(db, seeded, device_requests):
    student = make_student(db, 1)
    request = device_requests.request_device_change(student.id, "new-phone")
    device_requests.decide(request.id, seeded["admin"].id, approve=False)

    with pytest.raises(ConflictError):
        device_requests.decide(request.id, seeded["admin"].id, approve=True)


def test_approval_rechecks_device_owner(db, seeded, device_requests):
    student = make_student(db, 1)
    request = device_requests.request_device_change(student.id, "new-phone")
    make_student(db, 2, device_id="new-phone")

    with pytest.raises(DuplicateError):
        device_requests.decide(request.id, seeded["admin"].id, approve=True)


def test_unknown_request(seeded, device_requests):
    with pytest.raises(NotFoundError):
        device_requests.decide(42, seeded["admin"].id, approve=True)


def test_listing_filters_by_status(db, seeded, device_requests):
    first = make_student(db, 1)
    second = make_student(db, 2)
    decided = device_requests.request_device_change(first.id, "phone-a")
    device_requests.request_device_change(second.id, "phone-b")
    device_requests.decide(decided.id, seeded["admin"].id, approve=False)

    assert len(device_requests.list_requests()) == 2
    pending = device_requests.list_requests(DeviceRequestStatus.PENDING)
    assert [r.new_device_id for r in pending] == ["phone-b"]
