import pytest

from qr_attendance.exceptions import (
    AuthError,
    DeviceMismatchError,
    DuplicateError,
    ExpiredError,
    NotFoundError,
)
from qr_attendance.models import PendingRegistration, Student

from .conftest import make_student


def profile(n=1, **overrides):
    data = {
        "full_name": f"Student {n}",
        "email": f"student{n}@college.edu",
        "enrollment_number": f"ENR{n:03d}",
        "branch": "CSE",
        "year": "2",
        "device_id": f"device-{n}",
    }
    data.update(overrides)
    return data


def test_registration_promotes_pending_to_verified_student(db, identity, notifier, fixed_now):
    identity.register_student(profile(), now=fixed_now)
    code = notifier.last_code("student1@college.edu")

    student = identity.complete_registration("student1@college.edu", code, now=fixed_now)

    assert student.id is not None
    assert student.is_verified
    assert student.device_id == "device-1"
    assert db.query(PendingRegistration).count() == 0


def test_wrong_registration_code_creates_nothing(db, identity, notifier, fixed_now):
    identity.register_student(profile(), now=fixed_now)
    code = notifier.last_code("student1@college.edu")
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(ExpiredError):
        identity.complete_registration("student1@college.edu", wrong, now=fixed_now)
    assert db.query(Student).count() == 0


def test_device_already_bound_is_duplicate(db, identity, notifier):
    make_student(db, 1, device_id="shared-device")

    with pytest.raises(DuplicateError) as exc_info:
        identity.register_student(profile(2, device_id="shared-device"))
    assert "device" in exc_info.value.message
    assert notifier.sent == []


@pytest.mark.parametrize(
    "overrides",
    [{"email": "student1@college.edu"}, {"enrollment_number": "ENR001"}],
)
def test_email_or_enrollment_already_taken_is_duplicate(db, identity, overrides):
    make_student(db, 1)
    with pytest.raises(DuplicateError):
        identity.register_student(profile(2, **overrides))


def test_device_taken_between_request_and_verification(db, identity, notifier, fixed_now):
    identity.register_student(profile(1, device_id="contested"), now=fixed_now)
    code = notifier.last_code("student1@college.edu")
    make_student(db, 9, device_id="contested")

    with pytest.raises(DuplicateError):
        identity.complete_registration("student1@college.edu", code, now=fixed_now)


def test_login_unknown_email_is_not_found(identity):
    with pytest.raises(NotFoundError) as exc_info:
        identity.authenticate_student_login("ghost@college.edu", "device-1")
    assert not isinstance(exc_info.value, DeviceMismatchError)


def test_login_from_other_device_is_distinct_failure(db, identity, notifier):
    make_student(db, 1)

    with pytest.raises(DeviceMismatchError) as exc_info:
        identity.request_student_login("student1@college.edu", "someone-elses-phone")
    assert "device change" in exc_info.value.message.lower()
    assert notifier.sent == []


def test_inactive_student_cannot_log_in(db, identity):
    make_student(db, 1, is_active=False)
    with pytest.raises(NotFoundError):
        identity.authenticate_student_login("student1@college.edu", "device-1")


def test_student_login_round_trip_stamps_last_login(db, identity, notifier, fixed_now):
    make_student(db, 1)
    identity.request_student_login("student1@college.edu", "device-1", now=fixed_now)
    code = notifier.last_code("student1@college.edu")

    student = identity.verify_student_login(
        "student1@college.edu", code, "device-1", now=fixed_now
    )
    assert student.last_login == fixed_now


def test_teacher_login(seeded, identity, notifier, fixed_now):
    identity.request_teacher_login("anita.rao@college.edu", now=fixed_now)
    code = notifier.last_code("anita.rao@college.edu")

    teacher = identity.verify_teacher_login("anita.rao@college.edu", code, now=fixed_now)
    assert teacher.id == seeded["teacher"].id
    assert teacher.last_login == fixed_now


def test_unknown_teacher_not_found(seeded, identity, notifier):
    with pytest.raises(NotFoundError):
        identity.request_teacher_login("stranger@college.edu")
    assert notifier.sent == []


def test_admin_login(seeded, identity, notifier, fixed_now):
    identity.request_admin_login("admin@college.edu", now=fixed_now)
    code = notifier.last_code("admin@college.edu")
    admin = identity.verify_admin_login("admin@college.edu", code, now=fixed_now)
    assert admin.id == seeded["admin"].id


def test_require_active_student_checks_current_binding(db, identity):
    student = make_student(db, 1)

    assert identity.require_active_student(student.id, "device-1").id == student.id
    with pytest.raises(AuthError):
        identity.require_active_student(student.id, "old-device")
    with pytest.raises(AuthError):
        identity.require_active_student(999, "device-1")
