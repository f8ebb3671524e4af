from datetime import timedelta

import pytest

from qr_attendance.enums import SessionState
from qr_attendance.exceptions import InvalidSessionError, PermissionDeniedError, ValidationError
from qr_attendance.models import AttendanceRecord, QrSession

from .conftest import CLASSROOM, make_student


def test_unassigned_teacher_cannot_open_session(db, seeded, sessions):
    with pytest.raises(PermissionDeniedError):
        sessions.create_session(seeded["teacher"].id, seeded["other_subject"].id, *CLASSROOM)
    assert db.query(QrSession).count() == 0


def test_new_session_has_ten_minute_window_and_anchor(seeded, sessions, fixed_now):
    session = sessions.create_session(
        seeded["teacher"].id, seeded["subject"].id, *CLASSROOM, now=fixed_now
    )
    assert session.is_active
    assert session.expires_at == fixed_now + timedelta(minutes=10)
    assert (session.latitude, session.longitude) == CLASSROOM
    assert session.session_id.startswith("session_")


def test_session_ids_are_unique(seeded, sessions):
    ids = {
        sessions.create_session(seeded["teacher"].id, seeded["subject"].id, *CLASSROOM).session_id
        for _ in range(20)
    }
    assert len(ids) == 20


def test_second_session_supersedes_first(db, seeded, sessions, fixed_now):
    teacher_id, subject_id = seeded["teacher"].id, seeded["subject"].id
    first = sessions.create_session(teacher_id, subject_id, *CLASSROOM, now=fixed_now)
    second = sessions.create_session(
        teacher_id, subject_id, *CLASSROOM, now=fixed_now + timedelta(minutes=1)
    )
    db.refresh(first)

    assert not first.is_active
    assert sessions.state_of(first, fixed_now + timedelta(minutes=2)) == SessionState.SUPERSEDED
    with pytest.raises(InvalidSessionError):
        sessions.resolve_active(first.session_id, now=fixed_now + timedelta(minutes=2))
    assert sessions.resolve_active(second.session_id, now=fixed_now + timedelta(minutes=2)).id == second.id


def test_sessions_for_other_pairs_are_untouched(db, seeded, sessions, fixed_now):
    mine = sessions.create_session(
        seeded["teacher"].id, seeded["subject"].id, *CLASSROOM, now=fixed_now
    )
    sessions.create_session(
        seeded["other_teacher"].id, seeded["other_subject"].id, *CLASSROOM, now=fixed_now
    )
    db.refresh(mine)
    assert mine.is_active


def test_expiry_is_enforced_lazily(seeded, sessions, fixed_now):
    session = sessions.create_session(
        seeded["teacher"].id, seeded["subject"].id, *CLASSROOM, now=fixed_now
    )
    expiry = fixed_now + timedelta(minutes=10)

    assert session.is_active
    assert sessions.state_of(session, expiry) == SessionState.EXPIRED
    with pytest.raises(InvalidSessionError):
        sessions.resolve_active(session.session_id, now=expiry)


def test_unknown_session_is_invalid(sessions):
    with pytest.raises(InvalidSessionError):
        sessions.resolve_active("session_does_not_exist")


def test_invalid_anchor_rejected(seeded, sessions):
    with pytest.raises(ValidationError):
        sessions.create_session(seeded["teacher"].id, seeded["subject"].id, 123.0, 77.0)


def test_active_sessions_listing_counts_students(db, seeded, sessions, fixed_now):
    teacher_id, subject_id = seeded["teacher"].id, seeded["subject"].id
    session = sessions.create_session(teacher_id, subject_id, *CLASSROOM, now=fixed_now)
    for n in (1, 2):
        student = make_student(db, n)
        db.add(
            AttendanceRecord(
                student_id=student.id,
                teacher_id=teacher_id,
                subject_id=subject_id,
                qr_session_id=session.id,
                student_latitude=CLASSROOM[0],
                student_longitude=CLASSROOM[1],
                distance_from_teacher=1.0,
            )
        )
    db.commit()

    listed = sessions.list_active_sessions(teacher_id, now=fixed_now + timedelta(minutes=5))
    assert len(listed) == 1
    assert listed[0]["session_id"] == session.session_id
    assert listed[0]["student_count"] == 2
    assert listed[0]["subject_code"] == "CS201"

    assert sessions.list_active_sessions(teacher_id, now=fixed_now + timedelta(minutes=11)) == []


def test_expire_stale_flips_flag(db, seeded, sessions, fixed_now):
    session = sessions.create_session(
        seeded["teacher"].id, seeded["subject"].id, *CLASSROOM, now=fixed_now
    )
    assert sessions.expire_stale(now=fixed_now + timedelta(minutes=5)) == 0
    assert sessions.expire_stale(now=fixed_now + timedelta(minutes=10)) == 1
    db.refresh(session)
    assert not session.is_active


def test_total_sessions_counts_superseded(seeded, sessions):
    for _ in range(3):
        sessions.create_session(seeded["teacher"].id, seeded["subject"].id, *CLASSROOM)
    assert sessions.total_sessions(seeded["teacher"].id, seeded["subject"].id) == 3
