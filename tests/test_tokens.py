from datetime import timedelta

import pytest
from jose import jwt

from qr_attendance import config
from qr_attendance.exceptions import AuthError
from qr_attendance.utils import create_access_token, decode_token


def test_student_token_round_trip_carries_device():
    token = create_access_token(7, "s@college.edu", "student", device_id="dev-7")
    user = decode_token(token)
    assert user == {
        "email": "s@college.edu",
        "user_id": 7,
        "role": "student",
        "device_id": "dev-7",
    }


def test_teacher_token_has_no_device():
    user = decode_token(create_access_token(3, "t@college.edu", "teacher"))
    assert user["role"] == "teacher"
    assert user["device_id"] is None


def test_expired_token_rejected():
    token = create_access_token(1, "s@college.edu", "student", expires_delta=timedelta(seconds=-5))
    with pytest.raises(AuthError):
        decode_token(token)


def test_wrong_signature_rejected():
    token = jwt.encode(
        {"sub": "s@college.edu", "user_id": 1, "role": "teacher"},
        "not-the-secret",
        algorithm=config.ALGORITHM,
    )
    with pytest.raises(AuthError):
        decode_token(token)


def test_missing_claims_rejected():
    token = jwt.encode({"sub": "s@college.edu"}, config.SECRET_KEY, algorithm=config.ALGORITHM)
    with pytest.raises(AuthError):
        decode_token(token)


def test_garbage_rejected():
    with pytest.raises(AuthError):
        decode_token("not.a.jwt")
