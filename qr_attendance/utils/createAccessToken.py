from datetime import timedelta
from typing import Optional

from jose import jwt
from pydantic import EmailStr

from qr_attendance import config
from qr_attendance.utils.clock import utcnow


def create_access_token(
    user_id: int,
    email: EmailStr,
    role: str,
    device_id: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
):
    data_to_encode = {
        "sub": email,
        "user_id": user_id,
        "role": role,
    }
    if device_id is not None:
        data_to_encode["device_id"] = device_id

    expires = utcnow() + (
        expires_delta or timedelta(hours=config.ACCESS_TOKEN_EXPIRE_HOURS)
    )
    data_to_encode.update({"exp": expires})
    return jwt.encode(data_to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)
