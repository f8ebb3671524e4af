from jose import JWTError, jwt

from qr_attendance import config
from qr_attendance.exceptions import AuthError


def decode_token(token: str):
    """Bad signature, expiry and malformed claims all fail the same way."""
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise AuthError("Invalid or expired token")

    email = payload.get("sub")
    user_id = payload.get("user_id")
    role = payload.get("role")

    if not all([email, user_id, role]):
        raise AuthError("Invalid or expired token")

    return {
        "email": email,
        "user_id": user_id,
        "role": role,
        "device_id": payload.get("device_id"),
    }
