from qr_attendance.utils.clock import utcnow
from qr_attendance.utils.createAccessToken import create_access_token
from qr_attendance.utils.decodeAccessToken import decode_token
from qr_attendance.utils.geolocation import haversine, validate_proximity

__all__ = [
    "create_access_token",
    "decode_token",
    "haversine",
    "utcnow",
    "validate_proximity",
]
