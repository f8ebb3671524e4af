import math

from qr_attendance.exceptions import ProximityError, ValidationError

EARTH_RADIUS_METERS = 6371000


# ----------------------------------------Geolocation Logic/Algorithm--------------------------------------------
def haversine(lat1, lon1, lat2, lon2):
    """Great-circle distance between two coordinates, in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def validate_coordinates(latitude, longitude):
    if latitude is None or longitude is None:
        raise ValidationError("Latitude and longitude are required")
    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        raise ValidationError("Coordinates are out of range")


def check_within_radius(lat, lon, anchor_lat, anchor_lon, max_distance):
    return haversine(lat, lon, anchor_lat, anchor_lon) <= max_distance


def validate_proximity(lat, lon, anchor_lat, anchor_lon, max_distance):
    """Returns the distance to the anchor, or raises ProximityError past max_distance.

    The boundary is inclusive: exactly ``max_distance`` meters passes.
    """
    validate_coordinates(lat, lon)
    distance = haversine(lat, lon, anchor_lat, anchor_lon)
    if distance > max_distance:
        raise ProximityError(distance, max_distance)
    return distance
