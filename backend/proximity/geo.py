from dataclasses import dataclass
from math import atan2, cos, radians, sin, sqrt

EARTH_RADIUS_KM = 6371.0
DEFAULT_HALF_WIDTH_DEG = 0.03  # roughly 3 km


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float


@dataclass(frozen=True)
class BoundingBox:
    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    def as_viewbox(self) -> str:
        return f"{self.min_lon},{self.min_lat},{self.max_lon},{self.max_lat}"


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres on a spherical Earth."""
    d_lat = radians(lat2 - lat1)
    d_lon = radians(lon2 - lon1)
    a = sin(d_lat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(d_lon / 2) ** 2
    c = 2 * atan2(sqrt(a), sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def bounding_box(origin: Coordinate, half_width_deg: float = DEFAULT_HALF_WIDTH_DEG) -> BoundingBox:
    return BoundingBox(
        min_lon=max(-180.0, origin.lng - half_width_deg),
        min_lat=max(-90.0, origin.lat - half_width_deg),
        max_lon=min(180.0, origin.lng + half_width_deg),
        max_lat=min(90.0, origin.lat + half_width_deg),
    )
