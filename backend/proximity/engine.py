"""Nearest emergency center lookup.

For every category the engine queries the place provider inside a small
bounding box around the origin, keeps the places within the current search
radius and widens the radius until something is found. Each category is
capped independently; the merged list is ordered purely by distance.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from math import isfinite

from backend.core import config
from backend.core.errors import UpstreamError
from backend.proximity.geo import DEFAULT_HALF_WIDTH_DEG, Coordinate, bounding_box, haversine_km
from backend.proximity.provider import PlaceProvider

logger = logging.getLogger(__name__)

DEFAULT_RADII_KM = (5.0, 10.0, 15.0, 20.0)
PER_CATEGORY_LIMIT = 2


@dataclass(frozen=True)
class CategorySpec:
    tag: str
    label: str


DEFAULT_CATEGORIES = (
    CategorySpec(tag='hospital', label='Hospital'),
    CategorySpec(tag='police', label='Police Station'),
    CategorySpec(tag='fire_station', label='Fire Station'),
)


@dataclass(frozen=True)
class PlaceCandidate:
    name: str
    category: str
    latitude: float
    longitude: float
    distance_km: float

    def as_dict(self) -> dict:
        return {
            'name': self.name,
            'category': self.category,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'distance_km': round(self.distance_km, 3),
        }


@dataclass
class NearbySearchResult:
    centers: list[PlaceCandidate] = field(default_factory=list)
    by_category: dict[str, list[PlaceCandidate]] = field(default_factory=dict)
    failures: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {
            'centers': [center.as_dict() for center in self.centers],
            'by_category': {
                label: [center.as_dict() for center in centers]
                for label, centers in self.by_category.items()
            },
            'failures': dict(self.failures),
        }


def _to_candidate(raw: dict, category: CategorySpec, origin: Coordinate) -> PlaceCandidate | None:
    try:
        lat = float(raw['lat'])
        lon = float(raw['lon'])
    except (KeyError, TypeError, ValueError):
        logger.debug('Skipping %s result without usable coordinates: %r', category.label, raw)
        return None

    if not (isfinite(lat) and isfinite(lon) and -90 <= lat <= 90 and -180 <= lon <= 180):
        logger.debug('Skipping %s result with out-of-range coordinates: %r', category.label, raw)
        return None

    return PlaceCandidate(
        name=str(raw.get('display_name') or category.label),
        category=category.label,
        latitude=lat,
        longitude=lon,
        distance_km=haversine_km(origin.lat, origin.lng, lat, lon),
    )


def search_category(
    origin: Coordinate,
    category: CategorySpec,
    provider: PlaceProvider,
    radii_km: tuple[float, ...] = DEFAULT_RADII_KM,
    limit: int = PER_CATEGORY_LIMIT,
    result_limit: int | None = None,
    half_width_deg: float = DEFAULT_HALF_WIDTH_DEG,
) -> list[PlaceCandidate]:
    """Closest places for one category, widening the radius until any are found.

    Raises ``UpstreamError`` if the provider fails at any radius.
    """
    bbox = bounding_box(origin, half_width_deg)
    provider_limit = result_limit or config.PLACES_RESULT_LIMIT

    for radius_km in radii_km:
        raw_places = provider.search(category.tag, bbox, provider_limit)
        candidates = [
            candidate
            for candidate in (_to_candidate(raw, category, origin) for raw in raw_places)
            if candidate is not None and candidate.distance_km <= radius_km
        ]
        if candidates:
            candidates.sort(key=lambda candidate: candidate.distance_km)
            logger.debug('Found %d %s within %.0f km', len(candidates), category.label, radius_km)
            return candidates[:limit]
        logger.debug('No %s within %.0f km of %s', category.label, radius_km, origin)

    return []


def find_nearby(
    origin: Coordinate,
    provider: PlaceProvider,
    categories: tuple[CategorySpec, ...] = DEFAULT_CATEGORIES,
    radii_km: tuple[float, ...] = DEFAULT_RADII_KM,
    per_category_limit: int = PER_CATEGORY_LIMIT,
    max_workers: int | None = None,
) -> NearbySearchResult:
    result = NearbySearchResult()
    if not categories:
        return result

    def run(category: CategorySpec) -> tuple[CategorySpec, list[PlaceCandidate], str | None]:
        try:
            return category, search_category(origin, category, provider, radii_km, per_category_limit), None
        except UpstreamError as exc:
            logger.warning('Search for %s near %s failed: %s', category.label, origin, exc.message)
            return category, [], exc.message

    with ThreadPoolExecutor(max_workers=max_workers or len(categories)) as executor:
        outcomes = list(executor.map(run, categories))

    for category, centers, failure in outcomes:
        result.by_category[category.label] = centers
        result.centers.extend(centers)
        if failure is not None:
            result.failures[category.label] = failure

    result.centers.sort(key=lambda center: center.distance_km)
    return result
