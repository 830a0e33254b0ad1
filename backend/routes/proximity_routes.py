import logging

from fastapi import APIRouter, Depends, Query

from backend.auth.dependencies import get_current_claims
from backend.core.errors import UpstreamError
from backend.proximity.engine import find_nearby
from backend.proximity.geo import Coordinate
from backend.proximity.provider import NominatimProvider, PlaceProvider, extract_english_name

router = APIRouter(tags=['emergency-centers'], dependencies=[Depends(get_current_claims)])

logger = logging.getLogger(__name__)

LOCATION_NOT_AVAILABLE = 'Location not available'


def get_place_provider() -> NominatimProvider:
    return NominatimProvider()


@router.get('')
def nearby_emergency_centers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    provider: PlaceProvider = Depends(get_place_provider),
):
    return find_nearby(Coordinate(lat=lat, lng=lng), provider).as_dict()


@router.get('/address')
def address_for_location(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    provider: NominatimProvider = Depends(get_place_provider),
):
    try:
        display_name = provider.reverse_geocode(lat, lng)
    except UpstreamError as exc:
        logger.warning('Reverse geocoding %s,%s failed: %s', lat, lng, exc.message)
        return {'address': LOCATION_NOT_AVAILABLE}
    return {'address': extract_english_name(display_name)}
