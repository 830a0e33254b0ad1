"""Place search provider.

The engine only needs ``search(tag, bbox, limit)`` returning dicts with
``display_name``, ``lat`` and ``lon``. ``NominatimProvider`` implements it
against the OpenStreetMap Nominatim HTTP API (or anything compatible).
"""

import logging
import re
from typing import Protocol

import httpx

from backend.core import config
from backend.core.errors import UpstreamError
from backend.proximity.geo import BoundingBox

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = 'Unknown Location'


class PlaceProvider(Protocol):
    def search(self, tag: str, bbox: BoundingBox, limit: int) -> list[dict]:
        ...


class NominatimProvider:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.base_url = (base_url or config.PLACES_BASE_URL).rstrip('/')
        self.user_agent = user_agent or config.PLACES_USER_AGENT
        self.timeout = timeout if timeout is not None else config.PLACES_TIMEOUT_SECONDS
        self._client = client

    def _get(self, path: str, params: dict):
        url = f'{self.base_url}{path}'
        headers = {'User-Agent': self.user_agent, 'Accept': 'application/json'}
        try:
            if self._client is not None:
                response = self._client.get(url, params=params, headers=headers, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout) as client:
                    response = client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise UpstreamError(f'Place provider request failed: {exc.__class__.__name__}') from exc
        except ValueError as exc:
            raise UpstreamError('Place provider returned an unreadable response') from exc

    def search(self, tag: str, bbox: BoundingBox, limit: int) -> list[dict]:
        data = self._get('/search', {
            'format': 'json',
            'amenity': tag,
            'bounded': 1,
            'viewbox': bbox.as_viewbox(),
            'limit': limit,
        })
        if not isinstance(data, list):
            raise UpstreamError('Place provider returned an unexpected payload')
        return data

    def reverse_geocode(self, lat: float, lon: float) -> str | None:
        data = self._get('/reverse', {'format': 'json', 'lat': lat, 'lon': lon})
        if not isinstance(data, dict):
            raise UpstreamError('Place provider returned an unexpected payload')
        return data.get('display_name')


def extract_english_name(display_name: str | None) -> str:
    """Shorten a provider display name to its first ASCII-only component."""
    if not display_name:
        return UNKNOWN_LOCATION
    first_part = display_name.split(',')[0]
    ascii_only = re.sub(r'[^\x00-\x7F]', '', first_part)
    cleaned = re.sub(r'\s+', ' ', ascii_only).strip()
    return cleaned or UNKNOWN_LOCATION
