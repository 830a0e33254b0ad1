import pytest

from backend.main import app
from backend.proximity.geo import Coordinate
from backend.routes.proximity_routes import get_place_provider

NEW_DELHI = Coordinate(lat=28.6139, lng=77.2090)


@pytest.fixture
def provider(fake_provider, place_north, failing_upstream):
    return fake_provider(
        places={
            'hospital': [place_north(NEW_DELHI, 9), place_north(NEW_DELHI, 2), place_north(NEW_DELHI, 4)],
            'police': failing_upstream,
            'fire_station': [place_north(NEW_DELHI, 1)],
        },
        address='Connaught Place, New Delhi, India',
    )


def test_nearby_centers_requires_authentication(client) -> None:
    response = client.get('/api/emergency-centers', params={'lat': 28.6139, 'lng': 77.2090})

    assert response.status_code == 401


def test_nearby_centers_returns_ranked_results_and_failures(client, auth_headers) -> None:
    response = client.get(
        '/api/emergency-centers',
        params={'lat': 28.6139, 'lng': 77.2090},
        headers=auth_headers(),
    )
    body = response.json()

    assert response.status_code == 200
    assert [(center['category'], center['distance_km']) for center in body['centers']] == [
        ('Fire Station', 1.0),
        ('Hospital', 2.0),
        ('Hospital', 4.0),
    ]
    assert body['by_category']['Police Station'] == []
    assert list(body['failures']) == ['Police Station']


def test_nearby_centers_accepts_any_search_only_provider(client, auth_headers, place_north) -> None:
    class SearchOnlyProvider:
        def search(self, tag, bbox, limit):
            return [place_north(NEW_DELHI, 3)] if tag == 'police' else []

    app.dependency_overrides[get_place_provider] = SearchOnlyProvider

    response = client.get(
        '/api/emergency-centers',
        params={'lat': 28.6139, 'lng': 77.2090},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert [center['category'] for center in response.json()['centers']] == ['Police Station']


@pytest.mark.parametrize(
    'path',
    ['/api/emergency-centers', '/api/resources', '/api/reports', '/api/contacts'],
)
def test_collection_routes_are_served_without_trailing_slash(client, auth_headers, path) -> None:
    response = client.get(
        path,
        params={'lat': 28.6139, 'lng': 77.2090},
        headers=auth_headers(),
        follow_redirects=False,
    )

    assert response.status_code == 200


@pytest.mark.parametrize(('lat', 'lng'), [(91, 0), (-91, 0), (0, 181), (0, -181)])
def test_nearby_centers_rejects_out_of_range_coordinates(client, auth_headers, lat, lng) -> None:
    response = client.get('/api/emergency-centers', params={'lat': lat, 'lng': lng}, headers=auth_headers())

    assert response.status_code == 400
    assert 'error' in response.json()


def test_address_returns_short_english_name(client, auth_headers) -> None:
    response = client.get(
        '/api/emergency-centers/address',
        params={'lat': 28.6139, 'lng': 77.2090},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert response.json() == {'address': 'Connaught Place'}


def test_address_falls_back_when_provider_fails(client, auth_headers, provider, failing_upstream) -> None:
    provider.address = failing_upstream

    response = client.get(
        '/api/emergency-centers/address',
        params={'lat': 28.6139, 'lng': 77.2090},
        headers=auth_headers(),
    )

    assert response.status_code == 200
    assert response.json() == {'address': 'Location not available'}
