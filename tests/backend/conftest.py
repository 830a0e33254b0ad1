import os
from math import degrees

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from backend.auth import jwt_handler  # noqa: E402
from backend.auth.credential_store import CredentialStore  # noqa: E402
from backend.auth.jwt_handler import TokenSettings  # noqa: E402
from backend.auth.service import AuthService  # noqa: E402
from backend.core.errors import UpstreamError  # noqa: E402
from backend.database import Base  # noqa: E402
from backend.models import contact, report, resource, user  # noqa: E402,F401
from backend.proximity.geo import EARTH_RADIUS_KM, Coordinate  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def token_settings() -> TokenSettings:
    return TokenSettings(secret_key='test-secret', algorithm='HS256', expires_minutes=60, bcrypt_rounds=4)


@pytest.fixture
def auth_service(db_session, token_settings) -> AuthService:
    return AuthService(CredentialStore(db_session), token_settings)


def issue_token(settings: TokenSettings, user_id: int = 1, role: str = 'user', **overrides) -> str:
    claims = {'id': user_id, 'email': f'user{user_id}@example.com', 'name': f'User {user_id}', 'role': role}
    claims.update(overrides)
    return jwt_handler.create_access_token(claims, settings)


def north_of(origin: Coordinate, km: float) -> dict:
    """A provider row ``km`` kilometres due north of ``origin``."""
    return {
        'display_name': f'{km} km north',
        'lat': str(origin.lat + degrees(km / EARTH_RADIUS_KM)),
        'lon': str(origin.lng),
    }


class FakePlaceProvider:
    """In-memory provider keyed by amenity tag.

    A value may be a list of rows or an exception instance to raise.
    """

    def __init__(self, places: dict | None = None, address: str | None = None):
        self.places = places or {}
        self.address = address
        self.calls: list[tuple[str, object, int]] = []

    def search(self, tag, bbox, limit):
        self.calls.append((tag, bbox, limit))
        rows = self.places.get(tag, [])
        if isinstance(rows, Exception):
            raise rows
        return list(rows)

    def reverse_geocode(self, lat, lon):
        if isinstance(self.address, Exception):
            raise self.address
        return self.address

    def calls_for(self, tag: str) -> int:
        return sum(1 for call in self.calls if call[0] == tag)


@pytest.fixture
def new_delhi() -> Coordinate:
    return Coordinate(lat=28.6139, lng=77.2090)


@pytest.fixture
def failing_upstream() -> UpstreamError:
    return UpstreamError('Place provider request failed: ReadTimeout')


@pytest.fixture
def make_token(token_settings):
    def _make_token(user_id: int = 1, role: str = 'user', **overrides) -> str:
        return issue_token(token_settings, user_id=user_id, role=role, **overrides)

    return _make_token


@pytest.fixture
def place_north():
    return north_of


@pytest.fixture
def fake_provider():
    return FakePlaceProvider
