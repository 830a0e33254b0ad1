"""Registration, login and token validation.

The service is built around an injected ``TokenSettings`` so the signing
secret never comes from module state, and a ``CredentialStore`` so tests can
run it against any SQLAlchemy session.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import jwt

from backend.auth import jwt_handler, passwords
from backend.auth.credential_store import CredentialStore
from backend.auth.jwt_handler import Claims, TokenSettings
from backend.auth.roles import Role
from backend.core.errors import AuthenticationError, ConflictError, ValidationError
from backend.models.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = 'Invalid email or password'
INVALID_TOKEN_MESSAGE = 'Invalid or expired token'


@dataclass(frozen=True)
class RegistrationResult:
    id: int
    message: str = 'User registered successfully'


@dataclass(frozen=True)
class LoginResult:
    token: str
    id: int
    email: str
    name: str
    role: Role
    message: str = 'Login successful'

    def as_dict(self) -> dict:
        return {
            'token': self.token,
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'role': self.role.value,
            'message': self.message,
        }


def normalize_email(email: str | None) -> str:
    return (email or '').strip().lower()


class AuthService:
    def __init__(self, store: CredentialStore, settings: TokenSettings):
        self.store = store
        self.settings = settings

    def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        role: str | None,
    ) -> RegistrationResult:
        name = (name or '').strip()
        email = normalize_email(email)
        role_value = (role or '').strip()

        if not name or not email or not password or not role_value:
            raise ValidationError('Name, email, password, and role are required')

        parsed_role = Role.parse(role_value)
        if parsed_role is None:
            raise ValidationError(f'Invalid role. Must be one of: {Role.choices()}')

        if len(password.encode('utf-8')) > passwords.BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f'Password must be {passwords.BCRYPT_MAX_PASSWORD_BYTES} bytes or fewer'
            )

        if self.store.find_by_email(email) is not None:
            raise ConflictError('Email already exists')

        user = User(
            name=name,
            email=email,
            hashed_password=passwords.hash_password(password, rounds=self.settings.bcrypt_rounds),
            role=parsed_role.value,
        )
        user_id = self.store.insert(user)
        logger.info('Registered user id=%s role=%s', user_id, parsed_role.value)
        return RegistrationResult(id=user_id)

    def login(self, email: str | None, password: str | None) -> LoginResult:
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError('Email and password are required')

        user = self.store.find_by_email(email)
        if user is None or not passwords.verify_password(password, user.hashed_password):
            logger.info('Rejected login attempt for %s', email)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        role = Role.parse(user.role)
        if role is None:
            logger.error('User id=%s has unknown role %r', user.id, user.role)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        token = jwt_handler.create_access_token(
            {'id': user.id, 'email': user.email, 'name': user.name, 'role': role.value},
            self.settings,
        )
        return LoginResult(token=token, id=user.id, email=user.email, name=user.name, role=role)

    def validate_token(self, token: str | None) -> Claims:
        return validate_token(token, self.settings)


def validate_token(token: str | None, settings: TokenSettings) -> Claims:
    """Decode a session token, rejecting anything that does not fully verify."""
    if not token:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    try:
        payload = jwt_handler.decode_access_token(token, settings)
    except jwt.PyJWTError as exc:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE) from exc

    role = Role.parse(payload.get('role'))
    user_id = payload.get('id')
    email = payload.get('email')
    name = payload.get('name')
    if role is None or not isinstance(user_id, int) or not email or not name:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    if payload.get('sub') != str(user_id):
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    return Claims(
        id=user_id,
        email=email,
        name=name,
        role=role,
        expires_at=datetime.fromtimestamp(payload['exp'], tz=timezone.utc),
    )
