from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from backend.auth.credential_store import CredentialStore
from backend.auth.jwt_handler import Claims, TokenSettings
from backend.auth.roles import Role
from backend.auth.service import AuthService, validate_token
from backend.core import config
from backend.core.errors import AuthenticationError, ForbiddenError
from backend.database import get_db

security = HTTPBearer(auto_error=False)


def get_token_settings() -> TokenSettings:
    return config.get_token_settings()


def get_auth_service(
    db: Session = Depends(get_db),
    settings: TokenSettings = Depends(get_token_settings),
) -> AuthService:
    return AuthService(CredentialStore(db), settings)


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: TokenSettings = Depends(get_token_settings),
) -> Claims:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError("Not authenticated")
    return validate_token(credentials.credentials, settings)


def require_roles(*roles: Role):
    allowed = frozenset(roles)

    def dependency(claims: Claims = Depends(get_current_claims)) -> Claims:
        if claims.role not in allowed:
            raise ForbiddenError()
        return claims

    return dependency
