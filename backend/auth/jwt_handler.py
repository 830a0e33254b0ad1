from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from backend.auth.roles import Role


@dataclass(frozen=True)
class TokenSettings:
    secret_key: str
    algorithm: str = "HS256"
    expires_minutes: int = 60
    bcrypt_rounds: int = 10


@dataclass(frozen=True)
class Claims:
    id: int
    email: str
    name: str
    role: Role
    expires_at: datetime

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "expires_at": self.expires_at.isoformat(),
        }


def create_access_token(
    claims: dict,
    settings: TokenSettings,
    issued_at: datetime | None = None,
) -> str:
    issued = issued_at or datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=settings.expires_minutes)
    payload = {**claims, "sub": str(claims["id"]), "exp": expire, "iat": issued}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: TokenSettings) -> dict:
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.algorithm],
        options={"require": ["exp", "iat", "sub"]},
    )
