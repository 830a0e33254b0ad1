import os

from dotenv import load_dotenv

from backend.auth.jwt_handler import TokenSettings


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./disaster.db")

CORS_ORIGINS = _get_list(
    os.getenv("CORS_ORIGINS"),
    default=["http://localhost:5173", "http://localhost:3000"],
)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Nominatim by default; any provider speaking the same search/reverse API works.
PLACES_BASE_URL = os.getenv("PLACES_BASE_URL", "https://nominatim.openstreetmap.org")
PLACES_USER_AGENT = os.getenv("PLACES_USER_AGENT", "disaster-response-api/0.1")
PLACES_TIMEOUT_SECONDS = float(os.getenv("PLACES_TIMEOUT_SECONDS", "10"))
PLACES_RESULT_LIMIT = int(os.getenv("PLACES_RESULT_LIMIT", "20"))


def get_token_settings() -> TokenSettings:
    return TokenSettings(
        secret_key=JWT_SECRET_KEY,
        algorithm=JWT_ALGORITHM,
        expires_minutes=JWT_EXPIRES_MINUTES,
        bcrypt_rounds=BCRYPT_ROUNDS,
    )


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if not 4 <= BCRYPT_ROUNDS <= 31:
        raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31.")
