from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
    EMERGENCY_RESPONDER = "emergency_responder"

    @classmethod
    def parse(cls, value: str | None) -> "Role | None":
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def choices(cls) -> str:
        return ", ".join(role.value for role in cls)
