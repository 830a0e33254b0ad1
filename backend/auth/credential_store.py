from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import ConflictError, StorageUnavailableError
from backend.models.user import User


class CredentialStore:
    """User lookups and inserts backed by the ``users`` table."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        try:
            return self.db.query(User).filter(User.email == email).first()
        except SQLAlchemyError as exc:
            raise StorageUnavailableError() from exc

    def insert(self, user: User) -> int:
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as exc:
            # The unique index on users.email settles concurrent registrations.
            self.db.rollback()
            raise ConflictError("Email already exists") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageUnavailableError() from exc
        self.db.refresh(user)
        return user.id
