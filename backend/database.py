from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from backend.core import config


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    config.DATABASE_URL,
    echo=config.SQL_ECHO,
    connect_args=_connect_args(config.DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_user_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_user_schema(bind=None) -> None:
    """Backfill the unique email index on user tables created before it existed.

    Registration relies on the store rejecting a second row with the same
    email, so the index has to be present even on old databases.
    """
    global _user_schema_checked

    if _user_schema_checked and bind is None:
        return

    target = bind or engine

    with _schema_lock:
        if _user_schema_checked and bind is None:
            return

        inspector = inspect(target)

        if 'users' not in inspector.get_table_names():
            _user_schema_checked = _user_schema_checked or bind is None
            return

        existing_columns = {column['name'] for column in inspector.get_columns('users')}
        has_unique_email = any(
            index.get('unique') and index['column_names'] == ['email']
            for index in inspector.get_indexes('users')
        ) or any(
            constraint['column_names'] == ['email']
            for constraint in inspector.get_unique_constraints('users')
        )
        migration_steps = [
            ('name', "ALTER TABLE users ADD COLUMN name VARCHAR NOT NULL DEFAULT ''"),
            ('role', "ALTER TABLE users ADD COLUMN role VARCHAR NOT NULL DEFAULT 'user'"),
        ]

        with target.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            if not has_unique_email:
                connection.execute(
                    text('CREATE UNIQUE INDEX IF NOT EXISTS ux_users_email ON users(email)')
                )

        _user_schema_checked = _user_schema_checked or bind is None
