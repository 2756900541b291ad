"""Engine creation, session factories and schema setup for the SQL game store."""

from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from carcassonne.config import get_settings
from carcassonne.models import Base


def _configure_sqlite_wal(
    dbapi_connection: Any, connection_record: Any  # noqa: ARG001
) -> None:
    """Configure SQLite to use WAL mode for better concurrency.

    Args:
        dbapi_connection: The DBAPI connection
        connection_record: Connection record (required by SQLAlchemy event API)
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str | None = None, *, echo: bool | None = None) -> Engine:
    """Create and configure the database engine.

    Args:
        database_url: Overrides ``Settings.database_url`` when given
        echo: Overrides ``Settings.database_echo`` when given

    Returns:
        Engine: Configured SQLAlchemy engine

    Note:
        For SQLite databases, automatically configures WAL mode and foreign keys.
        An in-memory SQLite URL gets a single shared connection so every
        session sees the same database.
    """
    settings = get_settings()
    url = database_url or settings.database_url
    echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            engine = create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                url,
                echo=echo,
                pool_pre_ping=True,
                connect_args={"check_same_thread": False},
            )
        event.listen(engine, "connect", _configure_sqlite_wal)
    else:
        # Non-SQLite (e.g., PostgreSQL): honor pool settings for production use
        engine = create_engine(
            url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_recycle=settings.database_pool_recycle,
            pool_timeout=settings.database_pool_timeout,
        )

    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def check_database_health(engine: Engine) -> bool:
    """Return True when the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
