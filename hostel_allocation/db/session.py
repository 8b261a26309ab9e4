"""Database engine and session management."""
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hostel_allocation.core.logging import get_logger
from hostel_allocation.models.base import Base

logger = get_logger(__name__)


class Database:
    """
    Owns the engine and session factory for one application instance.

    Constructed explicitly (normally by the FastAPI lifespan) and disposed
    on shutdown, so no engine or session is shared through module globals.
    """

    def __init__(self, url: str, echo: bool = False, engine_options: Optional[Dict[str, Any]] = None):
        self.url = url
        options: Dict[str, Any] = {"echo": echo, "future": True}

        if url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False}
            if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
                options["poolclass"] = StaticPool
        else:
            options["pool_pre_ping"] = True

        options.update(engine_options or {})
        self.engine: Engine = create_engine(url, **options)

        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self.session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        """Create all tables (development and tests; production uses migrations)"""
        import hostel_allocation.models  # noqa: F401  registers every mapper

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables ensured", extra={"tables": len(Base.metadata.tables)})

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("All database tables dropped")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Yield a session that is always closed"""
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
