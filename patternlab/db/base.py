"""
Database engine, session factory and declarative base.

The engine is not created at import time: ``create_app`` builds a
``Database`` from settings and stores it on ``app.state``, and request
handlers receive sessions through the ``get_db`` dependency.
"""
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine suited to the configured backend."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )

    # Postgres: small pool, recycled connections
    return create_engine(
        database_url,
        pool_size=5,
        max_overflow=0,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


class Database:
    """Explicit database handle: one engine plus its session factory."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_url(cls, database_url: str) -> "Database":
        return cls(create_db_engine(database_url))

    def create_all(self) -> None:
        """Create all tables registered on ``Base``."""
        # Import models so every table is registered on the metadata
        import patternlab.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Generator[Session, None, None]:
        """Yield a session and close it afterwards."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()
