"""
Database configuration and session management.
"""
import os
from typing import Any, Dict, Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from rinksync.core.config import settings


def _engine_options(url: str) -> Dict[str, Any]:
    """Connection options for the configured backend."""
    options: Dict[str, Any] = {
        "echo": os.getenv("SQL_ECHO", "false").lower() == "true",
    }
    if url.startswith("sqlite"):
        # FastAPI may hand the session to a different thread than the one that opened it
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Verify connections before using
        )
    return options


DATABASE_URL = settings.DATABASE_URL

engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
    ```python
    @router.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        ...
    ```
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create any missing tables."""
    from rinksync.models.models import Base
    Base.metadata.create_all(bind=engine, checkfirst=True)
