"""Shared pytest fixtures for rinksync tests."""
import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import AsyncGenerator, Generator

# Keep the app module from opening a file-backed database on import
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create fresh test database session with isolated in-memory database."""
    from rinksync.models import Base

    # One shared connection so the request thread sees the test's data
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture(scope="function")
async def async_client(db_session: Session) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client for testing FastAPI endpoints."""
    from rinksync.main import app
    from rinksync.core.database import get_db

    # Override database dependency to use test session
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def make_team(db_session: Session):
    """Factory: persist a team."""
    from rinksync.models import Team

    def _make(name: str, external_id: str = None, **kwargs) -> Team:
        team = Team(name=name, external_id=external_id, **kwargs)
        db_session.add(team)
        db_session.commit()
        return team

    return _make


@pytest.fixture
def make_event(db_session: Session):
    """Factory: persist an event (tournament by default)."""
    from rinksync.models import Event, EventType

    def _make(name: str = "Test Event", event_type: str = EventType.TOURNAMENT.value, **kwargs) -> Event:
        event = Event(name=name, event_type=event_type, **kwargs)
        db_session.add(event)
        db_session.commit()
        return event

    return _make


@pytest.fixture
def make_game(db_session: Session):
    """Factory: persist a game; completed when both scores are given."""
    from rinksync.models import Game, GameStage, GameStatus

    def _make(
        home,
        away,
        home_score: int = None,
        away_score: int = None,
        event=None,
        start: datetime = datetime(2025, 10, 5, 19, 0),
        stage: str = GameStage.POOL_PLAY.value,
        **kwargs,
    ) -> Game:
        completed = home_score is not None and away_score is not None
        game = Game(
            event_id=event.id if event is not None else None,
            home_team_id=home.id if home is not None else None,
            away_team_id=away.id if away is not None else None,
            final_score_home=home_score,
            final_score_away=away_score,
            status=GameStatus.COMPLETED.value if completed else GameStatus.SCHEDULED.value,
            start_datetime=start,
            stage=stage,
            **kwargs,
        )
        db_session.add(game)
        db_session.commit()
        return game

    return _make


@pytest.fixture
def regular_season(make_event):
    """A regular-season event spanning the 2025-26 season."""
    from rinksync.models import EventType

    return make_event(
        name="2025-26 Regular Season",
        event_type=EventType.REGULAR_SEASON.value,
        start_date=date(2025, 9, 1),
        end_date=date(2026, 3, 31),
    )
