from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from splatbin.config import Settings
from splatbin.dependencies import build_services
from splatbin.extensions import create_db_engine
from splatbin.main import create_app
from splatbin.models import Base


class FakeClock:
    """可控时钟，用于模拟时间流逝"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'test.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        EXPIRY_MAX_HOURS=168,
        EXPIRY_ALLOW_EVERLASTING=True,
        UPLOAD_MAX_SIZE_MB=1,
        REAPER_ENABLED=False,
    )


@pytest.fixture
def services(test_settings, clock):
    engine = create_db_engine(test_settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    built = build_services(test_settings, engine, clock=clock)
    built.content.ensure_root()
    yield built
    engine.dispose()


@pytest.fixture
def client(test_settings, clock):
    app = create_app(test_settings, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_services(client):
    return client.app.state.services
