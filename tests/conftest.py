import asyncio

import pytest
from fastapi.testclient import TestClient

from springanim.app.dependencies import get_app_settings, get_database
from springanim.app.main import app
from springanim.config import DatabaseSettings, PhysicsSettings, Settings
from springanim.database import SpringDB, close_db


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "springanim-test.db")


@pytest.fixture
def db(db_path):
    database = SpringDB(db_path)
    asyncio.run(database.initialize())
    return database


@pytest.fixture
def settings(db_path):
    return Settings(
        database=DatabaseSettings(path=db_path),
        physics=PhysicsSettings(prefixes=[""], fps=60.0, default_preset="default")
    )


@pytest.fixture
def client(db, settings):
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_database] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        asyncio.run(close_db())
