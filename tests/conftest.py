"""
Central pytest configuration for the clinic records tests.

Provides shared fixtures and markers for unit and integration tests.
Integration tests get a fresh SQLite file per test, reached through the
same async engine and repositories the application uses.
"""

import logging
import os

import pytest

# Set early so nothing picks up a developer's .env database
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("LOG_LEVEL", "ERROR")

from clinic_records.db.session import (  # noqa: E402
    build_engine,
    create_tables,
    dispose_engine,
)
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402
from tests.config.markers import (  # noqa: E402,F401
    pytest_collection_modifyitems,
    pytest_configure,
)
from tests.config.test_config import TestConfig  # noqa: E402
from tests.factories.repository_factories import (  # noqa: E402
    InMemoryDoctorRepository,
    InMemoryDrugRepository,
    InMemoryPatientRepository,
    InMemoryPharmacistRepository,
    InMemoryPrescriptionRepository,
)
from tests.fixtures.domain_fixtures import *  # noqa: E402,F401,F403


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> str:
    """Point DATABASE_URL at a throwaway SQLite file for this test."""
    url = TestConfig.database_url_for(tmp_path / "clinic_records_test.db")
    monkeypatch.setenv("DATABASE_URL", url)
    return url


@pytest.fixture
async def engine(database_url):
    engine = build_engine(database_url)
    await create_tables(engine)
    yield engine
    await engine.dispose()
    await dispose_engine()


@pytest.fixture
async def db_session(engine):
    """Session bound to a freshly created schema."""
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def in_memory_repositories() -> dict:
    return {
        "doctors": InMemoryDoctorRepository(),
        "patients": InMemoryPatientRepository(),
        "pharmacists": InMemoryPharmacistRepository(),
        "drugs": InMemoryDrugRepository(),
        "prescriptions": InMemoryPrescriptionRepository(),
    }


@pytest.fixture
def restore_root_logger():
    """Undo handler changes made by setup_logging during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
