"""
Pytest configuration and shared fixtures.
"""

import copy
import logging
import pytest
from decimal import Decimal
from typing import Dict, Any, List

from jobly import logger as jobly_logger
from jobly.database import Database


COMPANIES = [
    {
        "handle": "c1",
        "name": "C1",
        "description": "Desc1",
        "numEmployees": 1,
        "logoUrl": "http://c1.img",
    },
    {
        "handle": "c2",
        "name": "C2",
        "description": "Desc2",
        "numEmployees": 2,
        "logoUrl": "http://c2.img",
    },
    {
        "handle": "c3",
        "name": "C3",
        "description": "Desc3",
        "numEmployees": 3,
        "logoUrl": "http://c3.img",
    },
]

JOBS = [
    {"title": "j1", "salary": 100, "equity": Decimal("0.1"), "company_handle": "c1"},
    {"title": "j2", "salary": 200, "equity": Decimal("0"), "company_handle": "c1"},
    {"title": "j3", "salary": 300, "equity": None, "company_handle": "c2"},
]


def sqlite_url(path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def seed(db: Database) -> None:
    """Insert the sample companies and jobs with raw statements."""
    for c in COMPANIES:
        await db.query(
            """INSERT INTO companies (handle, name, description, num_employees, logo_url)
               VALUES ($1, $2, $3, $4, $5)""",
            [c["handle"], c["name"], c["description"], c["numEmployees"], c["logoUrl"]],
        )
    for j in JOBS:
        await db.query(
            """INSERT INTO jobs (title, salary, equity, company_handle)
               VALUES ($1, $2, $3, $4)""",
            [j["title"], j["salary"], None if j["equity"] is None else str(j["equity"]), j["company_handle"]],
        )


@pytest.fixture
async def empty_db(tmp_path):
    """Database with the schema created and no rows."""
    db = Database(sqlite_url(tmp_path / "test.db"))
    await db.init_schema()
    yield db
    await db.close()


@pytest.fixture
async def db(empty_db):
    """Database seeded with companies c1..c3 and jobs j1..j3."""
    await seed(empty_db)
    return empty_db


@pytest.fixture
def new_company() -> Dict[str, Any]:
    """Valid company data not present in the seed."""
    return {
        "handle": "new",
        "name": "New",
        "description": "New Description",
        "numEmployees": 1,
        "logoUrl": "http://new.img",
    }


@pytest.fixture
def new_job() -> Dict[str, Any]:
    """Valid job data for company c1."""
    return {
        "title": "new",
        "salary": 150,
        "equity": Decimal("0.25"),
        "company_handle": "c1",
    }


@pytest.fixture
def sample_companies() -> List[Dict[str, Any]]:
    """Seeded companies, in name order."""
    return copy.deepcopy(COMPANIES)


@pytest.fixture
def sample_jobs() -> List[Dict[str, Any]]:
    """Seeded jobs, without ids."""
    return copy.deepcopy(JOBS)


@pytest.fixture
def isolated_logger(monkeypatch):
    """
    Let a test build its own global logger.

    The shared "jobly" logging.Logger keeps its handlers and level, and the
    previous global instance comes back after the test.
    """
    std_logger = logging.getLogger("jobly")
    handlers, level = list(std_logger.handlers), std_logger.level
    monkeypatch.setattr(jobly_logger, "_global_logger", None)

    yield

    for handler in std_logger.handlers:
        if handler not in handlers:
            handler.close()
    std_logger.handlers[:] = handlers
    std_logger.setLevel(level)


@pytest.fixture
def clean_log_env(monkeypatch):
    """Unset JOBLY_LOG_* and remove anything a .env file sets during the test."""
    for name in ("JOBLY_LOG_LEVEL", "JOBLY_LOG_DIR"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
