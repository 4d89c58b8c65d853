"""
Pytest configuration and shared fixtures

Two kinds of database fixtures:
- fake_db: records every statement and returns canned rows, no server needed
- db_connection: a real DatabaseConnection on a fresh test database,
  skipped when PostgreSQL is not reachable
"""

import asyncio
import logging
import sys
from pathlib import Path

import asyncpg
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import DatabaseConfig
from database import DatabaseConnection
from tests.test_config import TEST_DB_CONFIG


class FakeDatabase:
    """Stands in for DatabaseConnection, recording statements"""

    def __init__(self, rows=None):
        self.logger = logging.getLogger("sql").getChild("fake")
        self.rows = list(rows or [])
        self.statements: list[tuple[str, tuple]] = []

    async def execute(self, query: str, *args, timeout=None) -> str:
        self.statements.append((query, args))
        return "OK"

    async def fetch(self, query: str, *args, timeout=None) -> list:
        self.statements.append((query, args))
        return self.rows

    @property
    def last(self) -> tuple[str, tuple]:
        return self.statements[-1]


@pytest.fixture
def fake_db():
    return FakeDatabase()


async def _admin_connection():
    return await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database='postgres',
        timeout=5,
    )


@pytest.fixture(scope="function")
async def db_connection():
    """
    DatabaseConnection on a fresh test database.

    Skips the test when PostgreSQL is not reachable.
    """
    try:
        sys_conn = await _admin_connection()
    except (OSError, asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError) as e:
        pytest.skip(f"PostgreSQL not available: {e}")

    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
        await sys_conn.execute(f'CREATE DATABASE {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()

    config = DatabaseConfig(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        database=TEST_DB_CONFIG['database'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        ssl_mode='prefer',
        min_pool_size=1,
        max_pool_size=2,
    )
    db = DatabaseConnection(config)
    await db.connect()

    yield db

    # Teardown
    await db.disconnect()
    sys_conn = await _admin_connection()
    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()
