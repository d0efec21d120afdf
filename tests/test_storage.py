"""Tests for storage module."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ats.core.exceptions import TransientStoreError
from ats.core.storage import Database, _connect_args
from ats.models import User
from ats.models.status import Role


class TestConnectArgs:
    """Tests for lock timeout wiring per driver."""

    def test_sqlite_busy_timeout(self):
        """Test SQLite waits on a locked database for the timeout."""
        assert _connect_args("sqlite+aiosqlite:///./ats.db", 2.0) == {"timeout": 2.0}

    def test_postgres_lock_timeout(self):
        """Test PostgreSQL gets lock_timeout in milliseconds."""
        args = _connect_args("postgresql+asyncpg://u:p@localhost/ats", 1.5)
        assert args == {"server_settings": {"lock_timeout": "1500"}}

    def test_other_drivers(self):
        """Test no extra arguments for unknown drivers."""
        assert _connect_args("mysql+aiomysql://u:p@localhost/ats", 1.0) == {}


class TestDatabase:
    """Tests for the Database store handle."""

    async def test_transaction_commits(self, database):
        """Test a clean block is committed."""
        async with database.transaction() as session:
            session.add(
                User(email="a@example.com", first_name="A", last_name="B", role=Role.CANDIDATE)
            )

        async with database.session() as session:
            user = await session.get(User, 1)
        assert user.full_name == "A B"
        assert user.is_active is True

    async def test_transaction_rolls_back(self, database):
        """Test an exception discards the block's writes."""
        with pytest.raises(ValueError):
            async with database.transaction() as session:
                session.add(
                    User(email="a@example.com", first_name="A", last_name="B")
                )
                await session.flush()
                raise ValueError("boom")

        async with database.session() as session:
            assert await session.get(User, 1) is None

    @pytest.mark.parametrize(
        "error",
        [
            OperationalError("SELECT 1", {}, Exception("database is locked")),
            PoolTimeoutError("QueuePool limit reached"),
        ],
    )
    async def test_store_errors_become_transient(self, database, error):
        """Test lock timeouts and lost connections are reported as retryable."""
        with pytest.raises(TransientStoreError):
            async with database.transaction():
                raise error

    async def test_init_models_is_idempotent(self, tmp_path):
        """Test creating tables twice is harmless."""
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'twice.db'}")
        await database.init_models()
        await database.init_models()
        await database.dispose()
