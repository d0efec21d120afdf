"""Tests for background notification tasks."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select

from ats.core.storage import Database
from ats.models.history import Notification


def worker_settings(url: str) -> SimpleNamespace:
    return SimpleNamespace(
        database_url=url, database_lock_timeout_seconds=5.0, app_base_path="/ats"
    )


class TestDeliverNotification:
    """Tests for the deliver_notification RQ job."""

    def test_stores_notification(self, tmp_path):
        """Test the worker writes the notification with its own store handle."""
        from ats.tasks import deliver_notification

        url = f"sqlite+aiosqlite:///{tmp_path / 'worker.db'}"

        async def create_tables():
            database = Database(url)
            await database.init_models()
            await database.dispose()

        async def read_back():
            database = Database(url)
            async with database.session() as session:
                result = await session.execute(select(Notification))
                rows = list(result.scalars().all())
            await database.dispose()
            return rows

        asyncio.run(create_tables())
        payload = {
            "user_id": 1,
            "type": "interview_scheduled",
            "message": "Interview scheduled",
            "link": "/interviews/4",
            "data": {"interview_id": 4},
        }

        with patch("ats.tasks.settings", worker_settings(url)):
            result = deliver_notification(payload)

        assert result["status"] == "delivered"
        assert result["user_id"] == 1
        assert result["type"] == "interview_scheduled"

        [row] = asyncio.run(read_back())
        assert row.link == "/ats/interviews/4"
        assert row.data == {"interview_id": 4}

    def test_failure_is_reraised(self):
        """Test a failed delivery propagates so RQ can retry the job."""
        from ats.tasks import deliver_notification

        failing = AsyncMock(side_effect=RuntimeError("store down"))
        with patch("ats.tasks._deliver_async", failing):
            with pytest.raises(RuntimeError, match="store down"):
                deliver_notification({"user_id": 1, "type": "job_offer", "message": "x"})
        failing.assert_awaited_once()
