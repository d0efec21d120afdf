"""Background tasks for the notification queue.

The queue dispatcher enqueues ``deliver_notification``; an RQ worker
started with ``rq worker ats-notifications`` runs it and stores the
notification.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from ats.core.config import settings
from ats.core.storage import Database
from ats.services.notifications.dispatchers import DatabaseNotificationDispatcher

logger = logging.getLogger(__name__)


def deliver_notification(payload: dict[str, Any]) -> dict[str, Any]:
    """Store one notification in the worker process.

    Failures propagate so RQ keeps the job in its failed registry for
    requeueing.
    """
    logger.info(
        f"Delivering notification {payload.get('type')} to user {payload.get('user_id')}"
    )
    try:
        asyncio.run(_deliver_async(payload))
    except Exception as e:
        logger.error(f"Notification delivery failed: {e!s}")
        raise

    return {
        "status": "delivered",
        "user_id": payload["user_id"],
        "type": payload["type"],
        "timestamp": datetime.now(UTC).isoformat(),
    }


async def _deliver_async(payload: dict[str, Any]) -> None:
    """Async implementation of notification delivery."""
    database = Database(
        str(settings.database_url),
        lock_timeout=settings.database_lock_timeout_seconds,
    )
    try:
        dispatcher = DatabaseNotificationDispatcher(database, settings.app_base_path)
        await dispatcher.notify(
            payload["user_id"],
            payload["type"],
            payload["message"],
            payload.get("link", ""),
            payload.get("data"),
        )
    finally:
        await database.dispose()
