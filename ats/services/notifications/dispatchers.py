"""Notification dispatcher implementations."""

import asyncio
import logging
from typing import Any

from rq import Queue

from ats.core.storage import Database
from ats.models.history import Notification
from ats.services.notifications.base import (
    NotificationDispatcher,
    NotificationMessage,
)

logger = logging.getLogger(__name__)


class DatabaseNotificationDispatcher(NotificationDispatcher):
    """Stores in-app notifications directly."""

    def __init__(self, database: Database, link_prefix: str = ""):
        self.database = database
        self.link_prefix = link_prefix

    async def notify(
        self,
        user_id: int,
        type: str,
        message: str,
        link: str = "",
        data: dict[str, Any] | None = None,
    ) -> None:
        async with self.database.transaction() as session:
            session.add(
                Notification(
                    user_id=user_id,
                    type=type,
                    message=message,
                    link=f"{self.link_prefix}{link}" if link else "",
                    data=data or {},
                )
            )
        logger.info(f"Notification {type} stored for user {user_id}")


class QueueNotificationDispatcher(NotificationDispatcher):
    """Hands notifications to an RQ worker.

    Delivery is at-least-once as far as the queue guarantees it; the
    workflow never waits for the worker.
    """

    def __init__(self, queue: Queue, job_timeout: str = "1m"):
        self.queue = queue
        self.job_timeout = job_timeout

    async def notify(
        self,
        user_id: int,
        type: str,
        message: str,
        link: str = "",
        data: dict[str, Any] | None = None,
    ) -> None:
        from ats.tasks import deliver_notification

        payload = NotificationMessage(
            user_id=user_id, type=type, message=message, link=link, data=data or {}
        ).to_payload()
        # rq talks to Redis synchronously
        job = await asyncio.to_thread(
            self.queue.enqueue,
            deliver_notification,
            payload,
            job_timeout=self.job_timeout,
            description=f"Notify user {user_id}: {type}",
        )
        logger.info(f"Enqueued notification {type} for user {user_id} as job {job.id}")
