"""Factory for creating the configured notification dispatcher."""

from redis import Redis
from rq import Queue

from ats.core.config import Settings
from ats.core.storage import Database
from ats.services.notifications.base import NotificationDispatcher
from ats.services.notifications.dispatchers import (
    DatabaseNotificationDispatcher,
    QueueNotificationDispatcher,
)


def create_notification_dispatcher(
    settings: Settings, database: Database
) -> NotificationDispatcher:
    """Get the dispatcher selected by ``notification_backend``."""
    if settings.notification_backend == "database":
        return DatabaseNotificationDispatcher(database, settings.app_base_path)
    if settings.notification_backend == "queue":
        queue = Queue(
            settings.notification_queue_name,
            connection=Redis.from_url(settings.redis_url),
        )
        return QueueNotificationDispatcher(queue, settings.notification_job_timeout)
    raise ValueError(f"Unknown notification backend: {settings.notification_backend}")
