"""Notification dispatch across the post-commit boundary."""

from ats.services.notifications.base import (
    EventSink,
    NotificationDispatcher,
    NotificationMessage,
    WorkflowEvent,
)
from ats.services.notifications.dispatchers import (
    DatabaseNotificationDispatcher,
    QueueNotificationDispatcher,
)
from ats.services.notifications.factory import create_notification_dispatcher

__all__ = [
    "DatabaseNotificationDispatcher",
    "EventSink",
    "NotificationDispatcher",
    "NotificationMessage",
    "QueueNotificationDispatcher",
    "WorkflowEvent",
    "create_notification_dispatcher",
]
