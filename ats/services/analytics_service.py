"""Analytics feed of application status changes."""

import logging

from ats.core.storage import Database
from ats.models.history import AnalyticsStatusChange
from ats.models.status import WorkflowAction
from ats.services.notifications.base import EventSink, WorkflowEvent

logger = logging.getLogger(__name__)


class AnalyticsRecorder(EventSink):
    """Writes one row per committed status change for reporting."""

    def __init__(self, database: Database):
        self.database = database

    async def publish(self, event: WorkflowEvent) -> None:
        # Explicit status changes count even when the status is re-affirmed
        if not event.status_changed and event.action is not WorkflowAction.STATUS_CHANGE:
            return

        async with self.database.transaction() as session:
            session.add(
                AnalyticsStatusChange(
                    application_id=event.application_id,
                    status=event.status.value,
                    changed_at=event.occurred_at,
                )
            )
        logger.debug(
            f"Analytics status change recorded for application "
            f"{event.application_id}: {event.status.value}"
        )
