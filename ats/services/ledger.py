"""Append-only workflow history."""

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.models.history import WorkflowHistoryEntry
from ats.models.status import ApplicationStatus, WorkflowAction
from ats.models.user import User
from ats.schemas.workflow import WorkflowHistoryItem

logger = logging.getLogger(__name__)


def _now() -> datetime:
    """Get current time as UTC naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class WorkflowLedger:
    """Records accepted transitions and reads them back.

    Entries are only ever inserted. ``record`` runs inside the caller's
    transaction, so an entry exists exactly when the change it describes
    was committed.
    """

    async def record(
        self,
        session: AsyncSession,
        application_id: int,
        status: ApplicationStatus,
        action: WorkflowAction,
        performed_by: int,
        notes: str | None = None,
    ) -> WorkflowHistoryEntry:
        """Append one entry for an accepted transition."""
        # Keep performed_at non-decreasing per application even if clocks drift
        latest = await session.scalar(
            select(func.max(WorkflowHistoryEntry.performed_at)).where(
                WorkflowHistoryEntry.application_id == application_id
            )
        )
        performed_at = _now()
        if latest is not None and latest > performed_at:
            performed_at = latest

        entry = WorkflowHistoryEntry(
            application_id=application_id,
            status=status.value,
            action=action.value,
            performed_by=performed_by,
            performed_at=performed_at,
            notes=notes or "",
        )
        session.add(entry)
        await session.flush()
        logger.debug(
            f"Recorded {action.value} -> {status.value} "
            f"for application {application_id} (entry {entry.id})"
        )
        return entry

    async def history(
        self, session: AsyncSession, application_id: int
    ) -> list[WorkflowHistoryItem]:
        """Return all entries for an application, newest first."""
        query = (
            select(WorkflowHistoryEntry, User)
            .outerjoin(User, WorkflowHistoryEntry.performed_by == User.id)
            .where(WorkflowHistoryEntry.application_id == application_id)
            .order_by(
                WorkflowHistoryEntry.performed_at.desc(),
                WorkflowHistoryEntry.id.desc(),
            )
        )
        result = await session.execute(query)

        return [
            WorkflowHistoryItem(
                id=entry.id,
                application_id=entry.application_id,
                status=entry.status,
                action=entry.action,
                performed_by=entry.performed_by,
                performed_by_name=user.full_name if user is not None else None,
                performed_at=entry.performed_at,
                notes=entry.notes,
            )
            for entry, user in result.all()
        ]

    async def count(self, session: AsyncSession, application_id: int) -> int:
        """Number of entries recorded for an application."""
        return await session.scalar(
            select(func.count(WorkflowHistoryEntry.id)).where(
                WorkflowHistoryEntry.application_id == application_id
            )
        )
