"""Events published after a workflow transaction commits."""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from ats.models.status import ApplicationStatus, WorkflowAction


@dataclass(frozen=True)
class NotificationMessage:
    """A message for one user, built while the transaction is open."""

    user_id: int
    type: str
    message: str
    link: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """JSON-serialisable form used on the queue."""
        return asdict(self)


@dataclass(frozen=True)
class WorkflowEvent:
    """Outcome of one committed workflow action."""

    application_id: int
    action: WorkflowAction
    previous_status: ApplicationStatus
    status: ApplicationStatus
    performed_by: int
    occurred_at: datetime
    notifications: tuple[NotificationMessage, ...] = ()

    @property
    def status_changed(self) -> bool:
        return self.previous_status is not self.status


class EventSink(ABC):
    """Consumer of committed workflow events.

    Sinks run after commit. A failing sink never affects the workflow
    outcome; the orchestrator logs the failure and moves on.
    """

    @abstractmethod
    async def publish(self, event: WorkflowEvent) -> None:
        """Handle one committed event."""
        pass


class NotificationDispatcher(EventSink):
    """Delivers the notifications attached to workflow events."""

    @abstractmethod
    async def notify(
        self,
        user_id: int,
        type: str,
        message: str,
        link: str = "",
        data: dict[str, Any] | None = None,
    ) -> None:
        """Fire-and-forget delivery of a single notification."""
        pass

    async def publish(self, event: WorkflowEvent) -> None:
        for notification in event.notifications:
            await self.notify(
                notification.user_id,
                notification.type,
                notification.message,
                notification.link,
                notification.data,
            )
