"""Result handed from a sub-workflow back to the orchestrator."""

from dataclasses import dataclass, field

from ats.models.application import Application
from ats.models.status import ApplicationStatus, WorkflowAction
from ats.services.notifications.base import NotificationMessage


@dataclass
class WorkflowOutcome:
    """Validated change waiting to be persisted and recorded.

    The sub-workflow has already mutated its own entity (interview or
    offer); the orchestrator applies ``status`` to the application and
    writes the ledger entry.
    """

    application: Application
    status: ApplicationStatus
    action: WorkflowAction
    notes: str | None = None
    notifications: list[NotificationMessage] = field(default_factory=list)
    entity_id: int | None = None
