"""Request and response schemas."""

from ats.schemas.workflow import (
    ApplicationResponse,
    ApplicationStatusUpdateRequest,
    MakeOfferRequest,
    ScheduleInterviewRequest,
    WorkflowHistoryItem,
)

__all__ = [
    "ApplicationResponse",
    "ApplicationStatusUpdateRequest",
    "MakeOfferRequest",
    "ScheduleInterviewRequest",
    "WorkflowHistoryItem",
]
