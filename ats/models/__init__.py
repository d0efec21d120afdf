"""Database models."""

from ats.models.application import Application, Interview, Offer
from ats.models.history import (
    AnalyticsStatusChange,
    Notification,
    WorkflowHistoryEntry,
)
from ats.models.user import Job, User

__all__ = [
    "AnalyticsStatusChange",
    "Application",
    "Interview",
    "Job",
    "Notification",
    "Offer",
    "User",
    "WorkflowHistoryEntry",
]
