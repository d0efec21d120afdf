"""Core application components."""

from ats.core.config import Settings, settings
from ats.core.exceptions import (
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    NotFoundError,
    TransientStoreError,
    WorkflowError,
)
from ats.core.storage import Base, Database

__all__ = [
    "Base",
    "ConflictError",
    "Database",
    "ForbiddenError",
    "IllegalTransitionError",
    "NotFoundError",
    "Settings",
    "TransientStoreError",
    "WorkflowError",
    "settings",
]
