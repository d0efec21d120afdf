"""Closed vocabularies for roles, statuses and workflow actions."""

from enum import Enum


class Role(str, Enum):
    """Role attached to an authenticated actor."""

    CANDIDATE = "Candidate"
    HIRING_MANAGER = "HiringManager"
    SUPER_ADMIN = "SuperAdmin"


class ApplicationStatus(str, Enum):
    """Pipeline position of an application."""

    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    CANDIDATE_NO_SHOW = "candidate_no_show"
    OFFER_MADE = "offer_made"
    OFFER_ACCEPTED = "offer_accepted"
    OFFER_REJECTED = "offer_rejected"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {
        ApplicationStatus.HIRED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
        ApplicationStatus.OFFER_REJECTED,
    }
)


class WorkflowAction(str, Enum):
    """Action names recorded in the workflow history."""

    STATUS_CHANGE = "status_change"
    SCHEDULE_INTERVIEW = "schedule_interview"
    UPDATE_INTERVIEW = "update_interview"
    MAKE_OFFER = "make_offer"
    RESPOND_TO_OFFER = "respond_to_offer"


class InterviewType(str, Enum):
    PHONE = "phone"
    VIDEO = "video"
    IN_PERSON = "in-person"
    TECHNICAL = "technical"
    FINAL = "final"


class InterviewStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_terminal(self) -> bool:
        return self is not InterviewStatus.SCHEDULED


class OfferStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    NEGOTIATING = "negotiating"

    @property
    def is_open(self) -> bool:
        """Pending and negotiating offers still accept a response."""
        return self in (OfferStatus.PENDING, OfferStatus.NEGOTIATING)


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
