"""Schemas for workflow API requests and responses."""

from datetime import UTC, date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ats.models.status import (
    ApplicationStatus,
    InterviewStatus,
    InterviewType,
    OfferStatus,
)


class ApplicationStatusUpdateRequest(BaseModel):
    """Request to move an application to a new status."""

    status: ApplicationStatus = Field(..., description="Target status")
    notes: str | None = Field(default=None, description="Reason for the change")


class ApplicationResponse(BaseModel):
    """Application state after a workflow action."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    candidate_id: int
    job_id: int
    status: ApplicationStatus
    updated_at: datetime


class ScheduleInterviewRequest(BaseModel):
    """Request to schedule an interview round."""

    application_id: int
    interview_type: InterviewType
    scheduled_date: datetime
    location: str | None = Field(default=None, description="Address for on-site rounds")
    meeting_link: str | None = Field(default=None, description="Link for remote rounds")
    interviewers: list[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def store_as_naive_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone(UTC).replace(tzinfo=None)
        return value


class ScheduleInterviewResponse(BaseModel):
    interview_id: int
    message: str = "Interview scheduled successfully"


class InterviewStatusUpdateRequest(BaseModel):
    """Request to resolve an interview."""

    status: InterviewStatus = Field(
        ..., description="completed, cancelled or no_show"
    )
    notes: str | None = None

    @field_validator("status")
    @classmethod
    def status_must_resolve(cls, value: InterviewStatus) -> InterviewStatus:
        if value is InterviewStatus.SCHEDULED:
            raise ValueError("status must be completed, cancelled or no_show")
        return value


class MakeOfferRequest(BaseModel):
    """Request to make a job offer."""

    application_id: int
    salary: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    start_date: date
    benefits: str | None = None
    conditions: str | None = None


class MakeOfferResponse(BaseModel):
    offer_id: int
    message: str = "Job offer created successfully"


class OfferResponseRequest(BaseModel):
    """Candidate's answer to an offer."""

    response: OfferStatus = Field(..., description="accepted, rejected or negotiating")
    notes: str | None = None

    @field_validator("response")
    @classmethod
    def response_must_answer(cls, value: OfferStatus) -> OfferStatus:
        if value is OfferStatus.PENDING:
            raise ValueError("response must be accepted, rejected or negotiating")
        return value


class AckResponse(BaseModel):
    status: str = "success"
    message: str


class WorkflowHistoryItem(BaseModel):
    """Single ledger entry annotated with the actor's name."""

    id: int
    application_id: int
    status: str
    action: str
    performed_by: int
    performed_by_name: str | None
    performed_at: datetime
    notes: str


class WorkflowHistoryResponse(BaseModel):
    history: list[WorkflowHistoryItem]
    total_count: int


class UpcomingInterviewItem(BaseModel):
    """Scheduled interview with the job and the other party."""

    id: int
    application_id: int
    interview_type: InterviewType
    scheduled_date: datetime
    location: str | None
    meeting_link: str | None
    interviewers: list[str]
    job_title: str
    counterpart_name: str
    counterpart_email: str | None = None


class UpcomingInterviewsResponse(BaseModel):
    interviews: list[UpcomingInterviewItem]
    total_count: int
