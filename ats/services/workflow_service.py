"""Transactional orchestration of workflow actions."""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    WorkflowError,
)
from ats.core.identity import Actor
from ats.core.storage import Database
from ats.models.application import Application, Interview, Offer
from ats.models.status import (
    ApplicationStatus,
    InterviewStatus,
    OfferStatus,
    Role,
    WorkflowAction,
)
from ats.models.user import Job, User
from ats.schemas.workflow import (
    ApplicationResponse,
    MakeOfferRequest,
    ScheduleInterviewRequest,
    UpcomingInterviewItem,
    WorkflowHistoryItem,
)
from ats.services.interview_workflow import InterviewWorkflow
from ats.services.ledger import WorkflowLedger
from ats.services.notifications.base import (
    EventSink,
    NotificationMessage,
    WorkflowEvent,
)
from ats.services.offer_workflow import OfferWorkflow
from ats.services.outcome import WorkflowOutcome
from ats.services.state_machine import apply_transition

logger = logging.getLogger(__name__)

Operation = Callable[[AsyncSession], Awaitable[WorkflowOutcome]]


def _now() -> datetime:
    """Get current time as UTC naive datetime for DB storage."""
    return datetime.now(UTC).replace(tzinfo=None)


class WorkflowService:
    """Runs each workflow action as one atomic unit.

    Validation, the entity change and the ledger entry share a single
    transaction. Events go out to the sinks only after that transaction
    commits, and a failing sink never undoes the action.
    """

    def __init__(
        self,
        database: Database,
        sinks: list[EventSink] | None = None,
        ledger: WorkflowLedger | None = None,
        interviews: InterviewWorkflow | None = None,
        offers: OfferWorkflow | None = None,
    ):
        self.database = database
        self.sinks = list(sinks or [])
        self.ledger = ledger or WorkflowLedger()
        self.interviews = interviews or InterviewWorkflow()
        self.offers = offers or OfferWorkflow()

    async def update_application_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        actor: Actor,
        notes: str | None = None,
    ) -> ApplicationResponse:
        """Move an application by explicit status change, including withdrawal."""

        async def operation(session: AsyncSession) -> WorkflowOutcome:
            application = await self._lock_application(session, application_id)
            new_status = apply_transition(
                application.status,
                WorkflowAction.STATUS_CHANGE,
                actor.role,
                outcome=status,
                is_owner=application.candidate_id == actor.id,
            )
            return WorkflowOutcome(
                application=application,
                status=new_status,
                action=WorkflowAction.STATUS_CHANGE,
                notes=notes,
                notifications=self._status_notifications(application, new_status),
            )

        outcome = await self._execute(operation, actor)
        return ApplicationResponse.model_validate(outcome.application)

    async def schedule_interview(
        self, request: ScheduleInterviewRequest, actor: Actor
    ) -> int:
        """Schedule an interview round and return its id."""

        async def operation(session: AsyncSession) -> WorkflowOutcome:
            application = await self._lock_application(session, request.application_id)
            return await self.interviews.schedule(session, application, request, actor)

        outcome = await self._execute(operation, actor)
        return outcome.entity_id

    async def update_interview_status(
        self,
        interview_id: int,
        status: InterviewStatus,
        actor: Actor,
        notes: str | None = None,
    ) -> None:
        """Resolve an interview and move its application accordingly."""

        async def operation(session: AsyncSession) -> WorkflowOutcome:
            application_id = await session.scalar(
                select(Interview.application_id).where(Interview.id == interview_id)
            )
            if application_id is None:
                raise NotFoundError("Interview", interview_id)

            application = await self._lock_application(session, application_id)
            interview = await session.scalar(
                select(Interview).where(Interview.id == interview_id).with_for_update()
            )
            return await self.interviews.update_status(
                session, application, interview, status, notes, actor
            )

        await self._execute(operation, actor)

    async def make_offer(self, request: MakeOfferRequest, actor: Actor) -> int:
        """Make an offer on an application and return its id."""

        async def operation(session: AsyncSession) -> WorkflowOutcome:
            application = await self._lock_application(session, request.application_id)
            return await self.offers.make_offer(session, application, request, actor)

        outcome = await self._execute(operation, actor)
        return outcome.entity_id

    async def respond_to_offer(
        self,
        offer_id: int,
        response: OfferStatus,
        actor: Actor,
        notes: str | None = None,
    ) -> None:
        """Record the candidate's response to an offer."""

        async def operation(session: AsyncSession) -> WorkflowOutcome:
            application_id = await session.scalar(
                select(Offer.application_id).where(Offer.id == offer_id)
            )
            if application_id is None:
                raise NotFoundError("Offer", offer_id)

            application = await self._lock_application(session, application_id)
            offer = await session.scalar(
                select(Offer).where(Offer.id == offer_id).with_for_update()
            )
            return await self.offers.respond(
                session, application, offer, response, notes, actor
            )

        await self._execute(operation, actor)

    async def get_history(
        self, application_id: int, actor: Actor
    ) -> list[WorkflowHistoryItem]:
        """Ledger entries for an application, newest first."""
        async with self.database.session() as session:
            application = await session.get(Application, application_id)
            if application is None:
                raise NotFoundError("Application", application_id)
            if actor.role is Role.CANDIDATE and application.candidate_id != actor.id:
                raise ForbiddenError(
                    "view_history",
                    actor.role.value,
                    "Candidates may only view their own application history",
                )
            return await self.ledger.history(session, application_id)

    async def get_upcoming_interviews(self, actor: Actor) -> list[UpcomingInterviewItem]:
        """Scheduled interviews visible to the actor, soonest first.

        Hiring staff see interviews for jobs they created; candidates see
        their own.
        """
        if actor.is_hiring:
            query = (
                select(Interview, Job.title, User)
                .join(Application, Interview.application_id == Application.id)
                .join(Job, Application.job_id == Job.id)
                .join(User, Application.candidate_id == User.id)
                .where(Job.created_by == actor.id)
            )
        else:
            query = (
                select(Interview, Job.title, User)
                .join(Application, Interview.application_id == Application.id)
                .join(Job, Application.job_id == Job.id)
                .join(User, Job.created_by == User.id)
                .where(Application.candidate_id == actor.id)
            )
        query = query.where(Interview.status == InterviewStatus.SCHEDULED).order_by(
            Interview.scheduled_date.asc(), Interview.id.asc()
        )

        async with self.database.session() as session:
            result = await session.execute(query)
            rows = result.all()

        return [
            UpcomingInterviewItem(
                id=interview.id,
                application_id=interview.application_id,
                interview_type=interview.interview_type,
                scheduled_date=interview.scheduled_date,
                location=interview.location,
                meeting_link=interview.meeting_link,
                interviewers=interview.interviewers or [],
                job_title=job_title,
                counterpart_name=counterpart.full_name,
                counterpart_email=counterpart.email if actor.is_hiring else None,
            )
            for interview, job_title, counterpart in rows
        ]

    async def _lock_application(
        self, session: AsyncSession, application_id: int
    ) -> Application:
        """Load the application row and hold its lock until commit."""
        application = await session.scalar(
            select(Application)
            .where(Application.id == application_id)
            .with_for_update(of=Application)
        )
        if application is None:
            raise NotFoundError("Application", application_id)
        return application

    async def _execute(self, operation: Operation, actor: Actor) -> WorkflowOutcome:
        """Validate, mutate and record in one transaction, then publish."""
        try:
            async with self.database.transaction() as session:
                outcome = await operation(session)
                application = outcome.application
                previous_status = application.status

                application.status = outcome.status
                application.updated_at = _now()
                entry = await self.ledger.record(
                    session,
                    application.id,
                    outcome.status,
                    outcome.action,
                    actor.id,
                    outcome.notes,
                )
                event = WorkflowEvent(
                    application_id=application.id,
                    action=outcome.action,
                    previous_status=previous_status,
                    status=outcome.status,
                    performed_by=actor.id,
                    occurred_at=entry.performed_at,
                    notifications=tuple(outcome.notifications),
                )
        except WorkflowError as e:
            logger.warning(
                f"Workflow action rejected for actor {actor.id} "
                f"({actor.role.value}): {type(e).__name__}: {e.message}"
            )
            raise
        except IntegrityError as e:
            logger.warning(f"Workflow action hit a constraint: {e.orig}")
            raise ConflictError("Change conflicts with the current state") from e

        logger.info(
            f"Application {event.application_id}: {event.action.value} "
            f"{event.previous_status.value} -> {event.status.value} by {actor.id}"
        )
        await self._publish(event)
        return outcome

    async def _publish(self, event: WorkflowEvent) -> None:
        """Hand a committed event to every sink; failures are only logged."""
        for sink in self.sinks:
            try:
                await sink.publish(event)
            except Exception as e:
                logger.error(
                    f"{type(sink).__name__} failed for application "
                    f"{event.application_id} ({event.action.value}): {e}"
                )

    def _status_notifications(
        self, application: Application, new_status: ApplicationStatus
    ) -> list[NotificationMessage]:
        job = application.job
        if new_status is ApplicationStatus.WITHDRAWN:
            return [
                NotificationMessage(
                    user_id=job.created_by,
                    type="application_withdrawn",
                    message=f"A candidate withdrew their application for {job.title}",
                    link=f"/applications/{application.id}",
                    data={"application_id": application.id},
                )
            ]
        return [
            NotificationMessage(
                user_id=application.candidate_id,
                type="application_status_update",
                message=(
                    f"Your application status for {job.title} has been "
                    f"updated to {new_status.value}"
                ),
                link=f"/applications/{application.id}",
                data={"application_id": application.id, "status": new_status.value},
            )
        ]


def get_workflow_service(request: Request) -> WorkflowService:
    """FastAPI dependency returning the service built at startup."""
    return request.app.state.workflow_service
