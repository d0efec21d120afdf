"""Interview scheduling and resolution."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.exceptions import IllegalTransitionError
from ats.core.identity import Actor
from ats.models.application import Application, Interview
from ats.models.status import InterviewStatus, WorkflowAction
from ats.schemas.workflow import ScheduleInterviewRequest
from ats.services.notifications.base import NotificationMessage
from ats.services.outcome import WorkflowOutcome
from ats.services.state_machine import apply_transition, authorize

logger = logging.getLogger(__name__)


class InterviewWorkflow:
    """Rules for interview rounds and their effect on the application."""

    async def schedule(
        self,
        session: AsyncSession,
        application: Application,
        request: ScheduleInterviewRequest,
        actor: Actor,
    ) -> WorkflowOutcome:
        """Create a scheduled interview round.

        Later rounds re-affirm ``interview_scheduled`` on the application.
        """
        new_status = apply_transition(
            application.status, WorkflowAction.SCHEDULE_INTERVIEW, actor.role
        )

        interview = Interview(
            application_id=application.id,
            interview_type=request.interview_type,
            scheduled_date=request.scheduled_date,
            location=request.location,
            meeting_link=request.meeting_link,
            interviewers=list(request.interviewers),
            notes=request.notes or "",
            status=InterviewStatus.SCHEDULED,
        )
        session.add(interview)
        await session.flush()

        invitation = NotificationMessage(
            user_id=application.candidate_id,
            type="interview_scheduled",
            message=(
                f"Interview scheduled for {application.job.title} on "
                f"{request.scheduled_date:%Y-%m-%d %H:%M}"
            ),
            link=f"/interviews/{interview.id}",
            data={
                "interview_id": interview.id,
                "application_id": application.id,
                "interview_type": request.interview_type.value,
                "scheduled_date": request.scheduled_date.isoformat(),
                "location": request.location,
                "meeting_link": request.meeting_link,
            },
        )

        logger.info(
            f"Interview {interview.id} ({request.interview_type.value}) scheduled "
            f"for application {application.id}"
        )
        return WorkflowOutcome(
            application=application,
            status=new_status,
            action=WorkflowAction.SCHEDULE_INTERVIEW,
            notes=request.notes,
            notifications=[invitation],
            entity_id=interview.id,
        )

    async def update_status(
        self,
        session: AsyncSession,
        application: Application,
        interview: Interview,
        new_status: InterviewStatus,
        notes: str | None,
        actor: Actor,
    ) -> WorkflowOutcome:
        """Resolve an interview as completed, cancelled or no_show."""
        authorize(
            WorkflowAction.UPDATE_INTERVIEW,
            actor.role,
            outcome=new_status,
            current=application.status,
        )
        if interview.status.is_terminal:
            raise IllegalTransitionError(
                interview.status.value,
                WorkflowAction.UPDATE_INTERVIEW.value,
                f"interview {interview.id} is already {interview.status.value}",
            )

        application_status = apply_transition(
            application.status,
            WorkflowAction.UPDATE_INTERVIEW,
            actor.role,
            outcome=new_status,
        )

        interview.status = new_status
        if notes:
            interview.notes = notes

        notifications = []
        if new_status is InterviewStatus.CANCELLED:
            notifications.append(
                NotificationMessage(
                    user_id=application.candidate_id,
                    type="interview_cancelled",
                    message=(
                        f"Your interview for {application.job.title} on "
                        f"{interview.scheduled_date:%Y-%m-%d %H:%M} was cancelled"
                    ),
                    link=f"/interviews/{interview.id}",
                    data={
                        "interview_id": interview.id,
                        "application_id": application.id,
                    },
                )
            )

        logger.info(
            f"Interview {interview.id} marked {new_status.value}, application "
            f"{application.id} -> {application_status.value}"
        )
        return WorkflowOutcome(
            application=application,
            status=application_status,
            action=WorkflowAction.UPDATE_INTERVIEW,
            notes=notes,
            notifications=notifications,
            entity_id=interview.id,
        )
