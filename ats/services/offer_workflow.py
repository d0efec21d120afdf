"""Job offers and candidate responses."""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ats.core.exceptions import ConflictError, IllegalTransitionError
from ats.core.identity import Actor
from ats.models.application import Application, Offer
from ats.models.status import OfferStatus, WorkflowAction
from ats.schemas.workflow import MakeOfferRequest
from ats.services.notifications.base import NotificationMessage
from ats.services.outcome import WorkflowOutcome
from ats.services.state_machine import (
    apply_transition,
    authorize,
    ensure_not_terminal,
)

logger = logging.getLogger(__name__)

DEFAULT_OFFER_NOTE = "Job offer created"


class OfferWorkflow:
    """Rules for offers and their effect on the application."""

    async def make_offer(
        self,
        session: AsyncSession,
        application: Application,
        request: MakeOfferRequest,
        actor: Actor,
    ) -> WorkflowOutcome:
        """Create a pending offer.

        A pending offer blocks any new one, whoever asks.
        """
        ensure_not_terminal(application.status, WorkflowAction.MAKE_OFFER)

        pending_id = await session.scalar(
            select(Offer.id)
            .where(
                Offer.application_id == application.id,
                Offer.status == OfferStatus.PENDING,
            )
            .limit(1)
        )
        if pending_id is not None:
            raise ConflictError(
                f"Application {application.id} already has pending offer {pending_id}"
            )

        new_status = apply_transition(
            application.status, WorkflowAction.MAKE_OFFER, actor.role
        )

        offer = Offer(
            application_id=application.id,
            salary=request.salary,
            start_date=request.start_date,
            benefits=request.benefits or "",
            conditions=request.conditions or "",
            status=OfferStatus.PENDING,
        )
        session.add(offer)
        await session.flush()

        notification = NotificationMessage(
            user_id=application.candidate_id,
            type="job_offer",
            message=f"You have received a job offer for {application.job.title}",
            link=f"/offers/{offer.id}",
            data={
                "offer_id": offer.id,
                "application_id": application.id,
                "salary": str(request.salary),
                "start_date": request.start_date.isoformat(),
                "benefits": request.benefits,
                "conditions": request.conditions,
            },
        )

        logger.info(f"Offer {offer.id} made on application {application.id}")
        return WorkflowOutcome(
            application=application,
            status=new_status,
            action=WorkflowAction.MAKE_OFFER,
            notes=DEFAULT_OFFER_NOTE,
            notifications=[notification],
            entity_id=offer.id,
        )

    async def respond(
        self,
        session: AsyncSession,
        application: Application,
        offer: Offer,
        response: OfferStatus,
        notes: str | None,
        actor: Actor,
    ) -> WorkflowOutcome:
        """Record the owning candidate's answer to an open offer."""
        is_owner = application.candidate_id == actor.id
        authorize(
            WorkflowAction.RESPOND_TO_OFFER,
            actor.role,
            outcome=response,
            is_owner=is_owner,
            current=application.status,
        )

        if not offer.status.is_open:
            raise IllegalTransitionError(
                offer.status.value,
                WorkflowAction.RESPOND_TO_OFFER.value,
                f"offer {offer.id} was already answered",
            )

        latest_id = await session.scalar(
            select(func.max(Offer.id)).where(Offer.application_id == application.id)
        )
        if latest_id != offer.id:
            raise IllegalTransitionError(
                offer.status.value,
                WorkflowAction.RESPOND_TO_OFFER.value,
                f"offer {offer.id} was superseded by offer {latest_id}",
            )

        new_status = apply_transition(
            application.status,
            WorkflowAction.RESPOND_TO_OFFER,
            actor.role,
            outcome=response,
            is_owner=is_owner,
        )

        offer.status = response
        offer.response_notes = notes or ""

        notification = NotificationMessage(
            user_id=application.job.created_by,
            type="offer_response",
            message=(
                f"Offer {offer.id} for {application.job.title} "
                f"was {response.value} by the candidate"
            ),
            link=f"/offers/{offer.id}",
            data={
                "offer_id": offer.id,
                "application_id": application.id,
                "response": response.value,
            },
        )

        logger.info(
            f"Offer {offer.id} {response.value}, application {application.id} "
            f"-> {new_status.value}"
        )
        return WorkflowOutcome(
            application=application,
            status=new_status,
            action=WorkflowAction.RESPOND_TO_OFFER,
            notes=notes,
            notifications=[notification],
            entity_id=offer.id,
        )
