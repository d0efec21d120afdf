"""API routes for the application workflow."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ats.core.exceptions import WorkflowError, to_http_exception
from ats.core.identity import Actor, get_current_actor
from ats.schemas.workflow import (
    AckResponse,
    ApplicationResponse,
    ApplicationStatusUpdateRequest,
    InterviewStatusUpdateRequest,
    MakeOfferRequest,
    MakeOfferResponse,
    OfferResponseRequest,
    ScheduleInterviewRequest,
    ScheduleInterviewResponse,
    UpcomingInterviewsResponse,
    WorkflowHistoryResponse,
)
from ats.services.workflow_service import WorkflowService, get_workflow_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.put(
    "/applications/{application_id}/status", response_model=ApplicationResponse
)
async def update_application_status(
    application_id: int,
    request: ApplicationStatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Change an application's status, or withdraw it as its candidate."""
    try:
        return await service.update_application_status(
            application_id, request.status, actor, request.notes
        )
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error updating application {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/interviews", response_model=ScheduleInterviewResponse)
async def schedule_interview(
    request: ScheduleInterviewRequest,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Schedule an interview round for an application."""
    try:
        interview_id = await service.schedule_interview(request, actor)
        return ScheduleInterviewResponse(interview_id=interview_id)
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error scheduling interview: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.put("/interviews/{interview_id}/status", response_model=AckResponse)
async def update_interview_status(
    interview_id: int,
    request: InterviewStatusUpdateRequest,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Mark an interview completed, cancelled or no_show."""
    try:
        await service.update_interview_status(
            interview_id, request.status, actor, request.notes
        )
        return AckResponse(message="Interview status updated successfully")
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error updating interview {interview_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.post("/offers", response_model=MakeOfferResponse)
async def make_offer(
    request: MakeOfferRequest,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Make a job offer on an application."""
    try:
        offer_id = await service.make_offer(request, actor)
        return MakeOfferResponse(offer_id=offer_id)
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error making offer: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.put("/offers/{offer_id}/response", response_model=AckResponse)
async def respond_to_offer(
    offer_id: int,
    request: OfferResponseRequest,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Record the candidate's response to an offer."""
    try:
        await service.respond_to_offer(offer_id, request.response, actor, request.notes)
        return AckResponse(message="Offer response recorded successfully")
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error responding to offer {offer_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get(
    "/applications/{application_id}/history", response_model=WorkflowHistoryResponse
)
async def get_application_history(
    application_id: int,
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Get the workflow history of an application, newest first."""
    try:
        history = await service.get_history(application_id, actor)
        return WorkflowHistoryResponse(history=history, total_count=len(history))
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error reading history of {application_id}: {e}")
        raise HTTPException(status_code=500, detail="Database error")


@router.get("/upcoming-interviews", response_model=UpcomingInterviewsResponse)
async def get_upcoming_interviews(
    actor: Actor = Depends(get_current_actor),
    service: WorkflowService = Depends(get_workflow_service),
):
    """Get scheduled interviews visible to the current actor."""
    try:
        interviews = await service.get_upcoming_interviews(actor)
        return UpcomingInterviewsResponse(
            interviews=interviews, total_count=len(interviews)
        )
    except WorkflowError as e:
        raise to_http_exception(e)
    except SQLAlchemyError as e:
        logger.error(f"Database error getting upcoming interviews: {e}")
        raise HTTPException(status_code=500, detail="Database error")
