"""Tests for job offers and candidate responses."""

from decimal import Decimal

import pytest
import pytest_asyncio
from conftest import MANAGER_ID, ledger_count, load_application, set_application_status
from pydantic import ValidationError

from ats.core.exceptions import (
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    NotFoundError,
)
from ats.models import Offer
from ats.models.status import ApplicationStatus, OfferStatus
from ats.schemas.workflow import MakeOfferRequest, OfferResponseRequest


async def load_offer(database, offer_id):
    async with database.session() as session:
        return await session.get(Offer, offer_id)


@pytest_asyncio.fixture
async def offer_id(database, seed, service, manager, offer_request):
    """A pending offer on a reviewed application."""
    await set_application_status(
        database, seed.application_id, ApplicationStatus.UNDER_REVIEW
    )
    return await service.make_offer(offer_request(), manager)


class TestMakeOffer:
    """Tests for making offers."""

    async def test_creates_pending_offer(self, database, seed, service, sink, offer_id):
        """Test the offer row and the candidate's notification."""
        offer = await load_offer(database, offer_id)
        assert offer.status is OfferStatus.PENDING
        assert offer.benefits == "Health insurance"
        assert offer.response_notes == ""

        [notification] = sink.notifications
        assert notification.type == "job_offer"
        assert notification.data["salary"] == "100000"
        assert notification.link == f"/offers/{offer_id}"

    async def test_applied_cannot_get_offer(
        self, database, seed, service, manager, offer_request
    ):
        """Test an offer is illegal before review."""
        with pytest.raises(IllegalTransitionError):
            await service.make_offer(offer_request(), manager)
        assert await ledger_count(database, seed.application_id) == 0

    async def test_closed_application_cannot_get_offer(
        self, database, seed, service, manager, offer_request
    ):
        """Test an offer on a hired application is illegal."""
        await set_application_status(database, seed.application_id, ApplicationStatus.HIRED)
        with pytest.raises(IllegalTransitionError):
            await service.make_offer(offer_request(), manager)

    async def test_candidate_cannot_make_offer(
        self, database, seed, service, candidate, offer_request
    ):
        """Test offers are a hiring-side action."""
        await set_application_status(
            database, seed.application_id, ApplicationStatus.UNDER_REVIEW
        )
        with pytest.raises(ForbiddenError):
            await service.make_offer(offer_request(), candidate)

    async def test_pending_offer_conflicts_for_any_role(
        self, seed, service, candidate, admin, offer_id, offer_request
    ):
        """Test the single pending offer rule is checked before the role."""
        for actor in (candidate, admin):
            with pytest.raises(ConflictError):
                await service.make_offer(offer_request(), actor)

    async def test_missing_application(self, seed, service, manager, offer_request):
        """Test an offer on an unknown application."""
        with pytest.raises(NotFoundError):
            await service.make_offer(offer_request(application_id=9999), manager)


class TestRespondToOffer:
    """Tests for candidate responses."""

    @pytest.mark.parametrize(
        "response,expected",
        [
            (OfferStatus.ACCEPTED, ApplicationStatus.OFFER_ACCEPTED),
            (OfferStatus.REJECTED, ApplicationStatus.OFFER_REJECTED),
            (OfferStatus.NEGOTIATING, ApplicationStatus.OFFER_MADE),
        ],
    )
    async def test_response_moves_application(
        self, database, seed, service, sink, candidate, offer_id, response, expected
    ):
        """Test each response updates both the offer and the application."""
        await service.respond_to_offer(offer_id, response, candidate, "Thanks")

        offer = await load_offer(database, offer_id)
        assert offer.status is response
        assert offer.response_notes == "Thanks"
        assert (await load_application(database, seed.application_id)).status is expected

        notification = sink.notifications[-1]
        assert notification.type == "offer_response"
        assert notification.user_id == MANAGER_ID
        assert notification.data["response"] == response.value

    async def test_negotiation_round_trip(
        self, database, seed, service, manager, candidate, offer_id, offer_request
    ):
        """Test negotiating allows a revised offer that supersedes the first."""
        await service.respond_to_offer(offer_id, OfferStatus.NEGOTIATING, candidate)
        revised_id = await service.make_offer(
            offer_request(salary=Decimal("110000")), manager
        )

        with pytest.raises(IllegalTransitionError):
            await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, candidate)

        await service.respond_to_offer(revised_id, OfferStatus.ACCEPTED, candidate)
        assert (await load_application(database, seed.application_id)).status is (
            ApplicationStatus.OFFER_ACCEPTED
        )
        assert (await load_offer(database, offer_id)).status is OfferStatus.NEGOTIATING

    async def test_pending_offer_answerable_after_review(
        self, database, seed, service, manager, candidate, offer_id, offer_request
    ):
        """Test moving back to under_review does not strand a pending offer."""
        await service.update_application_status(
            seed.application_id, ApplicationStatus.UNDER_REVIEW, manager
        )
        with pytest.raises(ConflictError):
            await service.make_offer(offer_request(), manager)

        await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, candidate)

        assert (await load_offer(database, offer_id)).status is OfferStatus.ACCEPTED
        assert (await load_application(database, seed.application_id)).status is (
            ApplicationStatus.OFFER_ACCEPTED
        )

    async def test_negotiation_after_review_allows_new_offer(
        self, database, seed, service, manager, candidate, offer_id, offer_request
    ):
        """Test a negotiating answer on a reviewed application reopens offers."""
        await service.update_application_status(
            seed.application_id, ApplicationStatus.UNDER_REVIEW, manager
        )
        await service.respond_to_offer(offer_id, OfferStatus.NEGOTIATING, candidate)

        revised_id = await service.make_offer(
            offer_request(salary=Decimal("105000")), manager
        )
        assert revised_id != offer_id
        assert (await load_application(database, seed.application_id)).status is (
            ApplicationStatus.OFFER_MADE
        )

    async def test_answered_offer_is_final(self, database, seed, service, candidate, offer_id):
        """Test a rejected offer cannot be accepted later."""
        await service.respond_to_offer(offer_id, OfferStatus.REJECTED, candidate)
        entries = await ledger_count(database, seed.application_id)

        with pytest.raises(IllegalTransitionError):
            await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, candidate)
        assert await ledger_count(database, seed.application_id) == entries

    async def test_other_candidate_is_forbidden(
        self, database, seed, service, other_candidate, offer_id
    ):
        """Test only the owning candidate may respond."""
        with pytest.raises(ForbiddenError):
            await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, other_candidate)
        assert (await load_offer(database, offer_id)).status is OfferStatus.PENDING

    async def test_hiring_manager_is_forbidden(self, seed, service, manager, offer_id):
        """Test staff cannot answer on the candidate's behalf."""
        with pytest.raises(ForbiddenError):
            await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, manager)

    async def test_ownership_checked_before_offer_state(
        self, seed, service, candidate, other_candidate, offer_id
    ):
        """Test a non-owner is forbidden even when the offer is already answered."""
        await service.respond_to_offer(offer_id, OfferStatus.ACCEPTED, candidate)
        with pytest.raises(ForbiddenError):
            await service.respond_to_offer(offer_id, OfferStatus.REJECTED, other_candidate)

    async def test_missing_offer(self, seed, service, candidate):
        """Test responding to an unknown offer."""
        with pytest.raises(NotFoundError):
            await service.respond_to_offer(9999, OfferStatus.ACCEPTED, candidate)


class TestOfferSchemas:
    """Tests for offer request validation."""

    def test_salary_must_be_positive(self):
        """Test zero salary is rejected."""
        with pytest.raises(ValidationError):
            MakeOfferRequest(application_id=1, salary=0, start_date="2030-01-01")

    def test_pending_is_not_a_response(self):
        """Test the response request refuses pending."""
        with pytest.raises(ValidationError):
            OfferResponseRequest(response=OfferStatus.PENDING)
