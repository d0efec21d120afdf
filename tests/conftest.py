"""Pytest configuration and fixtures."""

import os
from datetime import date, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio

# Set test environment variables before importing ats modules
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ["NOTIFICATION_BACKEND"] = "database"
os.environ.setdefault("ANALYTICS_ENABLED", "true")

from ats.core.identity import Actor  # noqa: E402
from ats.models.status import ApplicationStatus, InterviewType, Role  # noqa: E402
from ats.services.notifications.base import EventSink, WorkflowEvent  # noqa: E402

CANDIDATE_ID = 1
OTHER_CANDIDATE_ID = 2
MANAGER_ID = 3
ADMIN_ID = 4
OTHER_MANAGER_ID = 5


class RecordingSink(EventSink):
    """Collects published events."""

    def __init__(self):
        self.events: list[WorkflowEvent] = []

    async def publish(self, event: WorkflowEvent) -> None:
        self.events.append(event)

    @property
    def notifications(self):
        return [n for event in self.events for n in event.notifications]


class FailingSink(EventSink):
    """Sink whose transport is down."""

    def __init__(self):
        self.calls = 0

    async def publish(self, event: WorkflowEvent) -> None:
        self.calls += 1
        raise RuntimeError("notification transport unavailable")


@pytest_asyncio.fixture
async def database(tmp_path):
    """Fresh SQLite database per test."""
    from ats.core.storage import Database

    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'ats.db'}")
    await db.init_models()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def seed(database):
    """Users, one job and one application at ``applied``."""
    from ats.models import Application, Job, User

    async with database.transaction() as session:
        session.add_all(
            [
                User(id=CANDIDATE_ID, email="ann@example.com", first_name="Ann",
                     last_name="Lee", role=Role.CANDIDATE),
                User(id=OTHER_CANDIDATE_ID, email="bob@example.com", first_name="Bob",
                     last_name="Stone", role=Role.CANDIDATE),
                User(id=MANAGER_ID, email="maria@example.com", first_name="Maria",
                     last_name="Garcia", role=Role.HIRING_MANAGER),
                User(id=ADMIN_ID, email="root@example.com", first_name="Sam",
                     last_name="Admin", role=Role.SUPER_ADMIN),
                User(id=OTHER_MANAGER_ID, email="olga@example.com", first_name="Olga",
                     last_name="Petrova", role=Role.HIRING_MANAGER),
            ]
        )
        await session.flush()
        job = Job(title="Backend Engineer", created_by=MANAGER_ID)
        session.add(job)
        await session.flush()
        application = Application(
            candidate_id=CANDIDATE_ID, job_id=job.id, status=ApplicationStatus.APPLIED
        )
        session.add(application)
        await session.flush()

    return SimpleNamespace(job_id=job.id, application_id=application.id)


@pytest.fixture
def candidate():
    return Actor(id=CANDIDATE_ID, role=Role.CANDIDATE)


@pytest.fixture
def other_candidate():
    return Actor(id=OTHER_CANDIDATE_ID, role=Role.CANDIDATE)


@pytest.fixture
def manager():
    return Actor(id=MANAGER_ID, role=Role.HIRING_MANAGER)


@pytest.fixture
def admin():
    return Actor(id=ADMIN_ID, role=Role.SUPER_ADMIN)


@pytest.fixture
def other_manager():
    return Actor(id=OTHER_MANAGER_ID, role=Role.HIRING_MANAGER)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def service(database, sink):
    """Workflow service publishing to a recording sink."""
    from ats.services.workflow_service import WorkflowService

    return WorkflowService(database, [sink])


@pytest.fixture
def interview_request(seed):
    """Build a ScheduleInterviewRequest for the seeded application."""
    from ats.schemas.workflow import ScheduleInterviewRequest

    def _build(**overrides):
        data = {
            "application_id": seed.application_id,
            "interview_type": InterviewType.VIDEO,
            "scheduled_date": datetime(2030, 5, 4, 10, 30),
            "meeting_link": "https://meet.example.com/abc",
            "interviewers": ["Maria Garcia", "Tom Fisher"],
            "notes": "First round",
        }
        data.update(overrides)
        return ScheduleInterviewRequest(**data)

    return _build


@pytest.fixture
def offer_request(seed):
    """Build a MakeOfferRequest for the seeded application."""
    from ats.schemas.workflow import MakeOfferRequest

    def _build(**overrides):
        data = {
            "application_id": seed.application_id,
            "salary": Decimal("100000"),
            "start_date": date.today() + timedelta(days=30),
            "benefits": "Health insurance",
            "conditions": "Background check",
        }
        data.update(overrides)
        return MakeOfferRequest(**data)

    return _build


async def load_application(database, application_id):
    from ats.models import Application

    async with database.session() as session:
        return await session.get(Application, application_id)


async def set_application_status(database, application_id, status):
    """Put an application in a given status without going through the workflow."""
    from ats.models import Application

    async with database.transaction() as session:
        application = await session.get(Application, application_id)
        application.status = status


async def ledger_count(database, application_id):
    from ats.services.ledger import WorkflowLedger

    async with database.session() as session:
        return await WorkflowLedger().count(session, application_id)
