"""Application state machine.

Every legal move is a row in ``TRANSITIONS``, keyed by the requested action
and its outcome (target status, interview result or offer response). A
request that matches no row is illegal; nothing is decided by ad hoc
conditionals elsewhere.
"""

from dataclasses import dataclass

from ats.core.exceptions import ForbiddenError, IllegalTransitionError
from ats.models.status import (
    TERMINAL_STATUSES,
    ApplicationStatus,
    InterviewStatus,
    OfferStatus,
    Role,
    WorkflowAction,
)

HIRING_ROLES = frozenset({Role.HIRING_MANAGER, Role.SUPER_ADMIN})
CANDIDATE_ONLY = frozenset({Role.CANDIDATE})

ALL_STATUSES = frozenset(ApplicationStatus)
NON_TERMINAL = ALL_STATUSES - TERMINAL_STATUSES

SCHEDULABLE = frozenset(
    {
        ApplicationStatus.APPLIED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.INTERVIEW_SCHEDULED,
    }
)
INTERVIEW_RESOLVABLE = frozenset(
    {
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.INTERVIEW_SCHEDULED,
        ApplicationStatus.INTERVIEW_COMPLETED,
        ApplicationStatus.CANDIDATE_NO_SHOW,
    }
)
OFFERABLE = frozenset(
    {
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.INTERVIEW_COMPLETED,
        ApplicationStatus.OFFER_MADE,
    }
)
# An open offer stays answerable while its application is open
AWAITING_RESPONSE = NON_TERMINAL


@dataclass(frozen=True)
class TransitionRule:
    """One legal move of the application state machine.

    ``result`` of None leaves the application status unchanged.
    """

    sources: frozenset[ApplicationStatus]
    roles: frozenset[Role]
    result: ApplicationStatus | None
    owner_only: bool = False


TRANSITIONS: dict[tuple[WorkflowAction, str | None], TransitionRule] = {
    (WorkflowAction.STATUS_CHANGE, ApplicationStatus.UNDER_REVIEW.value): TransitionRule(
        NON_TERMINAL, HIRING_ROLES, ApplicationStatus.UNDER_REVIEW
    ),
    (WorkflowAction.STATUS_CHANGE, ApplicationStatus.REJECTED.value): TransitionRule(
        NON_TERMINAL, HIRING_ROLES, ApplicationStatus.REJECTED
    ),
    (WorkflowAction.STATUS_CHANGE, ApplicationStatus.HIRED.value): TransitionRule(
        NON_TERMINAL, HIRING_ROLES, ApplicationStatus.HIRED
    ),
    (WorkflowAction.STATUS_CHANGE, ApplicationStatus.WITHDRAWN.value): TransitionRule(
        NON_TERMINAL, CANDIDATE_ONLY, ApplicationStatus.WITHDRAWN, owner_only=True
    ),
    (WorkflowAction.SCHEDULE_INTERVIEW, None): TransitionRule(
        SCHEDULABLE, HIRING_ROLES, ApplicationStatus.INTERVIEW_SCHEDULED
    ),
    (WorkflowAction.UPDATE_INTERVIEW, InterviewStatus.COMPLETED.value): TransitionRule(
        INTERVIEW_RESOLVABLE, HIRING_ROLES, ApplicationStatus.INTERVIEW_COMPLETED
    ),
    (WorkflowAction.UPDATE_INTERVIEW, InterviewStatus.NO_SHOW.value): TransitionRule(
        INTERVIEW_RESOLVABLE, HIRING_ROLES, ApplicationStatus.CANDIDATE_NO_SHOW
    ),
    # A cancelled interview never moves the pipeline, even on a closed application
    (WorkflowAction.UPDATE_INTERVIEW, InterviewStatus.CANCELLED.value): TransitionRule(
        ALL_STATUSES, HIRING_ROLES, None
    ),
    (WorkflowAction.MAKE_OFFER, None): TransitionRule(
        OFFERABLE, HIRING_ROLES, ApplicationStatus.OFFER_MADE
    ),
    (WorkflowAction.RESPOND_TO_OFFER, OfferStatus.ACCEPTED.value): TransitionRule(
        AWAITING_RESPONSE, CANDIDATE_ONLY, ApplicationStatus.OFFER_ACCEPTED, owner_only=True
    ),
    (WorkflowAction.RESPOND_TO_OFFER, OfferStatus.REJECTED.value): TransitionRule(
        AWAITING_RESPONSE, CANDIDATE_ONLY, ApplicationStatus.OFFER_REJECTED, owner_only=True
    ),
    (WorkflowAction.RESPOND_TO_OFFER, OfferStatus.NEGOTIATING.value): TransitionRule(
        AWAITING_RESPONSE, CANDIDATE_ONLY, ApplicationStatus.OFFER_MADE, owner_only=True
    ),
}


def _key(action: WorkflowAction, outcome: str | None) -> tuple[WorkflowAction, str | None]:
    # Plain values keep keys and error messages free of enum reprs
    return action, (outcome.value if hasattr(outcome, "value") else outcome)


def _describe(action: WorkflowAction, outcome: str | None) -> str:
    key = _key(action, outcome)
    return f"{action.value}:{key[1]}" if key[1] else action.value


def get_rule(
    action: WorkflowAction,
    outcome: str | None = None,
    current: ApplicationStatus | None = None,
) -> TransitionRule:
    """Look up the rule for an action, or fail if no such move exists."""
    rule = TRANSITIONS.get(_key(action, outcome))
    if rule is None:
        raise IllegalTransitionError(
            current.value if current is not None else None,
            _describe(action, outcome),
            "no such transition",
        )
    return rule


def authorize(
    action: WorkflowAction,
    role: Role,
    *,
    outcome: str | None = None,
    is_owner: bool = False,
    current: ApplicationStatus | None = None,
) -> TransitionRule:
    """Check role and ownership for an action.

    ``current`` only names the status in errors; it is not checked here.
    """
    rule = get_rule(action, outcome, current)
    if role not in rule.roles:
        raise ForbiddenError(_describe(action, outcome), role.value)
    if rule.owner_only and not is_owner:
        raise ForbiddenError(
            _describe(action, outcome),
            role.value,
            "Only the owning candidate may perform this action",
        )
    return rule


def ensure_not_terminal(
    current: ApplicationStatus, action: WorkflowAction, outcome: str | None = None
) -> None:
    """Refuse any action on a closed application unless its rule allows it."""
    rule = get_rule(action, outcome, current)
    if current in TERMINAL_STATUSES and current not in rule.sources:
        raise IllegalTransitionError(
            current.value, _describe(action, outcome), "application is closed"
        )


def apply_transition(
    current: ApplicationStatus,
    action: WorkflowAction,
    role: Role,
    *,
    outcome: str | None = None,
    is_owner: bool = False,
) -> ApplicationStatus:
    """Validate a requested move and return the resulting status.

    Pure: reads nothing but its arguments. Re-applying the status the
    application already has is a legal move and returns that status.

    Raises:
        IllegalTransitionError: the move does not exist, the application is
            closed, or the move is not allowed from ``current``.
        ForbiddenError: the role or ownership does not permit the move.
    """
    ensure_not_terminal(current, action, outcome)
    rule = authorize(
        action, role, outcome=outcome, is_owner=is_owner, current=current
    )
    if current not in rule.sources:
        raise IllegalTransitionError(current.value, _describe(action, outcome))
    return rule.result if rule.result is not None else current
