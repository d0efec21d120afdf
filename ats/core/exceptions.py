"""Custom exceptions for the workflow engine."""

from fastapi import HTTPException, status


class WorkflowError(Exception):
    """Base exception for workflow errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class NotFoundError(WorkflowError):
    """Raised when a referenced application, interview or offer does not exist."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class IllegalTransitionError(WorkflowError):
    """Raised when an action is not valid from the current status."""

    def __init__(self, current: str | None, action: str, detail: str | None = None):
        self.current = current
        self.action = action
        message = f"Cannot perform {action}"
        if current is not None:
            message = f"{message} from status {current}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ForbiddenError(WorkflowError):
    """Raised when the actor's role or ownership does not permit the action."""

    def __init__(self, action: str, role: str, detail: str | None = None):
        self.action = action
        self.role = role
        super().__init__(detail or f"Role {role} may not perform {action}")


class ConflictError(WorkflowError):
    """Raised when an action would break an invariant, e.g. a second pending offer."""


class TransientStoreError(WorkflowError):
    """Raised on lock timeouts or lost connections. Safe to retry."""

    def __init__(self, detail: str = "Storage temporarily unavailable"):
        self.detail = detail
        super().__init__(detail)


def unauthorized_exception(detail: str = "Not authenticated") -> HTTPException:
    """Return a 401 Unauthorized exception."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden_exception(detail: str = "Not enough permissions") -> HTTPException:
    """Return a 403 Forbidden exception."""
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=detail,
    )


def not_found_exception(detail: str = "Resource not found") -> HTTPException:
    """Return a 404 Not Found exception."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def conflict_exception(detail: str = "Conflict with current state") -> HTTPException:
    """Return a 409 Conflict exception."""
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=detail,
    )


def service_unavailable_exception(
    detail: str = "Storage temporarily unavailable", retry_after: int = 1
) -> HTTPException:
    """Return a 503 exception the client may retry."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=detail,
        headers={"Retry-After": str(retry_after)},
    )


def to_http_exception(error: WorkflowError) -> HTTPException:
    """Map a workflow error to the HTTP exception a client should see."""
    if isinstance(error, NotFoundError):
        return not_found_exception(error.message)
    if isinstance(error, ForbiddenError):
        return forbidden_exception(error.message)
    if isinstance(error, TransientStoreError):
        return service_unavailable_exception(error.message)
    return conflict_exception(error.message)
