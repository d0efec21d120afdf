"""API routers."""

from ats.routers.workflow import router as workflow_router

__all__ = ["workflow_router"]
