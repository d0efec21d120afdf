"""Workflow services."""

from ats.services.workflow_service import WorkflowService, get_workflow_service

__all__ = ["WorkflowService", "get_workflow_service"]
