"""GitHub REST API access."""

from dispatchrun.github.client import GitHubClient
from dispatchrun.github.models import Job, Step, Workflow, WorkflowRun

__all__ = ["GitHubClient", "Job", "Step", "Workflow", "WorkflowRun"]
