"""Error taxonomy for dispatch and run resolution.

The GitHub client raises these by status code so that callers never
have to inspect message text:

    DispatchRunError
    ├── WorkflowNotFound      selector matched no workflow
    ├── DispatchFailed        dispatch failed or was refused
    │   └── WorkflowDisabled  dispatch refused, workflow is disabled
    ├── ApiError              any other failed API call
    │   └── NotFound          404, often a run that is still bootstrapping
    └── ResolutionTimeout     no run identified within the time budget
"""

from __future__ import annotations


class DispatchRunError(Exception):
    """Base class for all dispatchrun failures."""

    kind = "error"


class WorkflowNotFound(DispatchRunError):
    """No workflow matched the selector."""

    kind = "workflow_not_found"

    def __init__(self, selector: str, owner: str, repo: str):
        self.selector = selector
        super().__init__(
            f"Unable to find workflow '{selector}' in {owner}/{repo}"
        )


class DispatchFailed(DispatchRunError):
    """The dispatch call failed or got a non-success status."""

    kind = "dispatch_failed"

    def __init__(self, status: int | None, message: str = ""):
        self.status = status
        self.message = message
        received = (
            f"received status {status}" if status is not None
            else "no response"
        )
        detail = f": {message}" if message else ""
        super().__init__(f"Failed to dispatch workflow, {received}{detail}")


class WorkflowDisabled(DispatchFailed):
    """The workflow exists but is disabled, so nothing was dispatched."""

    kind = "workflow_disabled"


class ApiError(DispatchRunError):
    """A GitHub API call failed.

    status is None when the request never produced a response
    (connection reset, timeout).
    """

    kind = "api_error"

    def __init__(self, operation: str, status: int | None, message: str = ""):
        self.operation = operation
        self.status = status
        self.message = message
        received = (
            f"received {status}" if status is not None else "no response"
        )
        detail = f": {message}" if message else ""
        super().__init__(f"{operation} failed, {received}{detail}")


class NotFound(ApiError):
    """404 from the API."""

    kind = "not_found"

    def __init__(self, operation: str, message: str = "Not Found"):
        super().__init__(operation, 404, message)


class ResolutionTimeout(DispatchRunError):
    """The run could not be identified before the deadline."""

    kind = "timeout"


__all__ = [
    "DispatchRunError",
    "WorkflowNotFound",
    "DispatchFailed",
    "WorkflowDisabled",
    "ApiError",
    "NotFound",
    "ResolutionTimeout",
]
