"""Async GitHub REST client for the Actions endpoints dispatchrun uses.

Every method either returns parsed payload models or raises one of the
errors in dispatchrun.core.errors; callers never look at status codes.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx

from dispatchrun import __version__
from dispatchrun.core.errors import (
    ApiError,
    DispatchFailed,
    NotFound,
    WorkflowDisabled,
)
from dispatchrun.core.log import logger
from dispatchrun.github.models import Job, Workflow, WorkflowRun

ModelT = TypeVar("ModelT", Job, Workflow, WorkflowRun)

API_VERSION = "2022-11-28"

# GitHub answers 422 with this message when dispatching a disabled workflow
_DISABLED_MESSAGE = "disabled workflow"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("message", ""))
    return ""


def _parse(
    operation: str,
    response: httpx.Response,
    model: type[ModelT],
) -> ModelT:
    """Validate a JSON object payload into model.

    Raises:
        ApiError: the body is not JSON or does not fit the model
    """
    try:
        return model.model_validate(response.json())
    except ValueError as e:
        raise ApiError(
            operation, response.status_code, f"malformed response: {e}"
        ) from e


def _parse_list(
    operation: str,
    response: httpx.Response,
    key: str,
    model: type[ModelT],
) -> list[ModelT]:
    """Validate the list found under key in a JSON object payload."""
    try:
        items = response.json().get(key) or []
        return [model.model_validate(item) for item in items]
    except (ValueError, TypeError, AttributeError) as e:
        raise ApiError(
            operation, response.status_code, f"malformed response: {e}"
        ) from e


class GitHubClient:
    """Thin async wrapper over the GitHub REST API.

    Use as an async context manager so the connection pool is closed:

        async with GitHubClient(token) as client:
            workflows = await client.list_workflows("octo", "repo")
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Create a client.

        Args:
            token: Token sent as a bearer credential
            api_url: REST API base URL
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, e.g. MockTransport
                in tests
        """
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": f"dispatchrun/{__version__}",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        operation: str,
        method: str,
        url: str,
        expected: tuple[int, ...] = (200,),
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and classify failures.

        Raises:
            NotFound: on 404
            ApiError: on any other unexpected status, or when no
                response was received
        """
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(operation, None, str(e)) from e

        logger.spew(
            f"{method} {url} -> {response.status_code}",
            operation=operation,
        )

        if response.status_code in expected:
            return response
        if response.status_code == 404:
            raise NotFound(operation, _error_message(response) or "Not Found")
        raise ApiError(
            operation, response.status_code, _error_message(response)
        )

    async def list_workflows(self, owner: str, repo: str) -> list[Workflow]:
        """All workflows of a repository, following pagination."""
        workflows: list[Workflow] = []
        url: str | None = f"/repos/{owner}/{repo}/actions/workflows"
        params: dict[str, Any] | None = {"per_page": 100}

        while url:
            response = await self._request(
                "list workflows", "GET", url, params=params
            )
            workflows.extend(
                _parse_list("list workflows", response, "workflows", Workflow)
            )
            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        return workflows

    async def dispatch_workflow(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        ref: str,
        inputs: dict[str, str] | None = None,
    ) -> int:
        """Trigger a workflow_dispatch event.

        Returns:
            The response status (204 on success)

        Raises:
            WorkflowDisabled: the workflow is disabled
            DispatchFailed: any other non-204 status, or no response
        """
        try:
            response = await self._request(
                "dispatch workflow",
                "POST",
                f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}"
                "/dispatches",
                expected=(204,),
                json={"ref": ref, "inputs": inputs or {}},
            )
        except ApiError as e:
            if e.status == 422 and _DISABLED_MESSAGE in e.message:
                raise WorkflowDisabled(e.status, e.message) from e
            raise DispatchFailed(e.status, e.message) from e
        return response.status_code

    async def list_workflow_runs(
        self,
        owner: str,
        repo: str,
        workflow_id: int,
        branch: str | None = None,
        per_page: int = 10,
    ) -> list[WorkflowRun]:
        """Most recent runs of a workflow, newest first."""
        params: dict[str, Any] = {"per_page": per_page}
        if branch:
            params["branch"] = branch

        response = await self._request(
            "list workflow runs",
            "GET",
            f"/repos/{owner}/{repo}/actions/workflows/{workflow_id}/runs",
            params=params,
        )
        return _parse_list(
            "list workflow runs", response, "workflow_runs", WorkflowRun
        )

    async def list_jobs_for_run(
        self,
        owner: str,
        repo: str,
        run_id: int,
        filter: str = "latest",
    ) -> list[Job]:
        """Jobs of a run; filter='latest' keeps only the latest attempt."""
        response = await self._request(
            "list jobs for run",
            "GET",
            f"/repos/{owner}/{repo}/actions/runs/{run_id}/jobs",
            params={"filter": filter, "per_page": 100},
        )
        return _parse_list("list jobs for run", response, "jobs", Job)

    async def get_run(self, owner: str, repo: str, run_id: int) -> WorkflowRun:
        response = await self._request(
            "get workflow run",
            "GET",
            f"/repos/{owner}/{repo}/actions/runs/{run_id}",
        )
        return _parse("get workflow run", response, WorkflowRun)
