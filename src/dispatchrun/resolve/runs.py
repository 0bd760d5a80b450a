"""Candidate runs for a dispatched workflow."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel

from dispatchrun.core.context import DispatchContext
from dispatchrun.core.log import logger

# A branch-scoped listing only competes with dispatches on the same
# branch, so fewer candidates are needed.
BRANCH_PAGE_SIZE = 5
DEFAULT_PAGE_SIZE = 10


class CandidateRun(BaseModel):
    """A run that might be ours. Valid only for the cycle that fetched
    it."""

    run_id: int
    fetched_at: datetime


async def list_candidate_runs(client, context: DispatchContext) -> list[CandidateRun]:
    """Most recent runs of the context's workflow, newest first.

    Scoped to the dispatch branch when the ref names one.

    Raises:
        ApiError: the listing failed
    """
    branch = context.branch_name
    runs = await client.list_workflow_runs(
        context.owner,
        context.repo,
        context.workflow_id,
        branch=branch,
        per_page=BRANCH_PAGE_SIZE if branch else DEFAULT_PAGE_SIZE,
    )
    fetched_at = datetime.now(UTC)
    candidates = [
        CandidateRun(run_id=run.id, fetched_at=fetched_at) for run in runs
    ]

    logger.debug(
        "Fetched workflow runs",
        fetched_at=fetched_at.isoformat(),
        repository=context.repository,
        branch=branch,
        workflow_id=context.workflow_id,
        run_ids=[c.run_id for c in candidates],
    )
    return candidates


async def list_run_ids(client, context: DispatchContext) -> list[int]:
    """Run ids of list_candidate_runs(), in the platform's order."""
    return [c.run_id for c in await list_candidate_runs(client, context)]
