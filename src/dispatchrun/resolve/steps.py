"""Step names of a run's latest attempt."""

from __future__ import annotations

from dispatchrun.core.context import DispatchContext
from dispatchrun.core.log import logger


async def list_step_names(client, context: DispatchContext, run_id: int) -> list[str]:
    """Distinct step names across all jobs of the run's latest attempt.

    Order is first appearance.

    Raises:
        NotFound: the run or its jobs are not queryable yet
        ApiError: any other failure
    """
    jobs = await client.list_jobs_for_run(
        context.owner, context.repo, run_id, filter="latest"
    )
    steps = list(dict.fromkeys(
        name for job in jobs for name in job.step_names
    ))

    logger.debug(
        f"Fetched steps for run {run_id}",
        repository=context.repository,
        job_ids=[job.id for job in jobs],
        steps=steps,
    )
    return steps
