"""Search node - one enumerate-and-inspect cycle.

The node loops back to itself until a run's steps contain the
correlation marker or the overall deadline passes:

    Search -> Search -> ... -> Resolved
                           └-> ResolutionTimeout (raised)
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from dispatchrun.core.config import State
from dispatchrun.core.errors import NotFound, ResolutionTimeout
from dispatchrun.core.log import logger
from dispatchrun.core.marker import marker_pattern, steps_match
from dispatchrun.resolve.retry import retry_until_non_empty
from dispatchrun.resolve.runs import list_run_ids
from dispatchrun.resolve.steps import list_step_names
from dispatchrun.workflow.nodes.resolved import Resolved


def start_search(state: State) -> Search:
    """Arm the overall deadline and return the first Search node."""
    dispatch = state.runtime.dispatch
    dispatch.deadline = (
        dispatch.clock.monotonic()
        + dispatch.context.overall_timeout_seconds
    )
    dispatch.status = "searching"
    logger.info(
        "Attempting to identify run of workflow {workflow_id} "
        "by marker {marker}",
        workflow_id=dispatch.context.workflow_id,
        marker=dispatch.context.correlation_marker,
    )
    return Search()


@dataclass
class Search(BaseNode[State]):
    """Look for the marker in the steps of the latest runs."""

    attempt: int = 1

    async def run(self, ctx: GraphRunContext[State]) -> Search | Resolved:
        """Run one search cycle.

        Returns:
            Resolved: a candidate's steps contain the marker
            Search: no match yet, after the cycle backoff

        Raises:
            ResolutionTimeout: deadline passed, or no runs were listed
                within this cycle's budget
            ApiError: a non-404 API failure
        """
        dispatch = ctx.state.runtime.dispatch
        settings = ctx.state.config.resolve
        context = dispatch.context
        clock = dispatch.clock

        remaining = dispatch.deadline - clock.monotonic()
        if remaining <= 0:
            raise ResolutionTimeout(
                f"Timeout exceeded while attempting to get run ID "
                f"after {self.attempt - 1} attempts"
            )

        with logger.span(
            "Search cycle {attempt}",
            attempt=self.attempt,
            workflow_id=context.workflow_id,
            remaining_seconds=round(remaining, 1),
        ):
            run_id = await self._find_marked_run(ctx, remaining)
        if run_id is not None:
            return Resolved(run_id)

        logger.info(
            f"Exhausted searching IDs in known runs, "
            f"attempt {self.attempt}..."
        )
        await clock.sleep(settings.cycle_backoff_seconds)
        return Search(attempt=self.attempt + 1)

    async def _find_marked_run(
        self, ctx: GraphRunContext[State], remaining: float
    ) -> int | None:
        """First listed run whose steps contain the marker, if any."""
        dispatch = ctx.state.runtime.dispatch
        settings = ctx.state.config.resolve
        context = dispatch.context
        client = dispatch.client

        logger.debug(
            f"Attempting to fetch run IDs for workflow "
            f"{context.workflow_id}",
            attempt=self.attempt,
        )
        run_ids = await retry_until_non_empty(
            lambda: list_run_ids(client, context),
            timeout=min(settings.fetch_timeout_seconds, remaining),
            clock=dispatch.clock,
            backoff=settings.fetch_backoff_seconds,
        )

        pattern = marker_pattern(context.correlation_marker)
        for run_id in run_ids:
            try:
                steps = await list_step_names(client, context, run_id)
            except NotFound:
                logger.debug(
                    f"Could not identify ID in run {run_id}, continuing..."
                )
                continue

            if steps_match(pattern, steps):
                return run_id
        return None
