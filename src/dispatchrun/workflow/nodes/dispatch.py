"""Dispatch node - trigger the workflow with the marker as an input."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic_graph import BaseNode, End, GraphRunContext

from dispatchrun.core.config import State
from dispatchrun.core.errors import WorkflowDisabled
from dispatchrun.core.log import logger
from dispatchrun.core.output import emit_warning, set_output
from dispatchrun.workflow.nodes.search import Search, start_search


@dataclass
class Dispatch(BaseNode[State, None, int | None]):
    """Fire the workflow_dispatch event."""

    inputs: dict[str, str] = field(default_factory=dict)

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Search | End[int | None]:
        """Dispatch, then start searching for the resulting run.

        Returns:
            Search: dispatch accepted
            End[None]: the workflow is disabled, nothing to find

        Raises:
            DispatchFailed: the API refused the dispatch
        """
        dispatch = ctx.state.runtime.dispatch
        context = dispatch.context

        logger.info("Calling GitHub API to dispatch workflow...")
        try:
            status = await dispatch.client.dispatch_workflow(
                context.owner,
                context.repo,
                context.workflow_id,
                context.ref,
                self.inputs,
            )
        except WorkflowDisabled:
            message = "Workflow is disabled, no action was taken"
            logger.warning(message)
            emit_warning(message)
            dispatch.status = "disabled"
            return End(None)

        logger.info(f"API response status: {status}")
        dispatch.status = "dispatched"
        set_output("workflow_id", context.workflow_id)

        return start_search(ctx.state)
