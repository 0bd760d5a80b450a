"""SelectWorkflow node - resolve the selector and build the context."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from dispatchrun.core.config import State
from dispatchrun.core.context import DispatchContext
from dispatchrun.core.errors import WorkflowNotFound
from dispatchrun.core.log import logger
from dispatchrun.core.marker import generate_marker
from dispatchrun.workflow.nodes.dispatch import Dispatch
from dispatchrun.workflow.nodes.search import Search, start_search


@dataclass
class SelectWorkflow(BaseNode[State]):
    """Find the workflow named by config.workflow.selector."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Dispatch | Search:
        """Look the workflow up and fix the DispatchContext.

        Returns:
            Dispatch: normal dispatch-then-locate run
            Search: locating a run dispatched earlier with a known
                marker

        Raises:
            WorkflowNotFound: nothing matches the selector
        """
        config = ctx.state.config
        dispatch = ctx.state.runtime.dispatch
        owner, repo = config.github.owner, config.github.repo
        selector = config.workflow.selector

        workflows = await dispatch.client.list_workflows(owner, repo)
        logger.debug(
            "Listed workflows",
            workflows=[w.model_dump() for w in workflows],
        )

        workflow = next((w for w in workflows if w.matches(selector)), None)
        if workflow is None:
            raise WorkflowNotFound(selector, owner, repo)

        logger.info(
            "Found workflow, id: {id}, name: {name}, path: {path}",
            id=workflow.id,
            name=workflow.name,
            path=workflow.path,
        )

        inputs = dict(config.workflow.inputs)
        marker = (
            dispatch.marker
            or inputs.get(config.workflow.marker_input)
            or generate_marker()
        )
        inputs[config.workflow.marker_input] = marker

        dispatch.context = DispatchContext(
            owner=owner,
            repo=repo,
            workflow_id=workflow.id,
            ref=config.workflow.ref,
            overall_timeout_seconds=config.workflow.timeout_seconds,
            correlation_marker=marker,
        )

        if not dispatch.dispatch_enabled:
            return start_search(ctx.state)
        return Dispatch(inputs=inputs)
