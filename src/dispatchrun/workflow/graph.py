"""Graph workflow definition."""

from pydantic_graph import Graph

from dispatchrun.core.config import State
from dispatchrun.core.log import logger


def create_workflow() -> Graph:
    """Create the dispatch-and-locate graph.

        SelectWorkflow -> Dispatch -> Search <-> Search -> Resolved
                     └──────────────> Search   (locate only)

    Failure states are exceptions raised out of the graph run.

    Returns:
        Graph with State as state_type
    """
    logger.debug("Building workflow graph")

    from dispatchrun.workflow.nodes import (
        Dispatch,
        Resolved,
        Search,
        SelectWorkflow,
    )

    return Graph(
        nodes=(SelectWorkflow, Dispatch, Search, Resolved),
        state_type=State,
    )


async def run_graph(state: State) -> int | None:
    """Run the graph from SelectWorkflow until it ends.

    Returns:
        The identified run id, or None when nothing was dispatched
        (disabled workflow)

    Raises:
        DispatchRunError: any failure, see dispatchrun.core.errors
    """
    from dispatchrun.workflow.nodes import SelectWorkflow

    workflow = create_workflow()
    async with workflow.iter(SelectWorkflow(), state=state) as run:
        async for node in run:
            logger.spew(f"Entering node {type(node).__name__}")
    return run.result.output if run.result else None
