"""Shared driver for commands that run the dispatch graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from dispatchrun.core.errors import DispatchRunError
from dispatchrun.core.log import logger
from dispatchrun.core.output import emit_failure
from dispatchrun.github.client import GitHubClient
from dispatchrun.workflow.graph import run_graph

if TYPE_CHECKING:
    from dispatchrun.core.config import State

PERMISSION_HINT = "Does the token have the correct permissions?"


class GraphCommand(BaseModel):
    """Base for subcommands that run the workflow graph.

    Subclasses set up runtime state in prepare(); run_workflow() owns
    the API client and turns failures into an exit code.
    """

    def prepare(self, state: State) -> None:
        """Adjust runtime state before the graph starts."""

    async def run_workflow(self, state: State) -> int:
        """Run the graph from SelectWorkflow to completion.

        Returns:
            Exit code: 0 when a run was identified or the workflow is
            disabled, 1 on any failure
        """
        try:
            state.config.require()
        except ValueError as e:
            logger.error("Invalid configuration: {error}", error=str(e))
            emit_failure(str(e))
            return 1

        self.prepare(state)
        dispatch = state.runtime.dispatch

        try:
            if dispatch.client is not None:
                await run_graph(state)
            else:
                github = state.config.github
                async with GitHubClient(
                    github.token,
                    api_url=github.api_url,
                    timeout=github.request_timeout,
                ) as client:
                    dispatch.client = client
                    try:
                        await run_graph(state)
                    finally:
                        dispatch.client = None
        except DispatchRunError as e:
            dispatch.status = "failed"
            logger.error("Failed to complete: {error}", error=str(e))
            logger.warning(PERMISSION_HINT)
            emit_failure(str(e))
            return 1

        return 0

