"""Resolved node - publish the identified run."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from dispatchrun.core.config import State
from dispatchrun.core.errors import ApiError
from dispatchrun.core.log import logger
from dispatchrun.core.output import set_output


@dataclass
class Resolved(BaseNode[State, None, int | None]):
    """The run whose steps carry our marker has been found."""

    run_id: int

    async def run(self, ctx: GraphRunContext[State]) -> End[int | None]:
        """Emit run_id (and run_url when available) as outputs.

        Returns:
            End[int]: the identified run id
        """
        dispatch = ctx.state.runtime.dispatch
        context = dispatch.context

        # The URL is a convenience; the run id is already known
        try:
            run = await dispatch.client.get_run(
                context.owner, context.repo, self.run_id
            )
            dispatch.run_url = run.html_url
        except ApiError as e:
            logger.warning(f"Could not fetch URL of run {self.run_id}: {e}")

        dispatch.run_id = self.run_id
        dispatch.status = "resolved"

        logger.info(
            f"Successfully identified remote run {self.run_id}",
            run_id=self.run_id,
            url=dispatch.run_url,
        )
        set_output("run_id", self.run_id)
        if dispatch.run_url:
            set_output("run_url", dispatch.run_url)

        return End(self.run_id)
