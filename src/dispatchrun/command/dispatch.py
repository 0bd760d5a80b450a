"""Dispatch command - trigger a workflow and report its run id."""

from __future__ import annotations

from typing import TYPE_CHECKING

from dispatchrun.command.base import GraphCommand

if TYPE_CHECKING:
    from dispatchrun.core.config import State


class DispatchCommand(GraphCommand):
    """Dispatch a workflow and wait until its run id is known.

    A random correlation marker is passed as the workflow input named
    by --config.workflow.marker_input (default 'distinct_id'). The
    dispatched workflow must echo that input in a step name, e.g.

        - name: echo ${{ inputs.distinct_id }}
          run: echo ${{ inputs.distinct_id }}

    The run whose step names contain the marker is ours; its id is
    written to the 'run_id' output.
    """

    def prepare(self, state: State) -> None:
        state.runtime.dispatch.dispatch_enabled = True
