"""Locate command - find the run of an earlier dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from dispatchrun.command.base import GraphCommand

if TYPE_CHECKING:
    from dispatchrun.core.config import State


class LocateCommand(GraphCommand):
    """Find the run created by an earlier dispatch, without dispatching.

    Useful when a previous invocation dispatched successfully but
    timed out while searching: the same marker finds the same run.
    """

    marker: str = Field(
        description="Correlation marker the earlier dispatch used",
    )

    def prepare(self, state: State) -> None:
        state.runtime.dispatch.dispatch_enabled = False
        state.runtime.dispatch.marker = self.marker
