"""Workflow nodes for the dispatch-and-locate state machine."""

from dispatchrun.workflow.nodes.dispatch import Dispatch
from dispatchrun.workflow.nodes.resolved import Resolved
from dispatchrun.workflow.nodes.search import Search
from dispatchrun.workflow.nodes.select_workflow import SelectWorkflow

__all__ = [
    "SelectWorkflow",
    "Dispatch",
    "Search",
    "Resolved",
]
