"""Building blocks of the run-identification search."""

from dispatchrun.resolve.retry import retry_until_non_empty
from dispatchrun.resolve.runs import CandidateRun, list_candidate_runs, list_run_ids
from dispatchrun.resolve.steps import list_step_names

__all__ = [
    "CandidateRun",
    "list_candidate_runs",
    "list_run_ids",
    "list_step_names",
    "retry_until_non_empty",
]
