"""Immutable description of one dispatch-then-locate attempt."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

BRANCH_REF_PREFIX = "refs/heads/"


def branch_from_ref(ref: str) -> str | None:
    """Extract the branch name from a full git ref.

    Args:
        ref: Ref the workflow was dispatched on

    Returns:
        'main' for 'refs/heads/main'; None for tags and any other
        ref shape, which means the run listing is not branch scoped

    Examples:
        >>> branch_from_ref("refs/heads/feature/x")
        'feature/x'
        >>> branch_from_ref("refs/tags/v1.0") is None
        True
    """
    if ref.startswith(BRANCH_REF_PREFIX):
        branch = ref[len(BRANCH_REF_PREFIX):]
        return branch or None
    return None


class DispatchContext(BaseModel):
    """Everything needed to find the run created by one dispatch.

    Frozen: a resolution never mutates its context, so the same
    context can be used to re-run the search from scratch.
    """

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    workflow_id: int
    ref: str
    overall_timeout_seconds: float = Field(default=300, gt=0)
    correlation_marker: str = Field(min_length=1)

    @computed_field
    @property
    def branch_name(self) -> str | None:
        return branch_from_ref(self.ref)

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"
