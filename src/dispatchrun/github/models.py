"""Subset of the GitHub Actions payloads that dispatchrun reads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Workflow(_Payload):
    """A workflow definition in the repository."""

    id: int
    name: str
    path: str

    def matches(self, selector: str) -> bool:
        """True if selector is this workflow's name, id, or a suffix
        of its path (e.g. 'echo-2.yaml')."""
        return (
            self.name == selector
            or str(self.id) == selector
            or self.path.endswith(selector)
        )


class WorkflowRun(_Payload):
    id: int
    html_url: str | None = None


class Step(_Payload):
    name: str


class Job(_Payload):
    id: int
    steps: list[Step] | None = None

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self.steps or ()]
