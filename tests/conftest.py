"""Pytest configuration and fixtures for dispatchrun tests."""

import tempfile
from pathlib import Path

import pytest

from dispatchrun.core.errors import NotFound
from dispatchrun.core.log import ConsoleSink, setup_logger
from dispatchrun.github.models import Job, Step, Workflow, WorkflowRun

ACTIONS_ENV = (
    "GITHUB_ACTIONS",
    "GITHUB_API_URL",
    "GITHUB_OUTPUT",
    "GITHUB_REF",
    "GITHUB_REPOSITORY",
    "GITHUB_TOKEN",
)


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logging at debug level, nothing sent anywhere."""
    setup_logger(
        log_root=Path(tempfile.gettempdir()) / "dispatchrun-tests",
        session="test",
        console=ConsoleSink(level="debug"),
        instrument_http=False,
    )


@pytest.fixture(autouse=True)
def clean_actions_env(monkeypatch):
    """Keep a CI runner's own GITHUB_* variables out of the tests."""
    for name in ACTIONS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def output_file(tmp_path, monkeypatch):
    """Point GITHUB_OUTPUT at a temp file and return its path."""
    path = tmp_path / "github_output"
    path.touch()
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path


class FakeClock:
    """Clock whose sleeps advance time instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def job(job_id: int, *step_names: str) -> Job:
    return Job(id=job_id, steps=[Step(name=name) for name in step_names])


class FakeGitHub:
    """In-memory stand-in for GitHubClient.

    runs: list of run-id lists, one per list_workflow_runs call; the
        last one repeats
    jobs: run id -> list of Job, or an exception to raise
    """

    def __init__(self, workflows=None, runs=None, jobs=None, dispatch_error=None):
        self.workflows = workflows or []
        self.runs = runs or [[]]
        self.jobs = jobs or {}
        self.dispatch_error = dispatch_error
        self.calls: list[tuple] = []

    async def list_workflows(self, owner, repo):
        self.calls.append(("list_workflows", owner, repo))
        return list(self.workflows)

    async def dispatch_workflow(self, owner, repo, workflow_id, ref, inputs=None):
        self.calls.append(("dispatch", workflow_id, ref, dict(inputs or {})))
        if self.dispatch_error:
            raise self.dispatch_error
        return 204

    async def list_workflow_runs(self, owner, repo, workflow_id, branch=None, per_page=10):
        self.calls.append(("list_runs", workflow_id, branch, per_page))
        listed = sum(1 for call in self.calls if call[0] == "list_runs")
        ids = self.runs[min(listed, len(self.runs)) - 1]
        return [WorkflowRun(id=run_id) for run_id in ids]

    async def list_jobs_for_run(self, owner, repo, run_id, filter="latest"):
        self.calls.append(("list_jobs", run_id, filter))
        found = self.jobs.get(run_id)
        if found is None:
            raise NotFound("list jobs for run")
        if isinstance(found, Exception):
            raise found
        return list(found)

    async def get_run(self, owner, repo, run_id):
        self.calls.append(("get_run", run_id))
        return WorkflowRun(
            id=run_id,
            html_url=f"https://github.com/{owner}/{repo}/actions/runs/{run_id}",
        )

    def called(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def echo_workflows():
    return [
        Workflow(id=1854247, name="Message Echo 1", path=".github/workflows/echo-1.yaml"),
        Workflow(id=1854248, name="Message Echo 2", path=".github/workflows/echo-2.yaml"),
    ]


@pytest.fixture
def make_state(clock):
    """Build a State wired to a fake client and clock."""
    from dispatchrun.core.config import (
        Config,
        GitHubConfig,
        State,
        WorkflowConfig,
    )
    from dispatchrun.core.log import Logger

    def _make(client, **workflow):
        settings = {
            "selector": "echo-2.yaml",
            "ref": "refs/heads/main",
            **workflow,
        }
        state = State(
            config=Config(
                logger=Logger(
                    instrument_http=False,
                    console=ConsoleSink(level="debug"),
                ),
                github=GitHubConfig(token="test-token", repository="octo/hello"),
                workflow=WorkflowConfig(**settings),
            )
        )
        state.runtime.dispatch.client = client
        state.runtime.dispatch.clock = clock
        return state

    return _make
