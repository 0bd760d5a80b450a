"""Application state and configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from dispatchrun.core.base import BaseConfig, BaseState
from dispatchrun.core.clock import Clock
from dispatchrun.core.context import DispatchContext
from dispatchrun.core.log import Logger

DEFAULT_TIMEOUT_SECONDS = 5 * 60

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class GitHubConfig(BaseConfig):
    """GitHub API access."""

    token: str | None = Field(
        default=None,
        description=(
            "Token used for all API calls. Needs 'actions: write' on the "
            "target repository. Falls back to GITHUB_TOKEN"
        ),
    )
    repository: str | None = Field(
        default=None,
        description=(
            "Target repository as 'owner/repo'. Falls back to "
            "GITHUB_REPOSITORY"
        ),
    )
    api_url: str = Field(
        default="https://api.github.com",
        description="REST API base URL (GITHUB_API_URL on GHES)",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
    )

    @model_validator(mode='before')
    @classmethod
    def _actions_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for key, env in (
            ("token", "GITHUB_TOKEN"),
            ("repository", "GITHUB_REPOSITORY"),
            ("api_url", "GITHUB_API_URL"),
        ):
            if not data.get(key) and os.environ.get(env):
                data[key] = os.environ[env]
        return data

    @field_validator("repository")
    @classmethod
    def _check_repository(cls, value: str | None) -> str | None:
        if value is None:
            return value
        owner, sep, repo = value.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(
                f"repository must look like 'owner/repo', got '{value}'"
            )
        return value

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]


class WorkflowConfig(BaseConfig):
    """Which workflow to dispatch and how."""

    selector: str | None = Field(
        default=None,
        description=(
            "Workflow to dispatch: its display name, numeric id, or "
            "file name (e.g. 'echo-2.yaml')"
        ),
    )
    ref: str | None = Field(
        default=None,
        description=(
            "Git ref to run the workflow on (e.g. 'refs/heads/main'). "
            "Falls back to GITHUB_REF"
        ),
    )
    inputs: dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Workflow inputs as a flat JSON object of strings, "
            "e.g. '{\"environment\": \"staging\"}'"
        ),
    )
    marker_input: str = Field(
        default="distinct_id",
        description=(
            "Input carrying the correlation marker. The dispatched "
            "workflow must echo it in a step name. If inputs already "
            "set it, that value is the marker"
        ),
    )
    timeout_seconds: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Time allowed to identify the run, in seconds",
    )

    @model_validator(mode='before')
    @classmethod
    def _actions_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("ref"):
            ref = os.environ.get("GITHUB_REF")
            if ref:
                data = {**data, "ref": ref}
        return data

    @field_validator("inputs", mode='before')
    @classmethod
    def _decode_inputs(cls, value: Any) -> Any:
        """Accept inputs as a JSON string (as passed from the CLI or
        an action input) as well as a mapping."""
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError(f"inputs is not valid JSON: {e}") from e
        if not isinstance(value, dict):
            raise ValueError("inputs must be a JSON object")
        for key, item in value.items():
            if not isinstance(item, str):
                raise ValueError(
                    f"input '{key}' must be a string, "
                    f"got {type(item).__name__}"
                )
        return value

    @field_validator("timeout_seconds", mode='before')
    @classmethod
    def _empty_timeout(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_TIMEOUT_SECONDS
        return value


class ResolveConfig(BaseConfig):
    """Polling behaviour while looking for the dispatched run."""

    fetch_timeout_seconds: float = Field(
        default=60,
        gt=0,
        description=(
            "Upper bound on waiting for a non-empty run listing within "
            "one search cycle"
        ),
    )
    fetch_backoff_seconds: float = Field(
        default=1,
        ge=0,
        description="Pause between empty run listings",
    )
    cycle_backoff_seconds: float = Field(
        default=5,
        ge=0,
        description="Pause between search cycles that found no match",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance",
    )
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    resolve: ResolveConfig = Field(default_factory=ResolveConfig)

    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("dispatchrun"))
        ),
        description="Root directory for log files",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Install the process logger once configuration is known."""
        from dispatchrun.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        self.logger = setup_logger(
            log_root=self.log_root,
            session=self.session_name,
            level=self.logger.level,
            console=self.logger.console,
            file=self.logger.file,
            otlp=self.logger.otlp,
            logfire=self.logger.logfire,
            instrument_http=self.logger.instrument_http,
        )
        return self

    @property
    def session_name(self) -> str:
        repository = self.github.repository or "local"
        return repository.replace("/", "-")

    def require(self) -> None:
        """Raise ValueError naming every setting a run cannot do
        without."""
        missing = [
            name for name, value in (
                ("github.token", self.github.token),
                ("github.repository", self.github.repository),
                ("workflow.selector", self.workflow.selector),
                ("workflow.ref", self.workflow.ref),
            )
            if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required settings: {', '.join(missing)}"
            )


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================

class DispatchState(BaseState):
    """Dispatch-and-locate runtime state."""

    client: Any = Field(
        default=None,
        description="GitHubClient used for every API call",
    )
    clock: Any = Field(
        default_factory=Clock,
        description="Time source for deadlines and backoff sleeps",
    )
    dispatch_enabled: bool = Field(
        default=True,
        description="False when locating a run dispatched earlier",
    )
    marker: str | None = Field(
        default=None,
        description="Correlation marker supplied by the caller",
    )
    context: DispatchContext | None = Field(
        default=None,
        description="Immutable context of the current resolution",
    )
    deadline: float | None = Field(
        default=None,
        description="Monotonic time at which the search gives up",
    )
    run_id: int | None = Field(
        default=None,
        description="Identified run",
    )
    run_url: str | None = Field(
        default=None,
        description="HTML URL of the identified run",
    )
    status: str = Field(
        default="pending",
        description=(
            "pending, dispatched, searching, resolved, disabled, failed"
        ),
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """All runtime state, grouped by workflow."""

    dispatch: DispatchState = Field(
        default_factory=DispatchState,
        description="Dispatch-and-locate runtime state",
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Complete application state - configuration and runtime.

    This is the object that flows through every workflow node:
    - config: loaded from CLI, dispatchrun.yaml, .env and environment
    - runtime: mutated while the workflow runs
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )

    model_config = SettingsConfigDict(
        yaml_file="dispatchrun.yaml",
        env_file=".env",
        env_prefix="DISPATCHRUN_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init/CLI, dispatchrun.yaml, .env,
        environment, file secrets."""
        return (
            init_settings,
            YamlConfigSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    def close(self):
        self.config.close()


__all__ = [
    "State",
    "Config",
    "GitHubConfig",
    "WorkflowConfig",
    "ResolveConfig",
    "DispatchState",
]
