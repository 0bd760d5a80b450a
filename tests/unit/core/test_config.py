"""Tests for configuration parsing and Actions environment fallbacks."""

import pytest
from pydantic import ValidationError

from dispatchrun.core.config import (
    DEFAULT_TIMEOUT_SECONDS,
    Config,
    GitHubConfig,
    ResolveConfig,
    WorkflowConfig,
)
from dispatchrun.core.log import ConsoleSink, Logger


def quiet_logger():
    return Logger(instrument_http=False, console=ConsoleSink(enabled=False))


class TestWorkflowInputs:

    def test_inputs_from_json_string(self):
        config = WorkflowConfig(inputs='{"commitId": "1234567", "env": "staging"}')
        assert config.inputs == {"commitId": "1234567", "env": "staging"}

    def test_empty_inputs_string_means_no_inputs(self):
        assert WorkflowConfig(inputs="").inputs == {}

    def test_inputs_must_be_valid_json(self):
        with pytest.raises(ValidationError, match="not valid JSON"):
            WorkflowConfig(inputs="{not json")

    def test_inputs_must_be_an_object(self):
        with pytest.raises(ValidationError, match="JSON object"):
            WorkflowConfig(inputs='["a", "b"]')

    def test_input_values_must_be_strings(self):
        with pytest.raises(ValidationError, match="must be a string"):
            WorkflowConfig(inputs='{"count": 3}')


class TestTimeout:

    def test_default_is_five_minutes(self):
        assert WorkflowConfig().timeout_seconds == DEFAULT_TIMEOUT_SECONDS == 300

    def test_empty_string_uses_default(self):
        assert WorkflowConfig(timeout_seconds="").timeout_seconds == 300

    def test_numeric_string_is_parsed(self):
        assert WorkflowConfig(timeout_seconds="45").timeout_seconds == 45

    def test_non_numeric_is_rejected(self):
        with pytest.raises(ValidationError):
            WorkflowConfig(timeout_seconds="soon")

    def test_must_be_positive(self):
        with pytest.raises(ValidationError):
            WorkflowConfig(timeout_seconds=0)


class TestGitHubConfig:

    def test_repository_is_split(self):
        config = GitHubConfig(repository="octo/hello")
        assert (config.owner, config.repo) == ("octo", "hello")

    @pytest.mark.parametrize("value", ["octo", "octo/", "/hello", "a/b/c"])
    def test_malformed_repository(self, value):
        with pytest.raises(ValidationError, match="owner/repo"):
            GitHubConfig(repository=value)

    def test_actions_environment_fallbacks(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghs_env")
        monkeypatch.setenv("GITHUB_REPOSITORY", "octo/from-env")
        monkeypatch.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3")

        config = GitHubConfig()

        assert config.token == "ghs_env"
        assert config.repository == "octo/from-env"
        assert config.api_url == "https://ghe.example.com/api/v3"

    def test_explicit_values_beat_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REPOSITORY", "octo/from-env")
        assert GitHubConfig(repository="octo/explicit").repository == "octo/explicit"

    def test_ref_falls_back_to_github_ref(self, monkeypatch):
        monkeypatch.setenv("GITHUB_REF", "refs/heads/release")
        assert WorkflowConfig().ref == "refs/heads/release"


def test_resolve_defaults():
    config = ResolveConfig()
    assert config.fetch_timeout_seconds == 60
    assert config.fetch_backoff_seconds == 1
    assert config.cycle_backoff_seconds == 5


def test_require_lists_missing_settings():
    config = Config(logger=quiet_logger())

    with pytest.raises(ValueError) as excinfo:
        config.require()

    message = str(excinfo.value)
    for name in ("github.token", "github.repository",
                 "workflow.selector", "workflow.ref"):
        assert name in message


def test_require_passes_when_complete():
    config = Config(
        logger=quiet_logger(),
        github=GitHubConfig(token="t", repository="octo/hello"),
        workflow=WorkflowConfig(selector="echo-2.yaml", ref="refs/heads/main"),
    )
    config.require()
    assert config.session_name == "octo-hello"


def test_config_close_closes_logger_file(tmp_path):
    from dispatchrun.core.log import FileSink

    config = Config(
        logger=Logger(
            instrument_http=False,
            console=ConsoleSink(enabled=False),
            file=FileSink(enabled=True, path=str(tmp_path / "cascade.log")),
        ),
    )
    assert not config.logger.file._file.closed

    config.close()

    assert config.logger.file._file.closed
