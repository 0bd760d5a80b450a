"""Tests for DispatchContext and branch derivation."""

import pytest
from pydantic import ValidationError

from dispatchrun.core.context import DispatchContext, branch_from_ref


@pytest.mark.parametrize("ref, branch", [
    ("refs/heads/main", "main"),
    ("refs/heads/feature/login", "feature/login"),
    ("refs/tags/v1.0", None),
    ("refs/pull/12/merge", None),
    ("main", None),
    ("refs/heads/", None),
])
def test_branch_from_ref(ref, branch):
    assert branch_from_ref(ref) == branch


def make_context(**overrides):
    values = {
        "owner": "octo",
        "repo": "hello",
        "workflow_id": 42,
        "ref": "refs/heads/main",
        "correlation_marker": "M1",
    }
    values.update(overrides)
    return DispatchContext(**values)


def test_context_derives_branch_name():
    assert make_context().branch_name == "main"
    assert make_context(ref="refs/tags/v1.0").branch_name is None


def test_context_is_immutable():
    context = make_context()
    with pytest.raises(ValidationError):
        context.correlation_marker = "other"


def test_context_defaults_to_five_minutes():
    assert make_context().overall_timeout_seconds == 300


def test_context_rejects_empty_marker():
    with pytest.raises(ValidationError):
        make_context(correlation_marker="")


def test_repository():
    assert make_context().repository == "octo/hello"
