"""Correlation marker used to recognise our run among its siblings."""

import re
import uuid
from collections.abc import Iterable


def generate_marker() -> str:
    """Return a new random marker, e.g. '3f2b8c1e-...'."""
    return str(uuid.uuid4())


def marker_pattern(marker: str) -> re.Pattern[str]:
    """Compile a pattern that finds marker literally inside a step name.

    Markers may come from user inputs, so metacharacters are escaped.
    """
    return re.compile(re.escape(marker))


def steps_match(pattern: re.Pattern[str], steps: Iterable[str]) -> bool:
    return any(pattern.search(step) for step in steps)
