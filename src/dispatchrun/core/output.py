"""Step outputs and failure annotations for the calling pipeline.

Inside GitHub Actions outputs are appended to the file named by
GITHUB_OUTPUT; anywhere else they are printed as name=value lines so
shell callers can still capture them.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dispatchrun.core.log import logger


def _escape_annotation(message: str) -> str:
    return (message
        .replace('%', '%25')
        .replace('\r', '%0D')
        .replace('\n', '%0A')
    )


def set_output(name: str, value: object) -> None:
    """Publish a single output value."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    text = str(value)

    if output_file:
        if '\n' in text:
            raise ValueError(f"Output '{name}' must be a single line")
        with Path(output_file).open("a", encoding="utf-8") as f:
            f.write(f"{name}={text}\n")
    else:
        print(f"{name}={text}", file=sys.stdout, flush=True)

    logger.debug(f"Set output {name}", value=text)


def in_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def emit_failure(message: str) -> None:
    """Mark the step failed with a visible annotation."""
    if in_actions():
        print(f"::error::{_escape_annotation(message)}", flush=True)


def emit_warning(message: str) -> None:
    if in_actions():
        print(f"::warning::{_escape_annotation(message)}", flush=True)
