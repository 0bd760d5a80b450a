#!/usr/bin/env python3
"""dispatchrun CLI - dispatch a GitHub Actions workflow and report
the id of the run it created."""

import asyncio
import contextlib
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from dispatchrun.command.dispatch import DispatchCommand
from dispatchrun.command.locate import LocateCommand
from dispatchrun.core.config import State
from dispatchrun.core.log import logger


class CliState(State):
    """Dispatch a GitHub Actions workflow and identify its run.

    The workflow_dispatch API does not return a run id. dispatchrun
    passes a unique marker as a workflow input, then polls the
    workflow's recent runs until one has a step whose name contains
    the marker, and reports that run's id.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.workflow.selector echo-2.yaml)
    2. dispatchrun.yaml in the current directory
    3. .env file
    4. Environment variables
       (DISPATCHRUN_CONFIG__WORKFLOW__SELECTOR=echo-2.yaml),
       with GITHUB_TOKEN, GITHUB_REPOSITORY and GITHUB_REF as
       fallbacks inside GitHub Actions
    """

    dispatch: CliSubCommand[DispatchCommand]
    locate: CliSubCommand[LocateCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help if none
        was given."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            # argparse exits after printing help; exit 1 instead
            with contextlib.suppress(SystemExit):
                CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        # Closing the logger flushes and closes the file sinks
        with logger:
            exit_code = asyncio.run(subcommand.run_workflow(self))
            raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
