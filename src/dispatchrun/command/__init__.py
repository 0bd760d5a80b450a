"""CLI command modules for dispatchrun."""

from dispatchrun.command.dispatch import DispatchCommand
from dispatchrun.command.locate import LocateCommand

__all__ = ["DispatchCommand", "LocateCommand"]
