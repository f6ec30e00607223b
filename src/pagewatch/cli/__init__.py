"""Command-line interface components."""

from .main import create_cli
from .types import CLIContext, CLIError, CommandResult, OutputFormat

__all__ = [
    "CLIError",
    "CommandResult",
    "CLIContext",
    "OutputFormat",
    "create_cli",
]
