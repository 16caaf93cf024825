"""CIBorium CLI commands."""

from ciborium.commands.cleanup import cleanup
from ciborium.commands.command import command
from ciborium.commands.run import run

__all__ = [
    "cleanup",
    "command",
    "run",
]
