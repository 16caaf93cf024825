"""Launcher abstract base classes.

Defines the interface for starting build processes. LocalLauncher runs them
on this machine; LaunchDecorator wraps any launcher to redirect them into
containers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from ciborium.launch_types import LaunchRequest
from ciborium.listener import BuildListener


class Proc(ABC):
    """Handle to a started process."""

    @abstractmethod
    def join(self) -> int:
        """Block until the process exits.

        Returns:
            Exit status
        """
        pass

    @abstractmethod
    def is_alive(self) -> bool:
        """Check if the process is still running."""
        pass

    @abstractmethod
    def kill(self) -> None:
        """Terminate the process."""
        pass

    @property
    def stdout(self) -> bytes | None:
        """Captured standard output, when the request asked to read it."""
        return None

    @property
    def stderr(self) -> bytes | None:
        """Captured standard error, when the request asked to read it."""
        return None


class Channel(ABC):
    """Bidirectional byte channel to a started process."""

    @property
    @abstractmethod
    def input(self) -> BinaryIO:
        """Stream writing to the process."""

    @property
    @abstractmethod
    def output(self) -> BinaryIO:
        """Stream reading from the process."""

    @abstractmethod
    def join(self) -> int:
        """Wait for the remote side to exit and return its status."""

    @abstractmethod
    def close(self) -> None:
        """Close the channel."""


class Launcher(ABC):
    """Abstract base class for process launchers.

    Every launcher is bound to a build listener so that launched command
    lines and their output end up in the build log.
    """

    def __init__(self, listener: BuildListener | None = None) -> None:
        """Initialize launcher.

        Args:
            listener: Build log receiving launch output
        """
        self.listener = listener or BuildListener()

    @abstractmethod
    def launch(self, request: LaunchRequest) -> Proc:
        """Start a process.

        Args:
            request: What to run and how

        Returns:
            Handle to the started process

        Raises:
            OSError: If the process cannot be started
        """
        pass

    @abstractmethod
    def launch_channel(
        self,
        cmd: list[str],
        out: BinaryIO | None,
        work_dir: Path | None,
        env: dict[str, str] | None,
    ) -> Channel:
        """Start a process and open a channel to it.

        Args:
            cmd: Command tokens
            out: Stream receiving the process's standard error
            work_dir: Working directory
            env: Environment overrides

        Returns:
            Channel to the started process
        """
        pass

    @abstractmethod
    def kill(self, model_env: dict[str, str]) -> None:
        """Kill every process started with all of ``model_env`` in its environment.

        Args:
            model_env: Environment entries identifying the processes
        """
        pass

    @abstractmethod
    def is_unix(self) -> bool:
        """Check if processes run on a Unix-like platform."""
        pass

    def start(self, request: LaunchRequest) -> Proc:
        """Start a process; alias of launch() for request-builder style calls."""
        return self.launch(request)
