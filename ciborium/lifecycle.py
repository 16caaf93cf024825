"""Container cleanup at the end of a build.

Runs on the node that ran the build, once the build is over, whatever its
result. The container is stopped first and removed second; a running
container cannot be removed on every runtime. Non-zero statuses are
expected (the container usually exited and removed itself already) and are
only reported.
"""

from __future__ import annotations

from dataclasses import dataclass

from ciborium.constants import DOCKER_BINARY, DOCKER_REMOVE, StopCommand
from ciborium.launch_types import LaunchRequest
from ciborium.launchers.base import Launcher
from ciborium.listener import BuildListener
from ciborium.logging import get_logger

logger = get_logger("lifecycle")


@dataclass(frozen=True)
class CleanupReport:
    """Exit statuses of the cleanup commands; None when a command could not start."""

    container_name: str
    stop_status: int | None
    remove_status: int | None

    @property
    def clean(self) -> bool:
        return self.stop_status == 0 and self.remove_status == 0


class ContainerLifecycleManager:
    """Stop and remove a build's container."""

    def __init__(
        self,
        container_name: str,
        launcher: Launcher,
        listener: BuildListener,
        stop_command: StopCommand = StopCommand.KILL,
    ) -> None:
        """Initialize lifecycle manager.

        Args:
            container_name: Container started for the build's steps
            launcher: Undecorated launcher on the node that ran the build
            listener: Build log
            stop_command: Runtime verb used to stop the container
        """
        self.container_name = container_name
        self.launcher = launcher
        self.listener = listener
        self.stop_command = stop_command

    def _run(self, verb: str) -> int | None:
        request = LaunchRequest(
            cmds=[DOCKER_BINARY, verb, self.container_name],
            read_stdout=True,
            read_stderr=True,
        )
        try:
            proc = self.launcher.launch(request)
            status = proc.join()
        except OSError as e:
            logger.error(f"docker {verb} {self.container_name} could not be started: {e}")
            self.listener.error(f"Could not run docker {verb} against container {self.container_name}: {e}")
            return None

        self.listener.write_bytes(proc.stdout)
        self.listener.write_bytes(proc.stderr)
        self.listener.println(f"Run docker {verb} against container {self.container_name}; got status {status}")
        logger.info(
            f"docker {verb} {self.container_name} -> {status}",
            extra={"container": self.container_name, "command": verb, "status": status},
        )
        return status

    def stop(self) -> int | None:
        return self._run(self.stop_command.value)

    def remove(self) -> int | None:
        return self._run(DOCKER_REMOVE)

    def cleanup(self) -> CleanupReport:
        """Stop, then remove, the container.

        Returns:
            CleanupReport with both statuses
        """
        self.listener.println(f"Job is done; attempting to cleanup container by name: {self.container_name}")
        stop_status = self.stop()
        remove_status = self.remove()
        return CleanupReport(self.container_name, stop_status, remove_status)
