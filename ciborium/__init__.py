"""CIBorium - run each build step in its own docker container.

Launch requests of a sequential build are redirected into a new container,
with the workspace mounted so results stay on the host.
"""

__version__ = "0.1.0"
__author__ = "CIBorium Team"

from ciborium.command_filter import should_redirect
from ciborium.constants import BuildResult, StopCommand
from ciborium.exceptions import CiboriumError
from ciborium.invocation import ContainerInvocation, build_run_command
from ciborium.launch_types import LaunchRequest
from ciborium.launchers import LaunchDecorator, LocalLauncher
from ciborium.lifecycle import CleanupReport, ContainerLifecycleManager
from ciborium.wrapper import DockerBuildWrapper

__all__ = [
    "__version__",
    "BuildResult",
    "StopCommand",
    "CiboriumError",
    # Core
    "LaunchRequest",
    "should_redirect",
    "ContainerInvocation",
    "build_run_command",
    "LaunchDecorator",
    "LocalLauncher",
    "ContainerLifecycleManager",
    "CleanupReport",
    "DockerBuildWrapper",
]
