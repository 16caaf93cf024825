"""Build wrappers: hooks around a whole build.

A BuildWrapper gets two chances to act on a build: once before the first
step, to decorate the launcher every step goes through, and once at the end,
through the Environment returned by set_up(). The host calls each exactly
once per build and calls tear_down even when the build fails or is aborted.

DockerBuildWrapper uses them to run every build step in a new docker
container. Each step is a separate container, so files a step writes outside
the workspace are not seen by the next one::

    shell("touch /tmp/file")   # step 1
    shell("ls /tmp/file")      # step 2 fails

The workspace is mounted into each container at the same path, so anything
written there is visible to later steps and to the host.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ciborium.config import TeardownConfig, WrapperConfig
from ciborium.constants import DISPLAY_NAME
from ciborium.invocation import ContainerInvocation, invocation_for
from ciborium.launchers.base import Launcher
from ciborium.launchers.decorator import LaunchDecorator
from ciborium.lifecycle import CleanupReport, ContainerLifecycleManager
from ciborium.listener import BuildListener
from ciborium.logging import get_logger

if TYPE_CHECKING:
    from ciborium.build import Build
    from ciborium.pipeline import Pipeline

logger = get_logger("wrapper")


class Environment:
    """Per-build state returned by BuildWrapper.set_up()."""

    def tear_down(self, build: Build, listener: BuildListener) -> bool:
        """Run at the end of the build.

        Returns:
            True if the build may keep its result
        """
        return True


class BuildWrapper(ABC):
    """Hooks invoked around a build."""

    display_name: str = ""

    def decorate_launcher(self, build: Build, launcher: Launcher, listener: BuildListener) -> Launcher:
        """Return the launcher every step of the build will use."""
        return launcher

    @abstractmethod
    def set_up(self, build: Build, launcher: Launcher, listener: BuildListener) -> Environment:
        """Prepare the build and return its teardown environment."""
        pass

    def is_applicable(self, pipeline: Pipeline) -> bool:
        return True


class ContainerEnvironment(Environment):
    """Removes the build's container when the build is over."""

    def __init__(self, teardown: TeardownConfig) -> None:
        self.teardown = teardown
        self.report: CleanupReport | None = None

    def tear_down(self, build: Build, listener: BuildListener) -> bool:
        # Use a fresh launcher from the node: the decorated one would wrap docker itself
        launcher = build.built_on.create_launcher(listener)
        manager = ContainerLifecycleManager(
            build.container_name,
            launcher,
            listener,
            stop_command=self.teardown.get_stop_command(),
        )
        self.report = manager.cleanup()
        return super().tear_down(build, listener)


class DockerBuildWrapper(BuildWrapper):
    """Run all build steps inside new docker containers."""

    display_name = DISPLAY_NAME

    def __init__(
        self,
        config: WrapperConfig | None = None,
        teardown: TeardownConfig | None = None,
    ) -> None:
        """Initialize wrapper.

        Args:
            config: Image, environment allowlist and extra docker options
            teardown: Container cleanup settings
        """
        self.config = config or WrapperConfig()
        self.teardown = teardown or TeardownConfig()

    def invocation(self, build: Build) -> ContainerInvocation:
        """Compute the docker run prefix for the build's steps."""
        return invocation_for(build, self.config, build.get_environment())

    def decorate_launcher(self, build: Build, launcher: Launcher, listener: BuildListener) -> LaunchDecorator:
        invocation = self.invocation(build)
        logger.info(f"Steps of {build.tag} run in container {invocation.container_name} ({invocation.image})")
        return LaunchDecorator(launcher, invocation.args, invocation.container_name, listener)

    def set_up(self, build: Build, launcher: Launcher, listener: BuildListener) -> ContainerEnvironment:
        return ContainerEnvironment(self.teardown)

    def is_applicable(self, pipeline: Pipeline) -> bool:
        """Only plain shell-step pipelines can be wrapped."""
        return pipeline.is_freestyle()
