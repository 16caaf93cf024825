"""Unit tests for DockerBuildWrapper."""

import io

import pytest

from ciborium.build import Build
from ciborium.config import TeardownConfig, WrapperConfig
from ciborium.constants import DISPLAY_NAME
from ciborium.launch_types import LaunchRequest
from ciborium.launchers.decorator import LaunchDecorator
from ciborium.listener import BuildListener
from ciborium.pipeline import Pipeline, ShellStep
from ciborium.wrapper import BuildWrapper, ContainerEnvironment, DockerBuildWrapper, Environment
from tests.mocks import MockNode


class TestDecorateLauncher:
    """Tests for the decorate entry point."""

    @pytest.mark.smoke
    def test_returns_decorator_with_build_prefix(
        self, build: Build, node: MockNode, listener: BuildListener, wrapper_config: WrapperConfig
    ) -> None:
        wrapper = DockerBuildWrapper(wrapper_config)
        outer = node.create_launcher(listener)

        decorated = wrapper.decorate_launcher(build, outer, listener)

        assert isinstance(decorated, LaunchDecorator)
        assert decorated.outer is outer
        assert decorated.container_name == "build-42"
        assert decorated.prefix == wrapper.invocation(build).args

    def test_steps_run_in_container(
        self, build: Build, node: MockNode, listener: BuildListener, wrapper_config: WrapperConfig
    ) -> None:
        wrapper = DockerBuildWrapper(wrapper_config)
        decorated = wrapper.decorate_launcher(build, node.create_launcher(listener), listener)

        decorated.launch(LaunchRequest(cmds=["/bin/sh", "-xe", "/tmp/s.sh"]))

        cmds = node.launcher.commands[0]
        assert cmds[:2] == ["docker", "run"]
        assert cmds[-4:] == ["ubuntu", "/bin/sh", "-xe", "/tmp/s.sh"]
        assert "-e" in cmds and "PATH=/usr/bin" in cmds and "HOME=/home/ci" in cmds
        assert "SECRET=x" not in cmds

    def test_default_config(self, build: Build) -> None:
        wrapper = DockerBuildWrapper()
        assert wrapper.invocation(build).image == "build"


class TestTearDown:
    """Tests for the teardown entry point."""

    def test_set_up_returns_container_environment(self, build: Build, node: MockNode, listener: BuildListener) -> None:
        env = DockerBuildWrapper().set_up(build, node.create_launcher(listener), listener)
        assert isinstance(env, ContainerEnvironment)

    @pytest.mark.smoke
    def test_tear_down_cleans_named_container(
        self, build: Build, node: MockNode, listener: BuildListener, log_stream: io.StringIO
    ) -> None:
        env = DockerBuildWrapper().set_up(build, node.create_launcher(listener), listener)

        assert env.tear_down(build, listener) is True

        assert node.launcher.commands == [["docker", "kill", "build-42"], ["docker", "rm", "build-42"]]
        assert env.report is not None
        assert env.report.container_name == "build-42"

    def test_tear_down_uses_fresh_node_launcher(self, build: Build, node: MockNode, listener: BuildListener) -> None:
        wrapper = DockerBuildWrapper()
        decorated = wrapper.decorate_launcher(build, node.create_launcher(listener), listener)
        env = wrapper.set_up(build, decorated, listener)

        env.tear_down(build, listener)

        assert node.launchers_created == 2
        # Cleanup commands are not wrapped in docker run
        assert node.launcher.commands[0][:2] == ["docker", "kill"]

    def test_tear_down_ignores_failed_cleanup(self, build: Build, node: MockNode, listener: BuildListener) -> None:
        node.launcher.configure(statuses={"kill": 1, "rm": 1})
        env = DockerBuildWrapper().set_up(build, node.create_launcher(listener), listener)

        assert env.tear_down(build, listener) is True

    def test_stop_command_from_config(self, build: Build, node: MockNode, listener: BuildListener) -> None:
        wrapper = DockerBuildWrapper(teardown=TeardownConfig(stop_command="stop"))
        wrapper.set_up(build, node.create_launcher(listener), listener).tear_down(build, listener)
        assert node.launcher.commands[0] == ["docker", "stop", "build-42"]


class TestDescriptor:
    """Tests for wrapper metadata."""

    def test_display_name(self) -> None:
        assert DockerBuildWrapper.display_name == DISPLAY_NAME == "Docker Environment"

    def test_applicable_to_shell_pipelines(self) -> None:
        assert DockerBuildWrapper().is_applicable(Pipeline([ShellStep("make")])) is True

    def test_not_applicable_to_other_steps(self) -> None:
        pipeline = Pipeline([ShellStep("make"), object()])  # type: ignore[list-item]
        assert DockerBuildWrapper().is_applicable(pipeline) is False


class TestBaseClasses:
    """Tests for the default hook behavior."""

    def test_environment_tear_down_default(self, build: Build, listener: BuildListener) -> None:
        assert Environment().tear_down(build, listener) is True

    def test_build_wrapper_default_decoration(self, build: Build, node: MockNode, listener: BuildListener) -> None:
        class Plain(BuildWrapper):
            def set_up(self, build, launcher, listener):  # type: ignore[no-untyped-def]
                return Environment()

        launcher = node.create_launcher(listener)
        assert Plain().decorate_launcher(build, launcher, listener) is launcher
