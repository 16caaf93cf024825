"""Sequential pipeline driver.

Runs the steps of one build in order through a wrapped launcher. A step
only starts once the previous one has exited with status 0, and the wrapper's
teardown runs exactly once at the end, whatever happened.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from ciborium.build import Build
from ciborium.constants import SCRIPT_PREFIX, SHELL_BINARY, SHELL_FLAGS, BuildResult
from ciborium.exceptions import PipelineError
from ciborium.launch_types import LaunchRequest
from ciborium.launchers.base import Launcher
from ciborium.listener import BuildListener
from ciborium.logging import get_logger, get_step_logger, set_build_context
from ciborium.wrapper import BuildWrapper

logger = get_logger("pipeline")


@dataclass(frozen=True)
class ShellStep:
    """A build step running a shell script."""

    script: str

    def write_script(self, tmp_dir: Path) -> Path:
        """Write the script into ``tmp_dir`` and return its path."""
        fd, path = tempfile.mkstemp(prefix=SCRIPT_PREFIX, suffix=".sh", dir=tmp_dir)
        with os.fdopen(fd, "w") as f:
            f.write(self.script)
            if not self.script.endswith("\n"):
                f.write("\n")
        return Path(path)

    def request(self, script_path: Path, build: Build, env: dict[str, str]) -> LaunchRequest:
        return LaunchRequest(
            cmds=[SHELL_BINARY, SHELL_FLAGS, str(script_path)],
            pwd=build.workspace,
            env=env,
        )

    def perform(self, build: Build, launcher: Launcher, env: dict[str, str]) -> int:
        """Run the step and wait for it.

        Returns:
            Exit status of the step
        """
        script_path = self.write_script(build.tmp_dir)
        try:
            return launcher.launch(self.request(script_path, build, env)).join()
        finally:
            script_path.unlink(missing_ok=True)


@dataclass
class Pipeline:
    """Ordered build steps of a job."""

    steps: list[ShellStep] = field(default_factory=list)

    @classmethod
    def from_scripts(cls, scripts: list[str]) -> "Pipeline":
        return cls([ShellStep(script) for script in scripts])

    def is_freestyle(self) -> bool:
        return all(isinstance(step, ShellStep) for step in self.steps)


def _run_steps(build: Build, pipeline: Pipeline, launcher: Launcher, listener: BuildListener) -> BuildResult:
    env = build.get_environment()
    for index, step in enumerate(pipeline.steps, start=1):
        step_logger = get_step_logger(index)
        step_logger.info(f"Starting step {index}/{len(pipeline.steps)}")
        status = step.perform(build, launcher, env)
        if status != 0:
            listener.println(f"Build step {index} marked build as failure (status {status})")
            step_logger.warning(f"Step {index} failed with status {status}")
            return BuildResult.FAILURE
    return BuildResult.SUCCESS


def run_build(
    build: Build,
    pipeline: Pipeline,
    wrapper: BuildWrapper,
    listener: BuildListener | None = None,
) -> BuildResult:
    """Run a build's steps inside the wrapper, then tear it down.

    Args:
        build: Build being executed
        pipeline: Steps to run
        wrapper: Wrapper decorating the launcher and tearing down
        listener: Build log

    Returns:
        The build result, also stored on ``build.result``

    Raises:
        PipelineError: If the wrapper cannot wrap this pipeline
        OSError: If a step cannot be launched; teardown still runs
    """
    listener = listener or BuildListener()
    if not wrapper.is_applicable(pipeline):
        raise PipelineError(f"{wrapper.display_name or type(wrapper).__name__} cannot wrap this pipeline")

    set_build_context(job=build.job_name, build=build.number)
    build.workspace.mkdir(parents=True, exist_ok=True)

    launcher = build.built_on.create_launcher(listener)
    launcher = wrapper.decorate_launcher(build, launcher, listener)
    environment = wrapper.set_up(build, launcher, listener)

    try:
        build.result = _run_steps(build, pipeline, launcher, listener)
    except KeyboardInterrupt:
        build.result = BuildResult.ABORTED
        listener.println("Aborted by user")
        launcher.kill(build.cookie_env)
    except OSError:
        build.result = BuildResult.FAILURE
        raise
    finally:
        if not environment.tear_down(build, listener):
            build.result = BuildResult.FAILURE
        listener.println(f"Finished: {build.result.value.upper() if build.result else 'UNKNOWN'}")
        logger.info(f"{build.tag} finished with {build.result}")

    return build.result
