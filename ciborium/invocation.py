"""Build the ``docker run`` prefix that moves a build step into a container.

The argument order is fixed: the container runtime parses everything after
the image as the command to run, so the image must be the last token of the
prefix and every flag must come before it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ciborium.constants import (
    DOCKER_BINARY,
    DOCKER_RUN,
    FLAG_AUTO_REMOVE,
    FLAG_ENV,
    FLAG_HOSTNAME,
    FLAG_INTERACTIVE,
    FLAG_NAME,
    FLAG_VOLUME,
    FLAG_WORKDIR,
    WORKSPACE_PLACEHOLDER,
    WORKSPACE_VAR,
)

if TYPE_CHECKING:
    from ciborium.build import Build
    from ciborium.config import WrapperConfig

__all__ = [
    "ContainerInvocation",
    "InvocationContext",
    "build_run_command",
    "environment_flag",
    "invocation_for",
    "volume",
]


@dataclass(frozen=True)
class InvocationContext:
    """Build facts the run command is derived from."""

    workspace: str
    tmp_dir: str
    hostname: str
    container_name: str
    image: str


@dataclass(frozen=True)
class ContainerInvocation:
    """An immutable ``docker run ... <image>`` argument vector."""

    args: tuple[str, ...]
    container_name: str
    image: str

    def __len__(self) -> int:
        return len(self.args)

    def as_list(self) -> list[str]:
        return list(self.args)


def volume(path: str) -> str:
    """Encode a path bound to the same path inside the container."""
    return f"{path}:{path}"


def environment_flag(key: str, value: str) -> str:
    """Encode one environment entry in docker's ``KEY=VALUE`` syntax."""
    return f"{key}={value}"


def build_run_command(
    context: InvocationContext,
    include_environment: Sequence[str],
    extra_options: Sequence[str],
    environment: Mapping[str, str],
) -> ContainerInvocation:
    """Generate the command used to isolate a build step within docker.

    Args:
        context: Workspace, temp dir, hostname, container name and image
        include_environment: Names of build variables forwarded to the container
        extra_options: Free-form docker options, appended verbatim
        environment: Current build environment

    Returns:
        ContainerInvocation whose last token is the image
    """
    allowed = set(include_environment)
    cmd = [
        DOCKER_BINARY,
        DOCKER_RUN,
        FLAG_INTERACTIVE,  # keep stdin open, output goes to the build log
        FLAG_AUTO_REMOVE,
        FLAG_NAME,
        context.container_name,
        FLAG_WORKDIR,
        context.workspace,
        # Workspace is shared so reports written by the step stay on the host
        FLAG_VOLUME,
        volume(context.workspace),
        # Step scripts are generated in the temp dir
        FLAG_VOLUME,
        volume(context.tmp_dir),
        FLAG_HOSTNAME,
        context.hostname,
    ]

    for key, value in environment.items():
        if key in allowed:
            cmd.extend([FLAG_ENV, environment_flag(key, value)])

    cmd.extend(extra_options)

    # Expanded by whatever executes the command, not here
    cmd.extend([FLAG_ENV, environment_flag(WORKSPACE_VAR, WORKSPACE_PLACEHOLDER)])

    cmd.append(context.image)
    return ContainerInvocation(args=tuple(cmd), container_name=context.container_name, image=context.image)


def invocation_for(build: Build, config: WrapperConfig, environment: Mapping[str, str]) -> ContainerInvocation:
    """Resolve a build and wrapper configuration into a run command.

    An empty or blank configured image falls back to the build's default.
    """
    context = InvocationContext(
        workspace=str(build.workspace),
        tmp_dir=str(build.tmp_dir),
        hostname=build.built_on.hostname,
        container_name=build.container_name,
        image=config.image_or("") or build.default_image_name,
    )
    return build_run_command(
        context,
        include_environment=config.environment_allowlist(),
        extra_options=config.extra_options(),
        environment=environment,
    )
