"""Build and node model.

A Build carries the identity and paths of one pipeline execution; the
container name and default image are derived from it so that the name used
for every step is also the one cleaned up at teardown.
"""

from __future__ import annotations

import os
import re
import socket
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from ciborium.constants import (
    ENV_BUILD_COOKIE,
    ENV_BUILD_NUMBER,
    ENV_BUILD_TAG,
    ENV_JOB_NAME,
    ENV_NODE_NAME,
    WORKSPACE_VAR,
    BuildResult,
)
from ciborium.exceptions import ValidationError
from ciborium.launchers.local import LocalLauncher
from ciborium.listener import BuildListener

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")
_INVALID_IMAGE_CHARS = re.compile(r"[^a-z0-9._-]")


def container_name_for(job_name: str, number: int) -> str:
    """Derive the container name for a build.

    Docker names must match ``[a-zA-Z0-9][a-zA-Z0-9_.-]*``; other characters
    become underscores.
    """
    name = _INVALID_NAME_CHARS.sub("_", f"{job_name}-{number}")
    if not name[0].isalnum():
        name = f"b{name}"
    return name


def default_image_for(job_name: str) -> str:
    """Derive the image used when none is configured."""
    image = _INVALID_IMAGE_CHARS.sub("-", job_name.lower()).strip("-._")
    if not image:
        raise ValidationError("Cannot derive an image name from job name", field="job_name", details={"job": job_name})
    return image


@dataclass
class Node:
    """Machine a build runs on."""

    name: str = "built-in"
    hostname_override: str | None = None

    @property
    def hostname(self) -> str:
        return self.hostname_override or socket.gethostname()

    def create_launcher(self, listener: BuildListener) -> LocalLauncher:
        """Create a launcher that runs processes on this node."""
        return LocalLauncher(listener)


@dataclass
class Build:
    """One execution of a job."""

    job_name: str
    number: int
    workspace: Path
    built_on: Node = field(default_factory=Node)
    extra_env: dict[str, str] = field(default_factory=dict)
    tmp_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    inherit_env: bool = True
    cookie: str = field(default_factory=lambda: uuid.uuid4().hex)
    result: BuildResult | None = None

    def __post_init__(self) -> None:
        if not self.job_name:
            raise ValidationError("Job name must not be empty", field="job_name")
        if self.number < 0:
            raise ValidationError("Build number must not be negative", field="number")
        self.workspace = Path(self.workspace).absolute()

    @property
    def tag(self) -> str:
        return f"ciborium-{self.job_name}-{self.number}"

    @property
    def container_name(self) -> str:
        return container_name_for(self.job_name, self.number)

    @property
    def default_image_name(self) -> str:
        return default_image_for(self.job_name)

    @property
    def cookie_env(self) -> dict[str, str]:
        """Environment entry identifying this build's processes."""
        return {ENV_BUILD_COOKIE: self.cookie}

    def get_environment(self) -> dict[str, str]:
        """Build environment: host variables plus build identity."""
        env = dict(os.environ) if self.inherit_env else {}
        env.update(
            {
                ENV_JOB_NAME: self.job_name,
                ENV_BUILD_NUMBER: str(self.number),
                ENV_BUILD_TAG: self.tag,
                ENV_NODE_NAME: self.built_on.name,
                WORKSPACE_VAR: str(self.workspace),
            }
        )
        env.update(self.extra_env)
        env.update(self.cookie_env)
        return env
