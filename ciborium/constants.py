"""CIBorium constants and enumerations."""

from enum import Enum

# Container runtime
DOCKER_BINARY = "docker"
DOCKER_RUN = "run"
DOCKER_KILL = "kill"
DOCKER_STOP = "stop"
DOCKER_REMOVE = "rm"

# docker run flags, in the order they are emitted
FLAG_INTERACTIVE = "-i"
FLAG_AUTO_REMOVE = "--rm"
FLAG_NAME = "--name"
FLAG_WORKDIR = "-w"
FLAG_VOLUME = "-v"
FLAG_HOSTNAME = "-h"
FLAG_ENV = "-e"

# Workspace variable forced into every container. The value is left for the
# executing environment to expand.
WORKSPACE_VAR = "WORKSPACE"
WORKSPACE_PLACEHOLDER = "$WORKSPACE"

# Shell used for generated step scripts
SHELL_BINARY = "/bin/sh"
SHELL_FLAGS = "-xe"

# Build environment keys
ENV_JOB_NAME = "JOB_NAME"
ENV_BUILD_NUMBER = "BUILD_NUMBER"
ENV_BUILD_TAG = "BUILD_TAG"
ENV_NODE_NAME = "NODE_NAME"
ENV_BUILD_COOKIE = "BUILD_COOKIE"

# Filesystem
CONFIG_DIR = ".ciborium"
CONFIG_FILE = f"{CONFIG_DIR}/config.yaml"
SCRIPT_PREFIX = "ciborium"

DISPLAY_NAME = "Docker Environment"
MASK = "********"


class BuildResult(Enum):
    """Outcome of a build."""

    SUCCESS = "success"
    FAILURE = "failure"
    ABORTED = "aborted"


class StopCommand(Enum):
    """Runtime verb used to stop a container at teardown."""

    KILL = DOCKER_KILL
    STOP = DOCKER_STOP
