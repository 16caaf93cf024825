"""Decide which launch requests are redirected into a container.

Each check is a pure predicate over a launch request. A request is
redirected only when every check passes; evaluation stops at the first
failing check.
"""

from __future__ import annotations

from collections.abc import Callable

from ciborium.constants import DOCKER_BINARY, SHELL_BINARY
from ciborium.launch_types import LaunchRequest

RedirectCheck = Callable[[LaunchRequest | None], bool]


def is_present(request: LaunchRequest | None) -> bool:
    """Return True if there is a request at all."""
    return request is not None


def skips_docker_commands(request: LaunchRequest | None) -> bool:
    """Return True if no command token is exactly ``docker``.

    Any token equal to ``docker`` counts, so ``echo docker`` is not
    redirected either.
    """
    # Matches the token anywhere, not only in command position
    if request is None:
        return False
    return DOCKER_BINARY not in request.cmds


def skips_docker_shell_scripts(request: LaunchRequest | None) -> bool:
    """Return True unless the request is ``/bin/sh <flag> docker...``."""
    if request is None:
        return False
    cmds = request.cmds
    return not (len(cmds) == 3 and cmds[0] == SHELL_BINARY and cmds[2].startswith(DOCKER_BINARY))


REDIRECT_CHECKS: tuple[RedirectCheck, ...] = (
    is_present,
    skips_docker_commands,
    skips_docker_shell_scripts,
)


def should_redirect(request: LaunchRequest | None, checks: tuple[RedirectCheck, ...] = REDIRECT_CHECKS) -> bool:
    """Return True if the request should run inside a container.

    Args:
        request: Pending launch request
        checks: Ordered predicates, all of which must pass

    Returns:
        True to redirect, False to pass the request through untouched
    """
    return all(check(request) for check in checks)
