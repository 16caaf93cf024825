"""LaunchDecorator: run filtered launch requests inside a container.

Wraps another launcher. Requests that pass the command filter get the
``docker run`` prefix prepended; everything else is forwarded untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import BinaryIO

from ciborium.command_filter import REDIRECT_CHECKS, RedirectCheck, should_redirect
from ciborium.launch_types import LaunchRequest
from ciborium.launchers.base import Channel, Launcher, Proc
from ciborium.listener import BuildListener
from ciborium.logging import get_logger

logger = get_logger("decorator")


def prefix_commands(prefix: Sequence[str], args: Sequence[str]) -> list[str]:
    """Return ``prefix ++ args``."""
    return [*prefix, *args]


def prefix_masks(prefix: Sequence[str], masks: Sequence[bool]) -> list[bool]:
    """Return a mask array lined up with ``prefix ++ args``.

    Prefix positions are never masked; the original masks keep their
    relative order after them.
    """
    return [False] * len(prefix) + list(masks)


class LaunchDecorator(Launcher):
    """Launcher that redirects filtered requests into a named container."""

    def __init__(
        self,
        outer: Launcher,
        prefix: Sequence[str],
        container_name: str,
        listener: BuildListener | None = None,
        checks: tuple[RedirectCheck, ...] = REDIRECT_CHECKS,
    ) -> None:
        """Initialize decorator.

        Args:
            outer: Launcher that actually starts processes
            prefix: ``docker run ... <image>`` tokens
            container_name: Name the prefix runs the container under
            listener: Build log (default: the outer launcher's)
            checks: Predicates deciding which requests are redirected
        """
        super().__init__(listener or outer.listener)
        self.outer = outer
        self.prefix: tuple[str, ...] = tuple(prefix)
        self.container_name = container_name
        self.checks = checks

    def decorate(self, request: LaunchRequest) -> LaunchRequest:
        """Return the request to forward: the original one, or a prefixed copy."""
        if not should_redirect(request, self.checks):
            return request

        self.listener.println(f"Running with docker command: {list(self.prefix)}")
        logger.debug(f"Redirecting {request.cmds[:1]} into container {self.container_name}")

        masks = prefix_masks(self.prefix, request.masks) if request.masks is not None else None
        return replace(request, cmds=prefix_commands(self.prefix, request.cmds), masks=masks)

    def launch(self, request: LaunchRequest) -> Proc:
        return self.outer.launch(self.decorate(request))

    def launch_channel(
        self,
        cmd: list[str],
        out: BinaryIO | None,
        work_dir: Path | None,
        env: dict[str, str] | None,
    ) -> Channel:
        # Channels are always redirected; the command filter is not consulted
        return self.outer.launch_channel(prefix_commands(self.prefix, cmd), out, work_dir, env)

    def kill(self, model_env: dict[str, str]) -> None:
        # The container itself is left to teardown
        self.outer.kill(model_env)

    def is_unix(self) -> bool:
        return self.outer.is_unix()
