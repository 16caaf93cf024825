"""Launchers that start build processes."""

from ciborium.launchers.base import Channel, Launcher, Proc
from ciborium.launchers.decorator import LaunchDecorator
from ciborium.launchers.local import LocalChannel, LocalLauncher, LocalProc

__all__ = [
    "Channel",
    "Launcher",
    "LaunchDecorator",
    "LocalChannel",
    "LocalLauncher",
    "LocalProc",
    "Proc",
]
