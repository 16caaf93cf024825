"""Build log stream.

Everything a user should see for a build (echoed command lines, the applied
container prefix, cleanup output) is written through a BuildListener. It is
separate from the diagnostic ``ciborium.*`` loggers.
"""

from __future__ import annotations

import sys
from typing import BinaryIO, TextIO

from ciborium.logging import get_logger

logger = get_logger("listener")


class BuildListener:
    """Line-oriented writer for one build's log."""

    def __init__(self, stream: TextIO | None = None) -> None:
        """Initialize listener.

        Args:
            stream: Text stream receiving the build log (default: stdout)
        """
        self.stream = stream or sys.stdout

    def println(self, message: str) -> None:
        """Write one line to the build log."""
        self.stream.write(f"{message}\n")
        self.stream.flush()

    def error(self, message: str) -> None:
        """Write an error line to the build log."""
        self.println(f"ERROR: {message}")

    def write_bytes(self, data: bytes | None) -> None:
        """Copy raw process output into the build log."""
        if not data:
            return
        self.stream.write(data.decode("utf-8", errors="replace"))
        self.stream.flush()

    def copy_from(self, source: BinaryIO | None, chunk_size: int = 8192) -> int:
        """Copy a binary stream into the build log until EOF.

        Returns:
            Number of bytes copied
        """
        if source is None:
            return 0
        copied = 0
        while True:
            chunk = source.read(chunk_size)
            if not chunk:
                break
            self.write_bytes(chunk)
            copied += len(chunk)
        return copied
