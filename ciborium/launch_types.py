"""CIBorium launch data types.

Pure data types shared by launchers and the launch decorator.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from ciborium.constants import MASK
from ciborium.exceptions import ValidationError

__all__ = [
    "LaunchRequest",
]


@dataclass
class LaunchRequest:
    """A request to start an external process.

    ``masks`` is a per-token flag array parallel to ``cmds``; a true entry
    hides that token when the command line is echoed to the build log.
    """

    cmds: list[str]
    masks: list[bool] | None = None
    pwd: Path | None = None
    env: dict[str, str] | None = None
    stdout: BinaryIO | None = None
    read_stdout: bool = False
    read_stderr: bool = False

    def __post_init__(self) -> None:
        if self.masks is not None and len(self.masks) != len(self.cmds):
            raise ValidationError(
                "Mask array must have one entry per command token",
                field="masks",
                details={"cmds": len(self.cmds), "masks": len(self.masks)},
            )

    def display(self) -> str:
        """Render the command line with masked tokens hidden."""
        masks = self.masks or [False] * len(self.cmds)
        return " ".join(MASK if masked else token for token, masked in zip(self.cmds, masks))
