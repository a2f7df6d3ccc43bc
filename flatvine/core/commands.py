"""External command execution backend.

Defines the ``CommandRunner`` Protocol that every component shelling out
to a host tool (``flatpak``, ``ldd``, ``unsquashfs``) goes through, along
with the default subprocess-backed implementation.  Tests substitute a
recording fake.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class CommandResult(BaseModel):
    """Outcome of one external command."""

    model_config = ConfigDict(frozen=True)

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """Protocol for running a host command to completion.

    Implementations raise ``FileNotFoundError`` when the executable does
    not exist and otherwise report failure through ``returncode``.
    """

    def run(self, args: Sequence[str], *, capture: bool = True) -> CommandResult:
        ...


class SubprocessRunner:
    """Runs commands with :func:`subprocess.run`, no timeout.

    With ``capture=False`` the child inherits the terminal so the user
    sees the tool's own output.
    """

    def run(self, args: Sequence[str], *, capture: bool = True) -> CommandResult:
        argv = [str(a) for a in args]
        logger.debug("exec: %s", " ".join(argv))
        completed = subprocess.run(
            argv,
            capture_output=capture,
            text=True,
            check=False,
        )
        result = CommandResult(
            args=tuple(argv),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if not result.ok:
            logger.debug("exit %d: %s", result.returncode, result.stderr.strip())
        return result
