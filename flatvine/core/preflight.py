"""Preflight validation — architecture, host runtime, glibc, tools.

Checks run in a fixed order and the first failure raises.  Nothing in
this module writes to disk, so a failed preflight leaves the machine
exactly as it was.
"""

from __future__ import annotations

import logging
import platform
import shutil
from collections.abc import Callable
from pathlib import Path

from flatvine.core.commands import CommandRunner, SubprocessRunner
from flatvine.core.errors import (
    PlatformUnsupported,
    RuntimeMissing,
    ToolMissing,
    VersionTooOld,
)
from flatvine.core.versions import version_at_least
from flatvine.models.config import InstallConfig

logger = logging.getLogger(__name__)


class PreflightValidator:
    """Environment gate run before anything else.

    Parameters
    ----------
    config:
        The pinned install configuration.
    runner:
        Executes ``flatpak`` and ``ldd``.
    machine:
        Returns the CPU architecture name; defaults to ``platform.machine``.
    which:
        Resolves a tool on ``PATH``; defaults to ``shutil.which``.
    tools:
        Executables that must resolve on ``PATH``; defaults to
        ``config.required_tools``.
    extra_files:
        Files that must exist (e.g. the fixup helper script); a missing
        one is reported as a missing tool.
    """

    def __init__(
        self,
        config: InstallConfig,
        runner: CommandRunner | None = None,
        *,
        machine: Callable[[], str] = platform.machine,
        which: Callable[[str], str | None] = shutil.which,
        tools: tuple[str, ...] | None = None,
        extra_files: tuple[Path, ...] = (),
    ) -> None:
        self.config = config
        self.runner = runner or SubprocessRunner()
        self._machine = machine
        self._which = which
        self.tools = config.required_tools if tools is None else tools
        self._extra_files = extra_files

    def validate(self) -> dict[str, str]:
        """Run every check in order; return what was detected."""
        arch = self.check_architecture()
        self.check_runtime()
        glibc = self.check_glibc()
        tools = self.check_tools()
        logger.info("preflight passed: arch=%s glibc=%s", arch, glibc)
        return {"architecture": arch, "glibc": glibc, **tools}

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def check_architecture(self) -> str:
        arch = self._machine()
        if arch != self.config.required_arch:
            raise PlatformUnsupported(
                f"This installer is only supported on {self.config.required_arch} "
                f"(ARM64) systems; this machine is {arch or 'unknown'}."
            )
        return arch

    def check_runtime(self) -> None:
        app_id = self.config.app_id
        hint = f"Install it with: flatpak install flathub {app_id}"
        try:
            result = self.runner.run(
                ["flatpak", "list", "--app", "--columns=application"]
            )
        except FileNotFoundError:
            raise RuntimeMissing(
                f"flatpak is not installed, so {app_id} cannot be present. {hint}"
            ) from None
        installed = {line.strip() for line in result.stdout.splitlines()}
        if not result.ok or app_id not in installed:
            raise RuntimeMissing(f"Firefox Flatpak ({app_id}) is not installed. {hint}")

    def check_glibc(self) -> str:
        minimum = self.config.version_pin.min_glibc_version
        detected = self.detect_glibc_version()
        if detected is None:
            raise VersionTooOld(
                f"Could not determine the glibc version. "
                f"Widevine requires glibc {minimum} or newer."
            )
        if not version_at_least(detected, minimum):
            raise VersionTooOld(
                f"Your glibc version ({detected}) is too old. "
                f"Widevine requires glibc {minimum} or newer."
            )
        return detected

    def detect_glibc_version(self) -> str | None:
        """Read the version from the first line of ``ldd --version``."""
        try:
            result = self.runner.run(["ldd", "--version"])
        except FileNotFoundError:
            return None
        # glibc's ldd may exit non-zero for --version on some builds; trust stdout.
        lines = result.stdout.strip().splitlines()
        if not lines or not lines[0].split():
            return None
        token = lines[0].split()[-1]
        return token if token[:1].isdigit() else None

    def check_tools(self) -> dict[str, str]:
        resolved: dict[str, str] = {}
        for tool in self.tools:
            path = self._which(tool)
            if path is None:
                raise ToolMissing(f"Required tool '{tool}' is not installed.")
            resolved[tool] = path
        for extra in self._extra_files:
            if not extra.is_file():
                raise ToolMissing(f"{extra.name} not found in {extra.parent}")
        return resolved
