"""Sandbox configurator — Flatpak permission overrides for the host runtime.

The override store belongs to Flatpak.  Applying the same arguments twice
yields the same stored state, so reruns are safe.
"""

from __future__ import annotations

import logging

from flatvine.core.commands import CommandRunner, SubprocessRunner
from flatvine.core.errors import SandboxConfigFailed
from flatvine.models.config import InstallConfig

logger = logging.getLogger(__name__)


def build_override_args(config: InstallConfig) -> list[str]:
    """The env-var assignment and read-only filesystem grant for this install."""
    return [
        f"--env={config.gmp_env_var}={config.discovery_dir}",
        f"--filesystem={config.install_base}:ro",
    ]


class FlatpakOverrides:
    """Reads and writes ``flatpak override --user`` state for one app."""

    def __init__(self, config: InstallConfig, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.runner = runner or SubprocessRunner()

    def apply(self) -> list[str]:
        args = build_override_args(self.config)
        cmd = ["flatpak", "override", "--user", self.config.app_id, *args]
        try:
            result = self.runner.run(cmd)
        except FileNotFoundError as exc:
            raise SandboxConfigFailed(f"flatpak is not available: {exc}") from exc
        if not result.ok:
            raise SandboxConfigFailed(
                f"Failed to apply Flatpak overrides for {self.config.app_id}: "
                f"{result.stderr.strip() or f'exit status {result.returncode}'}"
            )
        logger.info("applied overrides: %s", " ".join(args))
        return args

    def show(self) -> str:
        """Return the current override text; empty if it cannot be read."""
        cmd = ["flatpak", "override", "--user", "--show", self.config.app_id]
        try:
            result = self.runner.run(cmd)
        except FileNotFoundError:
            return ""
        return result.stdout if result.ok else ""

    def reset_command(self) -> list[str]:
        """The manual uninstall command; never run by the pipeline."""
        return ["flatpak", "override", "--user", "--reset", self.config.app_id]
