"""Provisioning pipeline — the central coordinator for an install run.

Wires the preflight validator, workspace, fetcher, extractor, gates,
library transformer, installer, Flatpak overrides, preference writer and
verifier into one strictly sequential run::

    preflight -> intent gate -> workspace -> fetch -> extract
        -> license gate -> patch -> placement -> overrides
        -> preferences -> verify

Every stage goes through ``_run_stage``, which tracks its state, logs the
transition and converts unexpected exceptions into the stage's
``InstallerError`` subclass.  Nothing outside the workspace is written
before placement, so any failure up to and including the patch leaves
the install directory and the Flatpak overrides untouched.
"""

from __future__ import annotations

import logging
import platform
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

import httpx

from flatvine.config import Settings
from flatvine.console import InstallRenderer
from flatvine.core.commands import CommandRunner, SubprocessRunner
from flatvine.core.errors import (
    ExtractFailed,
    FetchFailed,
    InstallerError,
    PatchFailed,
    PlacementFailed,
    SandboxConfigFailed,
)
from flatvine.core.extractor import PayloadExtractor
from flatvine.core.fetcher import ArchiveFetcher
from flatvine.core.gates import Confirmer, ConsoleConfirmer, IntentGate, LicenseGate
from flatvine.core.placement import BundleInstaller
from flatvine.core.preferences import PreferenceWriter
from flatvine.core.preflight import PreflightValidator
from flatvine.core.sandbox import FlatpakOverrides
from flatvine.core.transformer import (
    FixupScriptTransformer,
    LibraryTransformer,
    apply_transform,
)
from flatvine.core.verifier import PostInstallVerifier
from flatvine.core.workspace import Workspace
from flatvine.models.config import LIBRARY_NAME, InstallConfig
from flatvine.models.reports import PipelineResult
from flatvine.models.stages import (
    DEFAULT_STAGE_DEFINITIONS,
    STAGES_BY_ID,
    StageDefinition,
    StageState,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Error raised when a stage fails with something other than an InstallerError.
_STAGE_ERRORS: dict[str, type[InstallerError]] = {
    "s3_fetch": FetchFailed,
    "s4_extract": ExtractFailed,
    "s6_patch": PatchFailed,
    "s7_placement": PlacementFailed,
    "s8_sandbox": SandboxConfigFailed,
    "s9_preferences": PlacementFailed,
}

_STAGE_MESSAGES: dict[str, str] = {
    "s3_fetch": "Downloading LaCrOS (Chrome) image...",
    "s4_extract": "Extracting Widevine...",
    "s6_patch": "Patching Widevine binary for compatibility...",
    "s7_placement": "Installing Widevine to {install_base}...",
    "s8_sandbox": "Configuring Firefox Flatpak environment...",
    "s9_preferences": "Creating Firefox preferences...",
}


class ProvisioningPipeline:
    """Runs one provisioning pass.

    Parameters
    ----------
    config:
        Pinned install configuration.
    settings:
        Runtime settings; defaults are read from the environment.
    runner, transformer, confirmer, renderer, http_client:
        Injected collaborators; real implementations are built when omitted.
    machine, which:
        Architecture and ``PATH`` lookups for preflight.
    workspace_parent:
        Where the temporary workspace is created (system temp dir if None).
    clock:
        Timestamp source for the README.
    handle_signals:
        Whether the workspace installs SIGINT/SIGTERM handlers.
    """

    def __init__(
        self,
        config: InstallConfig,
        settings: Settings | None = None,
        *,
        runner: CommandRunner | None = None,
        transformer: LibraryTransformer | None = None,
        confirmer: Confirmer | None = None,
        renderer: InstallRenderer | None = None,
        http_client: httpx.Client | None = None,
        machine: Callable[[], str] = platform.machine,
        which: Callable[[str], str | None] = shutil.which,
        workspace_parent: Path | None = None,
        clock: Callable[[], datetime] = datetime.now,
        handle_signals: bool = True,
    ) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.renderer = renderer or InstallRenderer()
        runner = runner or SubprocessRunner()

        tools = config.required_tools
        extra_files: tuple[Path, ...] = ()
        if transformer is None:
            # Check the interpreter the helper actually runs under.
            python = self.settings.python
            tools = tuple(python if tool == "python3" else tool for tool in tools)
            script = self.settings.resolved_fixup_script
            transformer = FixupScriptTransformer(script, python=python, runner=runner)
            extra_files = (script,)
        self.transformer = transformer

        confirmer = confirmer or ConsoleConfirmer(self.renderer.console)
        self.preflight = PreflightValidator(
            config,
            runner,
            machine=machine,
            which=which,
            tools=tools,
            extra_files=extra_files,
        )
        self.intent_gate = IntentGate(confirmer, self.renderer)
        self.license_gate = LicenseGate(confirmer, self.renderer)
        self.fetcher = ArchiveFetcher(
            config,
            http_client,
            console=self.renderer.console,
            connect_timeout=self.settings.connect_timeout_seconds,
        )
        self.extractor = PayloadExtractor(config, runner)
        self.installer = BundleInstaller(config, clock=clock, renderer=self.renderer)
        self.overrides = FlatpakOverrides(config, runner)
        self.preferences = PreferenceWriter(config)
        self.verifier = PostInstallVerifier(config, self.overrides)

        self._workspace_parent = workspace_parent
        self._handle_signals = handle_signals
        self.workspace: Workspace | None = None
        self.stage_states: dict[str, StageState] = {
            s.stage_id: StageState.NOT_STARTED for s in DEFAULT_STAGE_DEFINITIONS
        }

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> PipelineResult:
        """Execute every stage in order; raise ``InstallerError`` on failure."""
        config = self.config
        self.stage_states = dict.fromkeys(self.stage_states, StageState.NOT_STARTED)
        self._run_stage("s1_preflight", self.preflight.validate)
        self.intent_gate.ask(config)

        with self._run_stage("s2_workspace", self._open_workspace) as workspace:
            workdir = workspace.path
            archive = self._run_stage("s3_fetch", self.fetcher.fetch, workdir)
            payload = self._run_stage("s4_extract", self.extractor.extract, archive, workdir)
            self._run_stage("s5_license", self.license_gate.ask, payload)
            patched = self._run_stage(
                "s6_patch",
                apply_transform,
                self.transformer,
                payload.library,
                workdir / LIBRARY_NAME,
            )
            bundle = self._run_stage("s7_placement", self.installer.install, patched, payload)

        self._run_stage("s8_sandbox", self.overrides.apply)
        prefs_file = self._run_stage("s9_preferences", self.preferences.write)
        report = self._run_stage("s10_verify", self.verifier.verify)

        if report.files_present:
            self.renderer.info("Verification: Installation files present ✓")
        if report.override_visible:
            self.renderer.info("Verification: Flatpak environment configured ✓")
        for warning in report.warnings:
            self.renderer.warn(f"Verification: {warning.message}")

        return PipelineResult(
            widevine_version=config.version_pin.widevine_version,
            install_base=bundle.install_base,
            library_path=bundle.install_base / LIBRARY_NAME,
            prefs_file=prefs_file,
            stage_states=dict(self.stage_states),
            verification=report,
        )

    # ------------------------------------------------------------------
    # Stage lifecycle
    # ------------------------------------------------------------------

    def _open_workspace(self) -> Workspace:
        self.workspace = Workspace(
            self.config.workspace_prefix,
            parent=self._workspace_parent,
            handle_signals=self._handle_signals,
        )
        self.workspace.create()
        return self.workspace

    def _run_stage(self, stage_id: str, fn: Callable[..., T], *args: Any) -> T:
        definition = STAGES_BY_ID[stage_id]
        message = _STAGE_MESSAGES.get(stage_id)
        if message:
            self.renderer.info(message.format(install_base=self.config.install_base))

        self.stage_states[stage_id] = StageState.RUNNING
        logger.info("%s [%s] running", definition.display_name, stage_id)
        try:
            result = fn(*args)
        except InstallerError as exc:
            self._stage_failed(definition, exc)
            raise
        except Exception as exc:
            error_cls = _STAGE_ERRORS.get(stage_id, InstallerError)
            error = error_cls(f"{definition.display_name} failed: {exc}")
            self._stage_failed(definition, error)
            raise error from exc

        self.stage_states[stage_id] = StageState.PASSED
        logger.info("%s [%s] passed", definition.display_name, stage_id)
        return result

    def _stage_failed(self, definition: StageDefinition, error: InstallerError) -> None:
        self.stage_states[definition.stage_id] = StageState.FAILED
        logger.error(
            "%s [%s] failed (%s): %s",
            definition.display_name,
            definition.stage_id,
            error.label,
            error,
        )
        if definition.commits:
            self.renderer.warn(
                f"Installation is incomplete: {definition.display_name} failed after "
                f"files were written to {self.config.install_base}. Re-run the installer, "
                f"or remove that directory to uninstall."
            )
