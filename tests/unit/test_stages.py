"""Unit tests for the stage definitions and the pipeline stage lifecycle."""

from __future__ import annotations

import logging

import pytest

from flatvine.core.errors import (
    ExtractFailed,
    FetchFailed,
    InstallerError,
    PlacementFailed,
    SandboxConfigFailed,
)
from flatvine.models.stages import DEFAULT_STAGE_DEFINITIONS, StageState


class TestStageDefinitions:
    def test_ordered(self):
        ordinals = [s.ordinal for s in DEFAULT_STAGE_DEFINITIONS]
        assert ordinals == sorted(ordinals) == list(range(1, 11))

    def test_only_placement_onwards_commits(self):
        committing = [s.stage_id for s in DEFAULT_STAGE_DEFINITIONS if s.commits]
        assert committing == ["s7_placement", "s8_sandbox", "s9_preferences"]


class TestStageLifecycle:
    def test_passed_stage_recorded(self, make_pipeline):
        pipeline = make_pipeline()
        assert pipeline._run_stage("s3_fetch", lambda: "ok") == "ok"
        assert pipeline.stage_states["s3_fetch"] == StageState.PASSED

    def test_installer_error_passes_through(self, make_pipeline):
        pipeline = make_pipeline()

        def boom():
            raise FetchFailed("nope")

        with pytest.raises(FetchFailed, match="nope"):
            pipeline._run_stage("s3_fetch", boom)
        assert pipeline.stage_states["s3_fetch"] == StageState.FAILED

    def test_unexpected_error_is_wrapped_by_stage(self, make_pipeline):
        pipeline = make_pipeline()

        def boom():
            raise PermissionError("read-only filesystem")

        with pytest.raises(PlacementFailed, match="read-only filesystem") as info:
            pipeline._run_stage("s7_placement", boom)
        assert isinstance(info.value.__cause__, PermissionError)

    def test_unmapped_stage_uses_base_error(self, make_pipeline):
        pipeline = make_pipeline()

        def boom():
            raise ValueError("bad")

        with pytest.raises(InstallerError):
            pipeline._run_stage("s1_preflight", boom)

    def test_failure_logged_with_error_label(self, make_pipeline, caplog):
        pipeline = make_pipeline()

        def boom():
            raise FetchFailed("HTTP 503")

        with caplog.at_level(logging.ERROR, logger="flatvine.core.pipeline"):
            with pytest.raises(FetchFailed):
                pipeline._run_stage("s3_fetch", boom)
        assert "Archive Fetch [s3_fetch] failed (download failed): HTTP 503" in caplog.text

    def test_committing_stage_failure_warns_about_partial_install(
        self, make_pipeline, renderer
    ):
        pipeline = make_pipeline()

        def boom():
            raise SandboxConfigFailed("denied")

        with pytest.raises(SandboxConfigFailed):
            pipeline._run_stage("s8_sandbox", boom)
        output = renderer.console.export_text()
        assert "Installation is incomplete" in output
        assert "Sandbox Override failed" in output

    def test_workspace_stage_failure_has_no_partial_install_warning(
        self, make_pipeline, renderer
    ):
        pipeline = make_pipeline()

        def boom():
            raise ExtractFailed("bad superblock")

        with pytest.raises(ExtractFailed):
            pipeline._run_stage("s4_extract", boom)
        assert "Installation is incomplete" not in renderer.console.export_text()
