"""Report models — verification findings and the overall run summary."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from flatvine.models.stages import StageState


class VerificationWarning(BaseModel):
    """A non-fatal post-install finding."""

    model_config = ConfigDict(frozen=True)

    check_id: str  # "files_present", "override_visible"
    message: str


class VerificationReport(BaseModel):
    """Output of the post-install verifier."""

    model_config = ConfigDict(frozen=True)

    files_present: bool
    override_visible: bool
    warnings: list[VerificationWarning] = []

    @property
    def ok(self) -> bool:
        return not self.warnings


class PipelineResult(BaseModel):
    """Summary of a completed provisioning run."""

    model_config = ConfigDict(frozen=True)

    widevine_version: str
    install_base: Path
    library_path: Path
    prefs_file: Path
    stage_states: dict[str, StageState]
    verification: VerificationReport
    completed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
