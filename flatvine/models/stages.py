"""Pipeline stage models — the fixed, strictly ordered provisioning stages."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class StageState(str, Enum):
    """State of a single stage within one run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class StageDefinition(BaseModel):
    """Defines a pipeline stage.

    ``commits`` marks stages that write outside the workspace; nothing
    before the first committing stage may leave persistent state behind.
    """

    model_config = ConfigDict(frozen=True)

    stage_id: str
    display_name: str
    ordinal: int
    commits: bool = False


# The provisioning stages, in execution order.
DEFAULT_STAGE_DEFINITIONS: list[StageDefinition] = [
    StageDefinition(stage_id="s1_preflight", display_name="Preflight Validation", ordinal=1),
    StageDefinition(stage_id="s2_workspace", display_name="Workspace", ordinal=2),
    StageDefinition(stage_id="s3_fetch", display_name="Archive Fetch", ordinal=3),
    StageDefinition(stage_id="s4_extract", display_name="Payload Extraction", ordinal=4),
    StageDefinition(stage_id="s5_license", display_name="License Gate", ordinal=5),
    StageDefinition(stage_id="s6_patch", display_name="Binary Patch", ordinal=6),
    StageDefinition(
        stage_id="s7_placement", display_name="Placement", ordinal=7, commits=True
    ),
    StageDefinition(
        stage_id="s8_sandbox", display_name="Sandbox Override", ordinal=8, commits=True
    ),
    StageDefinition(
        stage_id="s9_preferences", display_name="Preferences", ordinal=9, commits=True
    ),
    StageDefinition(stage_id="s10_verify", display_name="Verification", ordinal=10),
]

STAGES_BY_ID: dict[str, StageDefinition] = {
    s.stage_id: s for s in DEFAULT_STAGE_DEFINITIONS
}
