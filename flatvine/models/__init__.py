"""flatvine data models — all Pydantic v2, all frozen (immutable)."""

from flatvine.models.artifacts import (
    ExtractedPayload,
    FetchedArchive,
    InstalledBundle,
    PatchedLibrary,
)
from flatvine.models.config import InstallConfig
from flatvine.models.layout import LinkSpec, PlacedFile, build_discovery_links
from flatvine.models.reports import (
    PipelineResult,
    VerificationReport,
    VerificationWarning,
)
from flatvine.models.stages import (
    DEFAULT_STAGE_DEFINITIONS,
    StageDefinition,
    StageState,
)
from flatvine.models.versioning import VersionPin

__all__ = [
    # versioning
    "VersionPin",
    # config
    "InstallConfig",
    # stages
    "StageState",
    "StageDefinition",
    "DEFAULT_STAGE_DEFINITIONS",
    # layout
    "LinkSpec",
    "PlacedFile",
    "build_discovery_links",
    # artifacts
    "FetchedArchive",
    "ExtractedPayload",
    "PatchedLibrary",
    "InstalledBundle",
    # reports
    "VerificationWarning",
    "VerificationReport",
    "PipelineResult",
]
