"""Version pinning model — the fixed versions stamped into every run."""

from pydantic import BaseModel, ConfigDict


class VersionPin(BaseModel):
    """Records the pinned versions for a provisioning run.

    The LaCrOS image version selects the archive; the Widevine version is
    written into the preference file and the README; the glibc minimum is
    the preflight floor.
    """

    model_config = ConfigDict(frozen=True)

    lacros_version: str = "128.0.6613.137"
    widevine_version: str = "4.10.2710.0"
    min_glibc_version: str = "2.36"
