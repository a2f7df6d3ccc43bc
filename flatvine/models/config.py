"""Install configuration model — the immutable value a pipeline run is built from."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from flatvine.models.versioning import VersionPin

# Relative paths inside the extracted image.
PAYLOAD_ROOT = Path("WidevineCdm")
LIBRARY_NAME = "libwidevinecdm.so"
MANIFEST_NAME = "manifest.json"
LICENSE_NAME = "LICENSE"
README_NAME = "README"
LIBRARY_RELPATH = PAYLOAD_ROOT / "_platform_specific" / "cros_arm64" / LIBRARY_NAME


class InstallConfig(BaseModel):
    """Every constant a provisioning run depends on.

    Tests substitute a fixture instance (temporary ``home``, local archive
    base URL) instead of patching module globals.
    """

    model_config = ConfigDict(frozen=True)

    home: Path
    app_id: str = "org.mozilla.firefox"
    distfiles_base: str = (
        "https://commondatastorage.googleapis.com/chromeos-localmirror/distfiles"
    )
    lacros_name: str = "chromeos-lacros-arm64-squash-zstd"
    version_pin: VersionPin = VersionPin()
    required_arch: str = "aarch64"
    required_tools: tuple[str, ...] = ("unsquashfs", "python3")
    payload_pattern: str = "WidevineCdm/*"
    workspace_prefix: str = "widevine-flatpak-installer."
    archive_filename: str = "lacros.squashfs"
    gmp_env_var: str = "MOZ_GMP_PATH"

    @classmethod
    def from_environment(cls, **overrides: object) -> InstallConfig:
        """Build the default configuration with ``home`` taken from ``$HOME``."""
        home = os.environ.get("HOME")
        if not home:
            raise RuntimeError("HOME is not set; cannot locate the Flatpak data root")
        return cls(home=Path(home), **overrides)

    # ------------------------------------------------------------------
    # Derived locations
    # ------------------------------------------------------------------

    @property
    def archive_url(self) -> str:
        return f"{self.distfiles_base}/{self.lacros_name}-{self.version_pin.lacros_version}"

    @property
    def flatpak_data_dir(self) -> Path:
        """Per-app data root owned by the Flatpak sandbox."""
        return self.home / ".var" / "app" / self.app_id

    @property
    def install_base(self) -> Path:
        return self.flatpak_data_dir / "widevine"

    @property
    def discovery_dir(self) -> Path:
        """GMP plugin directory that ``MOZ_GMP_PATH`` points at."""
        return self.install_base / "gmp-widevinecdm" / "system-installed"

    @property
    def prefs_dir(self) -> Path:
        return self.flatpak_data_dir / "prefs"

    @property
    def prefs_file(self) -> Path:
        return self.prefs_dir / "widevine.js"
