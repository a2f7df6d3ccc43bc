"""flatvine: Widevine CDM provisioning for the Firefox Flatpak on aarch64.

Fetches the pinned ChromeOS LaCrOS image, extracts and adapts the Widevine
CDM, installs it under the Flatpak per-app data root, and points Firefox
at it through Flatpak overrides and a preference file.
"""

__version__ = "0.1.0"
__description__ = "Widevine CDM installer for Firefox Flatpak on ARM64"

from flatvine.core.pipeline import ProvisioningPipeline
from flatvine.models.config import InstallConfig
from flatvine.cli.app import app as cli

__all__ = ["ProvisioningPipeline", "InstallConfig", "cli", "__version__"]
