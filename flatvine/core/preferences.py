"""Preference writer — the Firefox default-prefs file for the CDM."""

from __future__ import annotations

import logging
from pathlib import Path

from flatvine.core.errors import PlacementFailed
from flatvine.models.config import InstallConfig

logger = logging.getLogger(__name__)


def render_preferences(widevine_version: str) -> str:
    """Enable the plugin and EME, pin the version, disable auto-update."""
    return "\n".join([
        "// Widevine preferences for Firefox Flatpak",
        f'pref("media.gmp-widevinecdm.version", "{widevine_version}");',
        'pref("media.gmp-widevinecdm.visible", true);',
        'pref("media.gmp-widevinecdm.enabled", true);',
        'pref("media.gmp-widevinecdm.autoupdate", false);',
        'pref("media.eme.enabled", true);',
        'pref("media.eme.encrypted-media-encryption-scheme.enabled", true);',
        "",
    ])


class PreferenceWriter:
    """Overwrites ``prefs/widevine.js``; no merging with prior content."""

    def __init__(self, config: InstallConfig) -> None:
        self.config = config

    def write(self) -> Path:
        path = self.config.prefs_file
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                render_preferences(self.config.version_pin.widevine_version),
                encoding="utf-8",
            )
        except OSError as exc:
            raise PlacementFailed(f"Failed to write preferences to {path}: {exc}") from exc
        logger.info("wrote preferences %s", path)
        return path
