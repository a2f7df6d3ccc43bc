"""Installer/placement — writes the versioned install tree.

Layout under ``install_base``::

    libwidevinecdm.so                       0755
    manifest.json                           0644
    LICENSE                                 0644
    README                                  0644
    gmp-widevinecdm/system-installed/
        manifest.json     -> ../../manifest.json
        libwidevinecdm.so -> ../../libwidevinecdm.so

Re-running overwrites every entry in place; the discovery directory only
ever holds symlinks.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from flatvine.console import InstallRenderer
from flatvine.core.errors import PlacementFailed
from flatvine.models.artifacts import ExtractedPayload, InstalledBundle, PatchedLibrary
from flatvine.models.config import README_NAME, InstallConfig
from flatvine.models.layout import (
    LinkSpec,
    PlacedFile,
    build_discovery_links,
    build_placed_files,
)

logger = logging.getLogger(__name__)


class BundleInstaller:
    """Copies artifacts into place and materializes the discovery links.

    Parameters
    ----------
    config:
        Supplies ``install_base`` and ``discovery_dir``.
    clock:
        Source of the install timestamp written to the README.
    renderer:
        Announces the discovery-link step; silent if None.
    """

    def __init__(
        self,
        config: InstallConfig,
        *,
        clock: Callable[[], datetime] = datetime.now,
        renderer: InstallRenderer | None = None,
    ) -> None:
        self.config = config
        self._clock = clock
        self._renderer = renderer
        self.links: list[LinkSpec] = build_discovery_links(config)

    def install(
        self, patched: PatchedLibrary, payload: ExtractedPayload
    ) -> InstalledBundle:
        files = build_placed_files(
            self.config,
            patched_library=patched.path,
            manifest=payload.manifest,
            license_file=payload.license_file,
        )
        try:
            self.config.install_base.mkdir(parents=True, exist_ok=True)
            for placed in files:
                self._place(placed)
            if self._renderer is not None:
                self._renderer.info("Setting up Firefox plugin structure...")
            self._link_all()
            readme = self._write_readme()
        except OSError as exc:
            raise PlacementFailed(
                f"Failed to install Widevine into {self.config.install_base}: {exc}"
            ) from exc

        logger.info("installed %d files and %d links", len(files), len(self.links))
        return InstalledBundle(
            install_base=self.config.install_base,
            files=[p.destination for p in files],
            links=[entry.link_path for entry in self.links],
            readme=readme,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _place(placed: PlacedFile) -> None:
        """Equivalent of ``install -m MODE SRC DEST``."""
        dest = placed.destination
        if dest.is_symlink() or dest.exists():
            dest.unlink()
        shutil.copyfile(placed.source, dest)
        os.chmod(dest, placed.mode)

    def _link_all(self) -> None:
        self.config.discovery_dir.mkdir(parents=True, exist_ok=True)
        for entry in self.links:
            link = entry.link_path
            if link.is_symlink() or link.is_file():
                link.unlink()
            elif link.is_dir():
                shutil.rmtree(link)
            os.symlink(entry.target, link)

    def _write_readme(self) -> Path:
        path = self.config.install_base / README_NAME
        path.write_text(render_readme(self.config, self._clock()), encoding="utf-8")
        os.chmod(path, 0o644)
        return path


def render_readme(config: InstallConfig, installed_at: datetime) -> str:
    """Describe the installed state and the manual uninstall steps."""
    base = config.install_base
    return "\n".join([
        "Widevine CDM for Firefox Flatpak",
        "=================================",
        "",
        f"Version: {config.version_pin.widevine_version}",
        f"Installed: {installed_at:%a %b %d %H:%M:%S %Y}",
        "",
        "This directory contains the Widevine Content Decryption Module",
        "for use with Firefox Flatpak on ARM64 systems.",
        "",
        "Files:",
        "  - libwidevinecdm.so: The Widevine CDM library (patched)",
        "  - manifest.json: Plugin manifest",
        "  - LICENSE: Widevine license agreement",
        "  - gmp-widevinecdm/: Firefox plugin structure",
        "",
        "To uninstall:",
        f'  1. Remove this directory: rm -rf "{base}"',
        f"  2. Reset Flatpak overrides: flatpak override --user --reset {config.app_id}",
        f'  3. Remove preferences: rm "{config.prefs_file}"',
        "",
    ])
