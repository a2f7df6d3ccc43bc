"""Install layout models — what gets placed where, declared before any I/O."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from flatvine.models.config import (
    LIBRARY_NAME,
    LICENSE_NAME,
    MANIFEST_NAME,
    InstallConfig,
)


class PlacedFile(BaseModel):
    """A file copied into the install directory with fixed permission bits."""

    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    mode: int


class LinkSpec(BaseModel):
    """A symbolic link in the discovery directory.

    ``target`` is stored relative to the link's parent so the install tree
    stays valid if the Flatpak data root is moved.
    """

    model_config = ConfigDict(frozen=True)

    link_path: Path
    target: Path

    def resolved_target(self) -> Path:
        """Absolute, normalised path the link points at."""
        return Path(os.path.normpath(self.link_path.parent / self.target))


# Files exposed to the GMP loader; the license stays out of the discovery dir.
DISCOVERY_ENTRIES: tuple[str, ...] = (MANIFEST_NAME, LIBRARY_NAME)


def build_discovery_links(config: InstallConfig) -> list[LinkSpec]:
    """Return the GMP discovery layout as (link -> sibling file) pairs."""
    up = Path(os.path.relpath(config.install_base, config.discovery_dir))
    return [
        LinkSpec(link_path=config.discovery_dir / name, target=up / name)
        for name in DISCOVERY_ENTRIES
    ]


def build_placed_files(
    config: InstallConfig,
    *,
    patched_library: Path,
    manifest: Path,
    license_file: Path,
) -> list[PlacedFile]:
    """Return the files to install: library executable, metadata read-only."""
    base = config.install_base
    return [
        PlacedFile(source=patched_library, destination=base / LIBRARY_NAME, mode=0o755),
        PlacedFile(source=manifest, destination=base / MANIFEST_NAME, mode=0o644),
        PlacedFile(source=license_file, destination=base / LICENSE_NAME, mode=0o644),
    ]
