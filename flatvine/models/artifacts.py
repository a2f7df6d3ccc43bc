"""Stage output models — the values handed from one stage to the next."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class FetchedArchive(BaseModel):
    """The downloaded image inside the workspace."""

    model_config = ConfigDict(frozen=True)

    url: str
    path: Path
    size_bytes: int


class ExtractedPayload(BaseModel):
    """Files pulled out of the archive, at their known relative paths."""

    model_config = ConfigDict(frozen=True)

    root: Path  # the unsquashfs destination directory
    library: Path
    manifest: Path
    license_file: Path


class PatchedLibrary(BaseModel):
    """Output of the library transformation; never empty."""

    model_config = ConfigDict(frozen=True)

    path: Path
    size_bytes: int


class InstalledBundle(BaseModel):
    """The persistent install tree produced by placement."""

    model_config = ConfigDict(frozen=True)

    install_base: Path
    files: list[Path]
    links: list[Path]
    readme: Path
