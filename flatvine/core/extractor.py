"""Payload extractor — selective ``unsquashfs`` of the Widevine subtree."""

from __future__ import annotations

import logging
from pathlib import Path

from flatvine.core.commands import CommandRunner, SubprocessRunner
from flatvine.core.errors import ExtractFailed
from flatvine.models.artifacts import ExtractedPayload, FetchedArchive
from flatvine.models.config import (
    LIBRARY_RELPATH,
    LICENSE_NAME,
    MANIFEST_NAME,
    PAYLOAD_ROOT,
    InstallConfig,
)

logger = logging.getLogger(__name__)

EXTRACT_DIRNAME = "squashfs-root"


class PayloadExtractor:
    """Pulls ``config.payload_pattern`` out of the squashfs image."""

    def __init__(self, config: InstallConfig, runner: CommandRunner | None = None) -> None:
        self.config = config
        self.runner = runner or SubprocessRunner()

    def extract(self, archive: FetchedArchive, workdir: Path) -> ExtractedPayload:
        dest = workdir / EXTRACT_DIRNAME
        args = [
            "unsquashfs",
            "-q",
            "-d",
            str(dest),
            str(archive.path),
            self.config.payload_pattern,
        ]
        try:
            result = self.runner.run(args)
        except FileNotFoundError as exc:
            raise ExtractFailed(f"unsquashfs is not available: {exc}") from exc
        if not result.ok:
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise ExtractFailed(
                f"Failed to extract Widevine from LaCrOS image: {detail}"
            )

        payload = ExtractedPayload(
            root=dest,
            library=dest / LIBRARY_RELPATH,
            manifest=dest / PAYLOAD_ROOT / MANIFEST_NAME,
            license_file=dest / PAYLOAD_ROOT / LICENSE_NAME,
        )
        missing = [
            p.relative_to(dest).as_posix()
            for p in (payload.library, payload.manifest, payload.license_file)
            if not p.is_file()
        ]
        if missing:
            raise ExtractFailed(
                "Extraction produced no usable Widevine payload; missing: "
                + ", ".join(missing)
            )
        logger.info("extracted payload under %s", dest)
        return payload
