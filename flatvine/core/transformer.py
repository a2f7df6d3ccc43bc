"""Library transformer interface — the external binary-compatibility tool.

The transformation that rewrites ``libwidevinecdm.so`` for the host page
size lives outside this package.  The pipeline only depends on the
``LibraryTransformer`` Protocol; the default implementation runs the
``widevine_fixup.py`` helper script as a subprocess.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from flatvine.core.commands import CommandRunner, SubprocessRunner
from flatvine.core.errors import PatchFailed
from flatvine.models.artifacts import PatchedLibrary

logger = logging.getLogger(__name__)


@runtime_checkable
class LibraryTransformer(Protocol):
    """Protocol for the library transformation.

    ``transform`` blocks until done and returns ``True`` on success.
    """

    def transform(self, input_path: Path, output_path: Path) -> bool:
        ...


class FixupScriptTransformer:
    """Runs ``<python> <script> INPUT OUTPUT``; success iff exit status 0."""

    def __init__(
        self,
        script: Path,
        *,
        python: str = "python3",
        runner: CommandRunner | None = None,
    ) -> None:
        self.script = script
        self.python = python
        self.runner = runner or SubprocessRunner()

    def transform(self, input_path: Path, output_path: Path) -> bool:
        try:
            result = self.runner.run(
                [self.python, str(self.script), str(input_path), str(output_path)],
                capture=False,
            )
        except FileNotFoundError as exc:
            logger.error("cannot run fixup helper: %s", exc)
            return False
        return result.ok


def apply_transform(
    transformer: LibraryTransformer, input_path: Path, output_path: Path
) -> PatchedLibrary:
    """Invoke *transformer* and check it produced a non-empty library."""
    logger.info("transforming %s -> %s", input_path, output_path)
    if not transformer.transform(input_path, output_path):
        raise PatchFailed("Failed to patch Widevine binary")
    if not output_path.is_file():
        raise PatchFailed(f"Patch step reported success but {output_path} does not exist")
    size = output_path.stat().st_size
    if size == 0:
        raise PatchFailed(f"Patch step produced an empty file at {output_path}")
    return PatchedLibrary(path=output_path, size_bytes=size)
