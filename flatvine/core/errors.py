"""Installer error taxonomy.

Every fatal condition raised by the pipeline is an ``InstallerError``
subclass with its own exit status, so the CLI can report a distinguishable
reason and terminate with a distinguishable code.  Post-install
verification problems are not errors; see ``flatvine.core.verifier``.
"""

from __future__ import annotations

from typing import ClassVar


class InstallerError(RuntimeError):
    """Base class for fatal installer failures."""

    exit_code: ClassVar[int] = 1
    label: ClassVar[str] = "installer error"


class PlatformUnsupported(InstallerError):
    """Raised when the host CPU architecture is not the required target."""

    exit_code: ClassVar[int] = 10
    label: ClassVar[str] = "unsupported platform"


class RuntimeMissing(InstallerError):
    """Raised when the sandboxed browser runtime is not installed."""

    exit_code: ClassVar[int] = 11
    label: ClassVar[str] = "host runtime missing"


class VersionTooOld(InstallerError):
    """Raised when the system dynamic linker (glibc) is older than required."""

    exit_code: ClassVar[int] = 12
    label: ClassVar[str] = "glibc too old"


class ToolMissing(InstallerError):
    """Raised when a required external tool cannot be resolved."""

    exit_code: ClassVar[int] = 13
    label: ClassVar[str] = "required tool missing"


class FetchFailed(InstallerError):
    """Raised when the archive download does not complete successfully."""

    exit_code: ClassVar[int] = 20
    label: ClassVar[str] = "download failed"


class ExtractFailed(InstallerError):
    """Raised when the payload cannot be extracted from the archive."""

    exit_code: ClassVar[int] = 21
    label: ClassVar[str] = "extraction failed"


class PatchFailed(InstallerError):
    """Raised when the library transformation fails or yields nothing."""

    exit_code: ClassVar[int] = 22
    label: ClassVar[str] = "patch failed"


class PlacementFailed(InstallerError):
    """Raised when installed files or links cannot be written."""

    exit_code: ClassVar[int] = 23
    label: ClassVar[str] = "installation failed"


class SandboxConfigFailed(InstallerError):
    """Raised when the Flatpak override cannot be applied."""

    exit_code: ClassVar[int] = 24
    label: ClassVar[str] = "sandbox configuration failed"


class InstallCancelled(InstallerError):
    """Raised when the user declines a gate or the process is interrupted."""

    exit_code: ClassVar[int] = 130
    label: ClassVar[str] = "cancelled"
