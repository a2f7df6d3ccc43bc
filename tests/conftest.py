"""Shared test fixtures for flatvine."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import pytest
from rich.console import Console

from flatvine.config import Settings
from flatvine.console import InstallRenderer
from flatvine.core.commands import CommandResult
from flatvine.core.pipeline import ProvisioningPipeline
from flatvine.models.config import InstallConfig

ARCHIVE_BYTES = b"hsqs" + b"\x00" * 2044
LIBRARY_BYTES = b"\x7fELF unpatched widevine"
PATCHED_BYTES = b"\x7fELF patched widevine"
MANIFEST_TEXT = '{"name": "WidevineCdm", "version": "4.10.2710.0"}'
LICENSE_TEXT = "Google Widevine license terms.\nLine two of the license.\n"
FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeRunner:
    """CommandRunner that emulates flatpak, ldd and unsquashfs in-process.

    Every call is recorded in ``calls``.  Override state persists in
    ``overrides`` so ``--show`` reflects prior ``override`` calls.
    """

    def __init__(
        self,
        *,
        installed_apps: Sequence[str] = ("org.mozilla.firefox",),
        glibc: str = "2.36",
        unsquashfs_ok: bool = True,
        unsquashfs_writes: bool = True,
        override_ok: bool = True,
        missing: Sequence[str] = (),
    ) -> None:
        self.installed_apps = list(installed_apps)
        self.glibc = glibc
        self.unsquashfs_ok = unsquashfs_ok
        self.unsquashfs_writes = unsquashfs_writes
        self.override_ok = override_ok
        self.missing = set(missing)
        self.calls: list[list[str]] = []
        self.overrides: dict[str, list[str]] = {}

    def run(self, args: Sequence[str], *, capture: bool = True) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append(argv)
        if argv[0] in self.missing:
            raise FileNotFoundError(argv[0])
        handler = {
            "flatpak": self._flatpak,
            "ldd": self._ldd,
            "unsquashfs": self._unsquashfs,
        }.get(argv[0])
        if handler is None:
            return CommandResult(args=tuple(argv), returncode=127)
        return handler(argv)

    def override_calls(self) -> list[list[str]]:
        return [
            c for c in self.calls
            if c[:3] == ["flatpak", "override", "--user"] and "--show" not in c
        ]

    def _flatpak(self, argv: list[str]) -> CommandResult:
        if argv[1] == "list":
            return CommandResult(
                args=tuple(argv),
                returncode=0,
                stdout="".join(f"{app}\n" for app in self.installed_apps),
            )
        if argv[1] == "override" and "--show" in argv:
            app_id = argv[-1]
            stdout = "".join(
                f"[Environment]\n{a[len('--env='):]}\n"
                for a in self.overrides.get(app_id, [])
                if a.startswith("--env=")
            )
            return CommandResult(args=tuple(argv), returncode=0, stdout=stdout)
        if argv[1] == "override":
            if not self.override_ok:
                return CommandResult(args=tuple(argv), returncode=1, stderr="denied")
            app_id, grants = argv[3], argv[4:]
            self.overrides[app_id] = grants
            return CommandResult(args=tuple(argv), returncode=0)
        return CommandResult(args=tuple(argv), returncode=1)

    def _ldd(self, argv: list[str]) -> CommandResult:
        return CommandResult(
            args=tuple(argv),
            returncode=0,
            stdout=f"ldd (GNU libc) {self.glibc}\nCopyright (C) 2022\n",
        )

    def _unsquashfs(self, argv: list[str]) -> CommandResult:
        if not self.unsquashfs_ok:
            return CommandResult(
                args=tuple(argv), returncode=1, stderr="FATAL ERROR: bad superblock"
            )
        dest = Path(argv[argv.index("-d") + 1])
        if self.unsquashfs_writes:
            cdm = dest / "WidevineCdm"
            lib_dir = cdm / "_platform_specific" / "cros_arm64"
            lib_dir.mkdir(parents=True)
            (lib_dir / "libwidevinecdm.so").write_bytes(LIBRARY_BYTES)
            (cdm / "manifest.json").write_text(MANIFEST_TEXT)
            (cdm / "LICENSE").write_text(LICENSE_TEXT)
        else:
            dest.mkdir(parents=True)
        return CommandResult(args=tuple(argv), returncode=0)


class FakeTransformer:
    """LibraryTransformer that writes fixed bytes, or reports failure."""

    def __init__(self, *, succeed: bool = True, output: bytes = PATCHED_BYTES) -> None:
        self.succeed = succeed
        self.output = output
        self.calls: list[tuple[Path, Path]] = []

    def transform(self, input_path: Path, output_path: Path) -> bool:
        self.calls.append((input_path, output_path))
        if not self.succeed:
            return False
        output_path.write_bytes(self.output)
        return True


class FakeConfirmer:
    """Confirmer that answers from a scripted list (default: always proceed)."""

    def __init__(self, answers: Sequence[bool] | None = None) -> None:
        self.answers = list(answers) if answers is not None else None
        self.prompts: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if self.answers is None:
            return True
        return self.answers.pop(0)


class ChunkedBody(httpx.SyncByteStream):
    """Response body delivered in small chunks, like a real socket read."""

    def __init__(self, body: bytes, chunk_size: int = 512) -> None:
        self.body = body
        self.chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        for start in range(0, len(self.body), self.chunk_size):
            yield self.body[start:start + self.chunk_size]


def archive_transport(
    body: bytes = ARCHIVE_BYTES,
    *,
    status: int = 200,
    headers: dict[str, str] | None = None,
    requests: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Mirror stand-in that streams ``body`` (Content-Length defaults to its size)."""
    response_headers = {"Content-Length": str(len(body))}
    response_headers.update(headers or {})

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, headers=response_headers, stream=ChunkedBody(body))

    return httpx.MockTransport(handler)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def home(tmp_path: Path) -> Path:
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def scratch(tmp_path: Path) -> Path:
    """Parent directory for pipeline workspaces."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def install_config(home: Path) -> InstallConfig:
    return InstallConfig(home=home, distfiles_base="https://mirror.test/distfiles")


@pytest.fixture
def renderer() -> InstallRenderer:
    return InstallRenderer(console=Console(record=True, width=100))


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_pipeline(
    install_config: InstallConfig,
    renderer: InstallRenderer,
    scratch: Path,
) -> Callable[..., ProvisioningPipeline]:
    """Factory fixture: build a pipeline wired entirely to fakes."""

    def _factory(**overrides: Any) -> ProvisioningPipeline:
        transport = overrides.pop("transport", None) or archive_transport()
        defaults: dict[str, Any] = {
            "runner": FakeRunner(),
            "transformer": FakeTransformer(),
            "confirmer": FakeConfirmer(),
            "renderer": renderer,
            "http_client": httpx.Client(transport=transport),
            "machine": lambda: "aarch64",
            "which": lambda tool: f"/usr/bin/{tool}",
            "workspace_parent": scratch,
            "clock": lambda: FIXED_NOW,
            "handle_signals": False,
        }
        defaults.update(overrides)
        config = defaults.pop("config", install_config)
        settings = defaults.pop("settings", None) or Settings()
        return ProvisioningPipeline(config, settings, **defaults)

    return _factory
