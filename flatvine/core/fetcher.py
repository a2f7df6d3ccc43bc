"""Archive fetcher — one streamed GET of the pinned LaCrOS image.

Single attempt, fail fast.  The downloaded bytes are not checksummed;
a corrupted transfer only surfaces later if extraction or patching fails.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from flatvine.core.errors import FetchFailed
from flatvine.models.artifacts import FetchedArchive
from flatvine.models.config import InstallConfig

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 16


class ArchiveFetcher:
    """Downloads ``config.archive_url`` into the workspace.

    Parameters
    ----------
    config:
        Supplies the URL and the destination filename.
    client:
        An ``httpx.Client``; one with a connect-only timeout is created
        (and closed) per fetch if not provided.
    console:
        Rich console for the progress bar; None disables the bar.
    """

    def __init__(
        self,
        config: InstallConfig,
        client: httpx.Client | None = None,
        *,
        console: Console | None = None,
        connect_timeout: float = 30.0,
    ) -> None:
        self.config = config
        self._client = client
        self._console = console
        self._connect_timeout = connect_timeout

    def fetch(self, workdir: Path) -> FetchedArchive:
        url = self.config.archive_url
        dest = workdir / self.config.archive_filename
        logger.info("downloading %s -> %s", url, dest)

        client = self._client or httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(None, connect=self._connect_timeout),
        )
        try:
            received, downloaded, expected = self._stream(client, url, dest)
        except httpx.HTTPStatusError as exc:
            raise FetchFailed(
                f"Failed to download LaCrOS image: HTTP {exc.response.status_code} from {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchFailed(f"Failed to download LaCrOS image: {exc}") from exc
        except OSError as exc:
            raise FetchFailed(f"Failed to write {dest}: {exc}") from exc
        finally:
            if self._client is None:
                client.close()

        if expected is not None and downloaded < expected:
            raise FetchFailed(
                f"Failed to download LaCrOS image: only {downloaded} of {expected} bytes received"
            )
        if received == 0:
            raise FetchFailed(f"Failed to download LaCrOS image: empty response from {url}")

        logger.info("downloaded %d bytes", received)
        return FetchedArchive(url=url, path=dest, size_bytes=received)

    def _stream(
        self, client: httpx.Client, url: str, dest: Path
    ) -> tuple[int, int, int | None]:
        """Write the body to ``dest``; return bytes written, bytes on the wire
        and the announced ``Content-Length``."""
        received = 0
        with client.stream("GET", url) as response:
            response.raise_for_status()
            length = response.headers.get("Content-Length")
            expected = int(length) if length and length.isdigit() else None
            with open(dest, "wb") as fp, self._progress() as progress:
                task = progress.add_task("lacros.squashfs", total=expected)
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    fp.write(chunk)
                    received += len(chunk)
                    progress.update(task, completed=response.num_bytes_downloaded)
            downloaded = response.num_bytes_downloaded
        return received, downloaded, expected

    def _progress(self) -> Progress:
        return Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self._console,
            disable=self._console is None,
            transient=False,
        )
