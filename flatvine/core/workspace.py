"""Ephemeral workspace — a scoped temporary directory with guaranteed cleanup.

The workspace is the only place the fetch, extract and patch stages write
to.  Release is registered before any of them runs and covers three exit
paths:

* normal completion and propagated exceptions, via ``__exit__``;
* SIGINT, SIGTERM and SIGHUP (terminal closed), which are turned into
  ``InstallCancelled`` so the stack unwinds through ``__exit__``;
* interpreter shutdown, via an ``atexit`` hook.

``release()`` is idempotent, so whichever path gets there first removes
the directory and the others do nothing.
"""

from __future__ import annotations

import atexit
import logging
import shutil
import signal
import tempfile
import threading
from pathlib import Path
from types import FrameType
from typing import Any

from flatvine.core.errors import InstallCancelled

logger = logging.getLogger(__name__)

_HANDLED_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


class Workspace:
    """A uniquely named temporary directory owned by one pipeline run.

    Parameters
    ----------
    prefix:
        Recognisable name prefix, e.g. ``"widevine-flatpak-installer."``.
    parent:
        Directory to create the workspace in; the system temp dir if None.
    handle_signals:
        Install SIGINT/SIGTERM/SIGHUP handlers while the workspace is open.  Only
        honoured on the main thread.
    """

    def __init__(
        self,
        prefix: str,
        *,
        parent: Path | None = None,
        handle_signals: bool = True,
    ) -> None:
        self.prefix = prefix
        self.parent = parent
        self.handle_signals = handle_signals
        self._path: Path | None = None
        self._released = False
        self._previous_handlers: dict[int, Any] = {}

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("workspace has not been created")
        return self._path

    @property
    def released(self) -> bool:
        return self._released

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self) -> Path:
        """Create the directory and register every release hook."""
        if self._path is not None:
            return self._path
        self._path = Path(
            tempfile.mkdtemp(
                prefix=self.prefix,
                dir=str(self.parent) if self.parent else None,
            )
        )
        atexit.register(self.release)
        if self.handle_signals and threading.current_thread() is threading.main_thread():
            for signum in _HANDLED_SIGNALS:
                self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
        logger.info("workspace created: %s", self._path)
        return self._path

    def release(self) -> None:
        """Remove the workspace recursively.  Safe to call more than once."""
        if self._released or self._path is None:
            return
        self._released = True
        atexit.unregister(self.release)
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

        if self._path.exists():
            logger.info("removing workspace %s", self._path)
            try:
                shutil.rmtree(self._path)
            except OSError as exc:
                logger.warning("could not remove workspace %s: %s", self._path, exc)

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        raise InstallCancelled(f"Interrupted by {signal.Signals(signum).name}")

    def __enter__(self) -> Workspace:
        self.create()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        return f"<Workspace path={str(self._path)!r} released={self._released}>"
