"""Interactive confirmation gates.

Both gates (intent to proceed, license acknowledgment) go through the
``Confirmer`` Protocol.  A declined or interrupted prompt raises
``InstallCancelled``, which leaves the pipeline along the same path as
any other fatal error.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from rich.console import Console

from flatvine.console import InstallRenderer
from flatvine.core.errors import InstallCancelled
from flatvine.models.artifacts import ExtractedPayload
from flatvine.models.config import InstallConfig

logger = logging.getLogger(__name__)

INTENT_PROMPT = "Press Enter to proceed, or Ctrl-C to cancel:"
LICENSE_PROMPT = "Press Enter to accept the license and proceed, or Ctrl-C to cancel:"


@runtime_checkable
class Confirmer(Protocol):
    """Protocol for a blocking yes/cancel prompt."""

    def confirm(self, prompt: str) -> bool:
        """Block until the user proceeds (True) or cancels (False)."""
        ...


class ConsoleConfirmer:
    """Waits for Enter on the terminal; EOF or Ctrl-C counts as cancel."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def confirm(self, prompt: str) -> bool:
        try:
            self.console.input(f"{prompt} ")
        except (EOFError, KeyboardInterrupt):
            self.console.print()
            return False
        return True


def require_confirmation(confirmer: Confirmer, prompt: str) -> None:
    if not confirmer.confirm(prompt):
        logger.info("gate declined: %s", prompt)
        raise InstallCancelled("Installation cancelled by user")


class IntentGate:
    """Shows what is about to happen and asks to proceed."""

    def __init__(self, confirmer: Confirmer, renderer: InstallRenderer) -> None:
        self.confirmer = confirmer
        self.renderer = renderer

    def ask(self, config: InstallConfig) -> None:
        self.renderer.print_intro(config)
        require_confirmation(self.confirmer, INTENT_PROMPT)


class LicenseGate:
    """Displays the extracted license verbatim and waits for acceptance."""

    def __init__(self, confirmer: Confirmer, renderer: InstallRenderer) -> None:
        self.confirmer = confirmer
        self.renderer = renderer

    def ask(self, payload: ExtractedPayload) -> str:
        text = payload.license_file.read_text(encoding="utf-8", errors="replace")
        self.renderer.print_license(text)
        require_confirmation(self.confirmer, LICENSE_PROMPT)
        return text
