"""Rich terminal renderer for installer output.

Color scheme
------------
- green  : progress steps (``==>``) and success
- yellow : warnings
- red    : errors
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

if TYPE_CHECKING:
    from flatvine.models.config import InstallConfig
    from flatvine.models.reports import PipelineResult


_INTRO = """\
This will download, adapt, and install a copy of the Widevine
Content Decryption Module for Firefox Flatpak on aarch64 systems.

[bold]IMPORTANT INFORMATION:[/bold]

  • Widevine is proprietary DRM technology developed by Google
  • This uses ARM64 builds intended for ChromeOS
  • Not supported or endorsed by Google
  • The Asahi Linux/ARM community cannot provide support
  • You assume all responsibility for using this installer

[bold]SECURITY CONSIDERATIONS:[/bold]

  • Only the binary file format is adapted for compatibility
  • The CDM software itself is not modified
  • On systems with >4k page size (e.g., Apple Silicon), security is weakened"""


class InstallRenderer:
    """Formats installer messages, banners and summaries.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Status lines
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        self.console.print(f"[bold green]==>[/bold green] {escape(message)}")

    def warn(self, message: str) -> None:
        self.console.print(f"[bold yellow]Warning:[/bold yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def print_intro(self, config: InstallConfig) -> None:
        self.console.print()
        self.console.print(
            Panel(
                _INTRO,
                title="[bold]Widevine Installer for Firefox Flatpak (ARM64)[/bold]",
                border_style="cyan",
                padding=(1, 2),
            )
        )
        self.console.print(f"Widevine version: {config.version_pin.widevine_version}")
        self.console.print(f"LaCrOS version:   {config.version_pin.lacros_version}")
        self.console.print(f"Install location: {escape(str(config.install_base))}")
        self.console.print()

    def print_license(self, text: str) -> None:
        """Print the license verbatim, framed by rules."""
        self.console.print()
        self.console.rule("[bold]Widevine License Agreement[/bold]")
        self.console.print(Text(text))
        self.console.rule()
        self.console.print()

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def print_summary(self, result: PipelineResult, config: InstallConfig) -> None:
        base = escape(str(result.install_base))
        self.console.print()
        self.console.print(
            Panel(
                "\n".join([
                    "[bold green]Widevine has been installed for Firefox Flatpak.[/bold green]",
                    "",
                    "[bold]Next steps:[/bold]",
                    "  1. Restart Firefox if it's currently running",
                    "  2. Visit about:plugins in Firefox to verify Widevine is loaded",
                    "  3. Test with a DRM-protected video (e.g., Netflix, Spotify Web Player)",
                    "",
                    "[bold]Installation details:[/bold]",
                    f"  • Widevine library: {escape(str(result.library_path))}",
                    f"  • Version: {result.widevine_version}",
                    f"  • Flatpak overrides applied: {config.gmp_env_var} environment variable",
                    "",
                    "[bold]To uninstall:[/bold]",
                    f'  rm -rf "{base}" && flatpak override --user --reset {config.app_id}',
                    "",
                    "[bold]Troubleshooting:[/bold]",
                    "  • If Widevine doesn't load, check about:support in Firefox",
                    '  • Look for "Widevine" under the "Media" section',
                    "  • Ensure EME is enabled in Firefox settings",
                ]),
                title="[bold]Installation Complete![/bold]",
                border_style="green",
                padding=(1, 2),
            )
        )
        self.console.print()
