"""Main Typer application.

Entry point: ``flatvine`` (configured via pyproject.toml console_scripts).
Takes no arguments; the install location is derived from ``$HOME``.
"""

from __future__ import annotations

import logging

import typer
from pydantic import ValidationError
from rich.console import Console

from flatvine.config import Settings
from flatvine.console import InstallRenderer
from flatvine.core.errors import InstallerError
from flatvine.core.pipeline import ProvisioningPipeline
from flatvine.models.config import InstallConfig

console = Console()

app = typer.Typer(
    name="flatvine",
    help="Install the Widevine CDM into the Firefox Flatpak on aarch64.",
    rich_markup_mode="rich",
    add_completion=False,
)


@app.command()
def install() -> None:
    """Download, adapt, and install Widevine for Firefox Flatpak."""
    renderer = InstallRenderer(console=console)
    try:
        settings = Settings()
    except ValidationError as exc:
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"])
            renderer.error(f"Invalid setting FLATVINE_{field.upper()}: {err['msg']}")
        raise typer.Exit(code=1)
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = InstallConfig.from_environment()
    except RuntimeError as exc:
        renderer.error(str(exc))
        raise typer.Exit(code=1)

    try:
        result = ProvisioningPipeline(config, settings, renderer=renderer).run()
    except InstallerError as exc:
        renderer.error(str(exc))
        raise typer.Exit(code=exc.exit_code)

    renderer.print_summary(result, config)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
