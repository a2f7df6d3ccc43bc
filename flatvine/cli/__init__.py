"""flatvine CLI — Typer-based command-line interface.

Provides the zero-argument ``flatvine`` command that runs the full
provisioning pipeline.  All output uses Rich for formatted terminal display.
"""
