"""StageSim command-line interface package."""

from stagesim.cli.main import cli, main

__all__ = ["cli", "main"]
