"""Command-line interface."""

from ago_diagnosis.cli.main import cli


__all__ = ["cli"]
