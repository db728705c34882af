"""Command line entry points for CashPulse."""

from .main import cli

__all__ = ["cli"]
