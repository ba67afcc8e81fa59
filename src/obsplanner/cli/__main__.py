"""
CLI entry point for the obsplanner.cli module.

This allows running: python -m obsplanner.cli
"""

from .main import cli

if __name__ == "__main__":
    cli()
