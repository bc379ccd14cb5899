"""
Dev Container Toolkit - Convenience commands for a containerized dev environment

This package checks and installs the tools a dev container needs (Docker,
Docker Compose, Node.js/npm, the Dev Containers CLI) and proxies the
start/stop/rebuild/logs/shell/clean lifecycle to them.
"""

__version__ = "1.0.0"

from .cli import cli

__all__ = ["cli"]
