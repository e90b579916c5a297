"""Command-line interface for imagesmith.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Backend listing and availability probing
- One-shot resize and crop
- Perceptual and pixel-exact comparison
- Detailed error reporting
"""

from imagesmith.cli.app import cli, main

__all__ = ["cli", "main"]
