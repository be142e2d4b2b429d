"""Command-line interface for glyfkit.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Font and maxp statistics summary
- Decode and re-encode check of every glyph
- Composite flattening with recalculated bounds
"""

from glyfkit.cli.app import app, cli, main

__all__ = ["app", "cli", "main"]
