"""
LC-3 SDK Command-Line Interface
===============================

This package provides the command-line tools for the LC-3 SDK:

- **lc3asm**: LC-3 assembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["lc3asm"]
