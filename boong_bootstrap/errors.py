"""
errors.py

Responsibility: The common base for every step's error class.

`cli.main` catches `BootstrapError`, prints `Error: <message>` and exits 1.
"""

from __future__ import annotations


class BootstrapError(RuntimeError):
    """Base class for every fatal error the CLI reports with exit code 1."""
