"""
commands.py

Responsibility: run external commands (git, ln, scp) and turn failures into
the calling step's error type with the captured stderr attached.
"""

from __future__ import annotations

import subprocess

from boong_bootstrap.errors import BootstrapError


def run_command(cmd: list[str], *, error: type[BootstrapError], redact: str | None = None) -> None:
    """
    Run a subprocess command, raising `error` with the captured stderr on failure.

    `redact` is masked out of the command line shown in the message.
    """
    try:
        subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, text=True)
    except FileNotFoundError as e:
        raise error(f"command not found: {cmd[0]}") from e
    except subprocess.CalledProcessError as e:
        shown = " ".join("***" if redact and part == redact else part for part in cmd)
        raise error(f"command failed ({e.returncode}): {shown}\n{(e.stderr or '').strip()}") from e
