"""
agent.py

Responsibility: Start the agent binary as a detached background process.

The launcher is picked per platform:
- POSIX: the child gets its own session, so it survives the parent's exit
  and terminal hangups.
- Windows: the child gets no console window.

stdout and stderr go to `agent.log` (truncated on every launch). The parent
never waits for the child.
"""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from boong_bootstrap.config import Config
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger

logger = get_logger(__name__)


class AgentError(BootstrapError):
    pass


@dataclass(frozen=True)
class AgentProcess:
    pid: int
    log_path: Path


class ProcessLauncher:
    """Starts a command with platform-specific detachment attributes."""

    def popen_kwargs(self) -> dict[str, Any]:
        return {}

    def start(self, cmd: list[str], log_path: Path) -> subprocess.Popen:
        with open(log_path, "wb") as log:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=log,
                close_fds=True,
                **self.popen_kwargs(),
            )


class PosixLauncher(ProcessLauncher):
    def popen_kwargs(self) -> dict[str, Any]:
        return {"start_new_session": True}


class WindowsLauncher(ProcessLauncher):
    # Values from winbase.h; subprocess only exports them on Windows.
    CREATE_NO_WINDOW = 0x08000000
    STARTF_USESHOWWINDOW = 0x00000001
    SW_HIDE = 0

    def popen_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"creationflags": self.CREATE_NO_WINDOW}
        startupinfo_cls = getattr(subprocess, "STARTUPINFO", None)
        if startupinfo_cls is not None:
            startupinfo = startupinfo_cls()
            startupinfo.dwFlags |= self.STARTF_USESHOWWINDOW
            startupinfo.wShowWindow = self.SW_HIDE
            kwargs["startupinfo"] = startupinfo
        return kwargs


def select_launcher(platform: str | None = None) -> ProcessLauncher:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsLauncher()
    return PosixLauncher()


def launch_agent(config: Config, launcher: ProcessLauncher | None = None) -> AgentProcess:
    agent_path = config.agent_path
    if not agent_path.is_file():
        raise AgentError(f"agent binary not found: {agent_path}")

    launcher = launcher or select_launcher()
    log_path = config.agent_log
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        process = launcher.start([str(agent_path)], log_path)
    except OSError as e:
        raise AgentError(f"agent startup failed: {e}") from e

    pid = process.pid
    # Detached: never waited on, so Popen must not treat it as still running.
    process.returncode = 0

    logger.info("agent_started", pid=pid, log=str(log_path))
    return AgentProcess(pid=pid, log_path=log_path)
