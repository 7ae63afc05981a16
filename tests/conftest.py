from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Any

import pytest
import requests
import structlog

BOOTSTRAP_VARS = (
    "REPO_HOST",
    "DISTBUILD_REPO",
    "WRAPPER_REPO",
    "AGENT_BIN",
    "PROXY_BIN",
    "DISTNINJA_BIN",
    "AUTH_USER",
    "AUTH_PASS",
    "DISTBUILD_AUTH_USER",
    "DISTBUILD_AUTH_PASSWORD",
    "BOOTSTRAP_LINK_DIR",
    "BOOTSTRAP_USE_SUDO",
    "BOOTSTRAP_HTTP_TIMEOUT",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in BOOTSTRAP_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    structlog.reset_defaults()


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b"", fail_midway: bool = False) -> None:
        self.status_code = status_code
        self.content = content
        self.fail_midway = fail_midway
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        half = len(self.content) // 2
        yield self.content[:half]
        if self.fail_midway:
            raise requests.ConnectionError("connection reset by peer")
        yield self.content[half:]

    def close(self) -> None:
        self.closed = True


class FakeHTTP:
    """Stands in for `requests.get`; unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.calls: list[dict[str, Any]] = []

    def add(self, url: str, content: bytes = b"#!/bin/sh\n", status_code: int = 200) -> None:
        self.routes[url] = FakeResponse(status_code=status_code, content=content)

    def __call__(self, url: str, auth=None, stream: bool = False, timeout=None) -> FakeResponse:
        self.calls.append({"url": url, "auth": auth, "stream": stream, "timeout": timeout})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        return route


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHTTP:
    http = FakeHTTP()
    monkeypatch.setattr("boong_bootstrap.downloader.requests.get", http)
    return http


class FakeCommands:
    """
    Intercepts git / scp / sshpass; everything else (ln) really runs.

    A simulated clone creates the destination with a README naming the url.
    """

    def __init__(self, real_run) -> None:
        self.real_run = real_run
        self.calls: list[list[str]] = []
        self.fail_with: str | None = None

    def __call__(self, cmd: list[str], *args: Any, **kwargs: Any) -> subprocess.CompletedProcess:
        if cmd[0] not in ("git", "scp", "sshpass"):
            return self.real_run(cmd, *args, **kwargs)

        self.calls.append(list(cmd))
        if self.fail_with is not None:
            raise subprocess.CalledProcessError(128, cmd, output=None, stderr=self.fail_with)
        if cmd[0] == "git":
            destination = Path(cmd[-1])
            destination.mkdir(parents=True, exist_ok=True)
            (destination / "README").write_text(cmd[2], encoding="utf-8")
        return subprocess.CompletedProcess(cmd, 0, stdout=None, stderr="")

    def git_calls(self) -> list[list[str]]:
        return [c for c in self.calls if c[0] == "git"]


@pytest.fixture
def fake_commands(monkeypatch: pytest.MonkeyPatch) -> FakeCommands:
    commands = FakeCommands(subprocess.run)
    monkeypatch.setattr(subprocess, "run", commands)
    return commands


@pytest.fixture
def empty_env_file(tmp_path: Path) -> Path:
    path = tmp_path / "empty.env"
    path.write_text("", encoding="utf-8")
    return path
