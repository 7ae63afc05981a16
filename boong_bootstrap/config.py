"""
config.py

Responsibility: Build the single, immutable `Config` every step receives.

Sources, lowest precedence first:
- the defaults file bundled with the package (or `--env-file`), `.env` syntax
- the process environment
- CLI flags (paths, mode switches, worker credentials)

Validation happens here so that configuration errors surface before any
filesystem, network or process side effect.
"""

from __future__ import annotations

import io
import os
from collections.abc import Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from dotenv import dotenv_values

from boong_bootstrap.errors import BootstrapError

DEFAULTS_FILE = "defaults.env"
DEFAULT_LINK_DIR = "/usr/local/bin"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(BootstrapError):
    pass


@dataclass(frozen=True)
class Config:
    """Everything a run needs, resolved once at startup."""

    distbuild_path: Path
    aosp_path: Path | None = None
    deploy_agent: bool = False
    enable_toolchains: bool = False

    repo_host: str | None = None
    distbuild_repo: str | None = None
    wrapper_repo: str | None = None

    agent_bin: str | None = None
    proxy_bin: str | None = None
    distninja_bin: str | None = None
    auth_user: str | None = None
    auth_pass: str | None = None
    http_timeout: float | None = None

    worker: str | None = None
    password: str | None = None

    link_dir: Path = Path(DEFAULT_LINK_DIR)
    use_sudo: bool = True

    @property
    def bin_dir(self) -> Path:
        return self.distbuild_path / "boong" / "bin"

    @property
    def agent_path(self) -> Path:
        return self.bin_dir / "agent"

    @property
    def agent_log(self) -> Path:
        return self.distbuild_path / "agent.log"

    @property
    def distbuild_checkout(self) -> Path:
        if self.aosp_path is None:
            raise ConfigError("aosp path is not configured")
        return self.aosp_path / "build" / "distbuild"

    @property
    def auth(self) -> tuple[str, str] | None:
        # Basic auth only when both halves are present.
        if self.auth_user and self.auth_pass:
            return self.auth_user, self.auth_pass
        return None


def expand_tilde(path: str) -> str:
    if not path.startswith("~"):
        return path
    expanded = os.path.expanduser(path)
    if expanded == path:
        raise ConfigError(f"failed to expand tilde: {path}")
    return expanded


def read_defaults(env_file: str | Path | None = None) -> dict[str, str]:
    """
    Parse the defaults file into a mapping.

    With no `env_file`, the `defaults.env` shipped inside the package is used.
    Keys without a value are dropped.
    """
    if env_file is None:
        text = resources.files("boong_bootstrap").joinpath(DEFAULTS_FILE).read_text(encoding="utf-8")
    else:
        path = Path(env_file)
        if not path.is_file():
            raise ConfigError(f"env file does not exist: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"cannot read env file {path}: {e}") from e

    values = dotenv_values(stream=io.StringIO(text))
    return {k: v for k, v in values.items() if v is not None}


def merge_environment(defaults: Mapping[str, str], environ: Mapping[str, str]) -> dict[str, str]:
    """Defaults only fill keys the environment does not already define."""
    merged = dict(defaults)
    merged.update(environ)
    return merged


def _lookup(values: Mapping[str, str], *keys: str) -> str | None:
    for key in keys:
        value = (values.get(key) or "").strip()
        if value:
            return value
    return None


def _parse_bool(values: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _lookup(values, key)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigError(f"environment variable {key} must be a boolean, got {raw!r}")


def _parse_timeout(values: Mapping[str, str], key: str) -> float | None:
    raw = _lookup(values, key)
    if raw is None:
        return None
    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigError(f"environment variable {key} must be a number, got {raw!r}") from e
    if timeout <= 0:
        raise ConfigError(f"environment variable {key} must be positive, got {raw!r}")
    return timeout


def load_config(
    *,
    distbuild_path: str | None,
    aosp_path: str | None = None,
    deploy_agent: bool = False,
    enable_toolchains: bool = False,
    worker: str | None = None,
    password: str | None = None,
    env_file: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Config:
    """
    Validate flags, merge defaults with the environment and return a `Config`.

    Raises ConfigError for:
    - missing `--distbuild-path`
    - both or neither of `--aosp-path` / `--deploy-agent`
    - `--password` without `--worker`
    - provisioning mode without REPO_HOST, or without DISTBUILD_REPO / WRAPPER_REPO
    - malformed BOOTSTRAP_* values
    """
    if not distbuild_path:
        raise ConfigError("--distbuild-path flag is required")
    if aosp_path and deploy_agent:
        raise ConfigError("--aosp-path and --deploy-agent are mutually exclusive")
    if not aosp_path and not deploy_agent:
        raise ConfigError("--aosp-path or --deploy-agent flag is required")
    if password and not worker:
        raise ConfigError("--password requires --worker")

    env = os.environ if environ is None else environ
    values = merge_environment(read_defaults(expand_tilde(env_file) if env_file else None), env)

    repo_host = _lookup(values, "REPO_HOST")
    distbuild_repo = _lookup(values, "DISTBUILD_REPO")
    wrapper_repo = _lookup(values, "WRAPPER_REPO")

    if not deploy_agent:
        if repo_host is None:
            raise ConfigError("environment variable REPO_HOST not set")
        if distbuild_repo is None and wrapper_repo is None:
            raise ConfigError("environment variable DISTBUILD_REPO or WRAPPER_REPO not set")

    return Config(
        distbuild_path=Path(expand_tilde(distbuild_path)),
        aosp_path=Path(expand_tilde(aosp_path)) if aosp_path else None,
        deploy_agent=deploy_agent,
        enable_toolchains=enable_toolchains,
        repo_host=repo_host.rstrip("/") if repo_host else None,
        distbuild_repo=distbuild_repo,
        wrapper_repo=wrapper_repo,
        agent_bin=_lookup(values, "AGENT_BIN"),
        proxy_bin=_lookup(values, "PROXY_BIN"),
        distninja_bin=_lookup(values, "DISTNINJA_BIN"),
        auth_user=_lookup(values, "AUTH_USER", "DISTBUILD_AUTH_USER"),
        auth_pass=_lookup(values, "AUTH_PASS", "DISTBUILD_AUTH_PASSWORD"),
        http_timeout=_parse_timeout(values, "BOOTSTRAP_HTTP_TIMEOUT"),
        worker=worker or None,
        password=password or None,
        link_dir=Path(expand_tilde(_lookup(values, "BOOTSTRAP_LINK_DIR") or DEFAULT_LINK_DIR)),
        use_sudo=_parse_bool(values, "BOOTSTRAP_USE_SUDO", default=True),
    )
