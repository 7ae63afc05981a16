"""
repo.py

Responsibility: git clones into freshly wiped directories.

Every clone removes the destination first, so running a clone twice against
the same path yields the same tree.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from boong_bootstrap.commands import run_command
from boong_bootstrap.config import Config, ConfigError
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger

logger = get_logger(__name__)


class GitError(BootstrapError):
    pass


def reset_dir(path: Path) -> None:
    if path.exists() or path.is_symlink():
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    path.mkdir(parents=True, exist_ok=True)


def clone(url: str, destination: Path, *, branch: str | None = None, depth: int | None = None) -> None:
    """
    `git clone` url into destination.

    The destination must be empty or missing; callers wipe it first.
    """
    cmd = ["git", "clone", url]
    if branch:
        cmd += ["-b", branch]
    if depth:
        cmd += ["--depth", str(depth)]
    cmd.append(str(destination))

    logger.info("git_clone_started", url=url, destination=str(destination), branch=branch, depth=depth)
    run_command(cmd, error=GitError)
    logger.info("git_clone_finished", destination=str(destination))


def distbuild_source(config: Config) -> tuple[str, Path]:
    """Resolve (clone url, destination) for the distbuild checkout."""
    target = config.distbuild_checkout
    if config.repo_host is None:
        raise ConfigError("environment variable REPO_HOST not set")

    if config.distbuild_repo:
        return f"{config.repo_host}/{config.distbuild_repo}", target
    if config.wrapper_repo:
        return f"{config.repo_host}/{config.wrapper_repo}", target / "boong" / "wrapper"
    raise ConfigError("environment variable DISTBUILD_REPO or WRAPPER_REPO not set")


def clone_distbuild_repo(config: Config) -> Path:
    url, destination = distbuild_source(config)

    try:
        reset_dir(config.distbuild_checkout)
        # Wrapper checkouts live one level below build/distbuild/boong.
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise GitError(f"failed to reset {config.distbuild_checkout}: {e}") from e

    clone(url, destination)
    return destination
