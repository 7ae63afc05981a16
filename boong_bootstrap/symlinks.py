"""
symlinks.py

Responsibility: Publish downloaded binaries into the system bin directory.

Links are forced (`ln -sf`), usually through sudo. A failure aborts the run;
links created before the failure are left in place.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from boong_bootstrap.commands import run_command
from boong_bootstrap.config import Config
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger

logger = get_logger(__name__)


class SymlinkError(BootstrapError):
    pass


def symlink_command(source: Path, target: Path, *, use_sudo: bool) -> list[str]:
    cmd = ["ln", "-sf", str(source), str(target)]
    return ["sudo", *cmd] if use_sudo else cmd


def install_symlinks(config: Config, names: Iterable[str]) -> list[Path]:
    links: list[Path] = []
    for name in names:
        source = config.bin_dir / name
        target = config.link_dir / name
        try:
            run_command(symlink_command(source, target, use_sudo=config.use_sudo), error=SymlinkError)
        except SymlinkError as e:
            raise SymlinkError(f"create symlink failed: {e} [{name}]") from e
        logger.info("symlink_installed", source=str(source), target=str(target))
        links.append(target)
    return links
