"""
transfer.py

Responsibility: Copy the downloaded binaries to a remote build worker with scp.

A password switches the command to `sshpass -p <password> scp ...`; the
password is masked in error messages.
"""

from __future__ import annotations

from boong_bootstrap.commands import run_command
from boong_bootstrap.config import Config
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger

logger = get_logger(__name__)


class TransferError(BootstrapError):
    pass


def transfer_command(config: Config) -> list[str]:
    if not config.worker:
        raise TransferError("no worker configured")
    remote = f"{config.worker}:{(config.distbuild_path / 'boong').as_posix()}/"
    cmd = ["scp", "-r", str(config.bin_dir), remote]
    if config.password:
        cmd = ["sshpass", "-p", config.password, *cmd]
    return cmd


def copy_to_worker(config: Config) -> str:
    cmd = transfer_command(config)
    logger.info("worker_transfer_started", worker=config.worker, source=str(config.bin_dir))
    run_command(cmd, error=TransferError, redact=config.password)
    logger.info("worker_transfer_finished", worker=config.worker)
    return cmd[-1]
