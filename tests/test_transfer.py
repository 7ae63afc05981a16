from __future__ import annotations

from pathlib import Path

import pytest

from boong_bootstrap.config import Config
from boong_bootstrap.transfer import TransferError, copy_to_worker, transfer_command

from .conftest import FakeCommands


def test_transfer_command_without_password() -> None:
    config = Config(distbuild_path=Path("/srv/distbuild"), worker="builder@worker-1")
    assert transfer_command(config) == ["scp", "-r", "/srv/distbuild/boong/bin", "builder@worker-1:/srv/distbuild/boong/"]


def test_transfer_command_with_password_uses_sshpass() -> None:
    config = Config(distbuild_path=Path("/srv/distbuild"), worker="worker-1", password="s3cret")
    assert transfer_command(config)[:4] == ["sshpass", "-p", "s3cret", "scp"]


def test_transfer_requires_worker() -> None:
    with pytest.raises(TransferError):
        transfer_command(Config(distbuild_path=Path("/srv/distbuild")))


def test_copy_runs_scp(fake_commands: FakeCommands) -> None:
    config = Config(distbuild_path=Path("/srv/distbuild"), worker="worker-1")

    assert copy_to_worker(config) == "worker-1:/srv/distbuild/boong/"
    assert fake_commands.calls == [transfer_command(config)]


def test_failure_masks_password(fake_commands: FakeCommands) -> None:
    fake_commands.fail_with = "Permission denied, please try again."
    config = Config(distbuild_path=Path("/srv/distbuild"), worker="worker-1", password="s3cret")

    with pytest.raises(TransferError) as excinfo:
        copy_to_worker(config)

    assert "Permission denied" in str(excinfo.value)
    assert "s3cret" not in str(excinfo.value)
