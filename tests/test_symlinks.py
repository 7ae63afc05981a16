from __future__ import annotations

import os
from pathlib import Path

import pytest

from boong_bootstrap.config import Config
from boong_bootstrap.symlinks import SymlinkError, install_symlinks, symlink_command

pytestmark = pytest.mark.skipif(os.name != "posix", reason="uses ln")


def _config(tmp_path: Path) -> Config:
    config = Config(distbuild_path=tmp_path / "dist", link_dir=tmp_path / "links", use_sudo=False)
    config.bin_dir.mkdir(parents=True)
    config.link_dir.mkdir()
    for name in ("proxy", "distninja"):
        (config.bin_dir / name).write_text(name, encoding="utf-8")
    return config


def test_symlink_command_uses_sudo_by_default() -> None:
    assert symlink_command(Path("/d/proxy"), Path("/usr/local/bin/proxy"), use_sudo=True) == [
        "sudo",
        "ln",
        "-sf",
        "/d/proxy",
        "/usr/local/bin/proxy",
    ]


def test_links_point_at_downloaded_binaries(tmp_path: Path) -> None:
    config = _config(tmp_path)
    stale = config.link_dir / "proxy"
    stale.symlink_to(tmp_path / "elsewhere")

    links = install_symlinks(config, ["proxy", "distninja"])

    assert links == [config.link_dir / "proxy", config.link_dir / "distninja"]
    for link in links:
        assert link.is_symlink()
        assert Path(os.readlink(link)) == config.bin_dir / link.name


def test_failure_names_binary_and_keeps_earlier_links(tmp_path: Path) -> None:
    config = _config(tmp_path)
    (config.link_dir / "distninja").mkdir()
    (config.link_dir / "distninja" / "distninja").mkdir()

    with pytest.raises(SymlinkError, match=r"\[distninja\]"):
        install_symlinks(config, ["proxy", "distninja"])

    assert (config.link_dir / "proxy").is_symlink()
