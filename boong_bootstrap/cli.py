"""
cli.py

Responsibility: CLI entrypoint for boong-bootstrap.

Two mutually exclusive run modes:

agent-deploy (`--deploy-agent`):
1) Download the agent binary
2) Launch it detached, output to `<distbuild-path>/agent.log`

provisioning (`--aosp-path`):
1) Clone the distbuild (or wrapper) repository into the AOSP tree
2) Download proxy / distninja in parallel
3) (Optional) Clone prebuilt toolchains
4) Symlink the downloaded binaries into the system bin directory
5) (Optional) Copy the binaries to a remote worker

This module orchestrates; each step lives in its own module:
- Configuration: `config.py`
- git: `repo.py`, `toolchains.py`
- HTTP: `downloader.py`
- Linking / copying / launching: `symlinks.py`, `transfer.py`, `agent.py`
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from boong_bootstrap import __version__
from boong_bootstrap.agent import AgentProcess, launch_agent
from boong_bootstrap.config import Config, load_config
from boong_bootstrap.downloader import DownloadError, agent_task, download_resources, resource_tasks
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger, setup_logging
from boong_bootstrap.repo import GitError, clone_distbuild_repo
from boong_bootstrap.symlinks import SymlinkError, install_symlinks
from boong_bootstrap.toolchains import download_toolchains
from boong_bootstrap.transfer import TransferError, copy_to_worker

logger = get_logger(__name__)


def deploy_agent(config: Config) -> AgentProcess:
    task = agent_task(config)
    try:
        download_resources(config, [task] if task else [])
    except DownloadError as e:
        raise DownloadError(f"download agent failed: {e}") from e

    print("starting agent in background...")
    agent = launch_agent(config)
    print(f"agent started with PID {agent.pid}")
    print(f"log output: {agent.log_path}")
    return agent


def provision(config: Config) -> None:
    try:
        checkout = clone_distbuild_repo(config)
    except GitError as e:
        raise GitError(f"git clone failed: {e}") from e
    print(f"cloned distbuild repository into {checkout}")

    tasks = resource_tasks(config)
    try:
        download_resources(config, tasks)
    except DownloadError as e:
        raise DownloadError(f"download resources failed: {e}") from e

    if config.enable_toolchains:
        try:
            toolchains = download_toolchains(config)
        except GitError as e:
            raise GitError(f"download toolchains failed: {e}") from e
        for toolchain in toolchains:
            print(f"cloned {toolchain.name} toolchain into {toolchain.path}")

    try:
        install_symlinks(config, [task.name for task in tasks])
    except SymlinkError as e:
        raise SymlinkError(f"create symlinks failed: {e}") from e

    if config.worker:
        try:
            remote = copy_to_worker(config)
        except TransferError as e:
            raise TransferError(f"copy to worker failed: {e}") from e
        print(f"copied binaries to {remote}")


def bootstrap_cmd(args: argparse.Namespace) -> int:
    config = load_config(
        distbuild_path=args.distbuild_path,
        aosp_path=args.aosp_path,
        deploy_agent=bool(args.deploy_agent),
        enable_toolchains=bool(args.enable_toolchains),
        worker=args.worker,
        password=args.password,
        env_file=args.env_file,
    )

    if config.deploy_agent:
        deploy_agent(config)
    else:
        provision(config)
    return 0


class _Parser(argparse.ArgumentParser):
    """Usage errors are fatal errors like any other: exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"Error: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="boong-bootstrap", description="boong bootstrap - distbuild environment setup")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    p.add_argument("--aosp-path", default=None, help="AOSP base path (provisioning mode)")
    p.add_argument("--distbuild-path", default=None, help="distbuild binaries path (required)")
    p.add_argument("--deploy-agent", action="store_true", help="Download and start the agent service")
    p.add_argument("--enable-toolchains", action="store_true", help="Clone prebuilt toolchains")

    p.add_argument("-w", "--worker", default=None, help="Remote worker ([user@]host) to copy binaries to")
    p.add_argument("-p", "--password", default=None, help="SSH password for --worker (uses sshpass)")

    p.add_argument("--env-file", default=None, help="Defaults file to use instead of the bundled one")
    p.add_argument("--log-level", default=None, help="Log level (or set env LOG_LEVEL, default: INFO)")
    p.add_argument(
        "--log-format",
        default=None,
        choices=["console", "json"],
        help="Log format (or set env LOG_FORMAT, default: console)",
    )

    p.set_defaults(func=bootstrap_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help / --version exit 0, usage errors exit 1
        return int(e.code or 0)
    setup_logging(log_level=args.log_level, log_format=args.log_format)
    try:
        return int(args.func(args))
    except BootstrapError as e:
        logger.debug("run_failed", error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
