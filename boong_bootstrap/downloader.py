"""
downloader.py

Responsibility: Fetch prebuilt binaries over HTTP(S).

- One thread per download; the caller waits for every task to finish.
- The first failure (in completion order) is raised, later ones are logged.
- Bodies are streamed to `<name>.part` and renamed into place on success, so a
  failed download never leaves a truncated binary behind.
- Every error message ends with the destination file name in brackets.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

import requests

from boong_bootstrap.config import Config
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.logging_config import get_logger

logger = get_logger(__name__)

CHUNK_SIZE = 1024 * 1024
EXECUTABLE_MODE = 0o755


class DownloadError(BootstrapError):
    pass


@dataclass(frozen=True)
class DownloadTask:
    url: str
    destination: Path

    @property
    def name(self) -> str:
        return self.destination.name


def download_file(
    task: DownloadTask,
    *,
    auth: tuple[str, str] | None = None,
    timeout: float | None = None,
) -> Path:
    """
    GET `task.url` and write the body to `task.destination` with mode 0755.
    """
    name = task.name
    part = task.destination.with_name(f"{name}.part")

    logger.info("download_started", name=name, url=task.url)
    try:
        r = requests.get(task.url, auth=auth, stream=True, timeout=timeout)
    except requests.RequestException as e:
        raise DownloadError(f"download failed: {e} [{name}]") from e

    try:
        if r.status_code != 200:
            raise DownloadError(f"download failed with status code {r.status_code} [{name}]")
        try:
            with open(part, "wb") as out:
                for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                    out.write(chunk)
        except requests.RequestException as e:
            raise DownloadError(f"download failed: {e} [{name}]") from e
        except OSError as e:
            raise DownloadError(f"write file failed: {e} [{name}]") from e

        try:
            os.chmod(part, EXECUTABLE_MODE)
            os.replace(part, task.destination)
        except OSError as e:
            raise DownloadError(f"chmod failed: {e} [{name}]") from e
    except DownloadError:
        part.unlink(missing_ok=True)
        raise
    finally:
        r.close()

    logger.info("download_finished", name=name, destination=str(task.destination))
    return task.destination


def download_all(
    tasks: Sequence[DownloadTask],
    *,
    auth: tuple[str, str] | None = None,
    timeout: float | None = None,
) -> list[Path]:
    """
    Run every task concurrently and wait for all of them.

    Returns the written paths in task order. Raises the first DownloadError
    observed; files of tasks that did succeed stay in place.
    """
    if not tasks:
        return []

    first_error: DownloadError | None = None
    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="download") as pool:
        futures = {pool.submit(download_file, task, auth=auth, timeout=timeout): task for task in tasks}
        for future in as_completed(futures):
            try:
                future.result()
            except DownloadError as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.error("download_failed", name=futures[future].name, error=str(e))

    if first_error is not None:
        raise first_error
    return [task.destination for task in tasks]


def _optional_task(url: str | None, env_key: str, destination: Path) -> DownloadTask | None:
    if not url:
        logger.warning("resource_skipped", name=destination.name, reason=f"environment variable {env_key} not set")
        return None
    return DownloadTask(url=url, destination=destination)


def resource_tasks(config: Config) -> list[DownloadTask]:
    """Download tasks for provisioning mode; unset URLs are skipped with a warning."""
    candidates = [
        _optional_task(config.proxy_bin, "PROXY_BIN", config.bin_dir / "proxy"),
        _optional_task(config.distninja_bin, "DISTNINJA_BIN", config.bin_dir / "distninja"),
    ]
    return [task for task in candidates if task is not None]


def agent_task(config: Config) -> DownloadTask | None:
    return _optional_task(config.agent_bin, "AGENT_BIN", config.agent_path)


def download_resources(config: Config, tasks: Sequence[DownloadTask]) -> list[Path]:
    try:
        config.bin_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DownloadError(f"create bin directory failed: {e}") from e
    return download_all(tasks, auth=config.auth, timeout=config.http_timeout)
