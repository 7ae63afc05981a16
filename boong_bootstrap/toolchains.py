"""
toolchains.py

Responsibility: Fetch prebuilt compiler toolchains as shallow, branch-pinned clones.

The list of toolchains comes from `toolchains.yaml`, rendered with Jinja2 and
then parsed as YAML. Entry paths are relative to the distbuild directory
and joined after parsing. Per-entry `branch`/`depth` override the manifest
`defaults` block. Toolchains are cloned one after another.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from boong_bootstrap.config import Config, ConfigError
from boong_bootstrap.errors import BootstrapError
from boong_bootstrap.renderer import render_resource, render_text
from boong_bootstrap.repo import GitError, clone, reset_dir

MANIFEST = "toolchains.yaml"


class ManifestError(BootstrapError):
    pass


@dataclass(frozen=True)
class Toolchain:
    name: str
    repo: str
    path: Path
    branch: str = "master"
    depth: int = 1


def _manifest_context(config: Config) -> dict[str, Any]:
    if config.repo_host is None:
        raise ConfigError("environment variable REPO_HOST not set")
    return {
        "repo_host": config.repo_host,
    }


def _parse_entry(raw: Any, defaults: dict[str, Any], base: Path) -> Toolchain:
    if not isinstance(raw, dict):
        raise ManifestError("each toolchain must be a mapping")
    merged = {**defaults, **raw}

    name = str(merged.get("name") or "").strip()
    repo = str(merged.get("repo") or "").strip()
    path = str(merged.get("path") or "").strip()
    if not (name and repo and path):
        raise ManifestError(f"toolchain entry needs name, repo and path: {raw!r}")

    try:
        depth = int(merged.get("depth", 1))
    except (TypeError, ValueError) as e:
        raise ManifestError(f"toolchain {name}: depth must be an integer") from e

    relative = Path(path)
    if relative.is_absolute() or ".." in relative.parts:
        raise ManifestError(f"toolchain {name}: path must stay inside the distbuild directory: {path}")

    return Toolchain(
        name=name,
        repo=repo,
        path=base / relative,
        branch=str(merged.get("branch") or "master"),
        depth=depth,
    )


def parse_manifest(text: str, base: Path) -> list[Toolchain]:
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid toolchain manifest: {e}") from e
    if not isinstance(data, dict):
        raise ManifestError("toolchain manifest must be a mapping at the top level")

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ManifestError("`defaults` must be a mapping when provided")

    entries = data.get("toolchains") or []
    if not isinstance(entries, list):
        raise ManifestError("`toolchains` must be a list")

    return [_parse_entry(raw, defaults, base) for raw in entries]


def load_toolchains(config: Config, manifest_text: str | None = None) -> list[Toolchain]:
    """
    Render and parse the toolchain manifest (the bundled one unless
    `manifest_text` is given).
    """
    context = _manifest_context(config)
    if manifest_text is None:
        rendered = render_resource(MANIFEST, context)
    else:
        rendered = render_text(manifest_text, context, source=MANIFEST)
    return parse_manifest(rendered, config.distbuild_path)


def clone_toolchain(toolchain: Toolchain) -> None:
    try:
        reset_dir(toolchain.path)
    except OSError as e:
        raise GitError(f"failed to remove existing {toolchain.name} directory: {e}") from e
    try:
        clone(toolchain.repo, toolchain.path, branch=toolchain.branch, depth=toolchain.depth)
    except GitError as e:
        raise GitError(f"{toolchain.name} clone failed: {e}") from e


def download_toolchains(config: Config) -> list[Toolchain]:
    toolchains = load_toolchains(config)
    for toolchain in toolchains:
        clone_toolchain(toolchain)
    return toolchains
