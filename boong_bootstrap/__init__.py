"""
boong_bootstrap package

Prepares a distbuild environment: clones the build tooling repository,
downloads prebuilt binaries, links them into the system path and, on demand,
launches the background agent.

Key responsibilities are split across modules:
- `config.py`: defaults file + environment + CLI flags -> immutable `Config`
- `repo.py`: git clones (distbuild repository, wrapper fallback)
- `downloader.py`: parallel binary downloads over HTTP(S)
- `toolchains.py`: shallow, branch-pinned toolchain clones from a YAML manifest
- `renderer.py`: Jinja2 rendering of bundled templates
- `symlinks.py`: publishing binaries into the system bin directory
- `transfer.py`: copying binaries to a remote build worker
- `agent.py`: detached agent launch
- `cli.py`: CLI entrypoint and orchestration of the two run modes
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
