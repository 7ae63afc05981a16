"""
renderer.py

Responsibility: Render bundled text templates (the toolchain manifest) with Jinja2.

Undefined variables are errors, never silently empty strings.
"""

from __future__ import annotations

from importlib import resources
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from boong_bootstrap.errors import BootstrapError


class RenderError(BootstrapError):
    pass


def _environment() -> Environment:
    return Environment(
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_text(text: str, context: dict[str, Any], *, source: str = "<string>") -> str:
    try:
        return _environment().from_string(text).render(**context)
    except TemplateError as e:
        raise RenderError(f"failed rendering template {source}: {e}") from e


def render_resource(name: str, context: dict[str, Any]) -> str:
    """Render a template file shipped inside the `boong_bootstrap` package."""
    try:
        text = resources.files("boong_bootstrap").joinpath(name).read_text(encoding="utf-8")
    except OSError as e:
        raise RenderError(f"template not found: {name}") from e
    return render_text(text, context, source=name)
