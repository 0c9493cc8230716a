# -*- coding: utf-8 -*-
"""
Centralized Jinja2 environment for HTML templates (diagnostics and panel).
"""
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .config import settings


def nl2br(value: str) -> Markup:
    """Escape text and turn its line breaks into <br> tags."""
    escaped = escape(value or "")
    return Markup("<br>").join(escaped.split("\n"))


def create_jinja_env(template_dir: Path | str | None = None) -> Environment:
    """
    Create a configured Jinja2 environment.

    Args:
        template_dir: Path to templates directory. Defaults to settings.TEMPLATES_DIR.

    Returns:
        Configured Jinja2 Environment instance.
    """
    if template_dir is None:
        template_dir = settings.TEMPLATES_DIR

    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=False,
        autoescape=select_autoescape(["html", "j2"]),
    )
    env.filters["nl2br"] = nl2br

    return env


# Default environment instance
_default_env: Environment | None = None


def get_jinja_env() -> Environment:
    """Get or create the default Jinja2 environment."""
    global _default_env
    if _default_env is None:
        _default_env = create_jinja_env()
    return _default_env


def render_template(template_name: str, **context) -> str:
    """Render a template with the given context. Values are HTML-escaped."""
    template = get_jinja_env().get_template(template_name)
    return template.render(**context).strip()
