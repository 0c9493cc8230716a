# -*- coding: utf-8 -*-
"""
Markdown rendering boundary.

The pipeline accepts any callable `render(text)` returning either a string or
an awaitable of a string. `render_markdown` is the default, backed by
markdown-it-py.
"""
import inspect
import logging
from typing import Awaitable, Callable, Union

from markdown_it import MarkdownIt

from .config import settings

logger = logging.getLogger(__name__)

RenderFunction = Callable[[str], Union[str, Awaitable[str]]]


class RenderError(Exception):
    """The render function failed or returned something other than a string."""

    pass


def create_markdown_parser(
        allow_html: bool | None = None,
        linkify: bool | None = None,
) -> MarkdownIt:
    """
    Build a CommonMark parser with tables and strikethrough enabled.

    Args:
        allow_html: Pass raw HTML through. Defaults to settings.MARKDOWN_ALLOW_HTML.
        linkify: Autolink bare URLs. Defaults to settings.MARKDOWN_LINKIFY.
    """
    if allow_html is None:
        allow_html = settings.MARKDOWN_ALLOW_HTML
    if linkify is None:
        linkify = settings.MARKDOWN_LINKIFY

    md = MarkdownIt("commonmark", {"html": allow_html, "linkify": linkify, "breaks": False})
    md.enable(["table", "strikethrough"])
    if linkify:
        md.enable("linkify")
    return md


_default_parser: MarkdownIt | None = None


def render_markdown(text: str) -> str:
    """Render Markdown text to an HTML fragment."""
    global _default_parser
    if _default_parser is None:
        _default_parser = create_markdown_parser()
    return _default_parser.render(text)


async def run_renderer(render: RenderFunction, text: str) -> str:
    """
    Call a render function and await its result if it is deferred.

    Raises:
        RenderError: if the result is not a string.
    """
    result = render(text)
    if inspect.isawaitable(result):
        result = await result
    if not isinstance(result, str):
        raise RenderError(f"Renderer returned {type(result).__name__}, expected str")
    return result
