# -*- coding: utf-8 -*-
"""
Diagnostic HTML fragments shown in place of a real preview.
"""
from .jinja_env import render_template

NO_TEXT_FIELDS_NOTICE = "The current table has no text fields, create a text field first"
INIT_FAILED_NOTICE = "Initialization failed, please refresh and retry"


def not_text_field() -> str:
    return render_template("diagnostics/not_text_field.html.j2")


def empty_cell() -> str:
    return render_template("diagnostics/empty_cell.html.j2")


def not_markdown(content: str) -> str:
    """Notice plus the raw content, escaped, with line breaks kept."""
    return render_template("diagnostics/not_markdown.html.j2", content=content)


def fetch_error(detail: str) -> str:
    return render_template("diagnostics/fetch_error.html.j2", detail=detail)


def render_error(detail: str, content: str) -> str:
    """Error detail followed by the source text, which must stay visible."""
    return render_template("diagnostics/render_error.html.j2", detail=detail, content=content)


def selection_error(detail: str) -> str:
    return render_template("diagnostics/selection_error.html.j2", detail=detail)


def placeholder() -> str:
    return render_template("diagnostics/placeholder.html.j2")


def describe_error(error: BaseException) -> str:
    """Readable one-line detail for an exception."""
    message = str(error)
    return message if message else type(error).__name__
