# -*- coding: utf-8 -*-
"""
Markdown detection heuristic.

A cell "looks like Markdown" when any one of a fixed set of syntax patterns
appears anywhere in it. List and blockquote markers are anchored per line.
"""
import re

# name -> compiled pattern
MARKDOWN_PATTERNS: dict[str, re.Pattern[str]] = {
    "heading": re.compile(r"#{1,6}\s+.+"),
    "bold": re.compile(r"\*\*.+\*\*"),
    "italic": re.compile(r"\*.+\*"),
    "inline_code": re.compile(r"`[^`]+`"),
    "code_fence": re.compile(r"```[\s\S]*?```"),
    "link": re.compile(r"\[.+\]\(.+\)"),
    "image": re.compile(r"!\[.+\]\(.+\)"),
    "bullet_list": re.compile(r"^\s*[-+*]\s+.+", re.MULTILINE),
    "ordered_list": re.compile(r"^\s*\d+\.\s+.+", re.MULTILINE),
    "blockquote": re.compile(r"^\s*>.+", re.MULTILINE),
    "table_rule": re.compile(r"\|\s*[-:]+\s*\|"),
}


def matching_patterns(content: str) -> list[str]:
    """Names of the patterns found in content, in declaration order."""
    if not content:
        return []
    return [name for name, pattern in MARKDOWN_PATTERNS.items() if pattern.search(content)]


def looks_like_markdown(content: str) -> bool:
    """True if content contains any recognizable Markdown syntax."""
    if not content:
        return False
    return any(pattern.search(content) for pattern in MARKDOWN_PATTERNS.values())
