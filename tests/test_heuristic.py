# -*- coding: utf-8 -*-
"""
Tests for the Markdown detection heuristic.
"""
import pytest

from cell_preview.heuristic import MARKDOWN_PATTERNS, looks_like_markdown, matching_patterns


class TestLooksLikeMarkdown:

    def test_empty_is_not_markdown(self):
        assert looks_like_markdown("") is False

    @pytest.mark.parametrize(
        "content",
        [
            "# Title",
            "###### Deep heading",
            "some **bold** text",
            "an *emphasis* here",
            "call `run()` now",
            "```\ncode\n```",
            "see [docs](https://example.com)",
            "![logo](logo.png)",
            "- item one",
            "intro\n  + nested item",
            "1. first",
            "text\n> quoted",
            "a | b \n|---|---|",
            "| :--- |",
        ],
    )
    def test_markdown_syntax_is_detected(self, content):
        assert looks_like_markdown(content) is True

    @pytest.mark.parametrize(
        "content",
        [
            "plain sentence.",
            "hello\nworld",
            "price: 5 - 3 = 2",
            "#hashtag",
            "2024.01.15",
            "a | b | c",
        ],
    )
    def test_plain_text_is_not_markdown(self, content):
        assert looks_like_markdown(content) is False

    def test_list_markers_checked_on_every_line(self):
        assert looks_like_markdown("Shopping:\n* milk\n* eggs") is True
        assert looks_like_markdown("Steps:\n10. last step") is True

    def test_matching_patterns_names(self):
        assert matching_patterns("# Title") == ["heading"]
        assert set(matching_patterns("**bold**")) == {"bold", "italic"}
        assert matching_patterns("") == []
        assert matching_patterns("plain") == []

    def test_pattern_set_is_complete(self):
        assert set(MARKDOWN_PATTERNS) == {
            "heading",
            "bold",
            "italic",
            "inline_code",
            "code_fence",
            "link",
            "image",
            "bullet_list",
            "ordered_list",
            "blockquote",
            "table_rule",
        }
