"""Tests for the markdown renderer."""

import pytest

from portal_assistant.markdown import markdown_to_html


class TestBlocks:
    """Line-level elements."""

    def test_heading_and_bold_without_empty_paragraphs(self):
        """A heading, a blank line and a bold paragraph leave no empty <p>."""
        html = markdown_to_html("# Title\n\nSome **bold** text")

        assert "<h1>Title</h1>" in html
        assert "<strong>bold</strong>" in html
        assert "<p></p>" not in html
        assert html == "<h1>Title</h1>\n<p>Some <strong>bold</strong> text</p>"

    @pytest.mark.parametrize(
        "source, expected",
        [
            ("### h3", "<h3>h3</h3>"),
            ("## h2", "<h2>h2</h2>"),
            ("---", "<hr/>"),
            ("  ---  ", "<hr/>"),
        ],
    )
    def test_block_elements(self, source, expected):
        """Headings and rules map to their tags."""
        assert markdown_to_html(source) == expected

    def test_blank_lines_collapse_to_one_break(self):
        """Consecutive blank lines produce a single break."""
        assert markdown_to_html("a\n\n\n\nb") == "<p>a</p>\n<p>b</p>"

    def test_leading_blank_lines_are_dropped(self):
        """Blank lines before any content produce nothing."""
        assert markdown_to_html("\n\nb") == "<p>b</p>"

    def test_bold_is_not_nested(self):
        """Each **span** is replaced independently."""
        assert markdown_to_html("**a** e **b**") == "<p><strong>a</strong> e <strong>b</strong></p>"

    def test_empty_input(self):
        """Empty or missing text renders as an empty string."""
        assert markdown_to_html("") == ""
        assert markdown_to_html(None) == ""


class TestLists:
    """List opening and closing."""

    def test_list_is_closed_once_before_plain_paragraph(self):
        """A non-item line closes the open list exactly once."""
        assert markdown_to_html("* a\n* b\nplain") == "<ul><li>a</li><li>b</li></ul><p>plain</p>"

    def test_ordered_list(self):
        """Numbered items form an <ol>."""
        assert markdown_to_html("1. um\n2. dois") == "<ol><li>um</li><li>dois</li></ol>"

    def test_switching_list_kind_closes_the_previous_list(self):
        """An ordered item right after a bullet list starts a new list."""
        assert markdown_to_html("* a\n1. b") == "<ul><li>a</li></ul><ol><li>b</li></ol>"

    def test_list_opens_right_after_a_paragraph(self):
        """No blank line is needed before a list."""
        assert markdown_to_html("intro\n* a") == "<p>intro</p><ul><li>a</li></ul>"


class TestEscaping:
    """Model text cannot inject markup."""

    def test_script_tags_are_escaped(self):
        """<script> is rendered as literal text."""
        html = markdown_to_html("<script>alert(1)</script>")

        assert "&lt;script&gt;" in html
        assert "<script>" not in html

    def test_escaping_happens_inside_synthesized_tags(self):
        """Angle brackets in a heading are escaped inside the generated tag."""
        assert markdown_to_html("## a <b> c") == "<h2>a &lt;b&gt; c</h2>"
