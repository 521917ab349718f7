"""Tests for escaping and sanitizing of message text."""

import re

import pytest
from hypothesis import given
from hypothesis import strategies as st

from localeforge.config import HtmlMinOptions, LocalesOptions
from localeforge.errors import HtmlSyntaxError
from localeforge.escaping import Sanitized, js_escape, quote, sanitize, text_content


class TestJsEscape:
    """Test js_escape."""

    def test_plain_text_unchanged(self) -> None:
        """Word characters, spaces and punctuation stay as they are."""
        assert js_escape("Hello, world! {name} 100%") == "Hello, world! {name} 100%"

    def test_quotes_and_backslash(self) -> None:
        """Both quote characters and the backslash become hex escapes."""
        assert js_escape("\"'\\") == "\\x22\\x27\\x5c"

    def test_html_specials(self) -> None:
        """A closing script tag cannot appear in the output."""
        assert js_escape("</script>&") == "\\x3c/script\\x3e\\x26"

    def test_control_characters(self) -> None:
        """Newlines and tabs become hex escapes."""
        assert js_escape("a\nb\tc") == "a\\x0ab\\x09c"

    def test_non_ascii_unchanged(self) -> None:
        """Non-ASCII letters are kept verbatim."""
        assert js_escape("Öffnen – 日本") == "Öffnen – 日本"

    @given(st.text())
    def test_output_has_no_unsafe_characters(self, text: str) -> None:
        """Property: no quote, backslash-free, HTML special or control char survives."""
        escaped = js_escape(text)
        # Every backslash in the output starts an \xNN escape.
        without_escapes = re.sub(r"\\x[0-9a-f]{2}", "", escaped)
        assert not set(without_escapes) & set("\"'\\<>&")
        assert all(ord(c) >= 32 for c in without_escapes)

    @given(st.text())
    def test_escapes_are_reversible(self, text: str) -> None:
        """Property: replacing the escapes back yields the input."""
        escaped = js_escape(text)
        restored = re.sub(r"\\x([0-9a-f]{2})", lambda m: chr(int(m.group(1), 16)), escaped)
        assert restored == text


class TestQuote:
    """Test quote."""

    def test_wraps_in_double_quotes(self) -> None:
        """The text is wrapped, not escaped."""
        assert quote("a\\x22b") == '"a\\x22b"'


class TestTextContent:
    """Test text_content."""

    def test_strips_tags(self) -> None:
        """Tags are removed, text is kept."""
        assert text_content("Hello <b>world</b>!") == "Hello world!"

    def test_decodes_entities(self) -> None:
        """Character references are decoded."""
        assert text_content("a &amp; b &lt; c") == "a & b < c"

    def test_plain_text(self) -> None:
        """Text without markup is returned unchanged."""
        assert text_content("Hello {name}!") == "Hello {name}!"

    def test_rejected_markup_raises(self) -> None:
        """The tree builder's rejection surfaces as HtmlSyntaxError."""
        with pytest.raises(HtmlSyntaxError):
            text_content("a <![foo[ bar")


class TestSanitize:
    """Test sanitize."""

    def test_minifies_and_sanitizes_content(self, options: LocalesOptions) -> None:
        """Whitespace is collapsed, scripts are dropped."""
        result = sanitize("k", "  Hello   <b>you</b><script>x()</script> ", options)
        assert result == Sanitized(key="k", content="Hello <b>you</b>")

    def test_key_is_not_minified_by_default(self, options: LocalesOptions) -> None:
        """Without htmlmin_keys the key is left alone."""
        assert sanitize("  a  b ", "x", options).key == "  a  b "

    def test_key_minified_with_key_options(self) -> None:
        """With htmlmin_keys the key is minified too."""
        options = LocalesOptions(htmlmin_keys=HtmlMinOptions())
        assert sanitize("  a   b ", "x", options).key == "a b"

    def test_escape_key(self, options: LocalesOptions) -> None:
        """escape_key js-escapes the key."""
        assert sanitize('Say "hi"', "x", options, escape_key=True).key == "Say \\x22hi\\x22"

    def test_disallowed_url_removed(self, options: LocalesOptions) -> None:
        """javascript: URLs do not survive, allowed URLs and placeholders do."""
        content = (
            '<a href="javascript:alert(1)">x</a>'
            '<a href="https://example.org/">y</a>'
            '<a href="{url}">z</a>'
        )
        result = sanitize("k", content, options).content
        assert result == '<a>x</a><a href="https://example.org/">y</a><a href="{url}">z</a>'

    def test_no_minify_when_disabled(self) -> None:
        """With htmlmin disabled, whitespace is preserved."""
        options = LocalesOptions(htmlmin=None)
        assert sanitize("k", "a   b", options).content == "a   b"

    def test_malformed_markup_raises(self, options: LocalesOptions) -> None:
        """Stray end tags are reported with their position."""
        with pytest.raises(HtmlSyntaxError) as exc_info:
            sanitize("k", "Hello</b>", options)
        assert exc_info.value.line == 1
        assert exc_info.value.column == 6

    def test_rejected_markup_raises_without_minifier(self) -> None:
        """Sanitizing alone also reports markup the tokenizer rejects."""
        with pytest.raises(HtmlSyntaxError):
            sanitize("k", "a <![foo[ bar", LocalesOptions(htmlmin=None))

    def test_text_escaped(self, options: LocalesOptions) -> None:
        """A bare ampersand is escaped in the content."""
        assert sanitize("k", "Tom & Jerry", options).content == "Tom &amp; Jerry"
