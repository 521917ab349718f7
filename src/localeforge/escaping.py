"""Escaping and sanitizing of message text.

Message keys and values are embedded in three nested syntaxes by the
generated module: an HTML page, a script block inside it, and a quoted
string literal inside that script. js_escape() makes a string safe for the
innermost two; sanitize() makes markup safe for the outermost one.

Python 3.13+. Depends on BeautifulSoup through localeforge.markup.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from localeforge.markup import minify, parse_fragment, sanitize_html

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions

__all__ = ["Sanitized", "js_escape", "quote", "sanitize", "text_content"]

_NON_WORD = re.compile(r"\W")

# Characters escaped besides control characters. The HTML specials are
# included because "</script>" ends a script block even inside a quoted
# string: the HTML parser runs before the script parser.
_ALWAYS_ESCAPED = frozenset("\"'\\<>&")


def _escape_char(match: re.Match[str]) -> str:
    char = match.group(0)
    code = ord(char)
    if code < 32 or char in _ALWAYS_ESCAPED:
        return f"\\x{code:02x}"
    return char


def js_escape(text: str) -> str:
    """Escape a string for output in a quoted script context.

    Control characters, both quote characters, the backslash and the HTML
    specials "<", ">", "&" become \\xNN escapes; everything else is kept.

    Example:
        >>> js_escape('Say "hi" </script>')
        'Say \\\\x22hi\\\\x22 \\\\x3c/script\\\\x3e'
    """
    return _NON_WORD.sub(_escape_char, text)


def quote(text: str) -> str:
    """Wrap an already escaped string in double quotes."""
    return f'"{text}"'


def text_content(markup: str) -> str:
    """Plain text of a markup fragment (tags stripped, entities decoded).

    Raises:
        HtmlSyntaxError: If the tokenizer rejects the markup

    Example:
        >>> text_content("Hello <b>world</b> &amp; all")
        'Hello world & all'
    """
    return parse_fragment(f"<p>{markup}</p>").p.get_text()


@dataclass(frozen=True, slots=True)
class Sanitized:
    """Result of sanitize().

    Attributes:
        key: Key after optional minification and escaping
        content: Minified and sanitized content
    """

    key: str
    content: str


def sanitize(
    key: str,
    content: str,
    options: LocalesOptions,
    *,
    escape_key: bool = False,
) -> Sanitized:
    """Minify and sanitize a key/content pair.

    Args:
        key: Message key
        content: Message content (markup allowed)
        options: Minifier options and URL allow-list
        escape_key: Also js_escape() the key for embedding in a string literal

    Returns:
        Sanitized key and content

    Raises:
        HtmlSyntaxError: If the markup is malformed (nesting is only checked
            when minification is enabled)
    """
    url_regexp = options.url_regexp

    def url_allowed(value: str) -> bool:
        return url_regexp.search(value) is not None

    key = str(key)
    if options.htmlmin is not None and options.htmlmin_keys is not None:
        key = minify(key, options.htmlmin_keys) or key
    if escape_key:
        key = js_escape(key)
    content = str(content)
    if options.htmlmin is not None:
        content = minify(content, options.htmlmin) or content
    return Sanitized(key=key, content=sanitize_html(content, url_allowed))
