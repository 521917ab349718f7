"""HTML fragment minifier.

Streams a fragment through the stdlib tokenizer, drops comments, collapses
whitespace, and checks that elements nest properly. Character references
are passed through verbatim; only the sanitizer decides how text is escaped.

Malformed markup raises HtmlSyntaxError with the line and column of the
offending tag, so a broken translatable string can be found in its file.

Python 3.13+.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from html.parser import HTMLParser

from localeforge.config import HtmlMinOptions
from localeforge.errors import HtmlSyntaxError

__all__ = ["INLINE_ELEMENTS", "VOID_ELEMENTS", "minify"]

VOID_ELEMENTS = frozenset(
    {
        "area", "base", "br", "col", "embed", "hr", "img", "input",
        "link", "meta", "param", "source", "track", "wbr",
    }
)

# Whitespace next to these elements is significant; around every other
# element it is trimmed.
INLINE_ELEMENTS = frozenset(
    {
        "a", "abbr", "acronym", "b", "bdi", "bdo", "big", "button", "cite",
        "code", "del", "dfn", "em", "font", "i", "img", "input", "ins", "kbd",
        "label", "mark", "math", "nobr", "object", "q", "rp", "rt", "rtc",
        "ruby", "s", "samp", "select", "small", "span", "strike", "strong",
        "sub", "sup", "svg", "textarea", "time", "tt", "u", "var",
    }
)

# Elements whose end tag may be omitted.
_OPTIONAL_END = frozenset(
    {
        "colgroup", "dd", "dt", "li", "optgroup", "option", "p", "rb", "rp",
        "rt", "rtc", "tbody", "td", "tfoot", "th", "thead", "tr",
    }
)

_PRESERVE_WHITESPACE = frozenset({"pre", "textarea", "script", "style"})

# HTML whitespace only; no-break spaces and other Unicode spaces are text.
_HTML_WHITESPACE = " \t\n\r\f"
_WHITESPACE_RUN = re.compile(r"[ \t\n\r\f]+")


@dataclass(slots=True)
class _Token:
    kind: str  # "text" | "tag" | "other"
    text: str
    name: str = ""
    preserve: bool = False


class _MinifyingParser(HTMLParser):
    """Tokenizer callback collecting minified tokens."""

    def __init__(self, options: HtmlMinOptions) -> None:
        super().__init__(convert_charrefs=False)
        self._options = options
        self._tokens: list[_Token] = []
        self._stack: list[tuple[str, tuple[int, int]]] = []
        self._preserve_depth = 0

    @property
    def tokens(self) -> list[_Token]:
        return self._tokens

    def _error(self, message: str, pos: tuple[int, int] | None = None) -> HtmlSyntaxError:
        line, offset = pos if pos is not None else self.getpos()
        return HtmlSyntaxError(message, line=line, column=offset + 1)

    def _append_text(self, text: str) -> None:
        preserve = self._preserve_depth > 0
        last = self._tokens[-1] if self._tokens else None
        if last is not None and last.kind == "text" and last.preserve == preserve:
            last.text += text
        else:
            self._tokens.append(_Token("text", text, preserve=preserve))

    @staticmethod
    def _render_start(tag: str, attrs: list[tuple[str, str | None]], close: bool) -> str:
        parts = [tag]
        for name, value in attrs:
            if value is None:
                parts.append(name)
            else:
                escaped = value.replace("&", "&amp;").replace('"', "&quot;")
                parts.append(f'{name}="{escaped}"')
        end = "/>" if close and tag not in VOID_ELEMENTS else ">"
        return "<" + " ".join(parts) + end

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._tokens.append(_Token("tag", self._render_start(tag, attrs, False), tag))
        if tag in VOID_ELEMENTS:
            return
        self._stack.append((tag, self.getpos()))
        if tag in _PRESERVE_WHITESPACE:
            self._preserve_depth += 1

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._tokens.append(_Token("tag", self._render_start(tag, attrs, True), tag))

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_ELEMENTS:
            return
        open_names = [name for name, _ in self._stack]
        if tag not in open_names:
            msg = f"Unexpected end tag </{tag}>"
            raise self._error(msg)
        while self._stack:
            name, pos = self._stack.pop()
            if name in _PRESERVE_WHITESPACE:
                self._preserve_depth -= 1
            if name == tag:
                break
            if name not in _OPTIONAL_END:
                msg = f"Mismatched end tag </{tag}>, expected </{name}>"
                raise self._error(msg)
        self._tokens.append(_Token("tag", f"</{tag}>", tag))

    def handle_data(self, data: str) -> None:
        if self._options.collapse_whitespace and not self._preserve_depth:
            data = _WHITESPACE_RUN.sub(" ", data)
        self._append_text(data)

    def handle_entityref(self, name: str) -> None:
        self._append_text(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._append_text(f"&#{name};")

    def handle_comment(self, data: str) -> None:
        if not self._options.remove_comments:
            self._tokens.append(_Token("other", f"<!--{data}-->"))

    def handle_decl(self, decl: str) -> None:
        self._tokens.append(_Token("other", f"<!{decl}>"))

    def unknown_decl(self, data: str) -> None:
        self._tokens.append(_Token("other", f"<![{data}]>"))

    def handle_pi(self, data: str) -> None:
        self._tokens.append(_Token("other", f"<?{data}>"))

    def finish(self) -> None:
        self.close()
        for name, pos in self._stack:
            if name not in _OPTIONAL_END:
                msg = f"Unclosed element <{name}>"
                raise self._error(msg, pos)


def _is_block_boundary(token: _Token | None) -> bool:
    if token is None:
        return True
    return token.kind == "tag" and token.name not in INLINE_ELEMENTS


def _trim_block_edges(tokens: list[_Token]) -> list[_Token]:
    trimmed: list[_Token] = []
    for index, token in enumerate(tokens):
        if token.kind == "text" and not token.preserve:
            previous = tokens[index - 1] if index > 0 else None
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            text = token.text
            if _is_block_boundary(previous):
                text = text.lstrip(_HTML_WHITESPACE)
            if _is_block_boundary(following):
                text = text.rstrip(_HTML_WHITESPACE)
            if not text:
                continue
            token = _Token("text", text)
        trimmed.append(token)
    return trimmed


def minify(markup: str, options: HtmlMinOptions) -> str:
    """Minify an HTML fragment.

    Args:
        markup: Fragment source
        options: Which minifications to apply

    Returns:
        Minified fragment

    Raises:
        HtmlSyntaxError: If an end tag has no matching start tag, elements
            overlap, an element is never closed, or the tokenizer rejects
            the markup

    Example:
        >>> minify("<p>\\n  Hello   <b>world</b>\\n</p><!-- x -->", HtmlMinOptions())
        '<p>Hello <b>world</b></p>'
    """
    parser = _MinifyingParser(options)
    try:
        parser.feed(markup)
        parser.finish()
    except AssertionError as e:
        # html.parser rejects unknown marked sections with AssertionError.
        msg = f"Unparsable markup: {e}"
        raise parser._error(msg) from e
    tokens = parser.tokens
    if options.collapse_whitespace:
        tokens = _trim_block_edges(tokens)
    return "".join(token.text for token in tokens)
