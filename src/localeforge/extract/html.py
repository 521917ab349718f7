"""HTML extractor.

Finds elements carrying a localize attribute (or its data- alias):

    <a localize-title="Open the menu" href="#">...</a>   attribute mode
    <p localize>Hello <b>{name}</b>!</p>                 content mode

In attribute mode the attribute value is both key and message. Content mode
is only available for the first configured attribute: the element's inner
markup, exactly as written in the document, is the key, and its minified and
sanitized form becomes the message.

Python 3.13+. Depends on BeautifulSoup.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from bs4 import Tag

from localeforge.diagnostics import log_error
from localeforge.errors import HtmlSyntaxError
from localeforge.escaping import sanitize
from localeforge.markup import parse_fragment
from localeforge.markup.sanitizer import FRAGMENT_FORMATTER
from localeforge.store import MessageEntry

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions

__all__ = ["parse_html"]

logger = logging.getLogger(__name__)

# Rest of a tag after its "<"; quoted attribute values may contain ">".
_TAG_REST = r"""(?:"[^"]*"|'[^']*'|[^'">])*>"""
_START_TAG_REST = re.compile(_TAG_REST)


def _attribute_value(element: Tag, name: str) -> str:
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return value


def _carries(element: Tag, attr: str) -> bool:
    return element.has_attr(attr) or element.has_attr(f"data-{attr}")


def _shift(error: HtmlSyntaxError, element: Tag) -> HtmlSyntaxError:
    """Re-anchor a fragment-relative error at the element's source line."""
    if element.sourceline is None or error.line is None:
        return error
    return HtmlSyntaxError(
        error.message,
        line=element.sourceline + error.line - 1,
        column=error.column,
    )


def _line_starts(text: str) -> list[int]:
    return [0, *(match.end() for match in re.finditer("\n", text))]


def _inner_source(text: str, line_starts: list[int], element: Tag) -> str | None:
    """Inner markup of element as written in text.

    The start tag is found through the builder's source position; the end
    tag is the matching one for the element's name, counting nested
    elements of the same name and skipping comments.

    Returns:
        The source between start and end tag, or None when the end tag is
        omitted or the element cannot be located
    """
    if element.sourceline is None or element.sourcepos is None:
        return None
    start = line_starts[element.sourceline - 1] + element.sourcepos
    if text[start : start + 1] != "<":
        return None
    head = _START_TAG_REST.match(text, start + 1)
    if head is None or head.group().endswith("/>"):
        return None
    tags = re.compile(
        rf"<!--.*?-->|<(/?){re.escape(element.name)}(?=[\s/>]){_TAG_REST}",
        re.IGNORECASE | re.DOTALL,
    )
    depth = 1
    for match in tags.finditer(text, head.end()):
        slash = match.group(1)
        if slash is None:
            continue
        if slash:
            depth -= 1
            if depth == 0:
                return text[head.end() : match.start()]
        elif not match.group().endswith("/>"):
            depth += 1
    return None


def parse_html(path: str, text: str, options: LocalesOptions) -> Iterator[tuple[str, MessageEntry]]:
    """Extract translatable messages from an HTML document.

    Args:
        path: File path recorded as provenance
        text: Document source
        options: Localize attributes, minifier and URL allow-list

    Yields:
        (key, entry) pairs, one per occurrence

    Raises:
        HtmlSyntaxError: If the tokenizer rejects the document

    Example:
        >>> from localeforge.config import LocalesOptions
        >>> [(k, e.value) for k, e in parse_html("a.html", "<p localize>Hi {n}</p>", LocalesOptions())]
        [('Hi {n}', 'Hi {n}')]
    """
    attrs = options.localize_attributes
    default_attr = attrs[0]
    soup = parse_fragment(text)
    elements = soup.find_all(lambda tag: any(_carries(tag, attr) for attr in attrs))
    logger.debug("Found %d localized elements in %s", len(elements), path)
    line_starts = _line_starts(text)
    for element in elements:
        for attr in attrs:
            # Attribute values arrive entity-decoded from the tree builder.
            value = _attribute_value(element, attr) or _attribute_value(element, f"data-{attr}")
            if value:
                key = value
            elif attr == default_attr and _carries(element, default_attr):
                value = _inner_source(text, line_starts, element)
                if value is None:
                    value = element.decode_contents(formatter=FRAGMENT_FORMATTER)
                try:
                    sanitized = sanitize(value, value, options)
                except HtmlSyntaxError as e:
                    log_error(_shift(e, element), value, None, path)
                    continue
                key, value = sanitized.key, sanitized.content
            if value:
                yield key, MessageEntry(value=value, files=[path])
