"""Allow-list HTML sanitizer.

Translator-supplied markup ends up inside generated script files, so only
formatting and structural elements survive. Unknown elements are unwrapped
(their text is kept); script-like elements are removed with their content.
URL-bearing attributes survive only when the URL predicate accepts them.

Python 3.13+. Depends on BeautifulSoup.
"""

from __future__ import annotations

from collections.abc import Callable

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, ProcessingInstruction, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from localeforge.errors import HtmlSyntaxError

__all__ = [
    "ALLOWED_ATTRIBUTES",
    "ALLOWED_ELEMENTS",
    "DROPPED_ELEMENTS",
    "FRAGMENT_FORMATTER",
    "URL_ATTRIBUTES",
    "parse_fragment",
    "sanitize_html",
]

UrlPredicate = Callable[[str], bool]

ALLOWED_ELEMENTS = frozenset(
    {
        "a", "abbr", "acronym", "address", "b", "bdi", "bdo", "big",
        "blockquote", "br", "caption", "center", "cite", "code", "col",
        "colgroup", "dd", "del", "dfn", "div", "dl", "dt", "em", "figcaption",
        "figure", "font", "h1", "h2", "h3", "h4", "h5", "h6", "hr", "i", "img",
        "ins", "kbd", "label", "li", "mark", "ol", "p", "pre", "q", "s",
        "samp", "small", "span", "strike", "strong", "sub", "sup", "table",
        "tbody", "td", "tfoot", "th", "thead", "time", "tr", "tt", "u", "ul",
        "var", "wbr",
    }
)

# Removed together with everything inside them.
DROPPED_ELEMENTS = frozenset(
    {
        "applet", "embed", "frame", "frameset", "iframe", "link", "meta",
        "noembed", "noframes", "noscript", "object", "script", "style",
        "template", "title",
    }
)

ALLOWED_ATTRIBUTES = frozenset(
    {
        "abbr", "align", "alt", "axis", "bgcolor", "border", "cellpadding",
        "cellspacing", "char", "charoff", "cite", "clear", "color", "cols",
        "colspan", "compact", "coords", "datetime", "dir", "disabled", "face",
        "headers", "height", "href", "hreflang", "hspace", "lang", "noshade",
        "nowrap", "rel", "rev", "rows", "rowspan", "rules", "scope", "shape",
        "size", "span", "src", "start", "summary", "target", "title", "type",
        "valign", "value", "vspace", "width",
    }
)

URL_ATTRIBUTES = frozenset({"href", "src", "cite", "longdesc", "usemap", "background"})

# Escapes only "&", "<", ">" (and quotes in attributes); non-ASCII text is
# written as-is. Void elements are written as <br>, not <br/>.
FRAGMENT_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


def parse_fragment(markup: str) -> BeautifulSoup:
    """Build a tree for markup with the html.parser builder.

    Raises:
        HtmlSyntaxError: If the tokenizer rejects the markup
    """
    try:
        return BeautifulSoup(markup, "html.parser")
    except (ParserRejectedMarkup, AssertionError) as e:
        msg = f"Unparsable markup: {e}"
        raise HtmlSyntaxError(msg) from e


def _clean_attributes(tag: Tag, url_allowed: UrlPredicate) -> None:
    for name in list(tag.attrs):
        value = tag.attrs[name]
        if isinstance(value, list):
            value = " ".join(value)
        lowered = name.lower()
        if lowered not in ALLOWED_ATTRIBUTES:
            del tag.attrs[name]
        elif lowered in URL_ATTRIBUTES and not url_allowed(value):
            del tag.attrs[name]
        else:
            tag.attrs[name] = value


def sanitize_html(markup: str, url_allowed: UrlPredicate) -> str:
    """Sanitize an HTML fragment against the element/attribute allow-list.

    Args:
        markup: Fragment to sanitize
        url_allowed: Predicate deciding whether a URL attribute value may stay

    Returns:
        Sanitized fragment; text is re-escaped so it never contains a bare
        "<", ">" or "&"

    Raises:
        HtmlSyntaxError: If the tokenizer rejects the markup

    Example:
        >>> import re
        >>> ok = re.compile(r"^https?://").match
        >>> sanitize_html('<a href="javascript:x()" title="t">Hi</a><script>x()</script>', ok)
        '<a title="t">Hi</a>'
    """
    soup = parse_fragment(markup)
    for node in list(soup.descendants):
        if isinstance(node, (Comment, Declaration, Doctype, ProcessingInstruction)):
            node.extract()
    for tag in soup.find_all(True):
        if tag.decomposed:
            continue
        name = tag.name.lower()
        if name in DROPPED_ELEMENTS:
            tag.decompose()
        elif name not in ALLOWED_ELEMENTS:
            _clean_attributes(tag, url_allowed)
            tag.unwrap()
        else:
            _clean_attributes(tag, url_allowed)
    return soup.decode(formatter=FRAGMENT_FORMATTER)
