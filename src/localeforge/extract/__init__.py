"""Message extraction from HTML and script sources.

parse_source() selects the extractor by file name and merges what it finds
into a shared store. Syntax errors in a whole file are logged and the file
contributes nothing; problems with single occurrences are logged by the
extractors themselves.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import TYPE_CHECKING

from localeforge.errors import HtmlSyntaxError, ScriptSyntaxError
from localeforge.store import MessageEntry, extend_messages

from .html import parse_html
from .literals import decode_string_literal
from .script import parse_script, tokenize

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions

__all__ = [
    "decode_string_literal",
    "parse_html",
    "parse_script",
    "parse_source",
    "tokenize",
]

logger = logging.getLogger(__name__)


def parse_source(
    path: str,
    text: str,
    messages: MutableMapping[str, MessageEntry],
    options: LocalesOptions,
) -> bool:
    """Extract messages from one source file into messages.

    Args:
        path: File path (selects the extractor, recorded as provenance)
        text: File contents
        messages: Accumulating store, modified in place
        options: Extraction options

    Returns:
        True if the file was scanned, False if it was skipped
    """
    if options.html_file_regexp.search(path):
        found = parse_html(path, text, options)
    elif options.script_file_regexp.search(path):
        found = parse_script(path, text, options)
    else:
        logger.warning("Source file %s not matched as HTML or JS file.", path)
        return False
    try:
        # Materialize first so a syntax error leaves messages untouched.
        extracted = list(found)
    except (HtmlSyntaxError, ScriptSyntaxError) as e:
        logger.error("%s: %s", path, e)
        return False
    for key, entry in extracted:
        extend_messages(messages, key, entry)
    return True
