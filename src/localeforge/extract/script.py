"""Script extractor.

Scans the token stream of a JavaScript file for calls of the configured
translation functions with a string literal as first argument:

    localize('Save')                 -> key "Save"
    i18n.localize("Hi {name}", data) -> key "Hi {name}"
    localize(label)                  -> warning, nothing extracted

Only this fixed call-site shape is recognized; no data flow is followed.

Python 3.13+. Depends on tree-sitter with the JavaScript grammar.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser

from localeforge.errors import LiteralDecodeError, ScriptSyntaxError
from localeforge.extract.literals import decode_string_literal
from localeforge.store import MessageEntry

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions

__all__ = ["Token", "parse_script", "tokenize"]

logger = logging.getLogger(__name__)

_IDENTIFIER_NODES = frozenset(
    {"identifier", "property_identifier", "shorthand_property_identifier"}
)
_COMMENT_NODES = frozenset({"comment", "html_comment"})
# Named nodes reported as one token although they have children.
_ATOMIC_NODES = frozenset({"string", "regex"})


@dataclass(frozen=True, slots=True)
class Token:
    """One lexical token.

    Attributes:
        type: "Identifier", "String", "Punctuator", "Keyword" or the
            grammar's node type for anything else
        value: Source text of the token
        line: 1-based line
        column: 1-based column (characters, not bytes)
    """

    type: str
    value: str
    line: int
    column: int


@functools.lru_cache(maxsize=1)
def _get_parser() -> Parser:
    """Build the JavaScript parser once (grammar loading is not free)."""
    import tree_sitter_javascript  # noqa: PLC0415

    return Parser(Language(tree_sitter_javascript.language()))


def _token_type(node: Node) -> str:
    if node.type in _IDENTIFIER_NODES:
        return "Identifier"
    if node.type == "string":
        return "String"
    if not node.is_named:
        return "Keyword" if node.type.isidentifier() else "Punctuator"
    return node.type


def _position(source: bytes, node: Node) -> tuple[int, int]:
    row, byte_col = node.start_point
    line_start = node.start_byte - byte_col
    col = len(source[line_start : node.start_byte].decode("utf-8", "replace"))
    return row + 1, col + 1


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_error(root: Node) -> Node | None:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def tokenize(text: str) -> list[Token]:
    """Tokenize JavaScript source.

    Comments are skipped; string literals are single tokens.

    Raises:
        ScriptSyntaxError: If the source does not parse

    Example:
        >>> [t.value for t in tokenize("localize('Save'); // done")]
        ['localize', '(', "'Save'", ')', ';']
    """
    source = text.encode("utf-8")
    tree = _get_parser().parse(source)
    root = tree.root_node
    if root.has_error:
        error_node = _first_error(root) or root
        line, column = _position(source, error_node)
        what = "Missing token" if error_node.is_missing else "Unexpected token"
        msg = f"{what} at {line}:{column}"
        raise ScriptSyntaxError(msg, line=line, column=column)

    tokens: list[Token] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in _COMMENT_NODES:
            continue
        if node.type in _ATOMIC_NODES or node.child_count == 0:
            if node.end_byte > node.start_byte:
                line, column = _position(source, node)
                value = source[node.start_byte : node.end_byte].decode("utf-8")
                tokens.append(Token(_token_type(node), value, line, column))
            continue
        stack.extend(reversed(node.children))
    return tokens


def parse_script(
    path: str, text: str, options: LocalesOptions
) -> Iterator[tuple[str, MessageEntry]]:
    """Extract translatable messages from JavaScript source.

    Args:
        path: File path recorded as provenance
        text: Script source
        options: Translation function identifiers

    Yields:
        (key, entry) pairs, one per recognized call

    Raises:
        ScriptSyntaxError: If the source does not parse; nothing is yielded
    """
    identifiers = options.localize_method_identifiers
    tokens = tokenize(text)
    for index, token in enumerate(tokens[:-3]):
        if not (
            token.type == "Identifier"
            and token.value in identifiers
            and tokens[index + 1].type == "Punctuator"
            and tokens[index + 1].value == "("
        ):
            continue
        argument, closing = tokens[index + 2], tokens[index + 3]
        if (
            argument.type == "String"
            and closing.type == "Punctuator"
            and closing.value in (")", ",")
        ):
            try:
                key = decode_string_literal(argument.value)
            except LiteralDecodeError as e:
                logger.warning(
                    "Unable to decode locale string from %s:%d:%d: %s",
                    path,
                    argument.line,
                    argument.column,
                    e,
                )
                continue
            yield key, MessageEntry(value=key, files=[path])
        else:
            logger.warning(
                "Unable to parse locale string from %s:%d:%d.",
                path,
                argument.line,
                argument.column,
            )
