"""Message format parser.

Grammar (ICU MessageFormat):

    message  := (text | argument | "#")*
    argument := "{" name "}"
              | "{" name "," "select" "," cases "}"
              | "{" name "," ("plural" | "selectordinal") "," ["offset:" N] cases "}"
              | "{" name "," type ["," style] "}"
    cases    := (key "{" message "}")+

Whitespace is allowed between the tokens of an argument. "#" is a token only
inside the cases of a plural (and of any select nested in one).

Quoting follows ICU: "''" is one apostrophe; an apostrophe directly before
"{", "}" or a special "#" starts a quoted literal that runs to the next
single apostrophe. Any other apostrophe is literal text:

    I said '{'hi'}'    -> I said {hi}
    don't              -> don't
    It''s {name}       -> It's {name}

Plural keys are checked against the CLDR categories of the locale; every
select and plural needs an "other" case.

Python 3.13+. Zero external dependencies.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from localeforge.constants import MAX_DEPTH
from localeforge.cursor import Cursor, ParseResult
from localeforge.errors import MessageFormatSyntaxError

from .ast import (
    Argument,
    Case,
    Element,
    Message,
    Octothorpe,
    Plural,
    Select,
    SimpleFormat,
    Text,
)

__all__ = ["CATEGORY_ORDER", "parse_message"]

# CLDR plural categories in their canonical order (used in error messages).
CATEGORY_ORDER: tuple[str, ...] = ("zero", "one", "two", "few", "many", "other")

_WORD_STOP = frozenset("{},'#")
_ASCII_DIGITS = frozenset("0123456789")
_EXACT_KEY = re.compile(r"=\d+(?:\.\d+)?")
_OFFSET = "offset:"


@dataclass(frozen=True, slots=True)
class _Context:
    """Per-parse settings threaded through the recursive rules."""

    cardinal: frozenset[str]
    ordinal: frozenset[str]
    max_depth: int


def _error(message: str, cursor: Cursor) -> MessageFormatSyntaxError:
    line, column = cursor.compute_line_col()
    return MessageFormatSyntaxError(message, line=line, column=column)


def _expect(cursor: Cursor, char: str) -> Cursor:
    if cursor.is_eof:
        msg = f"Expected '{char}' but reached end of message"
        raise _error(msg, cursor)
    if cursor.current != char:
        msg = f"Expected '{char}' but found '{cursor.current}'"
        raise _error(msg, cursor)
    return cursor.advance()


def _parse_word(cursor: Cursor, what: str) -> ParseResult[str]:
    """Parse a run of characters up to whitespace or a syntax character."""
    start = cursor.pos
    while (
        not cursor.is_eof
        and not cursor.current.isspace()
        and cursor.current not in _WORD_STOP
    ):
        cursor = cursor.advance()
    if cursor.pos == start:
        found = "end of message" if cursor.is_eof else f"'{cursor.current}'"
        msg = f"Expected {what} but found {found}"
        raise _error(msg, cursor)
    return ParseResult(cursor.slice_from(start), cursor)


def _parse_quoted(cursor: Cursor, in_plural: bool) -> ParseResult[str]:
    """Parse text starting at an apostrophe."""
    following = cursor.peek(1)
    if following == "'":
        return ParseResult("'", cursor.advance(2))
    if following is None or not (
        following in "{}" or (following == "#" and in_plural)
    ):
        return ParseResult("'", cursor.advance())

    start = cursor
    cursor = cursor.advance()
    chars: list[str] = []
    while True:
        if cursor.is_eof:
            raise _error("Unterminated quoted literal", start)
        char = cursor.current
        if char == "'":
            if cursor.peek(1) == "'":
                chars.append("'")
                cursor = cursor.advance(2)
                continue
            return ParseResult("".join(chars), cursor.advance())
        chars.append(char)
        cursor = cursor.advance()


def _parse_elements(
    cursor: Cursor, context: _Context, depth: int, in_plural: bool
) -> ParseResult[Message]:
    """Parse message elements up to end of input or an unmatched "}"."""
    elements: list[Element] = []
    text: list[str] = []

    def flush() -> None:
        if text:
            elements.append(Text("".join(text)))
            text.clear()

    while not cursor.is_eof:
        char = cursor.current
        if char == "}":
            break
        if char == "{":
            flush()
            argument = _parse_argument(cursor, context, depth, in_plural)
            elements.append(argument.value)
            cursor = argument.cursor
        elif char == "#" and in_plural:
            flush()
            elements.append(Octothorpe())
            cursor = cursor.advance()
        elif char == "'":
            quoted = _parse_quoted(cursor, in_plural)
            text.append(quoted.value)
            cursor = quoted.cursor
        else:
            text.append(char)
            cursor = cursor.advance()
    flush()
    return ParseResult(Message(tuple(elements)), cursor)


def _describe_keys(categories: Iterable[str]) -> str:
    names = [f"'{c}'" for c in CATEGORY_ORDER if c in categories]
    return ", ".join(names)


def _parse_cases(
    cursor: Cursor,
    context: _Context,
    depth: int,
    in_plural: bool,
    name: str,
    categories: frozenset[str] | None,
) -> ParseResult[tuple[Case, ...]]:
    """Parse "key {message}" pairs up to the closing brace (not consumed).

    Args:
        categories: Valid plural categories, or None for select (any key)
    """
    cases: list[Case] = []
    seen: set[str] = set()
    while True:
        cursor = cursor.skip_whitespace()
        if cursor.is_eof or cursor.current == "}":
            break
        key_cursor = cursor
        key = _parse_word(cursor, "case key")
        if categories is not None and not (
            key.value in categories or _EXACT_KEY.fullmatch(key.value)
        ):
            msg = (
                f"Invalid key '{key.value}' for argument '{name}'. Valid plural "
                f"keys for this locale are {_describe_keys(categories)}, "
                f"and explicit keys like '=0'"
            )
            raise _error(msg, key_cursor)
        if key.value in seen:
            msg = f"Duplicate key '{key.value}' for argument '{name}'"
            raise _error(msg, key_cursor)
        seen.add(key.value)

        cursor = _expect(key.cursor.skip_whitespace(), "{")
        body = _parse_elements(cursor, context, depth, in_plural)
        cursor = _expect(body.cursor, "}")
        cases.append(Case(key.value, body.value))

    if "other" not in seen:
        msg = f"No 'other' form found in selector '{name}'"
        raise _error(msg, cursor)
    return ParseResult(tuple(cases), cursor)


def _parse_offset(cursor: Cursor) -> ParseResult[int]:
    if cursor.slice_ahead(len(_OFFSET)) != _OFFSET:
        return ParseResult(0, cursor)
    cursor = cursor.advance(len(_OFFSET)).skip_whitespace()
    start = cursor.pos
    while not cursor.is_eof and cursor.current in _ASCII_DIGITS:
        cursor = cursor.advance()
    if cursor.pos == start:
        raise _error("Expected offset value", cursor)
    return ParseResult(int(cursor.slice_from(start)), cursor.skip_whitespace())


def _parse_argument(
    cursor: Cursor, context: _Context, depth: int, in_plural: bool
) -> ParseResult[Element]:
    """Parse a placeholder starting at "{"."""
    opening = cursor
    name = _parse_word(cursor.advance().skip_whitespace(), "argument name")
    cursor = name.cursor.skip_whitespace()
    if not cursor.is_eof and cursor.current == "}":
        return ParseResult(Argument(name.value), cursor.advance())

    cursor = _expect(cursor, ",").skip_whitespace()
    kind = _parse_word(cursor, "argument type")
    cursor = kind.cursor.skip_whitespace()

    if kind.value not in ("select", "plural", "selectordinal"):
        style: str | None = None
        if not cursor.is_eof and cursor.current == ",":
            cursor = cursor.advance()
            start = cursor.pos
            while not cursor.is_eof and cursor.current not in "{}":
                cursor = cursor.advance()
            style = cursor.slice_from(start).strip() or None
        cursor = _expect(cursor, "}")
        return ParseResult(SimpleFormat(name.value, kind.value, style), cursor)

    if depth >= context.max_depth:
        msg = f"Maximum nesting depth ({context.max_depth}) exceeded"
        raise _error(msg, opening)

    cursor = _expect(cursor, ",").skip_whitespace()
    if kind.value == "select":
        cases = _parse_cases(cursor, context, depth + 1, in_plural, name.value, None)
        node: Element = Select(name.value, cases.value)
    else:
        ordinal = kind.value == "selectordinal"
        offset = _parse_offset(cursor)
        categories = context.ordinal if ordinal else context.cardinal
        cases = _parse_cases(
            offset.cursor, context, depth + 1, True, name.value, categories
        )
        node = Plural(name.value, cases.value, offset=offset.value, ordinal=ordinal)
    return ParseResult(node, _expect(cases.cursor, "}"))


def parse_message(
    source: str,
    *,
    cardinal: Iterable[str] = (),
    ordinal: Iterable[str] = (),
    max_depth: int = MAX_DEPTH,
) -> Message:
    """Parse message text into an AST.

    Args:
        source: Message text
        cardinal: CLDR cardinal categories of the locale ("other" implied)
        ordinal: CLDR ordinal categories of the locale ("other" implied)
        max_depth: Maximum select/plural nesting

    Returns:
        Parsed message

    Raises:
        MessageFormatSyntaxError: If the text is not a valid message

    Example:
        >>> msg = parse_message("{n, plural, one {# file} other {# files}}", cardinal={"one"})
        >>> msg.elements[0].cases[0].key
        'one'
    """
    context = _Context(
        cardinal=frozenset(cardinal) | {"other"},
        ordinal=frozenset(ordinal) | {"other"},
        max_depth=max_depth,
    )
    result = _parse_elements(Cursor(source), context, depth=0, in_plural=False)
    if not result.cursor.is_eof:
        raise _error("Unexpected '}'", result.cursor)
    return result.value
