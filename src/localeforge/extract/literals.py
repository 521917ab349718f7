"""Decoder for JavaScript string literal tokens.

Turns the source text of a string literal token (quotes included) into the
string it denotes. The token is decoded character by character; nothing is
ever evaluated.

Supported escape sequences:
    \\b \\f \\n \\r \\t \\v      control characters
    \\0                    NUL (when not followed by a digit)
    \\1 .. \\377            legacy octal escapes
    \\xHH                  two hex digits
    \\uHHHH, \\u{H...}      UTF-16 code unit / code point
    \\<line terminator>    line continuation (produces nothing)
    \\<other>              the character itself

Surrogate pairs written as two \\u escapes are joined into one character.

Python 3.13+. Zero external dependencies.
"""

from localeforge.cursor import Cursor
from localeforge.errors import LiteralDecodeError

__all__ = ["decode_string_literal"]

_QUOTES = frozenset({'"', "'"})
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_OCTAL_DIGITS = frozenset("01234567")
_LINE_TERMINATORS = frozenset({"\n", "\r", "\u2028", "\u2029"})
_SINGLE_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
_MAX_CODE_POINT = 0x10FFFF


def _error(message: str, cursor: Cursor) -> LiteralDecodeError:
    line, col = cursor.compute_line_col()
    return LiteralDecodeError(f"{line}:{col}: {message}")


def _read_hex(cursor: Cursor, count: int) -> tuple[int, Cursor]:
    digits = cursor.slice_ahead(count)
    if len(digits) < count or not all(c in _HEX_DIGITS for c in digits):
        msg = f"Invalid hexadecimal escape (expected {count} hex digits)"
        raise _error(msg, cursor)
    return int(digits, 16), cursor.advance(count)


def _read_unicode_escape(cursor: Cursor) -> tuple[str, Cursor]:
    # cursor is just past "\u"
    if cursor.peek() == "{":
        end = cursor.source.find("}", cursor.pos)
        digits = cursor.source[cursor.pos + 1 : end] if end >= 0 else ""
        if not digits or not all(c in _HEX_DIGITS for c in digits):
            msg = "Invalid code point escape"
            raise _error(msg, cursor)
        code_point = int(digits, 16)
        if code_point > _MAX_CODE_POINT:
            msg = f"Code point out of range: U+{digits}"
            raise _error(msg, cursor)
        return chr(code_point), cursor.advance(len(digits) + 2)
    code_unit, cursor = _read_hex(cursor, 4)
    return chr(code_unit), cursor


def _read_octal_escape(cursor: Cursor) -> tuple[str, Cursor]:
    # cursor is at the first octal digit
    first = cursor.current
    max_len = 3 if first in "0123" else 2
    digits = first
    cursor = cursor.advance()
    while len(digits) < max_len and cursor.peek() in _OCTAL_DIGITS:
        digits += cursor.current
        cursor = cursor.advance()
    return chr(int(digits, 8)), cursor


def _read_escape(cursor: Cursor) -> tuple[str, Cursor]:  # noqa: PLR0911
    # cursor is just past the backslash
    if cursor.is_eof:
        msg = "Unexpected end of literal in escape sequence"
        raise _error(msg, cursor)
    char = cursor.current
    if char in _SINGLE_ESCAPES:
        return _SINGLE_ESCAPES[char], cursor.advance()
    if char == "\r":
        cursor = cursor.advance()
        if cursor.peek() == "\n":
            cursor = cursor.advance()
        return "", cursor
    if char in _LINE_TERMINATORS:
        return "", cursor.advance()
    if char == "0" and cursor.peek(1) not in _OCTAL_DIGITS | {"8", "9"}:
        return "\0", cursor.advance()
    if char in _OCTAL_DIGITS:
        return _read_octal_escape(cursor)
    if char == "x":
        code, cursor = _read_hex(cursor.advance(), 2)
        return chr(code), cursor
    if char == "u":
        return _read_unicode_escape(cursor.advance())
    return char, cursor.advance()


def _join_surrogates(text: str) -> str:
    try:
        return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError as e:
        msg = "Lone surrogate in string literal"
        raise LiteralDecodeError(msg) from e


def decode_string_literal(token: str) -> str:
    """Decode a single- or double-quoted JavaScript string literal.

    Args:
        token: Literal source text, including the surrounding quotes

    Returns:
        The denoted string

    Raises:
        LiteralDecodeError: If token is not exactly one valid string literal

    Example:
        >>> decode_string_literal("'Hello {name}!'")
        'Hello {name}!'
        >>> decode_string_literal('"Tab\\\\there \\\\u00e4 \\\\x41"')
        'Tab\\there ä A'
    """
    cursor = Cursor(token)
    if cursor.is_eof or cursor.current not in _QUOTES:
        msg = "Expected opening quote"
        raise _error(msg, cursor)
    quote_char = cursor.current
    cursor = cursor.advance()
    parts: list[str] = []
    has_escape = False
    while True:
        if cursor.is_eof:
            msg = "Unterminated string literal"
            raise _error(msg, cursor)
        char = cursor.current
        if char == quote_char:
            cursor = cursor.advance()
            break
        if char == "\\":
            decoded, cursor = _read_escape(cursor.advance())
            parts.append(decoded)
            has_escape = True
        elif char in ("\n", "\r"):
            msg = "Unescaped line break in string literal"
            raise _error(msg, cursor)
        else:
            parts.append(char)
            cursor = cursor.advance()
    if not cursor.is_eof:
        msg = "Unexpected text after string literal"
        raise _error(msg, cursor)
    value = "".join(parts)
    return _join_surrogates(value) if has_escape else value
