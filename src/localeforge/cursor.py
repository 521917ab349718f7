"""Position in a source string, for the hand-written parsers.

The JavaScript string literal decoder and the message format parser both
walk their input with a Cursor. A cursor never changes; moving returns a new
one, so a parse rule can keep its start position for error reports and
backtracking costs nothing.

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass

__all__ = ["Cursor", "ParseResult"]


@dataclass(frozen=True, slots=True)
class Cursor:
    """Read position in source.

    Example:
        >>> start = Cursor("{n}")
        >>> start.current, start.advance().current
        ('{', 'n')
        >>> start.advance(3).is_eof
        True
    """

    source: str
    pos: int = 0

    @property
    def is_eof(self) -> bool:
        """True once every character has been consumed."""
        return self.pos >= len(self.source)

    @property
    def current(self) -> str:
        """Character under the cursor.

        Raises:
            EOFError: If the cursor is past the last character
        """
        if self.is_eof:
            msg = f"No character at end of input (position {self.pos})"
            raise EOFError(msg)
        return self.source[self.pos]

    def peek(self, offset: int = 0) -> str | None:
        """Character offset positions ahead, None past the end."""
        index = self.pos + offset
        return self.source[index] if index < len(self.source) else None

    def advance(self, count: int = 1) -> "Cursor":
        """Cursor count characters further on, clamped to the end."""
        return Cursor(self.source, min(self.pos + count, len(self.source)))

    def slice_ahead(self, n: int) -> str:
        """Up to n characters from the cursor on, without moving."""
        return self.source[self.pos : self.pos + n]

    def slice_from(self, start_pos: int) -> str:
        """Text between start_pos and the cursor."""
        return self.source[start_pos : self.pos]

    def skip_whitespace(self) -> "Cursor":
        """Cursor at the next non-whitespace character (or the end)."""
        pos = self.pos
        source = self.source
        while pos < len(source) and source[pos].isspace():
            pos += 1
        return self if pos == self.pos else Cursor(source, pos)

    def compute_line_col(self) -> tuple[int, int]:
        """1-based (line, column) of the cursor.

        Example:
            >>> Cursor("ab\\ncd", 4).compute_line_col()
            (2, 2)
        """
        line_start = self.source.rfind("\n", 0, self.pos) + 1
        line = self.source.count("\n", 0, self.pos) + 1
        return line, self.pos - line_start + 1


@dataclass(frozen=True, slots=True)
class ParseResult[T]:
    """Value produced by a parse rule and the cursor just after it."""

    value: T
    cursor: Cursor
