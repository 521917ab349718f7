"""Exception hierarchy for localeforge.

Fatal configuration problems abort a task. Syntax errors in a single file or
a single message carry line/column information so the operator can locate
the offending string; callers log them and continue with the next item.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "HtmlSyntaxError",
    "LiteralDecodeError",
    "LocalesConfigError",
    "LocalesError",
    "MessageFormatSyntaxError",
    "ScriptSyntaxError",
    "SourceSyntaxError",
]


class LocalesError(Exception):
    """Base exception for all localeforge errors."""


class LocalesConfigError(LocalesError):
    """Fatal configuration error.

    Raised for missing locales, a missing destination path, a template or
    locale-rule file that does not exist, or a locale pattern that does not
    match a store path. Aborts the whole run.
    """


class SourceSyntaxError(LocalesError):
    """Malformed source text with an optional location.

    Attributes:
        line: 1-based line number (None if unknown)
        column: 1-based column number (None if unknown)
    """

    def __init__(
        self,
        message: str,
        *,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize SourceSyntaxError.

        Args:
            message: Human-readable error description
            line: 1-based line of the error
            column: 1-based column of the error
        """
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class HtmlSyntaxError(SourceSyntaxError):
    """Malformed markup (stray or mismatched end tag, unclosed element)."""


class ScriptSyntaxError(SourceSyntaxError):
    """Script source the tokenizer could not read."""


class MessageFormatSyntaxError(SourceSyntaxError):
    """ICU message text that does not parse under a locale's rules."""


class LiteralDecodeError(LocalesError):
    """A token that is not a valid JavaScript string literal."""
