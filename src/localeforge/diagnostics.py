"""Operator-facing error reporting.

Per-key failures (sanitize, compile, validate) never abort a run; they are
reported through log_error() with enough context to find the string again.

Python 3.13+. Zero external dependencies.
"""

import logging

from localeforge.errors import SourceSyntaxError

__all__ = ["format_error_report", "log_error"]

logger = logging.getLogger(__name__)


def format_error_report(
    error: Exception,
    key: str,
    locale: str | None,
    file: str | None,
) -> str:
    """Build the multi-line report for a failed key.

    Args:
        error: The exception raised while processing the key
        key: Message key being processed
        locale: Locale being processed (None during extraction)
        file: Source or store file the key came from

    Returns:
        Report text, one labelled field per line

    Example:
        >>> err = SourceSyntaxError("Unexpected '}'", line=1, column=7)
        >>> print(format_error_report(err, "a}", "de_DE", "de.json"))
        SourceSyntaxError:
        Error:  Unexpected '}'
        Column: 7
        Line:   1
        Key:    a}
        Locale: de_DE
        File:   de.json
    """
    line = column = None
    if isinstance(error, SourceSyntaxError):
        line, column = error.line, error.column
    escaped_key = key.replace("\n", "\\n")
    return "\n".join(
        [
            f"{type(error).__name__}:",
            f"Error:  {error}",
            f"Column: {column}",
            f"Line:   {line}",
            f"Key:    {escaped_key}",
            f"Locale: {locale}",
            f"File:   {file}",
        ]
    )


def log_error(
    error: Exception,
    key: str,
    locale: str | None = None,
    file: str | None = None,
) -> None:
    """Log a per-key failure as a warning; the caller skips the key."""
    logger.warning("%s", format_error_report(error, key, locale, file))
