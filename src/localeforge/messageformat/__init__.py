"""Per-locale ICU MessageFormat engine.

One MessageFormat instance per locale. It parses message text against that
locale's CLDR plural categories, precompiles messages to JavaScript, and
renders the locale's plural rule function for the generated module:

    >>> mf = MessageFormat("de_DE")
    >>> mf.compile("{n, plural, one {# Datei} other {# Dateien}}")[:40]
    'function(d){return ""+MessageFormat.p(d,'

Python 3.13+. Depends on Babel (CLDR plural rules and their JavaScript form).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from localeforge.escaping import js_escape, quote
from localeforge.locale_utils import get_babel_locale, normalize_locale

from .ast import (
    Argument,
    Case,
    Message,
    Octothorpe,
    Plural,
    Select,
    SimpleFormat,
    Text,
)
from .compiler import precompile
from .parser import CATEGORY_ORDER, parse_message

if TYPE_CHECKING:
    from babel import Locale

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Engine
    "MessageFormat",
    "parse_message",
    "precompile",
    # AST
    "Message",
    "Text",
    "Argument",
    "Octothorpe",
    "SimpleFormat",
    "Case",
    "Select",
    "Plural",
    # Data
    "CATEGORY_ORDER",
]

logger = logging.getLogger(__name__)


class MessageFormat:
    """Message parser and compiler bound to one locale.

    Attributes:
        locale: Locale code as configured (e.g. "de_DE"); also the key the
            generated rule function is registered under

    Raises:
        LocalesConfigError: On construction, if Babel has no rules for the
            locale or its language
    """

    __slots__ = ("_babel_locale", "_cardinal", "_locale", "_ordinal")

    def __init__(self, locale: str) -> None:
        self._locale = normalize_locale(locale)
        self._babel_locale: Locale = get_babel_locale(self._locale)
        self._cardinal = frozenset(self._babel_locale.plural_form.tags)
        self._ordinal = frozenset(self._babel_locale.ordinal_form.tags)
        logger.debug(
            "MessageFormat for %s uses CLDR rules of %s (plural: %s; ordinal: %s)",
            self._locale,
            self._babel_locale,
            " ".join(self.plural_categories),
            " ".join(self.ordinal_categories),
        )

    def __repr__(self) -> str:
        return f"MessageFormat({self._locale!r})"

    @property
    def locale(self) -> str:
        """Locale code."""
        return self._locale

    @property
    def language(self) -> str:
        """Language part of the locale code ("de" for "de_DE")."""
        return self._locale.split("_", 1)[0]

    @property
    def plural_categories(self) -> tuple[str, ...]:
        """Cardinal categories in CLDR order, "other" included."""
        return tuple(c for c in CATEGORY_ORDER if c in self._cardinal or c == "other")

    @property
    def ordinal_categories(self) -> tuple[str, ...]:
        """Ordinal categories in CLDR order, "other" included."""
        return tuple(c for c in CATEGORY_ORDER if c in self._ordinal or c == "other")

    def parse(self, text: str) -> Message:
        """Parse message text with this locale's plural categories.

        Raises:
            MessageFormatSyntaxError: If the text is not a valid message
        """
        return parse_message(text, cardinal=self._cardinal, ordinal=self._ordinal)

    def precompile(self, message: Message) -> str:
        """JavaScript function source for a parsed message."""
        return precompile(message, self._locale)

    def compile(self, text: str) -> str:
        """Parse and precompile in one step.

        Raises:
            MessageFormatSyntaxError: If the text is not a valid message
        """
        return self.precompile(self.parse(text))

    def locale_source(self) -> str:
        """JavaScript registering this locale's plural rule function.

        The function takes the number and an ordinal flag and returns the
        CLDR category name.
        """
        # Lazy import: Babel loads CLDR data at import time; defer until needed
        from babel.plural import to_javascript  # noqa: PLC0415

        cardinal = to_javascript(self._babel_locale.plural_form)
        ordinal = to_javascript(self._babel_locale.ordinal_form)
        return (
            f"MessageFormat.locale[{quote(js_escape(self._locale))}]="
            f"function(n,ord){{if(ord){{return {ordinal}(n);}}"
            f"return {cardinal}(n);}};"
        )
