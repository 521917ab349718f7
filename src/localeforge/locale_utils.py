"""Locale utilities.

Normalizes locale codes for Babel, looks up CLDR locales with caching, and
locates the locale name inside a store path.

Python 3.13+.
"""

from __future__ import annotations

import functools
import re
from typing import TYPE_CHECKING

from localeforge.errors import LocalesConfigError

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "get_babel_locale",
    "locale_from_path",
    "normalize_locale",
    "substitute_locale",
]


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to POSIX format for Babel.

    Example:
        >>> normalize_locale("en-US")
        'en_US'
        >>> normalize_locale("pt_BR")
        'pt_BR'
    """
    return locale_code.replace("-", "_")


@functools.lru_cache(maxsize=128)
def get_babel_locale(locale_code: str) -> Locale:
    """Get the Babel Locale for a locale code, falling back to its language.

    "en_XX" is not a CLDR locale, but "en" is; the language-level rules are
    what the generated module needs.

    Args:
        locale_code: Locale code (BCP-47 or POSIX format accepted)

    Returns:
        Babel Locale object

    Raises:
        LocalesConfigError: If neither the locale nor its language is known
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415
    from babel.core import UnknownLocaleError  # noqa: PLC0415

    normalized = normalize_locale(locale_code)
    candidates = [normalized]
    language = normalized.split("_", 1)[0]
    if language != normalized:
        candidates.append(language)
    for candidate in candidates:
        try:
            return Locale.parse(candidate)
        except (UnknownLocaleError, ValueError):
            continue
    msg = f"Message format rules for locale {locale_code} not found"
    raise LocalesConfigError(msg)


def locale_from_path(path: str, pattern: re.Pattern[str]) -> str:
    """Extract the locale name from a store path.

    Args:
        path: File path, e.g. "js/locale/en_US/i18n.json"
        pattern: Compiled locale pattern

    Returns:
        The first match of pattern in path

    Raises:
        LocalesConfigError: If the pattern does not match

    Example:
        >>> locale_from_path("js/locale/en_US/i18n.json", re.compile(r"\\w+(?=/[^/]+$)"))
        'en_US'
    """
    match = pattern.search(path.replace("\\", "/"))
    if not match or not match.group(0):
        msg = f"Regular expression {pattern.pattern} failed to match locale in path {path}."
        raise LocalesConfigError(msg)
    return match.group(0)


def substitute_locale(template: str, placeholder: str, locale: str) -> str:
    """Replace the locale placeholder in a path template.

    Example:
        >>> substitute_locale("locale/{locale}/i18n.json", "{locale}", "de_DE")
        'locale/de_DE/i18n.json'
    """
    return template.replace(placeholder, locale)
