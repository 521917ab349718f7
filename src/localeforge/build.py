"""Compile message stores into locale modules.

For every key of a store the compiler decides between three outputs:

    parameterized ("{" in the text)      -> precompiled function source
    static, translated (key != value)    -> quoted, escaped string literal
    static, untranslated (key == value)  -> omitted; the runtime falls back
                                            to the key itself

With wrap_static_translations, translated static texts are compiled to
functions as well, so the runtime can treat every entry uniformly.

The module text comes from a string.Template with the placeholders
$locale, $locale_name, $message_format_locale, $message_format_shared
and $translations.

Python 3.13+. Depends on Babel via localeforge.messageformat.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from string import Template
from typing import TYPE_CHECKING

from localeforge.constants import SHARED_RUNTIME_RESOURCE, TEMPLATE_RESOURCE
from localeforge.diagnostics import log_error
from localeforge.errors import LocalesConfigError, SourceSyntaxError
from localeforge.escaping import js_escape, quote, sanitize, text_content
from localeforge.locale_utils import substitute_locale

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions
    from localeforge.messageformat import MessageFormat
    from localeforge.store import MessageStore

__all__ = [
    "TranslationsMap",
    "compile_translations",
    "get_locale_template",
    "get_message_format_locale",
    "get_message_format_shared",
    "needs_translation_function",
    "render_module",
    "render_translations",
]

logger = logging.getLogger(__name__)

type TranslationsMap = dict[str, str]


def _read_resource(name: str) -> str:
    return resources.files("localeforge").joinpath("resources", name).read_text(
        encoding="utf-8"
    )


def _read_file(path: str, what: str) -> str:
    file = Path(path)
    if not file.is_file():
        msg = f"{what} {path} not found."
        raise LocalesConfigError(msg)
    return file.read_text(encoding="utf-8")


def get_locale_template(options: LocalesOptions) -> str:
    """Module template text (override file or the packaged template).

    Raises:
        LocalesConfigError: If the override file does not exist
    """
    if options.locale_template is None:
        return _read_resource(TEMPLATE_RESOURCE)
    return _read_file(options.locale_template, "Locale template")


def get_message_format_shared(options: LocalesOptions) -> str:
    """Shared runtime source (override file or the packaged include).

    Raises:
        LocalesConfigError: If the override file does not exist
    """
    if options.message_format_shared_file is None:
        return _read_resource(SHARED_RUNTIME_RESOURCE)
    return _read_file(options.message_format_shared_file, "MessageFormat shared file")


def get_message_format_locale(options: LocalesOptions, engine: MessageFormat) -> str:
    """Plural rule source for the engine's locale.

    Generated from CLDR data unless message_format_locale_file is set; in that
    file name the locale placeholder stands for the language code.

    Raises:
        LocalesConfigError: If the override file does not exist
    """
    if options.message_format_locale_file is None:
        return engine.locale_source()
    path = substitute_locale(
        options.message_format_locale_file, options.locale_placeholder, engine.language
    )
    return _read_file(path, "MessageFormat locale file")


def needs_translation_function(key: str, value: str, options: LocalesOptions) -> bool:
    """True if value must be compiled to a function instead of a literal."""
    return (options.wrap_static_translations and key != value) or "{" in value


def compile_translations(
    store: MessageStore,
    engine: MessageFormat,
    options: LocalesOptions,
    *,
    file: str | None = None,
) -> TranslationsMap:
    """Compile a store into a translations map.

    Keys are processed in sorted order. A key whose markup or message syntax
    is invalid is logged with its locale and file and left out; the other
    keys are unaffected.

    Args:
        store: Message store of one locale
        engine: Message format engine of the same locale
        options: Sanitizer and compiler options
        file: Store path, for error reports

    Returns:
        Mapping of quoted, escaped key to JavaScript value source
    """
    translations: TranslationsMap = {}
    for key in store.sorted_keys():
        value = store[key].value
        try:
            sanitized = sanitize(key, value, options, escape_key=True)
            content = sanitized.content
            # Keep the original value if sanitizing only escaped it.
            if text_content(content) == value:
                content = value
            if needs_translation_function(key, content, options):
                translations[quote(sanitized.key)] = engine.compile(content)
            elif key != value:
                translations[quote(sanitized.key)] = quote(js_escape(content))
        except SourceSyntaxError as e:
            log_error(e, key, engine.locale, file)
    logger.debug(
        "Compiled %d of %d messages for %s", len(translations), len(store), engine.locale
    )
    return translations


def render_translations(translations: Mapping[str, str]) -> str:
    """Render a translations map as a JavaScript object literal."""
    if not translations:
        return "{}"
    body = ",\n".join(f"        {key}: {value}" for key, value in translations.items())
    return "{\n" + body + "\n    }"


def render_module(
    template: str,
    *,
    locale: str,
    locale_name: str,
    message_format_locale: str,
    message_format_shared: str,
    translations: Mapping[str, str],
) -> str:
    """Fill the module template.

    Unknown "$" placeholders are left as they are, so templates may contain
    JavaScript that uses "$" itself.
    """
    return Template(template).safe_substitute(
        locale=js_escape(locale),
        locale_name=locale_name,
        message_format_locale=message_format_locale,
        message_format_shared=message_format_shared,
        translations=render_translations(translations),
    )
