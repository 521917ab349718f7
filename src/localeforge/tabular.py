"""CSV bridge between message stores and translators.

Export writes one CSV per locale store:

    "ID","de_DE","files"
    "Save","Speichern","app/index.html,app/js/app.js"

Import reads any number of CSVs with one column per locale and updates the
existing stores in update-only mode: translations of known keys replace the
stored values, unknown keys are ignored. Imported text is sanitized like
extracted markup and must parse as a message for its locale.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from localeforge.diagnostics import log_error
from localeforge.errors import SourceSyntaxError
from localeforge.escaping import sanitize, text_content
from localeforge.store import MessageEntry, MessageStore, extend_messages

if TYPE_CHECKING:
    from localeforge.config import LocalesOptions
    from localeforge.messageformat import MessageFormat

__all__ = ["export_csv", "import_messages", "read_csv"]

logger = logging.getLogger(__name__)

type ImportedMessages = dict[str, dict[str, MessageEntry]]


def _field_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list | tuple):
        return ",".join(str(item) for item in value)
    return str(value)


def export_csv(store: MessageStore, locale: str, options: LocalesOptions) -> str:
    """Render a store as CSV text.

    Every field is wrapped in the encapsulator after passing through the
    configured escape function.

    Args:
        store: Message store of one locale
        locale: Locale name, used as the value column header
        options: CSV dialect, key label and extra fields

    Returns:
        CSV text; a header row plus one row per key in sorted order

    Example:
        >>> from localeforge.config import LocalesOptions
        >>> store = MessageStore({"Save": MessageEntry("Speichern", ["a.js"])})
        >>> export_csv(store, "de_DE", LocalesOptions())
        '"ID","de_DE","files"\\r\\n"Save","Speichern","a.js"\\r\\n'
    """
    escape = options.csv_escape
    enc = options.csv_encapsulator

    def row(fields: list[str]) -> str:
        cells = (f"{enc}{escape(text)}{enc}" for text in fields)
        return options.csv_delimiter.join(cells) + options.csv_line_end

    lines = [row([options.csv_key_label, locale, *options.csv_extra_fields])]
    for key in store.sorted_keys():
        entry = store[key]
        extra = [_field_text(entry.get_field(name)) for name in options.csv_extra_fields]
        lines.append(row([key, entry.value, *extra]))
    return "".join(lines)


def read_csv(
    text: str,
    engines: Mapping[str, MessageFormat],
    options: LocalesOptions,
    *,
    file: str | None = None,
) -> ImportedMessages:
    """Collect translations per locale from CSV text.

    For each locale in engines, a non-empty cell in that locale's column is
    sanitized, reduced to plain text when that loses nothing, and checked
    with the locale's parser. Invalid cells are logged and skipped.

    Args:
        text: CSV text with a header row
        engines: Message format engine per locale to import
        options: CSV dialect, key label and sanitizer options
        file: Source path, for error reports

    Returns:
        Mapping of locale to {key: entry}; locales without cells are absent
    """
    reader = csv.DictReader(
        io.StringIO(text, newline=""),
        delimiter=options.csv_delimiter,
        quotechar=options.csv_encapsulator,
    )
    imported: ImportedMessages = {}
    for row in reader:
        key = row.get(options.csv_key_label)
        if not key:
            continue
        for locale, engine in engines.items():
            value = row.get(locale)
            if not value:
                continue
            try:
                content = sanitize(key, value, options).content
                if not content:
                    continue
                if text_content(content) == value:
                    content = value
                engine.parse(content)
            except SourceSyntaxError as e:
                log_error(e, key, locale, file)
                continue
            imported.setdefault(locale, {})[key] = MessageEntry(value=content)
    for locale, messages in imported.items():
        logger.debug("Read %d %s translations from %s", len(messages), locale, file)
    return imported


def import_messages(
    store: MessageStore, messages: Mapping[str, MessageEntry]
) -> MessageStore:
    """Merge imported translations into a store in update-only mode."""
    for key, entry in messages.items():
        extend_messages(store, key, entry, update=True)
    return store
