"""Shared constants for localeforge.

Default option values live here so that config, extractors, and the CLI
agree on them without importing each other.

Python 3.13+. Zero external dependencies.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Locales
    "DEFAULT_LOCALES",
    "DEFAULT_LOCALE_NAME",
    "DEFAULT_LOCALE_PLACEHOLDER",
    "DEFAULT_LOCALE_PATTERN",
    # Extraction
    "DEFAULT_LOCALIZE_ATTRIBUTES",
    "DEFAULT_LOCALIZE_METHOD_IDENTIFIERS",
    "DEFAULT_HTML_FILE_PATTERN",
    "DEFAULT_SCRIPT_FILE_PATTERN",
    "DEFAULT_URL_PATTERN",
    # Persistence
    "DEFAULT_JSON_INDENT",
    "STORE_ENCODING",
    # CSV
    "DEFAULT_CSV_ENCAPSULATOR",
    "DEFAULT_CSV_DELIMITER",
    "DEFAULT_CSV_LINE_END",
    "DEFAULT_CSV_KEY_LABEL",
    "DEFAULT_CSV_EXTRA_FIELDS",
    # Resources
    "TEMPLATE_RESOURCE",
    "SHARED_RUNTIME_RESOURCE",
    # Limits
    "MAX_DEPTH",
]

# ============================================================================
# LOCALES
# ============================================================================

DEFAULT_LOCALES: tuple[str, ...] = ("en_US",)

# Name of the global object the generated module registers itself on.
DEFAULT_LOCALE_NAME: str = "i18n"

DEFAULT_LOCALE_PLACEHOLDER: str = "{locale}"

# Matches the locale name in a store path,
# e.g. "en_US" in js/locale/en_US/i18n.json
DEFAULT_LOCALE_PATTERN: str = r"\w+(?=/[^/]+$)"

# ============================================================================
# EXTRACTION
# ============================================================================

DEFAULT_LOCALIZE_ATTRIBUTES: tuple[str, ...] = ("localize",)

DEFAULT_LOCALIZE_METHOD_IDENTIFIERS: tuple[str, ...] = ("localize",)

DEFAULT_HTML_FILE_PATTERN: str = r"\.html$"

DEFAULT_SCRIPT_FILE_PATTERN: str = r"\.js$"

# ftp, http(s), mailto, anchors and message variables (href="{url}")
DEFAULT_URL_PATTERN: str = r"^((ftp|https?)://|mailto:|#|\{\w+\})"

# ============================================================================
# PERSISTENCE
# ============================================================================

DEFAULT_JSON_INDENT: int = 2

STORE_ENCODING: str = "utf-8"

# ============================================================================
# CSV
# ============================================================================

DEFAULT_CSV_ENCAPSULATOR: str = '"'
DEFAULT_CSV_DELIMITER: str = ","
DEFAULT_CSV_LINE_END: str = "\r\n"
DEFAULT_CSV_KEY_LABEL: str = "ID"
DEFAULT_CSV_EXTRA_FIELDS: tuple[str, ...] = ("files",)

# ============================================================================
# RESOURCES
# ============================================================================

# Packaged files under localeforge/resources/
TEMPLATE_RESOURCE: str = "i18n.js.tmpl"
SHARED_RUNTIME_RESOURCE: str = "messageformat.include.js"

# ============================================================================
# LIMITS
# ============================================================================

# Maximum nesting of select/plural blocks in one message. Bounds recursion
# in the parser and the generated function nesting.
MAX_DEPTH: int = 100
