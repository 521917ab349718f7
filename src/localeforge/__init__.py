"""localeforge - Extraction, merging and compilation of translatable messages.

Scans HTML and JavaScript sources for text marked for translation, keeps one
JSON message store per locale, compiles the stores into JavaScript locale
modules with ICU MessageFormat support, and round-trips the stores through
CSV for translators.

Public API:
    LocalesTask - Runs the update, build, export and import operations
    LocalesOptions - Immutable options shared by all operations
    LocalesConfig, TaskTarget - Sources and destination per operation
    load_config - Load a LocalesConfig from a TOML file
    MessageStore, MessageEntry - Per-locale message store
    extend_messages - The merge algorithm
    MessageFormat - Per-locale message parser and compiler

Exceptions:
    LocalesError - Base exception class
    LocalesConfigError - Fatal configuration errors
    SourceSyntaxError - Malformed markup, script or message text

Submodules:
    localeforge.extract - HTML and script extractors
    localeforge.escaping - Escaping and sanitizing of message text
    localeforge.build - Store to module compilation
    localeforge.tabular - CSV export and import
    localeforge.cli - Command line interface
"""

from .config import HtmlMinOptions, LocalesConfig, LocalesOptions, TaskTarget, load_config
from .errors import (
    HtmlSyntaxError,
    LiteralDecodeError,
    LocalesConfigError,
    LocalesError,
    MessageFormatSyntaxError,
    ScriptSyntaxError,
    SourceSyntaxError,
)
from .messageformat import MessageFormat
from .store import MessageEntry, MessageStore, StoreFormatError, extend_messages
from .tasks import LocalesTask

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("localeforge")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "HtmlMinOptions",
    "HtmlSyntaxError",
    "LiteralDecodeError",
    "LocalesConfig",
    "LocalesConfigError",
    "LocalesError",
    "LocalesOptions",
    "LocalesTask",
    "MessageEntry",
    "MessageFormat",
    "MessageFormatSyntaxError",
    "MessageStore",
    "ScriptSyntaxError",
    "SourceSyntaxError",
    "StoreFormatError",
    "TaskTarget",
    "__version__",
    "extend_messages",
    "load_config",
]
