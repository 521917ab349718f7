"""Task options and targets.

LocalesOptions carries every tunable of the four operations (update, build,
export, import). TaskTarget names the source globs and destination path
template of one operation. Both are frozen; construct them directly or load
them from a TOML file with load_config().

Config file layout::

    [options]
    locales = ["en_US", "de_DE"]
    purge_locales = true

    [update]
    src = ["app/**/*.html", "app/js/**/*.js"]
    dest = "app/js/locale/{locale}/i18n.json"

    [build]
    src = ["app/js/locale/*/i18n.json"]
    dest = "app/js/locale/{locale}/i18n.js"

Relative paths in a config file resolve against the file's directory.

Python 3.13+.
"""

from __future__ import annotations

import re
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from localeforge.constants import (
    DEFAULT_CSV_DELIMITER,
    DEFAULT_CSV_ENCAPSULATOR,
    DEFAULT_CSV_EXTRA_FIELDS,
    DEFAULT_CSV_KEY_LABEL,
    DEFAULT_CSV_LINE_END,
    DEFAULT_HTML_FILE_PATTERN,
    DEFAULT_JSON_INDENT,
    DEFAULT_LOCALE_NAME,
    DEFAULT_LOCALE_PATTERN,
    DEFAULT_LOCALE_PLACEHOLDER,
    DEFAULT_LOCALES,
    DEFAULT_LOCALIZE_ATTRIBUTES,
    DEFAULT_LOCALIZE_METHOD_IDENTIFIERS,
    DEFAULT_SCRIPT_FILE_PATTERN,
    DEFAULT_URL_PATTERN,
)
from localeforge.errors import LocalesConfigError

__all__ = [
    "OPERATIONS",
    "HtmlMinOptions",
    "LocalesConfig",
    "LocalesOptions",
    "TaskTarget",
    "csv_escape",
    "load_config",
]

OPERATIONS: tuple[str, ...] = ("update", "build", "export", "import")


def csv_escape(text: str) -> str:
    """Default CSV escape: double every embedded double quote."""
    return text.replace('"', '""')


@dataclass(frozen=True, slots=True)
class HtmlMinOptions:
    """Minifier switches applied to extracted markup.

    Attributes:
        remove_comments: Drop HTML comments
        collapse_whitespace: Collapse whitespace runs and trim block edges
    """

    remove_comments: bool = True
    collapse_whitespace: bool = True


@dataclass(frozen=True, slots=True)
class LocalesOptions:
    """Immutable options shared by all operations.

    Constructing ``LocalesOptions()`` with no arguments gives the defaults.
    Regular-expression options are given as pattern strings and compiled
    once in __post_init__.

    Attributes:
        locales: Locales to update, build and import
        localize_attributes: HTML attributes marking translatable content.
            The first one also enables content mode (inner markup as message).
        localize_method_identifiers: Script function names to scan for
        html_file_pattern: Filename pattern selecting the HTML extractor
        script_file_pattern: Filename pattern selecting the script extractor
        locale_pattern: Pattern extracting the locale from a store path
        locale_placeholder: Placeholder replaced by the locale in dest paths
        locale_name: Global object name used by the generated module
        json_flat_format: Persist stores as {key: value}
        wrap_static_translations: Compile translated constants to functions
        purge_locales: Drop stale keys on a full update
        message_format_locale_file: Override for the plural-rule source;
            the placeholder is replaced by the language code
        message_format_shared_file: Override for the shared runtime include
        locale_template: Override for the generated module template
        url_pattern: URLs allowed to survive sanitization
        htmlmin: Minifier options for content, None disables minification
        htmlmin_keys: Minifier options for keys, None leaves keys untouched
        json_indent: Indentation of persisted stores
        csv_encapsulator: CSV quote character
        csv_delimiter: CSV field separator
        csv_line_end: CSV row terminator
        csv_escape: Escape applied to every exported CSV field
        csv_key_label: Header of the key column
        csv_extra_fields: Entry fields exported after the value column
        default_messages_source: Globs of seed stores merged before extraction
    """

    locales: tuple[str, ...] = DEFAULT_LOCALES
    localize_attributes: tuple[str, ...] = DEFAULT_LOCALIZE_ATTRIBUTES
    localize_method_identifiers: tuple[str, ...] = DEFAULT_LOCALIZE_METHOD_IDENTIFIERS
    html_file_pattern: str = DEFAULT_HTML_FILE_PATTERN
    script_file_pattern: str = DEFAULT_SCRIPT_FILE_PATTERN
    locale_pattern: str = DEFAULT_LOCALE_PATTERN
    locale_placeholder: str = DEFAULT_LOCALE_PLACEHOLDER
    locale_name: str = DEFAULT_LOCALE_NAME
    json_flat_format: bool = False
    wrap_static_translations: bool = False
    purge_locales: bool = True
    message_format_locale_file: str | None = None
    message_format_shared_file: str | None = None
    locale_template: str | None = None
    url_pattern: str = DEFAULT_URL_PATTERN
    htmlmin: HtmlMinOptions | None = field(default_factory=HtmlMinOptions)
    htmlmin_keys: HtmlMinOptions | None = None
    json_indent: int | None = DEFAULT_JSON_INDENT
    csv_encapsulator: str = DEFAULT_CSV_ENCAPSULATOR
    csv_delimiter: str = DEFAULT_CSV_DELIMITER
    csv_line_end: str = DEFAULT_CSV_LINE_END
    csv_escape: Callable[[str], str] = csv_escape
    csv_key_label: str = DEFAULT_CSV_KEY_LABEL
    csv_extra_fields: tuple[str, ...] = DEFAULT_CSV_EXTRA_FIELDS
    default_messages_source: tuple[str, ...] = ()
    _compiled: dict[str, re.Pattern[str]] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        """Validate options and compile patterns.

        Raises:
            LocalesConfigError: If no locales are defined, no localize
                attribute is defined, or a pattern does not compile.
        """
        if not self.locales:
            msg = "No locales defined"
            raise LocalesConfigError(msg)
        if not self.localize_attributes:
            msg = "No localize attributes defined"
            raise LocalesConfigError(msg)
        for name in (
            "html_file_pattern",
            "script_file_pattern",
            "locale_pattern",
            "url_pattern",
        ):
            try:
                self._compiled[name] = re.compile(getattr(self, name))
            except re.error as e:
                msg = f"Invalid regular expression for {name}: {e}"
                raise LocalesConfigError(msg) from e

    @property
    def html_file_regexp(self) -> re.Pattern[str]:
        """Compiled html_file_pattern."""
        return self._compiled["html_file_pattern"]

    @property
    def script_file_regexp(self) -> re.Pattern[str]:
        """Compiled script_file_pattern."""
        return self._compiled["script_file_pattern"]

    @property
    def locale_regexp(self) -> re.Pattern[str]:
        """Compiled locale_pattern."""
        return self._compiled["locale_pattern"]

    @property
    def url_regexp(self) -> re.Pattern[str]:
        """Compiled url_pattern."""
        return self._compiled["url_pattern"]


@dataclass(frozen=True, slots=True)
class TaskTarget:
    """Sources and destination of one operation.

    Attributes:
        src: Glob patterns of the input files
        dest: Output path template, usually containing the locale placeholder
    """

    src: tuple[str, ...] = ()
    dest: str = ""


@dataclass(frozen=True, slots=True)
class LocalesConfig:
    """Options plus one target per operation."""

    options: LocalesOptions = field(default_factory=LocalesOptions)
    targets: Mapping[str, TaskTarget] = field(default_factory=dict)

    def target(self, operation: str) -> TaskTarget:
        """Get the target of an operation (empty target when unconfigured)."""
        return self.targets.get(operation, TaskTarget())


_TUPLE_OPTIONS = frozenset(
    {
        "locales",
        "localize_attributes",
        "localize_method_identifiers",
        "csv_extra_fields",
        "default_messages_source",
    }
)
_PATH_OPTIONS = frozenset(
    {"message_format_locale_file", "message_format_shared_file", "locale_template"}
)
_HTMLMIN_OPTIONS = frozenset({"htmlmin", "htmlmin_keys"})


def _resolve(base: Path, path: str) -> str:
    candidate = Path(path)
    if candidate.is_absolute():
        return path
    return str(base / candidate)


def _htmlmin_from_toml(name: str, value: Any) -> HtmlMinOptions | None:
    if value is False:
        return None
    if value is True:
        return HtmlMinOptions()
    if isinstance(value, dict):
        try:
            return HtmlMinOptions(**value)
        except TypeError as e:
            msg = f"Invalid {name} options: {e}"
            raise LocalesConfigError(msg) from e
    msg = f"Option {name} must be a boolean or a table"
    raise LocalesConfigError(msg)


def _options_from_toml(raw: Mapping[str, Any], base: Path) -> LocalesOptions:
    known = {f.name for f in fields(LocalesOptions) if f.init and f.name != "csv_escape"}
    kwargs: dict[str, Any] = {}
    for name, value in raw.items():
        if name not in known:
            msg = f"Unknown option '{name}'"
            raise LocalesConfigError(msg)
        if name in _TUPLE_OPTIONS:
            if isinstance(value, str):
                value = [value]
            value = tuple(value)
            if name == "default_messages_source":
                value = tuple(_resolve(base, v) for v in value)
        elif name in _PATH_OPTIONS:
            value = _resolve(base, value)
        elif name in _HTMLMIN_OPTIONS:
            value = _htmlmin_from_toml(name, value)
        kwargs[name] = value
    return LocalesOptions(**kwargs)


def _target_from_toml(operation: str, raw: Mapping[str, Any], base: Path) -> TaskTarget:
    src = raw.get("src", ())
    if isinstance(src, str):
        src = [src]
    dest = raw.get("dest", "")
    if not isinstance(dest, str):
        msg = f"[{operation}] dest must be a string"
        raise LocalesConfigError(msg)
    return TaskTarget(
        src=tuple(_resolve(base, s) for s in src),
        dest=_resolve(base, dest) if dest else "",
    )


def load_config(path: str | Path) -> LocalesConfig:
    """Load options and targets from a TOML file.

    Args:
        path: Config file path

    Returns:
        LocalesConfig with paths resolved against the file's directory

    Raises:
        LocalesConfigError: If the file is missing, invalid TOML, or holds
            unknown options or tables
    """
    config_path = Path(path)
    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Config file {config_path} not found"
        raise LocalesConfigError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid config file {config_path}: {e}"
        raise LocalesConfigError(msg) from e

    base = config_path.parent
    unknown = set(data) - {"options", *OPERATIONS}
    if unknown:
        msg = f"Unknown config tables: {', '.join(sorted(unknown))}"
        raise LocalesConfigError(msg)

    options = _options_from_toml(data.get("options", {}), base)
    targets = {
        operation: _target_from_toml(operation, data[operation], base)
        for operation in OPERATIONS
        if operation in data
    }
    return LocalesConfig(options=options, targets=targets)
