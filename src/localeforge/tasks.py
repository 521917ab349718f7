"""The four operations: update, build, export and import.

    update  sources (HTML, JS)  -> per-locale JSON stores
    build   JSON stores         -> per-locale JavaScript modules
    export  JSON stores         -> per-locale CSV files
    import  CSV files           -> JSON stores (update-only)

File reads fan out as one coroutine per file inside an asyncio.TaskGroup,
which is also the completion barrier. Parsing and merging run synchronously
on the event loop once a read resolves, so merges into the shared working
set never interleave. A failing file is logged inside its own coroutine and
never cancels its siblings; fatal configuration errors are raised before the
fan-out starts. Output files are written after the barrier, one at a time.

Python 3.13+.
"""

from __future__ import annotations

import asyncio
import glob
import logging
import os
from collections.abc import Callable, Coroutine, Iterable, Sequence
from pathlib import Path
from typing import Any

from localeforge.build import (
    compile_translations,
    get_locale_template,
    get_message_format_locale,
    get_message_format_shared,
    render_module,
)
from localeforge.config import LocalesConfig, LocalesOptions, TaskTarget
from localeforge.constants import STORE_ENCODING
from localeforge.errors import LocalesConfigError
from localeforge.extract import parse_source
from localeforge.locale_utils import locale_from_path, substitute_locale
from localeforge.messageformat import MessageFormat
from localeforge.store import MessageStore, StoreFormatError, extend_messages
from localeforge.tabular import export_csv, import_messages, read_csv

__all__ = ["LocalesTask", "expand_sources"]

logger = logging.getLogger(__name__)

_GLOB_CHARS = frozenset("*?[")


def expand_sources(patterns: Iterable[str]) -> list[str]:
    """Expand glob patterns and plain paths into existing files.

    Globs expand recursively ("**") in sorted order; a plain path that does
    not exist is reported and dropped. Duplicates are removed, keeping the
    first occurrence.
    """
    files: dict[str, None] = {}
    for pattern in patterns:
        if _GLOB_CHARS.intersection(pattern):
            for match in sorted(glob.glob(pattern, recursive=True)):
                if os.path.isfile(match):
                    files.setdefault(match)
        elif os.path.isfile(pattern):
            files.setdefault(pattern)
        else:
            logger.warning("Source file %s not found.", pattern)
    return list(files)


def _read_text(path: str) -> str:
    return Path(path).read_text(encoding=STORE_ENCODING)


def _write_text(path: str, text: str) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding=STORE_ENCODING)


async def _read_all(paths: Sequence[str]) -> dict[str, str]:
    """Read files concurrently; unreadable files are logged and left out."""
    texts: dict[str, str] = {}

    async def read(path: str) -> None:
        try:
            texts[path] = await asyncio.to_thread(_read_text, path)
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Unable to read %s: %s", path, e)

    async with asyncio.TaskGroup() as group:
        for path in paths:
            group.create_task(read(path))
    # Completion order is arbitrary; hand results back in source order.
    return {path: texts[path] for path in paths if path in texts}


class LocalesTask:
    """Runs operations against one configuration.

    Each operation takes optional explicit files which replace the
    configured sources for that run.

    Example:
        >>> from localeforge.config import LocalesConfig, TaskTarget
        >>> config = LocalesConfig(targets={"update": TaskTarget(
        ...     src=("app/**/*.html",), dest="locale/{locale}/i18n.json")})
        >>> task = LocalesTask(config)
        >>> task.run("update")  # doctest: +SKIP
    """

    __slots__ = ("_config",)

    def __init__(self, config: LocalesConfig) -> None:
        self._config = config

    @property
    def options(self) -> LocalesOptions:
        """Options of the configuration."""
        return self._config.options

    def run(self, operation: str, files: Sequence[str] | None = None) -> None:
        """Run one operation to completion on a fresh event loop.

        Raises:
            LocalesConfigError: On unknown operations and fatal configuration errors
        """
        operations: dict[str, Callable[..., Coroutine[Any, Any, None]]] = {
            "update": self.update,
            "build": self.build,
            "export": self.export,
            "import": self.import_,
        }
        if operation not in operations:
            msg = f"Unknown operation '{operation}'"
            raise LocalesConfigError(msg)
        asyncio.run(operations[operation](files))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _target(self, operation: str) -> TaskTarget:
        return self._config.target(operation)

    @staticmethod
    def _destination(target: TaskTarget) -> str:
        if not target.dest:
            msg = "Missing destination file path."
            raise LocalesConfigError(msg)
        return target.dest

    def _locale_path(self, dest: str, locale: str) -> str:
        return substitute_locale(dest, self.options.locale_placeholder, locale)

    def _sources(self, target: TaskTarget, files: Sequence[str] | None) -> list[str]:
        return expand_sources(target.src if files is None else files)

    async def _load_seeds(self, messages: MessageStore) -> None:
        """Merge default message stores into the working set."""
        paths = expand_sources(self.options.default_messages_source)
        for path, text in (await _read_all(paths)).items():
            try:
                seed = MessageStore.loads(text, source=path)
            except StoreFormatError as e:
                logger.error("%s", e)
                continue
            for key, entry in seed.items():
                extend_messages(messages, key, entry)
            logger.info("Parsed locales from %s.", path)

    async def _scan(self, paths: Sequence[str], messages: MessageStore) -> set[str]:
        """Extract all sources into messages.

        Returns:
            Files that were read and scanned without a file-level failure
        """
        scanned: set[str] = set()

        async def scan(path: str) -> None:
            try:
                text = await asyncio.to_thread(_read_text, path)
            except (OSError, UnicodeDecodeError) as e:
                logger.error("Unable to read %s: %s", path, e)
                return
            if parse_source(path, text, messages, self.options):
                scanned.add(os.path.normpath(path))
                logger.info("Parsed locales from %s.", path)

        async with asyncio.TaskGroup() as group:
            for path in paths:
                group.create_task(scan(path))
        return scanned

    def _engines(self, locales: Iterable[str]) -> dict[str, MessageFormat]:
        return {locale: MessageFormat(locale) for locale in locales}

    def _store_locales(self, paths: Sequence[str]) -> dict[str, str]:
        regexp = self.options.locale_regexp
        return {path: locale_from_path(path, regexp) for path in paths}

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def update(self, files: Sequence[str] | None = None) -> None:
        """Extract messages and merge them into every locale store.

        Seed stores are merged first, then the scanned sources. Each locale
        store keeps its values and gains the new keys and file references.
        With purge_locales, keys not seen in this run are dropped, but only
        when the run scanned every configured source file.

        Raises:
            LocalesConfigError: If no destination is configured
            StoreFormatError: If an existing store is corrupt
        """
        options = self.options
        target = self._target("update")
        dest = self._destination(target)
        configured = expand_sources(target.src)
        sources = configured if files is None else expand_sources(files)

        messages = MessageStore()
        await self._load_seeds(messages)
        scanned = await self._scan(sources, messages)
        purge = (
            options.purge_locales
            and bool(scanned)
            and {os.path.normpath(p) for p in configured} <= scanned
        )
        if options.purge_locales and not purge:
            logger.info("Not purging locales: only a subset of the sources was scanned.")

        for locale in options.locales:
            path = self._locale_path(dest, locale)
            exists = os.path.isfile(path)
            if exists:
                store = MessageStore.loads(await asyncio.to_thread(_read_text, path), source=path)
                logger.info("Parsed locales from %s.", path)
            else:
                store = MessageStore()
            for key, entry in messages.items():
                extend_messages(store, key, entry)
            text = store.dumps(
                flat=options.json_flat_format,
                indent=options.json_indent,
                keys=messages.keys() if purge else None,
            )
            await asyncio.to_thread(_write_text, path, text)
            logger.info("%s locale file %s.", "Updated" if exists else "Created", path)

    async def build(self, files: Sequence[str] | None = None) -> None:
        """Compile every locale store into a JavaScript module.

        Raises:
            LocalesConfigError: If no destination is configured, a locale
                cannot be derived from a store path, or a template or rule
                file is missing
        """
        options = self.options
        target = self._target("build")
        dest = self._destination(target)
        sources = self._sources(target, files)
        locales = self._store_locales(sources)
        engines = self._engines(dict.fromkeys(locales.values()))
        template = get_locale_template(options)
        shared = get_message_format_shared(options)
        rules = {
            locale: get_message_format_locale(options, engine)
            for locale, engine in engines.items()
        }

        for path, text in (await _read_all(sources)).items():
            locale = locales[path]
            try:
                store = MessageStore.loads(text, source=path)
            except StoreFormatError as e:
                logger.error("%s", e)
                continue
            translations = compile_translations(store, engines[locale], options, file=path)
            logger.info("Parsed locales from %s.", path)
            module = render_module(
                template,
                locale=locale,
                locale_name=options.locale_name,
                message_format_locale=rules[locale],
                message_format_shared=shared,
                translations=translations,
            )
            dest_file = self._locale_path(dest, locale)
            await asyncio.to_thread(_write_text, dest_file, module)
            logger.info("Updated locale file %s.", dest_file)

    async def export(self, files: Sequence[str] | None = None) -> None:
        """Write one CSV per locale store.

        Raises:
            LocalesConfigError: If no destination is configured or a locale
                cannot be derived from a store path
        """
        options = self.options
        target = self._target("export")
        dest = self._destination(target)
        sources = self._sources(target, files)
        locales = self._store_locales(sources)

        for path, text in (await _read_all(sources)).items():
            locale = locales[path]
            try:
                store = MessageStore.loads(text, source=path)
            except StoreFormatError as e:
                logger.error("%s", e)
                continue
            logger.info("Parsed locales from %s.", path)
            dest_file = self._locale_path(dest, locale)
            await asyncio.to_thread(_write_text, dest_file, export_csv(store, locale, options))
            logger.info("Exported locales to %s.", dest_file)

    async def import_(self, files: Sequence[str] | None = None) -> None:
        """Merge translations from CSV files into the existing stores.

        Only keys already present in a store are updated. A locale whose
        store does not exist is skipped with a warning.

        Raises:
            LocalesConfigError: If no destination is configured or a locale
                has no plural rules
        """
        options = self.options
        target = self._target("import")
        dest = self._destination(target)
        sources = self._sources(target, files)
        if not sources:
            logger.warning("No import source file found.")
            return
        engines = self._engines(options.locales)

        for path, text in (await _read_all(sources)).items():
            imported = read_csv(text, engines, options, file=path)
            logger.info("Parsed locales from %s.", path)
            for locale, messages in imported.items():
                store_path = self._locale_path(dest, locale)
                if not os.path.isfile(store_path):
                    logger.warning("Import target file %s not found.", store_path)
                    continue
                try:
                    store = MessageStore.loads(
                        await asyncio.to_thread(_read_text, store_path), source=store_path
                    )
                except StoreFormatError as e:
                    logger.warning("%s", e)
                    continue
                import_messages(store, messages)
                text_out = store.dumps(flat=options.json_flat_format, indent=options.json_indent)
                await asyncio.to_thread(_write_text, store_path, text_out)
                logger.info("Updated locale file %s.", store_path)
