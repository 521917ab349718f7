"""Per-locale message store and the merge algorithm.

A store maps message keys (the source-language text) to entries holding the
translated value and the source files the key was seen in. Stores persist as
JSON objects with sorted keys so that repeated runs produce stable diffs.

Two on-disk entry shapes are accepted:

    "Save": "Speichern"                                  legacy flat shape
    "Save": {"value": "Speichern", "files": ["a.js"]}    structured shape

Both normalize to MessageEntry at the read boundary. The flat shape is only
ever produced again at serialization time, when flat output is requested.

Merge precedence within one update run: seed defaults, then fresh
extraction (create and extend), then optional import (update-only).

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from localeforge.constants import DEFAULT_JSON_INDENT, STORE_ENCODING
from localeforge.errors import LocalesError

__all__ = [
    "MessageEntry",
    "MessageStore",
    "StoreFormatError",
    "extend_messages",
]


class StoreFormatError(LocalesError):
    """Store file that is not a JSON object of entries."""


@dataclass(slots=True)
class MessageEntry:
    """One message of a store.

    Attributes:
        value: Translated (or default) message text
        files: Sorted, unique source paths the key was extracted from
        extra: Any further fields found on disk, kept verbatim
    """

    value: str
    files: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def coerce(cls, raw: MessageEntry | str | Mapping[str, Any]) -> MessageEntry:
        """Normalize either on-disk shape (or an entry) to a fresh MessageEntry.

        Raises:
            StoreFormatError: If raw is neither a string nor an object
        """
        if isinstance(raw, MessageEntry):
            return raw.copy()
        if isinstance(raw, str):
            return cls(value=raw)
        if isinstance(raw, Mapping):
            extra = {k: v for k, v in raw.items() if k not in ("value", "files")}
            value = raw.get("value", "")
            files = raw.get("files") or []
            if isinstance(files, str):
                files = [files]
            return cls(
                value="" if value is None else str(value),
                files=[str(f) for f in files],
                extra=extra,
            )
        msg = f"Invalid message entry: {raw!r}"
        raise StoreFormatError(msg)

    def copy(self) -> MessageEntry:
        """Copy with independent files list and extra mapping."""
        return MessageEntry(value=self.value, files=list(self.files), extra=dict(self.extra))

    def get_field(self, name: str) -> Any:
        """Look up value, files, or an extra field by name (None if absent)."""
        if name == "value":
            return self.value
        if name == "files":
            return self.files
        return self.extra.get(name)

    def to_json(self) -> dict[str, Any]:
        """Structured on-disk shape."""
        return {"value": self.value, "files": list(self.files), **self.extra}


class MessageStore(MutableMapping[str, MessageEntry]):
    """Mapping of message key to MessageEntry for one locale."""

    __slots__ = ("_messages",)

    def __init__(self, messages: Mapping[str, MessageEntry] | None = None) -> None:
        self._messages: dict[str, MessageEntry] = dict(messages or {})

    def __getitem__(self, key: str) -> MessageEntry:
        return self._messages[key]

    def __setitem__(self, key: str, entry: MessageEntry) -> None:
        self._messages[key] = entry

    def __delitem__(self, key: str) -> None:
        del self._messages[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return f"MessageStore({self._messages!r})"

    def sorted_keys(self) -> list[str]:
        """Keys in ascending order (the persisted order)."""
        return sorted(self._messages)

    @classmethod
    def from_json(cls, data: Any) -> MessageStore:
        """Build a store from parsed JSON, normalizing both entry shapes.

        Raises:
            StoreFormatError: If data is not an object or holds invalid entries
        """
        if not isinstance(data, Mapping):
            msg = "Message store must be a JSON object"
            raise StoreFormatError(msg)
        return cls({key: MessageEntry.coerce(raw) for key, raw in data.items()})

    def to_json(
        self,
        *,
        flat: bool = False,
        keys: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """Sorted JSON-ready mapping.

        Args:
            flat: Emit bare value strings instead of entry objects
            keys: Restrict output to these keys (default: all keys)
        """
        selected = self._messages.keys() if keys is None else keys
        result: dict[str, Any] = {}
        for key in sorted(k for k in selected if k in self._messages):
            entry = self._messages[key]
            result[key] = entry.value if flat else entry.to_json()
        return result

    @classmethod
    def load(cls, path: str | Path) -> MessageStore:
        """Read a store file.

        Raises:
            OSError: If the file cannot be read
            StoreFormatError: If the file is not a valid store
        """
        text = Path(path).read_text(encoding=STORE_ENCODING)
        return cls.loads(text, source=str(path))

    @classmethod
    def loads(cls, text: str, *, source: str = "<string>") -> MessageStore:
        """Parse store JSON text.

        Raises:
            StoreFormatError: If text is not a valid store
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {source}: {e}"
            raise StoreFormatError(msg) from e
        return cls.from_json(data)

    def dumps(
        self,
        *,
        flat: bool = False,
        indent: int | None = DEFAULT_JSON_INDENT,
        keys: Iterable[str] | None = None,
    ) -> str:
        """Serialize to JSON text with sorted keys and a trailing newline."""
        data = self.to_json(flat=flat, keys=keys)
        return json.dumps(data, indent=indent, ensure_ascii=False) + "\n"

    def dump(
        self,
        path: str | Path,
        *,
        flat: bool = False,
        indent: int | None = DEFAULT_JSON_INDENT,
        keys: Iterable[str] | None = None,
    ) -> None:
        """Write the store, creating parent directories as needed."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            self.dumps(flat=flat, indent=indent, keys=keys),
            encoding=STORE_ENCODING,
        )


def extend_messages(
    messages: MutableMapping[str, MessageEntry],
    key: str,
    entry: MessageEntry | str | Mapping[str, Any],
    update: bool = False,
) -> MutableMapping[str, MessageEntry]:
    """Merge one entry into a store.

    Absent keys are inserted, unless update is set (import mode never
    creates keys). Present keys get the incoming files unioned into their
    file list, or adopt the incoming list when they have none; update mode
    also overwrites the value. The file list is left sorted and unique.

    Synchronous and non-yielding, so concurrent file completions on one
    event loop can call it on a shared store without losing updates.

    Args:
        messages: Store to modify in place
        key: Message key
        entry: Incoming entry in either on-disk shape
        update: Update-only mode

    Returns:
        The same store, for chaining

    Example:
        >>> store = MessageStore()
        >>> _ = extend_messages(store, "Save", MessageEntry("Save", ["b.js"]))
        >>> _ = extend_messages(store, "Save", MessageEntry("Save", ["a.html"]))
        >>> store["Save"].files
        ['a.html', 'b.js']
    """
    incoming = MessageEntry.coerce(entry)
    original = messages.get(key)
    if original is None:
        if update:
            return messages
        incoming.files = sorted(dict.fromkeys(incoming.files))
        messages[key] = incoming
        return messages

    if not isinstance(original, MessageEntry):
        # Flat entries assigned directly bypass the read boundary.
        original = MessageEntry.coerce(original)
        messages[key] = original
    if original.files:
        for file in incoming.files:
            if file not in original.files:
                original.files.append(file)
    else:
        original.files = list(dict.fromkeys(incoming.files))
    if update:
        original.value = incoming.value
    original.files.sort()
    return messages
