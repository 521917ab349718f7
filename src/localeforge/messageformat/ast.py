"""Message format AST node definitions.

    Hello {name}!                      Text, Argument, Text
    {count, plural, one {# item} other {# items}}
                                       Plural(cases=(Case("one", ...), ...))
    {gender, select, male {He} other {They}}
                                       Select
    {total, number, percent}           SimpleFormat

Python 3.13+. Zero external dependencies.
"""

from dataclasses import dataclass

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    "Message",
    "Text",
    "Argument",
    "Octothorpe",
    "SimpleFormat",
    "Case",
    "Select",
    "Plural",
    "Element",
]


@dataclass(frozen=True, slots=True)
class Text:
    """Literal text (escapes already resolved)."""

    value: str


@dataclass(frozen=True, slots=True)
class Argument:
    """Plain variable substitution: {name}."""

    name: str


@dataclass(frozen=True, slots=True)
class Octothorpe:
    """"#" inside a plural case: the plural value minus the offset."""


@dataclass(frozen=True, slots=True)
class SimpleFormat:
    """Typed argument: {name, type} or {name, type, style}."""

    name: str
    format: str
    style: str | None = None


@dataclass(frozen=True, slots=True)
class Case:
    """One branch of a select or plural: key {message}."""

    key: str
    message: "Message"


@dataclass(frozen=True, slots=True)
class Select:
    """{name, select, key {...} ... other {...}}"""

    name: str
    cases: tuple[Case, ...]


@dataclass(frozen=True, slots=True)
class Plural:
    """{name, plural|selectordinal, [offset:N] key {...} ... other {...}}

    Attributes:
        name: Argument name
        cases: Branches; keys are "=N" or CLDR plural categories
        offset: Subtracted from the value before category selection
        ordinal: True for selectordinal
    """

    name: str
    cases: tuple[Case, ...]
    offset: int = 0
    ordinal: bool = False


type Element = Text | Argument | Octothorpe | SimpleFormat | Select | Plural


@dataclass(frozen=True, slots=True)
class Message:
    """Sequence of elements; the root of every parsed message."""

    elements: tuple[Element, ...]
