"""Message AST to JavaScript compiler.

Each message becomes a function of one argument object:

    Hello {name}!
    -> function(d){return "Hello "+MessageFormat.v(d,"name")+"!";}

    {n, plural, one {# file} other {# files}}
    -> function(d){return MessageFormat.p(d,"n",0,"en",false,
           {"one":function(n){return MessageFormat.n(n)+" file";},
            "other":function(n){return MessageFormat.n(n)+" files";}});}

The helpers (v, n, s, p, f) are defined by the shared runtime include. Case
functions of a select are closures, so "#" in a select nested inside a
plural still refers to the plural's value.

All string literals go through js_escape(), so the output is safe inside an
HTML script block.

Python 3.13+. Zero external dependencies.
"""

from localeforge.escaping import js_escape, quote

from .ast import (
    Argument,
    Case,
    Element,
    Message,
    Octothorpe,
    Plural,
    Select,
    SimpleFormat,
    Text,
)

__all__ = ["precompile"]


def _string(text: str) -> str:
    return quote(js_escape(text))


def _compile_cases(cases: tuple[Case, ...], locale: str, params: str) -> str:
    parts = [
        f"{_string(case.key)}:function({params}){{return "
        f"{_compile_message(case.message, locale)};}}"
        for case in cases
    ]
    return "{" + ",".join(parts) + "}"


def _compile_element(element: Element, locale: str) -> str:
    match element:
        case Text(value=value):
            return _string(value)
        case Argument(name=name):
            return f"MessageFormat.v(d,{_string(name)})"
        case Octothorpe():
            return "MessageFormat.n(n)"
        case SimpleFormat(name=name, format=fmt, style=style):
            style_js = "null" if style is None else _string(style)
            return (
                f"MessageFormat.f(d,{_string(name)},{_string(fmt)},"
                f"{style_js},{_string(locale)})"
            )
        case Select(name=name, cases=cases):
            return f"MessageFormat.s(d,{_string(name)},{_compile_cases(cases, locale, '')})"
        case Plural(name=name, cases=cases, offset=offset, ordinal=ordinal):
            ordinal_js = "true" if ordinal else "false"
            return (
                f"MessageFormat.p(d,{_string(name)},{offset},{_string(locale)},"
                f"{ordinal_js},{_compile_cases(cases, locale, 'n')})"
            )
    msg = f"Unknown message element: {element!r}"
    raise TypeError(msg)


def _compile_message(message: Message, locale: str) -> str:
    if not message.elements:
        return '""'
    parts = [_compile_element(element, locale) for element in message.elements]
    if not isinstance(message.elements[0], Text):
        # Force string concatenation even if the first helper is numeric.
        parts.insert(0, '""')
    return "+".join(parts)


def precompile(message: Message, locale: str) -> str:
    """Compile a parsed message to JavaScript function source.

    Args:
        message: Parsed message
        locale: Locale key the plural helper looks rules up by

    Returns:
        Source of a function(d) returning the formatted string

    Example:
        >>> from localeforge.messageformat.parser import parse_message
        >>> precompile(parse_message("Hi {name}"), "en")
        'function(d){return "Hi "+MessageFormat.v(d,"name");}'
    """
    return f"function(d){{return {_compile_message(message, locale)};}}"
