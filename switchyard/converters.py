"""
Type converters: the table that turns raw command-line tokens into values.

Every handler parameter declares a semantic type tag ("byte", "str", "path", ...).
The binder looks the tag up in a read-only ``tag -> parser`` mapping that is
handed to it at construction; nothing is inferred from annotations.

Parsers receive the raw token and either return the converted value or raise
ValueError with a short message. Integer parsers accept decimal and
0x/0o/0b-prefixed literals and enforce the range of their tag.
"""
import os.path
import re
from collections.abc import Mapping
from types import MappingProxyType

from .utils import rename

_PREFIXED = re.compile(r"([+-]?)0([xob])([0-9a-f_]+)", re.IGNORECASE)

_TRUTHS = frozenset({"true", "yes", "on", "1"})
_FALSES = frozenset({"false", "no", "off", "0"})


def _integer(tag, low, high, /):
    """
    build a range-checked integer parser registered under 'tag'.
    """
    @rename(tag)
    def parser(text, /):
        if match := _PREFIXED.fullmatch(text.strip()):
            value = int(match[1] + match[3], {"x": 16, "o": 8, "b": 2}[match[2].lower()])
        else:
            value = int(text, 10)
        if not low <= value <= high:
            raise ValueError(f"{tag} value {value} is out of range [{low}, {high}]")
        return value

    return parser


@rename("bool")
def _boolean(text, /):
    if (word := text.strip().lower()) in _TRUTHS:
        return True
    if word in _FALSES:
        return False
    raise ValueError(f"{text!r} is not a boolean (expected one of: {', '.join(sorted(_TRUTHS | _FALSES))})")


@rename("char")
def _character(text, /):
    if len(text) != 1:
        raise ValueError(f"{text!r} is not a single character")
    return text


@rename("path")
def _path(text, /):
    return os.path.expanduser(text)


DEFAULTS = MappingProxyType({
    "str": str,
    "char": _character,
    "bool": _boolean,
    "float": float,
    "path": _path,
    "int": _integer("int", -(1 << 31), (1 << 31) - 1),
    "byte": _integer("byte", 0, 0xFF),
    "sbyte": _integer("sbyte", -0x80, 0x7F),
    "uint16": _integer("uint16", 0, 0xFFFF),
    "int16": _integer("int16", -0x8000, 0x7FFF),
    "uint32": _integer("uint32", 0, 0xFFFFFFFF),
    "int32": _integer("int32", -(1 << 31), (1 << 31) - 1),
    "uint64": _integer("uint64", 0, (1 << 64) - 1),
    "int64": _integer("int64", -(1 << 63), (1 << 63) - 1),
})
"""
default converter table (read-only).
"""


def extend(table=DEFAULTS, /, **parsers):
    """
    return a new read-only converter table: 'table' plus 'parsers'.

    - tags given in 'parsers' replace the same tags in 'table'.
    - every parser must be callable; tags must be non-empty strings.

    example
    - extend(hex=lambda text: int(text, 16))
    - extend(DEFAULTS, **{"ip-address": ipaddress.ip_address})
    """
    if not isinstance(table, Mapping):
        raise TypeError("extend() argument must be a mapping")
    for tag, parser in parsers.items():
        if not tag.strip():
            raise ValueError("extend() tags cannot be empty")
        if not callable(parser):
            raise TypeError(f"extend() parser for {tag!r} must be callable")
    return MappingProxyType(dict(table) | parsers)


__all__ = (
    "DEFAULTS",
    "extend",
)
