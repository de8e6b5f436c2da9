"""
Switchyard utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the metadata, registry, and dispatch layers.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the higher-level command layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr) with
    immutable snapshots for containers.

- humanize(seconds)
  • Render an elapsed duration with a power-of-ten unit prefix ("1.25 milliseconds").

Stability and contract
- Names not in __all__ are internal and may change without notice.
"""
import builtins
import functools
import math
import os.path
import sys
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value (a parameter default, for
    instance), but the API needs a way to distinguish “not provided” from
    “provided as None”. A single instance, Unset, is exposed.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when Unset appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Returns the given object unless it is the Unset sentinel, in which case the
    provided default is returned. Falsey values like None, 0, "", or [] are
    preserved as-is; they are not treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> decorator

    Notes
    - Purely cosmetic: only __name__ and __qualname__ are updated.
    - Some built-in or C-implemented callables are not updatable and will
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Return an immutable snapshot of common container types (shallow).

    - Sequence (non-string) → tuple
    - Mapping               → MappingProxyType over a copy
    - Set                   → frozenset
    - anything else         → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads from "_{name}" on the instance and returns an
    immutable snapshot for container types, so public state cannot be mutated
    through the property.

    Example
    - Given self._shorts, declare shorts = mirror("shorts") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


_PREFIXES = {
    0: "",
    -3: "milli",
    -6: "micro",
    -9: "nano",
    -12: "pico",
}


def humanize(seconds, /):
    """
    render a duration in seconds scaled to the nearest power-of-ten prefix.

    examples
    - humanize(2.5)       -> "2.5 seconds"
    - humanize(0.00125)   -> "1.25 milliseconds"
    - humanize(0)         -> "0 seconds"
    """
    if not isinstance(seconds, int | float):
        raise TypeError("humanize() argument must be a number")
    if seconds <= 0:
        return "0 seconds"
    exponent = max(-12, min(0, 3 * math.floor(math.log10(seconds) / 3)))
    return "%s %sseconds" % (format(round(seconds / 10 ** exponent, 3), "g"), _PREFIXES[exponent])


def program():
    """
    return the host program name.

    lookup
    - the host application may expose __prog__ in __main__ (string).
    - otherwise the basename of sys.argv[0] is used, falling back to "switchyard"
      when the interpreter was started without a script (REPL, embedded hosts).
    """
    name = getattr(sys.modules.get("__main__"), "__prog__", Unset)
    if isinstance(name, str) and name.strip():
        return name.strip()
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "switchyard"


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "humanize",
    "program",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
