r"""
Switchyard command metadata.

Overview
- Parameter: one positional parameter of a handler (name, type tag, description,
  default, trailing-array flag).
- Metadata: the immutable descriptor of one handler (description, short
  switches, long switches, ordered parameters).
- check_layout(name, parameters): parameter ordering rules shared by
  registration and binding.

Switch declarations
- Switches are declared as one string, separated by commas and/or whitespace:
    "-?, -h, --help"
  or as an iterable of tokens:
    ("-v", "--verbosity")
- A short switch is '-' followed by exactly one character: '?' or an ASCII letter.
- A long switch is '--' followed by a name matching r"[A-Za-z_?][A-Za-z0-9_\-?]*".
- Switch names are case-sensitive. Anything else raises InvalidSwitchError
  naming the offending switch, so a malformed handler is never registered.

Parameter layout
- Optional parameters (those with a default) must trail the required ones.
- An array parameter consumes every remaining token, so it must be the last one.
- Violations raise ParameterLayoutError naming the handler.

Representation
- RecordType gives both records read-only properties (one per name listed in
  __introspectable__), plus a stable __repr__ and __rich_repr__.
"""
import functools
import operator
import re
from collections.abc import Iterable

from rich.text import Text

from .faults import InvalidSwitchError, DuplicatedSwitchError, ParameterLayoutError
from .utils import *

SHORT = re.compile(r"[?A-Za-z]")
LONG = re.compile(r"[A-Za-z_?][A-Za-z0-9_\-?]*")


class RecordType(type):
    """
    Metaclass that turns metadata classes into read-only, introspectable records.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      mirroring the private "_{name}" field (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and pretty printers.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - parameter(name='level', type='byte', ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_text(cls, name, object, /):
    """
    Internal: validate an optional description-like field.

    - Unset → None.
    - str → trimmed, must be non-empty.
    - Text → kept as-is (already styled by the host).
    """
    if not isinstance(object, str | Text | Unset):
        raise TypeError(f"{cls.__typename__} {name!r} must be a string")
    elif isinstance(object, str) and not (object := object.strip()):
        raise ValueError(f"{cls.__typename__} {name!r} cannot be empty")
    return coalesce(object)


class Parameter(metaclass=RecordType):
    """
    One positional parameter of a command handler.

    Parameters
    - name: str
      Display name used in help and in binding faults. Must look like an
      identifier (letters, digits, '_' or '-', not starting with a digit).
    - type: str
      Semantic type tag resolved by the binder through its converter table
      (e.g. "str", "byte", "path"). Defaults to "str".
    - descr: str | Text | Unset
      Short description for help. If Unset, becomes None.
    - default: Any | Unset (keyword-only)
      When given, the parameter is optional and this value is bound when no
      token is left for it. None is a legitimate default.
    - array: bool (keyword-only)
      Consume every remaining token, converting each with the type tag; the
      bound value is a list. An array parameter cannot have a default.
    """

    __introspectable__ = (
        "name",
        "type",
        "descr",
        "optional",
        "default",
        "array",
    )

    def __new__(cls, name, /, type="str", descr=Unset, *, default=Unset, array=False):
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"(?!\d)[\w-]+", name := name.strip()):
            raise ValueError(f"{cls.__typename__} 'name' must be an identifier-like string, got {name!r}")

        if not isinstance(type, str):
            raise TypeError(f"{cls.__typename__} 'type' must be a type tag string")
        elif not (type := type.strip()):
            raise ValueError(f"{cls.__typename__} 'type' cannot be empty")

        if array and default is not Unset:
            raise TypeError(f"array {cls.__typename__} {name!r} cannot have a default")

        self = super().__new__(cls)
        self._name = name
        self._type = type
        self._descr = _sanitize_text(cls, "descr", descr)
        self._optional = default is not Unset
        self._default = coalesce(default)
        self._array = bool(array)
        return self


def _tokenize(cls, switches):
    """
    Internal: split a switch declaration into raw tokens.
    """
    if isinstance(switches, str):
        return [token for token in re.split(r"[\s,]+", switches) if token]
    if not isinstance(switches, Iterable):
        raise TypeError(f"{cls.__typename__} 'switches' must be a string or an iterable of strings")
    tokens = []
    for token in switches:
        if not isinstance(token, str):
            raise TypeError(f"{cls.__typename__} 'switches' must be a string or an iterable of strings")
        tokens.append(token.strip())
    return tokens


def _sanitize_switches(cls, switches):
    """
    Internal: validate a switch declaration and split it into short/long sets.

    Returns
    - (shorts, longs): sets of bare switch names (no leading dashes).

    Raises
    - InvalidSwitchError: a token is not a valid short or long switch, or the
      declaration is empty.
    - DuplicatedSwitchError: the same switch is declared twice.
    """
    shorts = set()
    longs = set()
    for token in _tokenize(cls, switches):
        if token.startswith("--"):
            if not LONG.fullmatch(name := token[2:]):
                raise InvalidSwitchError(f"{token!r} is not a valid long switch", switch=token)
            target = longs
        elif token.startswith("-") and len(token) == 2:
            if not SHORT.fullmatch(name := token[1:]):
                raise InvalidSwitchError(f"{token!r} is not a valid short switch", switch=token)
            target = shorts
        else:
            raise InvalidSwitchError(f"{token!r} is not a valid switch", switch=token)
        if name in target:
            raise DuplicatedSwitchError(f"switch {token!r} is declared twice", switch=token)
        target.add(name)

    if not shorts and not longs:
        raise InvalidSwitchError(f"{cls.__typename__} must declare at least one switch")
    return shorts, longs


def check_layout(name, parameters, /):
    """
    validate the ordering rules of a handler's parameters.

    rules
    - no parameter may follow an array parameter.
    - a required parameter may not follow an optional one.

    raises
    - ParameterLayoutError naming the handler and both parameters involved.
    """
    optional = None
    array = None
    for parameter in parameters:
        if array is not None:
            raise ParameterLayoutError(
                f"handler [{name}] parameter {parameter.name!r} follows array parameter {array.name!r}",
                command=name,
                parameter=parameter.name,
            )
        if parameter.array:
            array = parameter
        elif parameter.optional:
            optional = parameter
        elif optional is not None:
            raise ParameterLayoutError(
                f"handler [{name}] required parameter {parameter.name!r} follows optional parameter {optional.name!r}",
                command=name,
                parameter=parameter.name,
            )


class Metadata(metaclass=RecordType):
    """
    Immutable descriptor of one command handler.

    Parameters
    - descr: str | Text
      Description shown first in help. Required, non-empty.
    - switches: str | Iterable[str]
      Switch declaration (see module docs), e.g. "-v, --verbosity".
    - *parameters: Parameter
      Ordered parameter descriptors.

    Properties
    - shorts: frozenset of single-character switch names.
    - longs: frozenset of long switch names.
    - switches: every switch in display form, sorted: "-x" shorts then "--long" longs.
    - parameters: tuple of Parameter.
    """

    __introspectable__ = (
        "descr",
        "shorts",
        "longs",
        "parameters",
    )

    def __new__(cls, descr, switches, /, *parameters):
        if descr is Unset:
            raise TypeError(f"{cls.__typename__} 'descr' is required")
        descr = _sanitize_text(cls, "descr", descr)

        shorts, longs = _sanitize_switches(cls, switches)

        names = set()
        for parameter in parameters:
            if not isinstance(parameter, Parameter):
                raise TypeError(f"{cls.__typename__} parameters must be Parameter instances")
            if parameter.name in names:
                raise ValueError(f"{cls.__typename__} parameter name {parameter.name!r} is already in use")
            names.add(parameter.name)

        self = super().__new__(cls)
        self._descr = descr
        self._shorts = frozenset(shorts)
        self._longs = frozenset(longs)
        self._parameters = tuple(parameters)
        return self

    @property
    def switches(self):
        return tuple(
            ["-" + name for name in sorted(self.shorts)] +
            ["--" + name for name in sorted(self.longs)]
        )


__all__ = (
    "Parameter",
    "Metadata",
    "check_layout",
)
