"""
Parameter binder: raw tokens in, typed positional arguments out.

The binder walks a command's parameters in declared order and consumes the
raw tokens collected for it:

- scalar parameter: the token at its position, converted with the parser of
  its type tag; the default when no token is left and it is optional;
  otherwise it is recorded as missing (every missing parameter is reported at
  once).
- array parameter: every remaining token, each converted; bound as a list.
- leftover tokens with no array parameter to absorb them are an error.

Type tags are resolved through the converter table handed to the binder at
construction. Nothing is inferred from the target's signature.
"""
from collections.abc import Mapping

from .converters import DEFAULTS
from .faults import (
    MissingParametersError,
    TooManyArgumentsError,
    UnsupportedTypeError,
    ConversionError,
)
from .metadata import check_layout
from .utils import mirror


class Binder:
    """
    Converts raw tokens into the positional arguments of a command.

    Parameters
    - converters: Mapping[str, Callable[[str], Any]]
      Tag → parser table. Defaults to switchyard.converters.DEFAULTS.
    """

    converters = mirror("converters")

    def __init__(self, converters=DEFAULTS, /):
        if not isinstance(converters, Mapping):
            raise TypeError("Binder() argument must be a mapping of type tags to parsers")
        self._converters = converters

    def _parser(self, command, parameter):
        try:
            return self._converters[parameter.type]
        except KeyError:
            raise UnsupportedTypeError(
                f"parameter {parameter.name!r} has unsupported type {parameter.type!r}",
                command=command.name,
                parameter=parameter.name,
            ) from None

    def _convert(self, command, parameter, parser, token):
        try:
            return parser(token)
        except Exception as exception:
            raise ConversionError(
                f"cannot convert {token!r} to {parameter.type} for parameter {parameter.name!r}: {exception}",
                command=command.name,
                parameter=parameter.name,
                token=token,
                exception=exception,
            ) from exception

    def bind(self, command, tokens, /):
        """
        Bind 'tokens' to the parameters of 'command'.

        Returns
        - list: one value per parameter, in declared order.

        Raises
        - ParameterLayoutError: the command's parameter layout is invalid.
        - UnsupportedTypeError: a type tag has no parser.
        - ConversionError: a parser rejected a token (the parser's exception is
          chained and kept under the 'exception' option).
        - MissingParametersError: required parameters had no token; the
          'parameters' option lists all of them.
        - TooManyArgumentsError: tokens were left over.
        """
        check_layout(command.name, command.parameters)
        tokens = list(tokens)

        arguments = []
        missing = []
        position = 0
        for parameter in command.parameters:
            parser = self._parser(command, parameter)
            if parameter.array:
                arguments.append([self._convert(command, parameter, parser, token) for token in tokens[position:]])
                position = len(tokens)
            elif position < len(tokens):
                arguments.append(self._convert(command, parameter, parser, tokens[position]))
                position += 1
            elif parameter.optional:
                arguments.append(parameter.default)
            else:
                missing.append(parameter.name)

        if missing:
            raise MissingParametersError(
                f"missing required parameter{'s' if len(missing) > 1 else ''}: {', '.join(missing)}",
                command=command.name,
                parameters=tuple(missing),
            )
        if position < len(tokens):
            raise TooManyArgumentsError(
                f"expects at most {len(command.parameters)} argument{'s' if len(command.parameters) != 1 else ''}, got {len(tokens)}",
                command=command.name,
                arguments=tuple(tokens[position:]),
            )
        return arguments


__all__ = (
    "Binder",
)
