"""
Switchyard faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the engine
  can report. Codes are grouped by the phase that raises them (registration,
  resolution, binding, execution) so logs and searches stay predictable.
- CommandException: base type that carries message + options and knows how to
  render itself with rich (header, one-sentence body, a single hint).
- report(): print any fault to a stderr console.

Phases
- registration faults are raised to the host while the command table is built.
- resolution faults abort a command-line run; the dispatcher logs them.
- binding and execution faults turn the current command's outcome fatal; the
  dispatcher logs them and stops opening new commands.

Customisation
- __prog__ in __main__ overrides the program name shown in headers.
- __styles__ in __main__ overrides any palette entry used by __rich__.
- __codes__ in __main__ may remap codes to host labels (see FaultCode.normalize).
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset, program


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by phase)
    - registration (1110x)
      • INVALID_SWITCH, PARAMETER_LAYOUT, DUPLICATED_SWITCH, INVALID_HANDLER
    - resolution (1111x)
      • UNRECOGNIZED_SWITCH, EXPECTED_COMMAND
    - binding (1112x)
      • MISSING_PARAMETERS, TOO_MANY_ARGUMENTS, UNSUPPORTED_TYPE, UNCONVERTIBLE_ARGUMENT
    - execution (1113x)
      • DELEGATED_ERROR, UNRESOLVABLE_DIRECTORY
    """
    # --- registration errors ---
    INVALID_SWITCH              = 11101
    PARAMETER_LAYOUT            = 11102
    DUPLICATED_SWITCH           = 11103
    INVALID_HANDLER             = 11104

    # --- resolution errors ---
    UNRECOGNIZED_SWITCH         = 11111
    EXPECTED_COMMAND            = 11112

    # --- binding errors ---
    MISSING_PARAMETERS          = 11121
    TOO_MANY_ARGUMENTS          = 11122
    UNSUPPORTED_TYPE            = 11123
    UNCONVERTIBLE_ARGUMENT      = 11124

    # --- execution errors ---
    DELEGATED_ERROR             = 11131
    UNRESOLVABLE_DIRECTORY      = 11132

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(sys.modules.get("__main__"), "__codes__", {}).get(self, self.value))


class CommandException(Exception):
    """
    base class of every switchyard fault.

    contract
    - message: one sentence, lowercase, naming the offending input.
    - options: read-only mapping; recognised keys are 'code', 'title', 'hint'
      and 'colorful'. any other key is kept as context for the host
      (e.g. 'switch', 'command', 'parameters').
    - subclasses declare their default code/title/hint as class attributes.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "command error"
    hint = Unset

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        # option overrides win over the class-level defaults
        for name in ("code", "title", "hint"):
            if name in options:
                setattr(self, name, options[name])

    def __rich__(self):
        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(sys.modules.get("__main__"), "__styles__", {}))

        colorful = self.options.get("colorful", True)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(program(), "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        renders = [header, text(self.message, "error-message")]
        if self.hint:
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(self.hint, "hint")))
        return Group(*renders)


class RegistrationError(CommandException):
    code = FaultCode.INVALID_HANDLER
    title = "invalid handler"
    hint = "declare handlers with @handler(...) before registering them"


class InvalidSwitchError(RegistrationError):
    code = FaultCode.INVALID_SWITCH
    title = "invalid switch"
    hint = "short switches are '?' or a letter; long switches start with a letter, '_' or '?'"


class ParameterLayoutError(RegistrationError):
    code = FaultCode.PARAMETER_LAYOUT
    title = "invalid parameter layout"
    hint = "optional parameters must trail required ones and an array parameter must be last"


class DuplicatedSwitchError(RegistrationError):
    code = FaultCode.DUPLICATED_SWITCH
    title = "duplicated switch"
    hint = "give the handler a different switch, or reuse the owner's name to override it"


class UnrecognizedSwitchError(CommandException):
    code = FaultCode.UNRECOGNIZED_SWITCH
    title = "unrecognized switch"
    hint = "run with -h to list every available switch"


class ExpectedCommandError(CommandException):
    code = FaultCode.EXPECTED_COMMAND
    title = "expected command"
    hint = "arguments must follow a switch"


class MissingParametersError(CommandException):
    code = FaultCode.MISSING_PARAMETERS
    title = "missing parameters"
    hint = "run with -h to see the parameters of each command"


class TooManyArgumentsError(CommandException):
    code = FaultCode.TOO_MANY_ARGUMENTS
    title = "too many arguments"
    hint = "run with -h to see the parameters of each command"


class UnsupportedTypeError(CommandException):
    code = FaultCode.UNSUPPORTED_TYPE
    title = "unsupported type"
    hint = "register a converter for the type before binding"


class ConversionError(CommandException):
    code = FaultCode.UNCONVERTIBLE_ARGUMENT
    title = "unconvertible argument"


class DelegatedCommandError(CommandException):
    code = FaultCode.DELEGATED_ERROR
    title = "delegated error"
    hint = "check additional logs for more details"


class WorkingDirectoryError(DelegatedCommandError):
    code = FaultCode.UNRESOLVABLE_DIRECTORY
    title = "unresolvable directory"
    hint = "the directory must exist and be accessible"


def report(fault, /, *, console=None):
    """
    print a fault to the given console (a stderr console by default).

    contract
    - fault must be a CommandException; anything else is a programming error.
    """
    if not isinstance(fault, CommandException):
        raise TypeError("report() argument must be a command exception")
    (console or Console(stderr=True)).print(fault)


__all__ = (
    "FaultCode",
    "CommandException",
    "RegistrationError",
    "InvalidSwitchError",
    "ParameterLayoutError",
    "DuplicatedSwitchError",
    "UnrecognizedSwitchError",
    "ExpectedCommandError",
    "MissingParametersError",
    "TooManyArgumentsError",
    "UnsupportedTypeError",
    "ConversionError",
    "DelegatedCommandError",
    "WorkingDirectoryError",
    "report",
)
