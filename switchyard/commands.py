"""
Switchyard command layer: handles, outcomes, and invocation.

What this module provides
- Result: the ordered outcome of one command and of a whole run
  (OK < ERROR < FATAL_ERROR), with escalate() as the aggregation rule.
- Command: a handler's Metadata paired with its callable target. Commands
  are callable (they forward to the target) and know how to run themselves
  against raw tokens through invoke().
- handler(...): decorator factory that declares a handler in one place.

Quick start
    from switchyard import handler, Parameter, Result

    @handler("Greet someone.", "-g, --greet", Parameter("who", "str", "Who to greet.", default="world"))
    def greet(who):
        print(f"hello, {who}")

    # greet is now a Command; CommandLine(commands=[greet]) makes it reachable
    # from "-g", "--greet", "-gAlice" or "--greet Alice".

Invocation contract
- A target returning a Result makes it the outcome; None (or any other value)
  means OK.
- A target raising any exception makes the outcome FATAL_ERROR; the exception
  is logged as an error (with traceback unless it is a CommandException).
- An OK outcome is downgraded to ERROR when the target logged at least one
  error through the sink while it ran.
"""
import time
from enum import IntEnum

from .binder import Binder
from .faults import CommandException, RegistrationError
from .metadata import Metadata, RecordType, check_layout
from .utils import *


class Result(IntEnum):
    """
    outcome of one command, and verdict of a whole run.

    ordering
    - OK < ERROR < FATAL_ERROR; a run's verdict only ever moves up.
    - the integer value doubles as the process exit status.
    """
    OK = 0
    ERROR = 1
    FATAL_ERROR = 2

    def escalate(self, other, /):
        """
        return the more severe of self and 'other'.
        """
        return max(self, Result(other))


class Command(metaclass=RecordType):
    """
    A command handler: metadata plus a callable target.

    Parameters
    - target: Callable
      Receives the bound arguments positionally, in parameter order.
    - metadata: Metadata
      Description, switches and parameters of the handler.
    - name: str | Unset (keyword-only)
      Handler identity. Defaults to target.__name__. Two handlers with the
      same identity are the same handler as far as the registry goes (a later
      registration overrides the earlier one).

    Properties
    - name, target, metadata: as given.
    - descr, shorts, longs, parameters, switches: forwarded from metadata.

    Raises
    - RegistrationError: target is not callable, or has no usable name.
    - ParameterLayoutError: the parameter ordering rules are violated.
    """

    __introspectable__ = (
        "name",
        "target",
        "metadata",
    )
    __displayable__ = (
        "name",
        "metadata",
    )

    def __new__(cls, target, metadata, /, *, name=Unset):
        if not callable(target):
            raise RegistrationError(f"handler target {target!r} is not callable")
        if not isinstance(metadata, Metadata):
            raise TypeError(f"{cls.__typename__} 'metadata' must be a Metadata instance")

        name = coalesce(name, getattr(target, "__name__", None))
        if not isinstance(name, str) or not (name := name.strip()):
            raise RegistrationError(f"handler target {target!r} has no name", hint="pass name=... to @handler()")

        check_layout(name, metadata.parameters)

        self = super().__new__(cls)
        self._name = name
        self._target = target
        self._metadata = metadata
        return self

    @property
    def descr(self):
        return self._metadata.descr

    @property
    def shorts(self):
        return self._metadata.shorts

    @property
    def longs(self):
        return self._metadata.longs

    @property
    def parameters(self):
        return self._metadata.parameters

    @property
    def switches(self):
        return self._metadata.switches

    def handles(self, switch, /):
        """
        tell whether this command owns 'switch' ("-x" or "--long" form).
        """
        return switch in self.switches

    def __call__(self, *arguments):
        return self._target(*arguments)

    def invoke(self, logger, converters, tokens, /):
        """
        Bind 'tokens' and run the target once.

        Parameters
        - logger: switchyard.logger.Logger
          Sink used for error reporting and for the before/after error count.
        - converters: Mapping[str, Callable[[str], Any]]
          Type tag table handed to the binder.
        - tokens: Sequence[str]
          Raw arguments collected for this command.

        Returns
        - (Result, float): the outcome and the elapsed time in seconds.

        Behavior
        - Binding failures and exceptions raised by the target never escape;
          they are logged and make the outcome FATAL_ERROR.
        - An outcome other than OK that was not accompanied by any logged
          error gets a generic error line naming the command.
        """
        before = logger.error_count
        start = time.perf_counter()
        try:
            arguments = Binder(converters).bind(self, tokens)
            result = self(*arguments)
        except CommandException as exception:
            logger.error(f"[{self.name}] {exception.message}")
            outcome = Result.FATAL_ERROR
        except Exception as exception:
            logger.exception(exception, f"[{self.name}] raised {type(exception).__name__}: {exception}")
            outcome = Result.FATAL_ERROR
        else:
            outcome = result if isinstance(result, Result) else Result.OK
        elapsed = time.perf_counter() - start

        if logger.error_count > before:
            if outcome is Result.OK:
                outcome = Result.ERROR
        elif outcome is not Result.OK:
            kind = "non-fatal" if outcome is Result.ERROR else "fatal"
            logger.error(f"invocation of [{self.name}] resulted in {kind} error")
        return outcome, elapsed


def handler(descr, switches, /, *parameters, name=Unset):
    """
    Declare a command handler.

    Parameters
    - descr: str | Text
      Description shown in help.
    - switches: str | Iterable[str]
      Switch declaration, e.g. "-v, --verbosity".
    - *parameters: Parameter
      Positional parameters, in the order the target receives them.
    - name: str | Unset (keyword-only)
      Handler identity; defaults to the target's __name__.

    Returns
    - A decorator turning a callable into a Command.

    Raises
    - InvalidSwitchError / DuplicatedSwitchError / ParameterLayoutError at
      declaration time, so a malformed handler never reaches a registry.
    """
    metadata = Metadata(descr, switches, *parameters)

    @rename("handler")
    def wrapper(target, /):
        if isinstance(target, Command):
            target = target.target
        return Command(target, metadata, name=name)

    return wrapper


__all__ = (
    "Result",
    "Command",
    "handler",
)
