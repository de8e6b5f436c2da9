"""
Switchyard dispatcher: turn an argument vector into command invocations.

What this module provides
- CommandLine: owns the registry (built-in handlers first, then the host's),
  the logging sink and the converter table, and runs argument vectors
  through them with process().
- invoke(object, prompt): convenience runner for a CommandLine or a single
  Command.

Tokenizing
- "--name" (third character a letter) selects the command owning long switch
  "name". "-x" (second character a letter or '?') selects the command owning
  short switch "x"; anything glued after it is the first argument, so "-v3"
  reads as "-v 3".
- Every other token is an argument of the command selected last. An argument
  before any switch, or an unknown switch, aborts the run with FATAL_ERROR.
- A command runs as soon as the next switch (or the end of input) closes its
  argument list. An empty vector shows the help screen.

Verdict
- Each command's outcome escalates the run's state (OK < ERROR < FATAL_ERROR).
  Once it is FATAL_ERROR no further command runs; the remaining switches are
  reported as skipped.

Built-in handlers
- -?, -h, --help            display the help screen.
- -l, --log [<path>]        also log to a file (blank: "<program>.log").
- --wd <directory>          change the working directory.
- -v, --verbosity <level>   set the sink's verbosity bit mask.
- --assemblies              list the loaded top-level modules.
Host handlers with the same name as a built-in one ("help", "log",
"working_directory", "verbosity", "assemblies") replace it.
"""
import os
import shlex
import sys
import time
from collections import defaultdict
from collections.abc import Iterable, Mapping

from rich.text import Text

from .commands import Command, Result, handler
from .converters import DEFAULTS
from .faults import CommandException, UnrecognizedSwitchError, ExpectedCommandError, WorkingDirectoryError
from .logger import SEPARATOR, Logger, Verbosity
from .metadata import Parameter
from .registry import Registry
from .utils import *

PROCESSING = Verbosity.COMMAND_LINE_PROCESSING


def _classify(token):
    """
    Internal: split a switch token into (switch, glued argument).

    Returns None for bare arguments.
    """
    if len(token) > 2 and token.startswith("--") and token[2].isalpha():
        return token, ""
    if len(token) > 1 and token[0] == "-" and (token[1].isalpha() or token[1] == "?"):
        return token[:2], token[2:]
    return None


class CommandLine:
    """
    Command-line processor.

    Parameters (keyword-only)
    - commands: Iterable[Command]
      Host handlers, registered after the built-in ones. A handler named like
      a built-in one overrides it; any other switch collision raises
      DuplicatedSwitchError.
    - logger: Logger | Unset
      Sink shared by every command. By default a console sink that shows
      everything except command-line processing traces (enable those with
      "-v 255").
    - converters: Mapping[str, Callable[[str], Any]]
      Type tag table used to bind arguments. Defaults to converters.DEFAULTS.
    - colorful: bool
      Style the help screen printed by -h and returned by render(). The
      file destination always receives it unstyled.

    Properties
    - logger, converters, colorful, registry: as configured.
    - commands: every registered Command, in help order.
    - state: the verdict of the last run (OK before the first one).
    """

    logger = mirror("logger")
    converters = mirror("converters")
    colorful = mirror("colorful")
    registry = mirror("registry")
    state = mirror("state")

    def __init__(self, *, commands=(), logger=Unset, converters=DEFAULTS, colorful=True):
        if not isinstance(logger, Logger | Unset):
            raise TypeError("CommandLine() 'logger' must be a Logger")
        if not isinstance(converters, Mapping):
            raise TypeError("CommandLine() 'converters' must be a mapping of type tags to parsers")
        if not isinstance(commands, Iterable):
            raise TypeError("CommandLine() 'commands' must be an iterable of commands")

        self._logger = coalesce(logger, None) or Logger(verbosity=Verbosity.ALL ^ PROCESSING)
        self._converters = converters
        self._colorful = bool(colorful)
        self._state = Result.OK
        self._registry, overridden = Registry.merge(self.builtins(), commands)
        for command in overridden:
            self._logger.note(f"[{command.name}] overridden by a host handler.", PROCESSING)

    @property
    def commands(self):
        return tuple(self._registry)

    def builtins(self):
        """
        return the built-in handlers, bound to this instance, in help order.
        """
        return (
            handler(
                "Display the help screen.",
                "-?, -h, --help",
                name="help",
            )(self._help),
            handler(
                "Set the log file.",
                "-l, --log",
                Parameter("path", "str", "The log output; blank for <program>.log.", default=""),
                name="log",
            )(self._log),
            handler(
                "Set the working directory.",
                "--wd",
                Parameter("directory", "path", "The new working directory."),
                name="working_directory",
            )(self._chdir),
            handler(
                "Set the verbosity level.",
                "-v, --verbosity",
                Parameter(
                    "level",
                    "byte",
                    "Bit mask: 0 = errors and warnings only, 1-16 = detail levels 1 to 5, "
                    "32 = success messages, 64 = warnings, 128 = command line processing.",
                ),
                name="verbosity",
            )(self._verbosity),
            handler(
                "Get a list of the loaded modules.",
                "--assemblies",
                name="assemblies",
            )(self._assemblies),
        )

    def _help(self):
        self._logger.note(self.render())

    def _log(self, path):
        if not path.strip():
            path = f"{program()}.log"
        self._logger.redirect(path)
        self._logger.note(f"Logging to {self._logger.path!r}.", PROCESSING)

    def _chdir(self, directory):
        if not directory.strip():
            raise WorkingDirectoryError(f"could not resolve path {directory!r}", directory=directory)
        resolved = os.path.realpath(directory)
        if not os.path.isdir(resolved):
            raise WorkingDirectoryError(f"could not resolve path {directory!r}", directory=directory)
        os.chdir(resolved)
        self._logger.note(f"Working directory set to {resolved!r}.", PROCESSING)

    def _verbosity(self, level):
        self._logger.verbosity = level
        self._logger.note(f"Verbosity level set to 0x{level:02X}.", PROCESSING)

    def _assemblies(self):
        lines = ["Loaded modules:"]
        for name in sorted(name for name in tuple(sys.modules) if "." not in name and not name.startswith("_")):
            version = getattr(sys.modules.get(name), "__version__", None)
            lines.append(f"   {name} {version}" if isinstance(version, str) else f"   {name}")
        self._logger.note("\n".join(lines))

    def __getitem__(self, switch):
        """
        return the command owning 'switch' ("-x" or "--long").

        raises
        - KeyError when no command owns it.
        """
        if (command := self._registry.lookup(switch)) is None:
            raise KeyError(switch)
        return command

    def _resolve(self, switch):
        if (command := self._registry.lookup(switch)) is None:
            raise UnrecognizedSwitchError(f"unrecognized switch: {switch!r}", switch=switch)
        return command

    def _dispatch(self, command, arguments):
        """
        Internal: run one command and fold its outcome into the run's state.
        """
        if command is None:
            return
        outcome, elapsed = command.invoke(self._logger, self._converters, arguments)
        self._state = self._state.escalate(outcome)
        match outcome:
            case Result.OK:
                self._logger.note(f"[{command.name}] finished successfully in {humanize(elapsed)}.", PROCESSING)
            case Result.ERROR:
                self._logger.note(
                    f"[{command.name}] finished with non-fatal error in {humanize(elapsed)}. "
                    f"Continuing command line processing.",
                    PROCESSING,
                )
            case Result.FATAL_ERROR:
                self._logger.note(f"[{command.name}] failed with fatal error in {humanize(elapsed)}.", PROCESSING)

    def _skip(self, tokens):
        for token in tokens:
            if match := _classify(token):
                command = self._registry.lookup(match[0])
                self._logger.note(
                    f"[{command.name if command else match[0]}] skipped because of previous fatal errors.",
                    PROCESSING,
                )

    def process(self, argv, /):
        """
        Run an argument vector and return the verdict.

        Parameters
        - argv: Iterable[str]
          Tokens without the program name (e.g. sys.argv[1:]).

        Returns
        - Result: the escalated outcome of every command that ran. Also kept
          in the 'state' property.

        Notes
        - Resolution errors (unknown switch, argument before any switch) are
          logged and make the verdict FATAL_ERROR; nothing is raised.
        """
        if isinstance(argv, str) or not isinstance(argv, Iterable):
            raise TypeError("process() argument must be an iterable of strings")
        tokens = list(argv)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("process() argument must be an iterable of strings")

        start = time.perf_counter()
        self._state = Result.OK
        tokens = tokens or ["-h"]

        command = None
        arguments = []
        index = 0
        try:
            while index < len(tokens):
                token = tokens[index]
                index += 1
                if match := _classify(token):
                    switch, token = match
                    self._dispatch(command, arguments)
                    if self._state is Result.FATAL_ERROR:
                        self._skip(tokens[index - 1:])
                        break
                    if switch.startswith("--"):
                        self._logger.note(f"Saw command: \"{switch[2:]}\"", PROCESSING)
                    else:
                        self._logger.note(f"Saw command: '{switch[1]}'", PROCESSING)
                    command = self._resolve(switch)
                    arguments = []
                    if not token:
                        continue
                if command is None:
                    raise ExpectedCommandError(f"expected a command before {token!r}", argument=token)
                arguments.append(token)
                self._logger.note(f"   Parameter {len(arguments)}: {token}", PROCESSING)
            else:
                self._dispatch(command, arguments)
        except CommandException as fault:
            self._logger.error(fault.message)
            self._state = Result.FATAL_ERROR
            self._skip(tokens[index:])

        self._logger.note(f"Completed in {humanize(time.perf_counter() - start)}", PROCESSING)
        return self._state

    def render(self):
        """
        Render the help screen as rich Text.

        Layout
        - "Command line usage:" and a blank line.
        - per command, blank-line separated: description; switches (shorts then
          longs, each sorted) followed by "<parameter>" placeholders; when the
          command has parameters, a "Parameters:" block of
          "   name (type): description" lines.
        - a separator line.

        Styling
        - Palette keys: usage-label, command-description, switch, separator,
          parameter-placeholder, parameters-label, parameter-name,
          parameter-type, parameter-description, rule.
        - User overrides are read from __main__.__styles__.
        - When colorful is False, styles are suppressed.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #FFFFFF",
            "command-description": "#E5E7EB",
            "switch": "bold #00E6FF",  # cyan switches
            "separator": "#9CA3AF",
            "parameter-placeholder": "#FFD600",  # amber placeholders
            "parameters-label": "bold #FFFFFF",
            "parameter-name": "#FFD600",
            "parameter-type": "italic #9CA3AF",
            "parameter-description": "#E5E7EB",
            "rule": "#9CA3AF dim",
        } | getattr(sys.modules.get("__main__"), "__styles__", {}))

        def text(fragment, style=""):
            return Text(str(fragment), styles[style] if self.colorful else "")

        rendered = Text()
        rendered.append_text(text("Command line usage:", "usage-label")).append("\n\n")
        for index, command in enumerate(self._registry):
            if index:
                rendered.append("\n")
            rendered.append_text(text(command.descr, "command-description")).append("\n")

            for position, switch in enumerate(command.switches):
                if position:
                    rendered.append_text(text(", ", "separator"))
                rendered.append_text(text(switch, "switch"))
            for parameter in command.parameters:
                rendered.append(" ").append_text(text(f"<{parameter.name}>", "parameter-placeholder"))
            rendered.append("\n")

            if command.parameters:
                rendered.append_text(text("Parameters:", "parameters-label")).append("\n")
                for parameter in command.parameters:
                    rendered.append("   ").append_text(text(parameter.name, "parameter-name"))
                    rendered.append(" (").append_text(
                        text(parameter.type + "[]" * parameter.array, "parameter-type")
                    ).append(")")
                    if parameter.descr is not None:
                        rendered.append(": ").append_text(text(parameter.descr, "parameter-description"))
                    rendered.append("\n")
        rendered.append_text(text(SEPARATOR, "rule")).append("\n")
        return rendered

    @property
    def help_text(self):
        """
        the help screen as plain text (same content as render()).
        """
        return self.render().plain

    def __invoke__(self, prompt=Unset):
        """
        Run this command line with a token stream.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used as-is.

        Returns
        - Result: see process().

        Raises
        - TypeError: when prompt is not Unset/str/Iterable[str].
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")
        return self.process(tokens)

    def __repr__(self):
        return f"command-line(state={self._state!r}, commands={len(self._registry)})"


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for command lines or single commands.

    Parameters
    - object: an instance providing __invoke__(prompt), or a Command.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens (each must be str).

    Behavior
    - If 'object' implements __invoke__, call it with prompt.
    - If 'object' is a Command, run it through a CommandLine holding it next to
      the built-in handlers.

    Returns
    - Result: the verdict of the run.

    Raises
    - TypeError: when 'object' cannot be invoked via the above contract or
      when prompt type is invalid for __invoke__.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)

    if isinstance(object, Command):
        return invoke(CommandLine(commands=[object]), prompt)

    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method") from None


__all__ = (
    "CommandLine",
    "invoke",
)
