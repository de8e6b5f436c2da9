"""
Command registry: the table the dispatcher resolves switches against.

Ownership
- Every switch has exactly one owner. Switches are keyed in display form
  ("-h", "--help"), so short and long names never collide with each other.
- Registering a command whose identity (Command.name) is already present
  replaces the existing command in place: it keeps its position in the
  listing and the switch map is rebuilt from the list, so none of the old
  command's switches survive.
- Claiming a switch owned by a command of another identity raises
  DuplicatedSwitchError and leaves the registry untouched.
"""
from .commands import Command
from .faults import RegistrationError, DuplicatedSwitchError
from .utils import mirror


class Registry:
    """
    Ordered collection of commands with switch lookup.

    Properties
    - commands: tuple of Command, in registration order.
    - switches: read-only mapping of switch → Command.
    """

    commands = mirror("commands")
    switches = mirror("switches")

    def __init__(self, commands=(), /):
        self._commands = []
        self._switches = {}
        for command in commands:
            self.register(command)

    @classmethod
    def merge(cls, builtins, consumers, /):
        """
        Build a registry from built-in commands, then consumer commands.

        A consumer command with the identity of a built-in one overrides it.
        Returns (registry, overridden): 'overridden' lists the replaced commands.
        """
        self = cls(builtins)
        overridden = []
        for command in consumers:
            if (replaced := self.register(command)) is not None:
                overridden.append(replaced)
        return self, tuple(overridden)

    def register(self, command, /):
        """
        Add 'command', or replace the registered command with the same name.

        Returns
        - the replaced Command, or None when 'command' was new.

        Raises
        - RegistrationError: 'command' is not a Command.
        - DuplicatedSwitchError: one of its switches belongs to another command.
        """
        if not isinstance(command, Command):
            raise RegistrationError(f"cannot register {command!r}: not a command handler")

        for switch in command.switches:
            owner = self._switches.get(switch)
            if owner is not None and owner.name != command.name:
                raise DuplicatedSwitchError(
                    f"switch {switch!r} of [{command.name}] is already handled by [{owner.name}]",
                    switch=switch,
                    command=command.name,
                    owner=owner.name,
                )

        replaced = None
        for index, existing in enumerate(self._commands):
            if existing.name == command.name:
                replaced = existing
                self._commands[index] = command
                break
        else:
            self._commands.append(command)

        self._switches = {switch: owner for owner in self._commands for switch in owner.switches}
        return replaced

    def lookup(self, switch, /):
        """
        return the command owning 'switch' ("-x" or "--long"), or None.
        """
        return self._switches.get(switch)

    def __contains__(self, switch):
        return switch in self._switches

    def __iter__(self):
        return iter(tuple(self._commands))

    def __len__(self):
        return len(self._commands)

    def __repr__(self):
        return f"registry({', '.join(command.name for command in self._commands)})"


__all__ = (
    "Registry",
)
