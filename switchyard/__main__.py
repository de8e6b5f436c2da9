"""
Run the built-in handlers from a shell: python -m switchyard [switches...]

The verdict doubles as the exit status: OK → 0, ERROR → 1, FATAL_ERROR → 2.
"""
import sys

from .cli import CommandLine
from .commands import Result
from .faults import RegistrationError, report

__prog__ = "switchyard"


def main(argv=None):
    try:
        commandline = CommandLine()
    except RegistrationError as fault:
        report(fault)
        return int(Result.FATAL_ERROR)

    with commandline.logger:
        verdict = commandline.process(sys.argv[1:] if argv is None else argv)
        commandline.logger.flush()
    return int(verdict)


if __name__ == "__main__":
    sys.exit(main())
