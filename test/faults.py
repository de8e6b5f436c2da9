"""
Faults module behavioral tests (codes, options, rich rendering).

Scope
- Validate class-level defaults and per-instance option overrides.
- Validate the rich rendition (header, message, hint) with and without colour.
- Validate report() on a captured console.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from switchyard.faults import (
    FaultCode,
    CommandException,
    RegistrationError,
    InvalidSwitchError,
    UnrecognizedSwitchError,
    WorkingDirectoryError,
    DelegatedCommandError,
    report,
)


def _render(fault):
    output = io.StringIO()
    Console(file=output, width=200, color_system=None).print(fault)
    return output.getvalue()


class TestFaults(TestCase):
    """Behavioral tests for fault metadata."""

    def testClassDefaults(self):
        fault = UnrecognizedSwitchError("unrecognized switch: '-x'", switch="-x")
        self.assertEqual(fault.code, FaultCode.UNRECOGNIZED_SWITCH)
        self.assertEqual(fault.options["switch"], "-x")
        self.assertEqual(str(fault), "unrecognized switch: '-x'")

    def testOptionsOverrideDefaults(self):
        fault = RegistrationError("no name", hint="pass name=...")
        self.assertEqual(fault.hint, "pass name=...")
        self.assertEqual(RegistrationError.hint, "declare handlers with @handler(...) before registering them")

    def testHierarchy(self):
        self.assertTrue(issubclass(InvalidSwitchError, RegistrationError))
        self.assertTrue(issubclass(WorkingDirectoryError, DelegatedCommandError))
        self.assertTrue(issubclass(DelegatedCommandError, CommandException))

    def testMessageMustBeAString(self):
        with self.assertRaises(TypeError):
            CommandException(42)  # type: ignore[arg-type]

    def testOptionsAreReadOnly(self):
        fault = CommandException("message", switch="-x")
        with self.assertRaises(TypeError):
            fault.options["switch"] = "-y"  # type: ignore[index]

    def testCodesAreGroupedByPhase(self):
        self.assertEqual(FaultCode.INVALID_SWITCH // 10, 1110)
        self.assertEqual(FaultCode.EXPECTED_COMMAND // 10, 1111)
        self.assertEqual(FaultCode.MISSING_PARAMETERS // 10, 1112)
        self.assertEqual(FaultCode.UNRESOLVABLE_DIRECTORY // 10, 1113)


class TestRendering(TestCase):
    """Behavioral tests for __rich__ and report()."""

    def testRichRenditionHasHeaderMessageAndHint(self):
        rendered = _render(InvalidSwitchError("'-1' is not a valid short switch"))
        self.assertIn(str(int(FaultCode.INVALID_SWITCH)), rendered)
        self.assertIn("Invalid Switch", rendered)
        self.assertIn("'-1' is not a valid short switch", rendered)
        self.assertIn("→", rendered)

    def testHintCanBeSuppressed(self):
        rendered = _render(CommandException("plain failure", hint=""))
        self.assertIn("plain failure", rendered)
        self.assertNotIn("→", rendered)

    def testColorlessRenditionKeepsText(self):
        rendered = _render(WorkingDirectoryError("could not resolve path 'nowhere'", colorful=False))
        self.assertIn("Unresolvable Directory", rendered)
        self.assertIn("nowhere", rendered)

    def testReportPrintsToGivenConsole(self):
        output = io.StringIO()
        report(UnrecognizedSwitchError("unrecognized switch: '-x'"), console=Console(file=output, width=200))
        self.assertIn("unrecognized switch: '-x'", output.getvalue())

    def testReportRejectsOtherExceptions(self):
        with self.assertRaises(TypeError):
            report(ValueError("nope"))  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
