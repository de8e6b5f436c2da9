"""
Registry module behavioral tests (registration, lookup, overrides).

Scope
- Validate switch lookup by display form ("-x" / "--long").
- Validate single ownership: collisions between different handlers fail.
- Validate overrides by identity: in-place replacement, no stale switches.

Conventions
- Test method names follow CamelCase per project convention.
- Handlers are declared with the public @handler decorator.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from switchyard import Registry, Command, Metadata, Parameter, handler
from switchyard.faults import RegistrationError, DuplicatedSwitchError


@handler("Display the help screen.", "-?, -h, --help")
def help():
    pass


@handler("Set the verbosity level.", "-v, --verbosity", Parameter("level", "byte"))
def verbosity(level):
    pass


class TestRegistry(TestCase):
    """Behavioral tests for Registry."""

    def testLookupByShortAndLongSwitch(self):
        registry = Registry((help, verbosity))
        self.assertIs(registry.lookup("-h"), help)
        self.assertIs(registry.lookup("-?"), help)
        self.assertIs(registry.lookup("--verbosity"), verbosity)
        self.assertIsNone(registry.lookup("-x"))

    def testShortAndLongNamespacesAreDistinct(self):
        @handler("Long h.", "--h")
        def long_h():
            pass

        registry = Registry((help, long_h))
        self.assertIs(registry.lookup("-h"), help)
        self.assertIs(registry.lookup("--h"), long_h)

    def testRegistrationOrderIsKept(self):
        registry = Registry((verbosity, help))
        self.assertEqual([command.name for command in registry.commands], ["verbosity", "help"])
        self.assertEqual(len(registry), 2)

    def testCollisionBetweenDifferentHandlersFails(self):
        @handler("Hijack.", "-x, --help")
        def hijack():
            pass

        registry = Registry((help,))
        with self.assertRaises(DuplicatedSwitchError) as context:
            registry.register(hijack)
        self.assertEqual(context.exception.options["owner"], "help")
        self.assertIsNone(registry.lookup("-x"))
        self.assertEqual(len(registry), 1)

    def testSameIdentityReplacesInPlace(self):
        replacement = handler("Friendlier help.", "-h, --usage", name="help")(lambda: None)
        registry = Registry((help, verbosity))
        self.assertIs(registry.register(replacement), help)

        self.assertEqual([command.name for command in registry], ["help", "verbosity"])
        self.assertIs(registry.lookup("-h"), replacement)
        self.assertIs(registry.lookup("--usage"), replacement)
        self.assertNotIn("-?", registry)
        self.assertNotIn("--help", registry)

    def testMergeReportsOverriddenBuiltins(self):
        replacement = handler("Friendlier help.", "-?, -h, --help", name="help")(lambda: None)
        registry, overridden = Registry.merge((help, verbosity), (replacement,))
        self.assertEqual(overridden, (help,))
        self.assertIs(registry.lookup("--help"), replacement)

    def testOnlyCommandsCanBeRegistered(self):
        with self.assertRaises(RegistrationError):
            Registry().register(lambda: None)

    def testSwitchesAreReadOnly(self):
        registry = Registry((help,))
        with self.assertRaises(TypeError):
            registry.switches["-z"] = help  # type: ignore[index]


class TestCommand(TestCase):
    """Behavioral tests for the Command handle itself."""

    def testNameDefaultsToTargetName(self):
        self.assertEqual(verbosity.name, "verbosity")

    def testCommandForwardsCalls(self):
        received = []
        command = Command(received.append, Metadata("Collect.", "-c", Parameter("item")), name="collect")
        command("token")
        self.assertEqual(received, ["token"])

    def testHandles(self):
        self.assertTrue(help.handles("--help"))
        self.assertFalse(help.handles("help"))

    def testNonCallableTargetRejected(self):
        with self.assertRaises(RegistrationError):
            Command("not callable", Metadata("Broken.", "-b"))

    def testNamelessTargetNeedsExplicitName(self):
        class Nameless:
            def __call__(self):
                pass

        with self.assertRaises(RegistrationError):
            handler("Nameless.", "-n")(Nameless())
        self.assertEqual(handler("Nameless.", "-n", name="nameless")(Nameless()).name, "nameless")


if __name__ == "__main__":
    unittest.main()
