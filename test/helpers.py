"""
Utilities module behavioral tests (sentinel, mirror, humanize, program).

Scope
- Validate Unset semantics and coalesce().
- Validate humanize() scaling of elapsed times.
- Validate program() lookup order.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase, mock

from switchyard.utils import Unset, UnsetType, coalesce, humanize, mirror, program, rename


class TestSentinel(TestCase):
    """Behavioral tests for Unset and coalesce()."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testCoalesceKeepsFalseyValues(self):
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")

    def testUnionWithUnset(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(1, str | Unset)


class TestMirror(TestCase):
    """Behavioral tests for mirror()."""

    def testContainersAreFrozen(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2

    def testRename(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")


class TestHumanize(TestCase):
    """Behavioral tests for humanize()."""

    def testSeconds(self):
        self.assertEqual(humanize(2.5), "2.5 seconds")

    def testMilliseconds(self):
        self.assertEqual(humanize(0.00125), "1.25 milliseconds")

    def testMicroseconds(self):
        self.assertEqual(humanize(0.000042), "42 microseconds")

    def testLongDurationsStayInSeconds(self):
        self.assertEqual(humanize(1500), "1500 seconds")

    def testZero(self):
        self.assertEqual(humanize(0), "0 seconds")

    def testRejectsNonNumbers(self):
        with self.assertRaises(TypeError):
            humanize("1")


class TestProgram(TestCase):
    """Behavioral tests for program()."""

    def testHostOverride(self):
        with mock.patch.object(sys.modules["__main__"], "__prog__", "tool", create=True):
            self.assertEqual(program(), "tool")

    def testFallsBackToArgv(self):
        with mock.patch.object(sys, "argv", ["/usr/local/bin/tool"]):
            with mock.patch.object(sys.modules["__main__"], "__prog__", "", create=True):
                self.assertEqual(program(), "tool")

    def testFallsBackToPackageName(self):
        with mock.patch.object(sys, "argv", []):
            with mock.patch.object(sys.modules["__main__"], "__prog__", "", create=True):
                self.assertEqual(program(), "switchyard")


if __name__ == "__main__":
    unittest.main()
