"""
Converters module behavioral tests (default table and extension).

Scope
- Validate integer tags: ranges, prefixed literals, rejection messages.
- Validate bool/char/path/float/str parsers.
- Validate extend(): read-only result, replacement, argument checks.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os.path
import unittest
from unittest import TestCase

from switchyard.converters import DEFAULTS, extend


class TestDefaultConverters(TestCase):
    """Behavioral tests for the default tag table."""

    def testByteRange(self):
        self.assertEqual(DEFAULTS["byte"]("0"), 0)
        self.assertEqual(DEFAULTS["byte"]("255"), 255)
        with self.assertRaises(ValueError):
            DEFAULTS["byte"]("256")
        with self.assertRaises(ValueError):
            DEFAULTS["byte"]("-1")

    def testPrefixedLiterals(self):
        self.assertEqual(DEFAULTS["byte"]("0xFF"), 255)
        self.assertEqual(DEFAULTS["uint16"]("0b101"), 5)
        self.assertEqual(DEFAULTS["int"]("-0o10"), -8)

    def testSignedRanges(self):
        self.assertEqual(DEFAULTS["sbyte"]("-128"), -128)
        with self.assertRaises(ValueError):
            DEFAULTS["sbyte"]("128")
        self.assertEqual(DEFAULTS["int64"](str(-(1 << 63))), -(1 << 63))
        with self.assertRaises(ValueError):
            DEFAULTS["int32"](str(1 << 31))

    def testNonNumericRejected(self):
        with self.assertRaises(ValueError):
            DEFAULTS["int"]("three")

    def testBooleanWords(self):
        for word in ("true", "YES", "on", "1"):
            self.assertIs(DEFAULTS["bool"](word), True)
        for word in ("false", "No", "off", "0"):
            self.assertIs(DEFAULTS["bool"](word), False)
        with self.assertRaises(ValueError):
            DEFAULTS["bool"]("maybe")

    def testCharacterMustBeSingle(self):
        self.assertEqual(DEFAULTS["char"]("x"), "x")
        with self.assertRaises(ValueError):
            DEFAULTS["char"]("xy")

    def testPathExpandsUser(self):
        self.assertEqual(DEFAULTS["path"]("~"), os.path.expanduser("~"))

    def testFloatAndString(self):
        self.assertEqual(DEFAULTS["float"]("1.5"), 1.5)
        self.assertEqual(DEFAULTS["str"]("text"), "text")

    def testTableIsReadOnly(self):
        with self.assertRaises(TypeError):
            DEFAULTS["hex"] = int  # type: ignore[index]


class TestExtend(TestCase):
    """Behavioral tests for extend()."""

    def testAddsTags(self):
        table = extend(hex=lambda text: int(text, 16))
        self.assertEqual(table["hex"]("ff"), 255)
        self.assertIn("byte", table)
        self.assertNotIn("hex", DEFAULTS)

    def testReplacesTags(self):
        table = extend(DEFAULTS, str=str.upper)
        self.assertEqual(table["str"]("abc"), "ABC")
        self.assertEqual(DEFAULTS["str"]("abc"), "abc")

    def testRejectsNonCallables(self):
        with self.assertRaises(TypeError):
            extend(hex=16)

    def testRejectsNonMappings(self):
        with self.assertRaises(TypeError):
            extend([("hex", int)])


if __name__ == "__main__":
    unittest.main()
