# python
"""
Values module behavioral tests (typed access and the binding map).

Scope
- Validate Values sequence behavior, cast()/castall() conversions and their faults.
- Validate Bindings insert/overwrite, presence checks and undefined lookups.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argmatch import (
    Values,
    Bindings,
    ConversionError,
    IndexOutOfRangeError,
    UndefinedArgumentError,
    FaultCode,
)


class TestValues(TestCase):
    """Behavioral tests for the Values container."""

    def testCountAndIteration(self):
        values = Values(["a", "b", "c"])
        self.assertEqual(len(values), 3)
        self.assertEqual(list(values), ["a", "b", "c"])
        self.assertEqual(values[1], "b")

    def testEqualityWithSequences(self):
        self.assertEqual(Values(["a", "b"]), ["a", "b"])
        self.assertEqual(Values(["a", "b"]), ("a", "b"))
        self.assertNotEqual(Values(["a", "b"]), "ab")
        self.assertEqual(Values(), [])

    def testSliceReturnsValues(self):
        sliced = Values(["a", "b", "c"], key="x")[1:]
        self.assertIsInstance(sliced, Values)
        self.assertEqual(sliced, ["b", "c"])
        self.assertEqual(sliced.key, "x")

    def testNonStringTokensRejected(self):
        with self.assertRaises(TypeError):
            Values([1, 2])

    def testCastDefaultsToFirstString(self):
        self.assertEqual(Values(["a", "b"]).cast(), "a")

    def testCastInteger(self):
        values = Values(["1", "-2", "+7"])
        self.assertEqual(values.cast(int), 1)
        self.assertEqual(values.cast(int, 1), -2)
        self.assertEqual(values.cast("long", 2), 7)

    def testCastFloat(self):
        values = Values(["-3.14", ".5", "5.", "1e3"])
        self.assertEqual(values.cast(float), -3.14)
        self.assertEqual(values.cast("double", 1), 0.5)
        self.assertEqual(values.cast("float", 2), 5.0)
        self.assertEqual(values.cast(float, 3), 1000.0)

    def testCastIntegerRejectsNonIntegers(self):
        for token in ("3.5", "1e3", " 1", "1_000", "abc", ""):
            with self.subTest(token=token), self.assertRaises(ConversionError):
                Values([token]).cast(int)

    def testCastFloatRejectsNonNumbers(self):
        for token in ("nan", "inf", "1.2.3", "abc", "-"):
            with self.subTest(token=token), self.assertRaises(ConversionError):
                Values([token]).cast(float)

    def testCastRejectsNonAsciiDigits(self):
        for token in ("\u0663", "-\u0663", "\uff11\uff12"):
            with self.subTest(token=token):
                with self.assertRaises(ConversionError):
                    Values([token]).cast(int)
                with self.assertRaises(ConversionError):
                    Values([token]).cast(float)

    def testCastFloatRejectsOverflow(self):
        for token in ("1e999", "-1e999"):
            with self.subTest(token=token), self.assertRaises(ConversionError):
                Values([token]).cast(float)
        self.assertEqual(Values(["1e308"]).cast(float), 1e308)

    def testConversionErrorIsValueError(self):
        with self.assertRaises(ValueError) as context:
            Values(["x"], key="--count").cast(int)
        self.assertIs(context.exception.code, FaultCode.CONVERSION)
        self.assertIn("'--count'", str(context.exception))

    def testCastIndexOutOfRange(self):
        with self.assertRaises(IndexOutOfRangeError) as context:
            Values(["a"]).cast(str, 1)
        self.assertIsInstance(context.exception, IndexError)
        self.assertIs(context.exception.code, FaultCode.INDEX_OUT_OF_RANGE)

    def testCastNegativeIndexOutOfRange(self):
        with self.assertRaises(IndexOutOfRangeError) as context:
            Values(["a", "b"]).cast(str, -1)
        self.assertEqual(context.exception.options["index"], -1)

    def testCastOnEmptyContainerOutOfRange(self):
        with self.assertRaises(IndexOutOfRangeError):
            Values().cast(int)

    def testIndexCheckedBeforeConversion(self):
        with self.assertRaises(IndexOutOfRangeError):
            Values(["x"]).cast(int, 5)

    def testCastUnknownTargetRejected(self):
        with self.assertRaises(TypeError):
            Values(["1"]).cast(bytes)
        with self.assertRaises(TypeError):
            Values(["1"]).castall("complex")

    def testCastAll(self):
        self.assertEqual(Values(["1", "2", "3"]).castall(int), (1, 2, 3))
        self.assertEqual(Values(["1.5", "-2"]).castall(float), (1.5, -2.0))
        self.assertEqual(Values(["a"]).castall(), ("a",))
        self.assertEqual(Values().castall(int), ())

    def testCastAllFailsOnFirstBadToken(self):
        with self.assertRaises(ConversionError) as context:
            Values(["1", "x", "y"]).castall(int)
        self.assertEqual(context.exception.options["input"], "x")
        self.assertEqual(context.exception.options["index"], 1)


class TestBindings(TestCase):
    """Behavioral tests for the Bindings map."""

    def testAddAndGet(self):
        bindings = Bindings()
        bindings.add("file", ["a.txt"])
        self.assertIn("file", bindings)
        self.assertEqual(bindings["file"], ["a.txt"])
        self.assertEqual(bindings["file"].key, "file")

    def testUndefinedLookupRaises(self):
        bindings = Bindings()
        with self.assertRaises(UndefinedArgumentError) as context:
            bindings["missing"]
        self.assertIsInstance(context.exception, KeyError)
        self.assertIs(context.exception.code, FaultCode.UNDEFINED_ARGUMENT)
        self.assertEqual(str(context.exception), "argument 'missing' was not given")

    def testGetReturnsDefaultForUndefined(self):
        self.assertIsNone(Bindings().get("missing"))

    def testEmptyBindingIsPresent(self):
        bindings = Bindings()
        bindings.add("-v", [])
        self.assertIn("-v", bindings)
        self.assertEqual(len(bindings["-v"]), 0)

    def testAddOverwrites(self):
        bindings = Bindings()
        bindings.add("-a", ["1"])
        bindings.add("-a", ["2"])
        self.assertEqual(bindings["-a"], ["2"])
        self.assertEqual(len(bindings), 1)

    def testIterationKeepsInsertionOrder(self):
        bindings = Bindings()
        for key in ("b", "a", "c"):
            bindings.add(key, [])
        self.assertEqual(list(bindings), ["b", "a", "c"])

    def testKeysMustBeStrings(self):
        with self.assertRaises(TypeError):
            Bindings().add(1, [])


if __name__ == "__main__":
    unittest.main()
