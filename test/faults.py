"""
Faults module behavioral tests (codes, derivation, rendering, shell mode).

Scope
- FaultCode normalization, including the __main__.__codes__ override.
- copy.replace derivation and trigger() contract for errors and warnings.
- Rich rendering of headers, messages and hints (plain and fancy).
- Shell mode: errors render on stderr and exit 1, help renders on stdout and exits 0,
  warnings render without going through the warnings module.

Conventions
- Test method names follow CamelCase per project convention.
- Output is captured with contextlib redirection; rich resolves sys.stdout/sys.stderr
  at print time.
"""

from __future__ import annotations

import contextlib
import copy
import io
import unittest
import warnings
from unittest import TestCase

from rich.console import Console

from argmatch import (
    Parser,
    ArgumentException,
    ArityMismatchError,
    ParseError,
    StrayValueWarning,
    UndefinedOptionError,
    FaultCode,
    trigger,
)


def render(renderable, width=100):
    console = Console(file=io.StringIO(), width=width, color_system=None, force_terminal=False)
    console.print(renderable)
    return console.file.getvalue()


class TestFaultCode(TestCase):
    """Behavioral tests for FaultCode."""

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.ARITY_MISMATCH.normalize(), "11122")

    def testNormalizeUsesHostMapping(self):
        main = __import__("__main__")
        sentinel = object()
        previous = getattr(main, "__codes__", sentinel)
        main.__codes__ = {FaultCode.ARITY_MISMATCH: "E-ARITY"}
        try:
            self.assertEqual(FaultCode.ARITY_MISMATCH.normalize(), "E-ARITY")
            self.assertEqual(FaultCode.STRAY_VALUE.normalize(), "11141")
        finally:
            if previous is sentinel:
                del main.__codes__
            else:
                main.__codes__ = previous

    def testCodesAreUnique(self):
        self.assertEqual(len({code.value for code in FaultCode}), len(FaultCode))


class TestFaults(TestCase):
    """Behavioral tests for fault objects and trigger()."""

    def setUp(self):
        self.fault = ArityMismatchError(
            "option '-p' expects exactly 2 values",
            title="arity mismatch",
            code=FaultCode.ARITY_MISMATCH,
            hint="pass two values",
        )

    def testMessageAndOptions(self):
        self.assertEqual(str(self.fault), "option '-p' expects exactly 2 values")
        self.assertEqual(self.fault.hint, "pass two values")
        self.assertIs(self.fault.code, FaultCode.ARITY_MISMATCH)
        with self.assertRaises(TypeError):
            self.fault.options["hint"] = "other"

    def testHierarchy(self):
        self.assertIsInstance(self.fault, ParseError)
        self.assertIsInstance(self.fault, ArgumentException)

    def testReplaceMergesOptions(self):
        derived = copy.replace(self.fault, prog="tool")
        self.assertIsInstance(derived, ArityMismatchError)
        self.assertIsNot(derived, self.fault)
        self.assertEqual(derived.options["prog"], "tool")
        self.assertEqual(derived.hint, "pass two values")
        self.assertNotIn("prog", self.fault.options)

    def testTriggerRaisesDerivedCopy(self):
        with self.assertRaises(ArityMismatchError) as context:
            trigger(self.fault, prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testTriggerRejectsForeignObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))

    def testTriggerWarns(self):
        warning = StrayValueWarning("ignoring 'x'", code=FaultCode.STRAY_VALUE_SKIPPED)
        with self.assertWarns(StrayValueWarning) as context:
            trigger(warning, prog="tool")
        self.assertEqual(str(context.warning), "ignoring 'x'")
        self.assertEqual(context.warning.options["prog"], "tool")


class TestRendering(TestCase):
    """Behavioral tests for rich rendering of faults."""

    def testPlainHeaderMessageAndHint(self):
        output = render(copy.replace(
            ArityMismatchError("expects exactly 2 values", title="arity mismatch", code=FaultCode.ARITY_MISMATCH, hint="pass two"),
            prog="tool",
        ))
        self.assertIn("[ tool — 11122 | Arity Mismatch ]", output)
        self.assertIn("expects exactly 2 values", output)
        self.assertIn("→ pass two", output)

    def testMissingCodeAndTitleFallBack(self):
        output = render(ArityMismatchError("boom", prog="tool"))
        self.assertIn("[ tool — ? | Aritymismatcherror ]", output)

    def testFancyUsesPanel(self):
        output = render(copy.replace(
            ArityMismatchError("boom", title="arity mismatch", code=FaultCode.ARITY_MISMATCH),
            prog="tool",
            fancy=True,
        ))
        self.assertIn("Arity Mismatch", output)
        self.assertIn("boom", output)
        self.assertIn("╭", output)

    def testWarningRenders(self):
        output = render(StrayValueWarning("ignoring 'x'", title="stray value", code=FaultCode.STRAY_VALUE_SKIPPED, prog="tool"))
        self.assertIn("[ tool — 12141 | Stray Value ]", output)


class TestShellMode(TestCase):
    """Behavioral tests for shell-mode surfacing."""

    def testErrorExitsWithStatusOne(self):
        parser = Parser("tool", shell=True)
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            parser.parse(["--nope"])
        self.assertEqual(context.exception.code, 1)
        self.assertIn("unknown option '--nope'", stderr.getvalue())
        self.assertIn("Unknown Option", stderr.getvalue())

    def testHelpExitsWithStatusZero(self):
        parser = Parser("tool", "Do things.", shell=True)
        parser.add_positional("x")
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            parser.parse(["-h"])
        self.assertEqual(context.exception.code, 0)
        self.assertIn("usage: tool", stdout.getvalue())
        self.assertIn("Do things.", stdout.getvalue())

    def testWarningIsPrintedNotWarned(self):
        parser = Parser("tool", strict=False, shell=True)
        parser.add_optional("-a")
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            bindings = parser.parse(["-a", "x", "y"])
        self.assertEqual(caught, [])
        self.assertEqual(bindings["-a"], ["x"])
        self.assertIn("Stray Value", stderr.getvalue())

    def testNonShellRaises(self):
        with self.assertRaises(UndefinedOptionError):
            Parser("tool").parse(["--nope"])


if __name__ == "__main__":
    unittest.main()
