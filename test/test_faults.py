"""
Fault hierarchy and rendering tests.

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes through a rich Console bound to an io.StringIO.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase

from rich.console import Console

from helmsman import (
    CommandException,
    OperationError,
    ArgumentError,
    CommandNotFoundError,
    ArityError,
    FormatError,
    BindError,
    ConversionError,
    SignatureError,
    FaultCode,
    RECOVERABLE,
)


def render(renderable):
    stream = io.StringIO()
    Console(file=stream, width=200, color_system=None, highlight=False).print(renderable)
    return stream.getvalue()


class TestHierarchy(TestCase):
    """Families recognized by the read loop."""

    def testRecoverableFamilies(self):
        for kind in (CommandNotFoundError, ArityError, FormatError, BindError, ConversionError):
            self.assertTrue(issubclass(kind, RECOVERABLE), kind)
        self.assertFalse(issubclass(SignatureError, RECOVERABLE))

    def testBuiltinBases(self):
        self.assertTrue(issubclass(ArgumentError, ValueError))
        self.assertTrue(issubclass(SignatureError, TypeError))

    def testCodeOverride(self):
        fault = OperationError("busy", code=FaultCode.NOT_ENOUGH_ARGUMENTS, title="busy right now")
        self.assertEqual(fault.code, FaultCode.NOT_ENOUGH_ARGUMENTS)
        self.assertEqual(fault.title, "busy right now")
        self.assertEqual(CommandNotFoundError().code, FaultCode.UNKNOWN_COMMAND)

    def testNonStringMessageRejected(self):
        with self.assertRaises(TypeError):
            CommandException(42)


class TestRendering(TestCase):
    """rich rendering of faults."""

    def testRichRendering(self):
        output = render(CommandNotFoundError("unknown command 'x'", hint="run 'help'"))
        self.assertIn("[ helmsman — 11101 | Unknown Command ]", output)
        self.assertIn("unknown command 'x'", output)
        self.assertIn("→ run 'help'", output)

    def testRenderWithProgram(self):
        output = render(ArityError("too few").render(prog="app"))
        self.assertIn("[ app — 11102 | Not Enough Arguments ]", output)
        self.assertNotIn("→", output)


if __name__ == "__main__":
    unittest.main()
