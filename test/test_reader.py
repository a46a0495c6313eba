"""
LineReader tests (ordering, end of input, cancellation, stop predicate).

Conventions
- Test method names follow CamelCase per project convention.
- Blocking streams are simulated with an os.pipe that is never written.
"""

from __future__ import annotations

import io
import os
import threading
import unittest
from unittest import TestCase

from helmsman import LineReader


class TestLineReader(TestCase):
    """Behavior of LineReader.readline()."""

    def testLinesInOrderWithoutEndings(self):
        reader = LineReader(io.StringIO("first\r\nsecond\n"))
        self.assertEqual(reader.readline(), "first")
        self.assertEqual(reader.readline(), "second")

    def testEndOfInputRaisesRepeatedly(self):
        reader = LineReader(io.StringIO(""))
        with self.assertRaises(EOFError):
            reader.readline()
        self.assertTrue(reader.exhausted)
        with self.assertRaises(EOFError):
            reader.readline()

    def testCancelledBeforeInput(self):
        read, write = os.pipe()
        self.addCleanup(os.close, write)
        stream = os.fdopen(read)
        cancel = threading.Event()
        cancel.set()
        reader = LineReader(stream)
        self.assertIsNone(reader.readline(cancel))

    def testCancelWhileWaiting(self):
        read, write = os.pipe()
        self.addCleanup(os.close, write)
        stream = os.fdopen(read)
        cancel = threading.Event()
        threading.Timer(0.1, cancel.set).start()
        self.assertIsNone(LineReader(stream, interval=0.01).readline(cancel))

    def testStopPredicate(self):
        reader = LineReader(io.StringIO("never read\n"))
        self.assertIsNone(reader.readline(stopped=lambda: True))

    def testLateLineKeptForNextCall(self):
        reader = LineReader(io.StringIO("kept\n"))
        reader.readline(stopped=lambda: True)
        self.assertEqual(reader.readline(), "kept")

    def testStreamFailureReachesTheCaller(self):
        class Broken:
            def readline(self):
                raise RuntimeError("device gone")

        cancel = threading.Event()
        timer = threading.Timer(5, cancel.set)
        timer.start()
        self.addCleanup(timer.cancel)
        reader = LineReader(Broken(), interval=0.01)
        with self.assertRaises(RuntimeError):
            reader.readline(cancel)
        self.assertFalse(cancel.is_set())
        self.assertTrue(reader.exhausted)

    def testNonStreamRejected(self):
        with self.assertRaises(TypeError):
            LineReader(object())

    def testNonPositiveIntervalRejected(self):
        with self.assertRaises(ValueError):
            LineReader(io.StringIO(""), interval=0)


if __name__ == "__main__":
    unittest.main()
