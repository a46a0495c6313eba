"""
Commands module behavioral tests (signatures, builders, registry lookup).

Scope
- Validate signature rules (special roles, defaults, variadic placement, names).
- Validate the fluent builder and handler arity checks.
- Validate registry order, first-match lookup and shadowing warnings.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (command, Command, Signature, Registry).
"""

from __future__ import annotations

import unittest
import warnings
from unittest import TestCase

from helmsman import (
    command,
    Command,
    CommandBuilder,
    Signature,
    Registry,
    Parameter,
    Role,
    SignatureError,
    ShadowedCommandWarning,
    FaultCode,
)


def save_item(key, value, flags):
    return key, value, flags


def quit():
    pass


class TestSignature(TestCase):
    """Validation rules of Signature."""

    def testRequiredCountsPositionals(self):
        signature = Signature((
            Parameter("a", Role.POSITIONAL),
            Parameter("b", Role.NAMED, int, default=1),
            Parameter("flags", Role.FLAGS, default=()),
        ))
        self.assertEqual(signature.required, 1)
        self.assertEqual(len(signature), 3)
        self.assertEqual(signature[0].name, "a")

    def testDuplicatedSpecialRoleRejected(self):
        with self.assertRaises(SignatureError) as context:
            Signature((
                Parameter("one", Role.FLAGS, default=()),
                Parameter("two", Role.FLAGS, default=()),
            ))
        self.assertEqual(context.exception.code, FaultCode.DUPLICATED_ROLE)

    def testSpecialRoleWithoutDefaultRejected(self):
        with self.assertRaises(SignatureError) as context:
            Signature((Parameter("caller", Role.CALLER),))
        self.assertEqual(context.exception.code, FaultCode.MISSING_DEFAULT)

    def testVariadicMustBeLast(self):
        with self.assertRaises(SignatureError) as context:
            Signature((
                Parameter("extra", Role.VARIADIC, default=()),
                Parameter("a", Role.POSITIONAL),
            ))
        self.assertEqual(context.exception.code, FaultCode.MISPLACED_VARIADIC)

    def testDuplicatedNameRejected(self):
        with self.assertRaises(SignatureError):
            Signature((Parameter("a", Role.POSITIONAL), Parameter("a", Role.POSITIONAL)))


class TestBuilder(TestCase):
    """Fluent declaration of commands."""

    def testBuildSaveItem(self):
        built = (
            command(save_item, name="save-item", descr="stores a value")
            .positional("key")
            .named("value", str | None, default=None)
            .with_flags()
            .build()
        )
        self.assertIsInstance(built, Command)
        self.assertEqual(built.name, "save-item")
        self.assertEqual(built.descr, "stores a value")
        self.assertEqual(built.required, 1)
        self.assertEqual([p.role for p in built.signature], [Role.POSITIONAL, Role.NAMED, Role.FLAGS])
        self.assertEqual(built("k", "v", ()), ("k", "v", ()))

    def testNameDefaultsToHandlerName(self):
        self.assertEqual(command(quit).build().name, "quit")

    def testParamPicksRoleFromDefault(self):
        built = command(save_item).param("key").param("value", int, default=0).with_flags().build()
        self.assertEqual(built.signature[0].role, Role.POSITIONAL)
        self.assertEqual(built.signature[1].role, Role.NAMED)

    def testHandlerArityMismatchRejected(self):
        with self.assertRaises(SignatureError):
            command(quit).positional("extra").build()

    def testNameWithSpacesRejected(self):
        with self.assertRaises(SignatureError):
            command(quit, name="two words").build()

    def testEmptyDescrRejected(self):
        with self.assertRaises(SignatureError):
            command(quit, descr="   ").build()

    def testNonCallableRejected(self):
        with self.assertRaises(SignatureError):
            CommandBuilder("quit")


class TestRegistry(TestCase):
    """Ordering, lookup and shadowing."""

    def testOrderAndBuildersAccepted(self):
        registry = Registry((command(quit), command(save_item, name="save").positional("key")
                             .named("value", default="").with_flags()))
        self.assertEqual([c.name for c in registry], ["quit", "save"])
        self.assertEqual(len(registry), 2)

    def testFindIsCaseSensitiveByDefault(self):
        registry = Registry((command(quit, name="Quit"),))
        self.assertIsNone(registry.find("quit"))
        self.assertEqual(registry.find("quit", ignore_case=True).name, "Quit")

    def testFirstMatchWinsAndWarns(self):
        first = command(quit, name="stop").build()
        second = command(quit, name="stop").build()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            registry = Registry((first, second))
        self.assertIs(registry.find("stop"), first)
        self.assertEqual(len(caught), 1)
        self.assertIsInstance(caught[0].message, ShadowedCommandWarning)
        self.assertIn("shadowed by an earlier one", str(caught[0].message))

    def testCaseOnlyCollisionWarnsAboutIgnoreCase(self):
        upper = command(quit, name="Quit").build()
        lower = command(quit, name="quit").build()
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            registry = Registry((upper, lower))
        self.assertIs(registry.find("quit"), lower)
        self.assertIs(registry.find("quit", ignore_case=True), upper)
        self.assertEqual(len(caught), 1)
        self.assertIn("when ignore_case is enabled", str(caught[0].message))

    def testEmptyRegistryIsFalsey(self):
        self.assertFalse(Registry())

    def testNonCommandRejected(self):
        with self.assertRaises(SignatureError):
            Registry((quit,))


if __name__ == "__main__":
    unittest.main()
