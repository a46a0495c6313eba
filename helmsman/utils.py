"""
Helmsman utilities shared by the tokens/arguments/commands/shell layers.

Overview
- Unset: the "no default declared" marker. A parameter whose default is None
  has a real default; a parameter whose default is Unset has none.
  • falsey, printed as "Unset", one instance per process, survives copy and pickle.
- coalesce(value, default=None): replace Unset (and only Unset) with a default.
- mirror("attr"): read-only property over self._attr; containers come back frozen.
- ordinal(number): "first", "second", …, "11th" for positions in messages.

Quick examples
    >>> coalesce(Unset, "fallback")
    'fallback'
    >>> coalesce(None, "fallback") is None
    True
    >>> ordinal(3)
    'third'
"""
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final

_WORDS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


@final
class UnsetType:
    """
    Type of the Unset marker. Calling it always returns the same instance.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        # pickled by reference to the module-level name
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return 'default' when 'object' is Unset, else 'object' itself (None, 0 and "" included).
    """
    return default if object is Unset else object


def _freeze(object):
    if isinstance(object, Sequence) and not isinstance(object, (str, bytes, bytearray)):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Read-only property exposing self._{name}.

    Lists come back as tuples, dicts as mapping proxies and sets as frozensets,
    so callers cannot mutate the backing field through the property.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _freeze(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


@functools.cache
def ordinal(number, /):
    """
    Ordinal label of a 1-based position: words up to ten, then '11th', '22nd', '103rd'.
    """
    if not isinstance(number, int) or isinstance(number, bool):
        raise TypeError("ordinal() argument must be an integer")
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if 10 < number % 100 < 20:
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
