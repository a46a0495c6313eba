"""
Helmsman faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings), grouped by domain so logs and searches stay predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves through rich in a lowercased, actionable way.
- Two recognized families for the read loop:
  • OperationError: the line cannot be carried out (unknown command, too few arguments).
  • ArgumentError: the line is malformed or a value cannot be bound.
  Handlers raise either family to report a recoverable failure; the read loop
  renders them and keeps going. Anything else is fatal to the loop.

Hierarchy
    CommandException
    ├── SignatureError (TypeError)           registration time, always fatal
    ├── OperationError
    │   ├── CommandNotFoundError
    │   └── ArityError
    └── ArgumentError (ValueError)
        ├── FormatError
        └── BindError
            └── ConversionError
    CommandWarning
    └── ShadowedCommandWarning

Rendering
- render(prog) / __rich__ return a Group: "[ prog — code | title ]", the message, and a "→ hint" line.
- The program label is the explicit prog argument, else a __prog__ attribute in __main__,
  else the "prog" option.
- Styles can be overridden through a __styles__ mapping in __main__.
"""
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset, coalesce


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - registration (101xx): UNSUPPORTED_TYPE, DUPLICATED_ROLE, MISSING_DEFAULT,
      MISPLACED_VARIADIC, INVALID_PARAMETER
    - routing (111xx): UNKNOWN_COMMAND, NOT_ENOUGH_ARGUMENTS
    - input (112xx): UNTERMINATED_QUOTE, MISSING_ARGUMENT, UNCASTABLE_VALUE
    - handler (113xx): DELEGATED_OPERATION, DELEGATED_ARGUMENT
    - warnings (12xxx): SHADOWED_COMMAND
    """
    # --- registration errors (10xxx) ---
    UNSUPPORTED_TYPE     = 10101
    DUPLICATED_ROLE      = 10102
    MISSING_DEFAULT      = 10103
    MISPLACED_VARIADIC   = 10104
    INVALID_PARAMETER    = 10105

    # --- routing errors (11xxx) ---
    UNKNOWN_COMMAND      = 11101
    NOT_ENOUGH_ARGUMENTS = 11102

    # --- input errors (11xxx) ---
    UNTERMINATED_QUOTE   = 11201
    MISSING_ARGUMENT     = 11202
    UNCASTABLE_VALUE     = 11203

    # --- delegated errors (11xxx) ---
    DELEGATED_OPERATION  = 11301
    DELEGATED_ARGUMENT   = 11302

    # --- warnings (12xxx) ---
    SHADOWED_COMMAND     = 12101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(self, styles, kind, prog=Unset):
    main = __import__("__main__")

    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = coalesce(prog, getattr(main, "__prog__", self.options.get("prog", "helmsman")))
    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(self.code.normalize(), "code"),
        " | ",
        text(self.title.title(), kind + "-title"),
        " ]"
    )
    renders = [header, text(self.message, kind + "-message")]
    if hint := self.options.get("hint"):
        renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))
    return Group(*renders)


class CommandException(Exception):
    """
    Base for every helmsman error.

    Carries a lowercased message plus free-form keyword options (hint, input,
    index, …). 'code' and 'title' default to class-level values and can be
    overridden per instance through the options.
    """
    code = FaultCode.DELEGATED_OPERATION
    title = "command error"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | type(Unset)):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = coalesce(message, "")
        super().__init__(self.message)
        if "code" in options:
            self.code = FaultCode(options["code"])
        if "title" in options:
            self.title = str(options["title"])
        self.options = MappingProxyType(options)

    @property
    def hint(self):
        return self.options.get("hint")

    def render(self, prog=Unset):
        """
        rich renderable of this error; 'prog' overrides the program label.
        """
        return _render(self, {
            "prog-name": "bold #E6E6F0",     # near-white program name
            "code": "bold #00E5FF",          # neon cyan fault code
            "error-title": "bold #FF4DA6",   # pinky title
            "error-message": "#C8C8D0",      # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error", prog)

    def __rich__(self):
        return self.render()


class SignatureError(CommandException, TypeError):
    code = FaultCode.INVALID_PARAMETER
    title = "invalid signature"


class OperationError(CommandException):
    """
    The line cannot be carried out in the current state. Raise it from a handler
    to report a recoverable failure.
    """
    code = FaultCode.DELEGATED_OPERATION
    title = "invalid operation"


class CommandNotFoundError(OperationError):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"


class ArityError(OperationError):
    code = FaultCode.NOT_ENOUGH_ARGUMENTS
    title = "not enough arguments"


class ArgumentError(CommandException, ValueError):
    """
    A value is malformed or cannot be bound. Raise it from a handler to reject
    an argument the binder accepted.
    """
    code = FaultCode.DELEGATED_ARGUMENT
    title = "invalid argument"


class FormatError(ArgumentError):
    code = FaultCode.UNTERMINATED_QUOTE
    title = "unterminated quote"


class BindError(ArgumentError):
    code = FaultCode.MISSING_ARGUMENT
    title = "missing argument"


class ConversionError(BindError):
    code = FaultCode.UNCASTABLE_VALUE
    title = "uncastable value"


class CommandWarning(Warning):
    code = FaultCode.SHADOWED_COMMAND
    title = "command warning"

    def __init__(self, message=Unset, /, **options):
        if not isinstance(message, str | type(Unset)):
            raise TypeError(f"{type(self).__name__}() message must be a string")
        self.message = coalesce(message, "")
        super().__init__(self.message)
        self.options = MappingProxyType(options)

    def render(self, prog=Unset):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",            # amber fault code for warnings
            "warning-title": "bold #FFC2E0",
            "warning-message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning", prog)

    def __rich__(self):
        return self.render()


class ShadowedCommandWarning(CommandWarning):
    code = FaultCode.SHADOWED_COMMAND
    title = "shadowed command"


RECOVERABLE = (OperationError, ArgumentError)
"""The fault families the read loop renders and survives."""


__all__ = (
    "FaultCode",
    "CommandException",
    "SignatureError",
    "OperationError",
    "CommandNotFoundError",
    "ArityError",
    "ArgumentError",
    "FormatError",
    "BindError",
    "ConversionError",
    "CommandWarning",
    "ShadowedCommandWarning",
    "RECOVERABLE",
)
