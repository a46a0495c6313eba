"""
Helmsman command layer: declare handlers, classify their parameters, look them up.

What this module provides
- Signature: the ordered, role-classified parameter list of a command.
  • at most one FLAGS, one CALLER and one VARIADIC parameter;
  • each of those three must declare a default;
  • VARIADIC must be the last parameter;
  • parameter names are unique;
  • required = number of POSITIONAL parameters.
- Command: an immutable pairing of a handler with its Signature, a lookup name and
  an optional description. Calling the command forwards positionally to the handler.
- CommandBuilder / command(): explicit, fluent registration. Roles are declared by
  the caller, never guessed from the handler.
- Registry: ordered collection of commands with first-match name lookup.

Quick start
    from helmsman import command

    def save_item(key, value, flags):
        ...

    save = (
        command(save_item, name="save-item", descr="stores a value")
        .positional("key", str)
        .named("value", str | None, default=None)
        .with_flags("flags")
        .build()
    )

Notes
- Registration is the only place where signature problems surface: any violation
  raises SignatureError from build(), never later at call time.
- Duplicate names are allowed and resolved first-match; the Registry warns with
  ShadowedCommandWarning so the shadowing is never silent.
"""
import builtins
import inspect
import logging
import warnings

from .arguments import Parameter, Role
from .faults import SignatureError, ShadowedCommandWarning, FaultCode
from .utils import Unset, coalesce, mirror, ordinal

logger = logging.getLogger(__name__)


class Signature:
    """
    Ordered, validated tuple of Parameter objects.

    Iterating yields parameters in declaration order; len() and indexing work as on a tuple.
    """
    __slots__ = ("_parameters",)

    parameters = mirror("parameters")

    def __init__(self, parameters=(), /):
        parameters = tuple(parameters)
        seen = set()
        specials = {}

        for position, parameter in enumerate(parameters, 1):
            if not isinstance(parameter, Parameter):
                raise SignatureError("signature items must be parameters", code=FaultCode.INVALID_PARAMETER)
            if parameter.name in seen:
                raise SignatureError(
                    "parameter name %r is declared twice" % parameter.name,
                    code=FaultCode.INVALID_PARAMETER,
                    hint="give every parameter a distinct name",
                )
            seen.add(parameter.name)

            if not parameter.role.special:
                continue
            if parameter.role in specials:
                raise SignatureError(
                    "%s parameter %r duplicates %r" % (parameter.role.value, parameter.name, specials[parameter.role]),
                    code=FaultCode.DUPLICATED_ROLE,
                    hint="a command accepts at most one %s parameter" % parameter.role.value,
                )
            specials[parameter.role] = parameter.name
            if parameter.default is Unset:
                raise SignatureError(
                    "%s parameter %r must declare a default" % (parameter.role.value, parameter.name),
                    code=FaultCode.MISSING_DEFAULT,
                )
            if parameter.role is Role.VARIADIC and position != len(parameters):
                raise SignatureError(
                    "variadic parameter %r must be the last one, found at %s position" % (
                        parameter.name, ordinal(position)
                    ),
                    code=FaultCode.MISPLACED_VARIADIC,
                    hint="move %r to the end of the signature" % parameter.name,
                )

        self._parameters = parameters

    @property
    def required(self):
        """
        Number of parameters that must be given on the line (POSITIONAL only).
        """
        return sum(parameter.role is Role.POSITIONAL for parameter in self._parameters)

    def __iter__(self):
        return iter(self._parameters)

    def __len__(self):
        return len(self._parameters)

    def __getitem__(self, index):
        return self._parameters[index]

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return self._parameters == other._parameters

    def __hash__(self):
        return hash(self._parameters)

    def __rich_repr__(self):
        yield from self._parameters

    def __repr__(self):
        return "signature(%s)" % ", ".join(map(repr, self._parameters))


def _sanitize_name(name, /):
    if not isinstance(name, str):
        raise SignatureError("command 'name' must be a string", code=FaultCode.INVALID_PARAMETER)
    elif not (name := name.strip()):
        raise SignatureError("command 'name' cannot be empty", code=FaultCode.INVALID_PARAMETER)
    elif any(char.isspace() for char in name) or '"' in name:
        raise SignatureError(
            "command name %r must be a single token" % name,
            code=FaultCode.INVALID_PARAMETER,
            hint="remove spaces and quotes from the name",
        )
    return name


def _sanitize_descr(descr, /):
    if not isinstance(descr, str | type(Unset)):
        raise SignatureError("command 'descr' must be a string", code=FaultCode.INVALID_PARAMETER)
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise SignatureError("command 'descr' cannot be empty", code=FaultCode.INVALID_PARAMETER)
    return coalesce(descr)


def _check_arity(callback, signature, name, /):
    """
    Fail fast when the handler cannot take one positional value per parameter.
    """
    try:
        target = inspect.signature(callback)
    except (TypeError, ValueError):
        return  # not inspectable (some builtins); trust the caller
    try:
        target.bind(*signature)
    except TypeError:
        raise SignatureError(
            "handler of %r cannot accept %d positional argument(s)" % (name, len(signature)),
            code=FaultCode.INVALID_PARAMETER,
            hint="declare one handler parameter per command parameter, in the same order",
        ) from None


class Command:
    """
    Immutable command: a handler plus its classified signature.

    Properties
    - name: lookup name (defaults to the handler's __name__).
    - identifier: the handler's qualified name.
    - callback: the handler.
    - signature: Signature.
    - descr: description or None.

    Calling a Command forwards the given values positionally to the handler.
    """
    __slots__ = ("_name", "_identifier", "_callback", "_signature", "_descr")
    __introspectable__ = ("name", "identifier", "signature", "descr")

    name = mirror("name")
    identifier = mirror("identifier")
    callback = mirror("callback")
    signature = mirror("signature")
    descr = mirror("descr")

    def __init__(self, callback, signature=Unset, /, name=Unset, descr=Unset):
        if not callable(callback):
            raise SignatureError("command 'callback' must be callable", code=FaultCode.INVALID_PARAMETER)
        signature = coalesce(signature, Signature())
        if not isinstance(signature, Signature):
            signature = Signature(signature)

        self._callback = callback
        self._identifier = getattr(callback, "__qualname__", None) or repr(callback)
        self._name = _sanitize_name(coalesce(name, getattr(callback, "__name__", "")))
        self._descr = _sanitize_descr(descr)
        self._signature = signature

        _check_arity(callback, signature, self._name)

    @property
    def required(self):
        return self._signature.required

    def __call__(self, *values):
        return self._callback(*values)

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "command(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __str__(self):
        return self._name


class CommandBuilder:
    """
    Fluent, explicit declaration of a command's parameters.

    Every method appends one parameter and returns the builder, so declarations read
    in the same order as the handler's parameters. build() validates the whole
    signature and returns the Command.

    Methods
    - positional(name, type): required, bound by order or 'name=value'.
    - named(name, type, default): optional, bound by 'name=value' or by order.
    - param(name, type, default=Unset): positional without default, named with one.
    - with_flags(name, default=()): receives every flag token.
    - with_caller(name, default=None): receives the interpreter.
    - variadic(name, default=()): receives every remaining token, type-inferred.
    """

    def __init__(self, callback, /, name=Unset, descr=Unset):
        if not callable(callback):
            raise SignatureError("command 'callback' must be callable", code=FaultCode.INVALID_PARAMETER)
        self._callback = callback
        self._name = name
        self._descr = descr
        self._parameters = []

    def _append(self, *args, **kwargs):
        self._parameters.append(Parameter(*args, **kwargs))
        return self

    def positional(self, name, type=str, /, descr=Unset):
        return self._append(name, Role.POSITIONAL, type, descr=descr)

    def named(self, name, type=str, /, default=Unset, descr=Unset):
        return self._append(name, Role.NAMED, type, default=default, descr=descr)

    def param(self, name, type=str, /, default=Unset, descr=Unset):
        role = Role.POSITIONAL if default is Unset else Role.NAMED
        return self._append(name, role, type, default=default, descr=descr)

    def with_flags(self, name="flags", /, default=(), descr=Unset):
        return self._append(name, Role.FLAGS, default=default, descr=descr)

    def with_caller(self, name="caller", /, default=None, descr=Unset):
        return self._append(name, Role.CALLER, default=default, descr=descr)

    def variadic(self, name="extra", /, default=(), descr=Unset):
        return self._append(name, Role.VARIADIC, default=default, descr=descr)

    def build(self):
        command = Command(self._callback, Signature(self._parameters), name=self._name, descr=self._descr)
        logger.debug("built command %r with %d parameter(s)", command.name, len(command.signature))
        return command

    def __repr__(self):
        return "command-builder(callback=%r, parameters=%r)" % (self._callback, self._parameters)


def command(callback, /, name=Unset, descr=Unset):
    """
    Start a fluent declaration for 'callback'.

    Returns
    - CommandBuilder: chain positional()/named()/with_flags()/… then call build().
      Shell accepts unbuilt builders too and builds them on construction.
    """
    return CommandBuilder(callback, name=name, descr=descr)


def _key(name, ignore_case, /):
    return name.casefold() if ignore_case else name


class Registry:
    """
    Ordered collection of commands.

    - Insertion order is kept and drives help listings and lookup.
    - find() returns the first command whose name matches; later duplicates are
      shadowed. Each shadowed name triggers a ShadowedCommandWarning at construction.
      A case-only collision warns too, worded for the ignore_case lookups it affects.
    """
    __slots__ = ("_commands",)

    commands = mirror("commands")

    def __init__(self, commands=(), /):
        resolved = []
        for command in commands:
            if isinstance(command, CommandBuilder):
                command = command.build()
            elif not isinstance(command, Command):
                raise SignatureError(
                    "registry items must be commands, got %s" % builtins.type(command).__name__,
                    code=FaultCode.INVALID_PARAMETER,
                    hint="declare handlers with command(...).build()",
                )
            resolved.append(command)

        firsts = {}
        for position, command in enumerate(resolved, 1):
            if (key := _key(command.name, True)) in firsts:
                first = firsts[key]
                if first.name == command.name:
                    message = "command %r at %s position is shadowed by an earlier one" % (
                        command.name, ordinal(position)
                    )
                else:
                    message = "command %r at %s position may be shadowed by %r when ignore_case is enabled" % (
                        command.name, ordinal(position), first.name
                    )
                warnings.warn(ShadowedCommandWarning(
                    message,
                    input=command.name,
                    index=position,
                    hint="rename one of the handlers; lookups return the first match",
                ), stacklevel=3)
            else:
                firsts[key] = command

        self._commands = tuple(resolved)

    def find(self, name, /, *, ignore_case=False):
        """
        Return the first command named 'name', or None.
        """
        if not isinstance(name, str):
            raise TypeError("find() argument must be a string")
        key = _key(name, ignore_case)
        for command in self._commands:
            if _key(command.name, ignore_case) == key:
                return command
        return None

    def __iter__(self):
        return iter(self._commands)

    def __len__(self):
        return len(self._commands)

    def __bool__(self):
        return bool(self._commands)

    def __repr__(self):
        return "registry(%s)" % ", ".join(command.name for command in self._commands)


__all__ = (
    "Signature",
    "Command",
    "CommandBuilder",
    "Registry",
    "command",
)
