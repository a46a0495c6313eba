r"""
Helmsman parameter declarations, value conversion, and argument binding.

Overview
- Role: how a parameter receives its value.
  • POSITIONAL: required, bound by order or by 'name=value'.
  • NAMED: optional (declares a default), bound by 'name=value' or by order.
  • FLAGS: receives every flag token of the line (e.g. ('--force', '--dry-run')).
  • CALLER: receives the interpreter that runs the command (e.g. to request a stop).
  • VARIADIC: receives every remaining positional token, each type-inferred.
- Parameter: immutable (name, role, type, default, nullable, descr) record.
- Fixed-width integers: int8/int16/int32/int64 and uint8/uint16/uint32/uint64,
  range-checked on conversion.
- convert(token, type): strict string-to-value conversion.
- infer(token): best-effort conversion for variadic tokens (bool → int → float → str).
- bind(signature, positionals, flags, caller): all-or-nothing argument binding.

Supported value types
- str, bool, int, float, decimal.Decimal, the fixed-width integers above,
  and any enum.Enum subclass (matched by member name, case-sensitively).
- Each may be wrapped as "may be absent": 'int | None' or 'Optional[int]'.

Binding order (per value-bearing parameter)
  1. a 'name=value' token anywhere among the positional tokens (excluded from indexing),
  2. the positional token at the parameter's index (FLAGS/CALLER take no index),
  3. the declared default,
  4. otherwise BindError.

Quick example
    >>> signature = (Parameter("x", Role.POSITIONAL, int), Parameter("y", Role.NAMED, int, default=0))
    >>> bind(signature, ["y=4", "3"], [], None)
    (3, 4)
"""
import builtins
import enum
import logging
import re
import types
import typing
from decimal import Decimal, InvalidOperation

from .faults import SignatureError, BindError, ConversionError, FaultCode
from .utils import Unset, mirror, ordinal

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    """
    The way a parameter receives its value from a command line.
    """
    POSITIONAL = "positional"
    NAMED = "named"
    FLAGS = "flags"
    CALLER = "caller"
    VARIADIC = "variadic"

    @property
    def special(self):
        """
        True for roles that are not bound from a single token.
        """
        return self in (Role.FLAGS, Role.CALLER, Role.VARIADIC)

    @property
    def indexed(self):
        """
        True for roles that occupy a positional index.
        """
        return self in (Role.POSITIONAL, Role.NAMED, Role.VARIADIC)


class Integral:
    """
    Fixed-width integer type used as a parameter type.

    Values are parsed like int and then range-checked against the width:
    int8 accepts -128..127, uint8 accepts 0..255, and so on.
    """
    __slots__ = ("_name", "_bits", "_signed")

    name = mirror("name")
    bits = mirror("bits")
    signed = mirror("signed")

    def __init__(self, name, bits, /, *, signed=True):
        self._name = name
        self._bits = bits
        self._signed = bool(signed)

    @property
    def bounds(self):
        if self._signed:
            return -(1 << (self._bits - 1)), (1 << (self._bits - 1)) - 1
        return 0, (1 << self._bits) - 1

    def __or__(self, other, /):
        """
        Support PEP 604 spelling in declarations (e.g., int8 | None).
        """
        try:
            return typing.Union[self, other]
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return typing.Union[other, self]
        except TypeError:
            return NotImplemented

    def __repr__(self):
        return self._name


int8 = Integral("int8", 8)
int16 = Integral("int16", 16)
int32 = Integral("int32", 32)
int64 = Integral("int64", 64)
uint8 = Integral("uint8", 8, signed=False)
uint16 = Integral("uint16", 16, signed=False)
uint32 = Integral("uint32", 32, signed=False)
uint64 = Integral("uint64", 64, signed=False)

_INTEGER = re.compile(r"\s*[+-]?\d+\s*")
_REAL = re.compile(r"\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*")
_SCALARS = (str, bool, int, float, Decimal)


def typename(type, /):
    """
    Short display name for a supported type ('str', 'int32', 'Color', …).
    """
    if isinstance(type, Integral):
        return type.name
    return getattr(type, "__name__", repr(type))


def _unwrap(annotation, /):
    """
    Split 'T | None' / 'Optional[T]' into (T, True); anything else into (annotation, False).
    """
    if typing.get_origin(annotation) in (types.UnionType, typing.Union):
        members = typing.get_args(annotation)
        inner = tuple(member for member in members if member is not types.NoneType)
        if len(inner) == 1 and len(members) == 2:
            return inner[0], True
    return annotation, False


def supported(type, /):
    """
    Tell whether 'type' (optionally wrapped as may-be-absent) can be bound from a token.
    """
    type, _ = _unwrap(type)
    if isinstance(type, Integral):
        return True
    if type in _SCALARS:
        return True
    return isinstance(type, builtins.type) and issubclass(type, enum.Enum)


class Parameter:
    """
    Immutable, role-classified parameter of a command signature.

    Properties
    - name: str, a valid Python identifier (also the 'name=' prefix on the line).
    - role: Role.
    - type: the unwrapped value type (None for FLAGS/CALLER/VARIADIC).
    - default: the declared default, or Unset when none was declared.
    - nullable: True when the type was declared as 'T | None'.
    - descr: short description or None.

    Raises
    - SignatureError: invalid name, unsupported type, a POSITIONAL with a default
      or a NAMED without one.
    """
    __slots__ = ("_name", "_role", "_type", "_default", "_nullable", "_descr")
    __introspectable__ = ("name", "role", "type", "default", "nullable", "descr")

    name = mirror("name")
    role = mirror("role")
    type = mirror("type")
    default = mirror("default")
    nullable = mirror("nullable")
    descr = mirror("descr")

    def __init__(self, name, role, type=str, /, default=Unset, descr=Unset):
        if not isinstance(name, str):
            raise SignatureError("parameter name must be a string", code=FaultCode.INVALID_PARAMETER)
        elif not name.isidentifier():
            raise SignatureError(
                "parameter name %r is not a valid identifier" % name,
                code=FaultCode.INVALID_PARAMETER,
                hint="use letters, digits and underscores, not starting with a digit",
            )
        if not isinstance(role, Role):
            raise SignatureError("parameter %r role must be a Role" % name, code=FaultCode.INVALID_PARAMETER)
        if not isinstance(descr, str | builtins.type(Unset)):
            raise SignatureError("parameter %r 'descr' must be a string" % name, code=FaultCode.INVALID_PARAMETER)

        self._name = name
        self._role = role
        self._default = default
        self._descr = (descr.strip() or None) if isinstance(descr, str) else None

        if role.special:
            self._type = None
            self._nullable = False
            return

        if not supported(type):
            raise SignatureError(
                "parameter %r has unsupported type %s" % (name, typename(type)),
                code=FaultCode.UNSUPPORTED_TYPE,
                hint="use str, bool, int, float, Decimal, a fixed-width integer or an Enum",
            )
        self._type, self._nullable = _unwrap(type)

        if role is Role.POSITIONAL and default is not Unset:
            raise SignatureError(
                "positional parameter %r cannot declare a default" % name,
                code=FaultCode.INVALID_PARAMETER,
                hint="declare it as a named parameter instead",
            )
        if role is Role.NAMED and default is Unset:
            raise SignatureError(
                "named parameter %r must declare a default" % name,
                code=FaultCode.MISSING_DEFAULT,
            )

    @property
    def required(self):
        return self._role is Role.POSITIONAL

    def __rich_repr__(self):
        for name in type(self).__introspectable__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "parameter(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __eq__(self, other):
        if not isinstance(other, Parameter):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in Parameter.__introspectable__)

    def __hash__(self):
        return hash((self._name, self._role))


def _uncastable(token, type, /, **options):
    return ConversionError(
        "cannot convert %r to %s" % (token, typename(type)),
        input=token,
        type=type,
        **{"hint": "provide a valid %s value" % typename(type)} | options
    )


def _parse_bool(token):
    match token.strip().lower():
        case "true":
            return True
        case "false":
            return False
    raise ValueError(token)


def _parse_int(token):
    if not _INTEGER.fullmatch(token):
        raise ValueError(token)
    return int(token)


def _parse_real(token, type=float):
    # plain decimal literals only: no underscores, no inf/nan spellings
    if not _REAL.fullmatch(token):
        raise ValueError(token)
    return type(token.strip())


def convert(token, type, /, *, nullable=False, lenient=False):
    """
    Convert a single token to 'type', strictly.

    Behavior
    - str: returned unchanged.
    - bool: 'true'/'false', case-insensitive, surrounding whitespace ignored.
    - int and fixed-width integers: optional sign followed by digits; widths are range-checked.
    - float, Decimal: plain decimal literals with an optional exponent ('2.5', '-.5e3');
      underscores and inf/nan spellings are rejected.
    - Enum: exact (case-sensitive) member name. With lenient=True and nullable=True an
      unknown name yields None instead of an error.

    Raises
    - ConversionError: naming the token and the target type.
    - SignatureError: when 'type' is not supported.
    """
    if not isinstance(token, str):
        raise TypeError("convert() first argument must be a string")
    if type is str:
        return token
    try:
        if type is bool:
            return _parse_bool(token)
        if type is int:
            return _parse_int(token)
        if isinstance(type, Integral):
            value = _parse_int(token)
        elif type is float:
            return _parse_real(token)
        elif type is Decimal:
            return _parse_real(token, Decimal)
    except (ValueError, InvalidOperation):
        raise _uncastable(token, type) from None

    if isinstance(type, Integral):
        lower, upper = type.bounds
        if not lower <= value <= upper:
            raise _uncastable(token, type, hint="%s values range from %d to %d" % (type.name, lower, upper))
        return value

    if isinstance(type, builtins.type) and issubclass(type, enum.Enum):
        try:
            return type.__members__[token]
        except KeyError:
            if lenient and nullable:
                return None
            raise _uncastable(
                token, type,
                choices=tuple(type.__members__),
                hint="choose one of: %s" % ", ".join(type.__members__),
            ) from None

    raise SignatureError("unsupported type %s" % typename(type), code=FaultCode.UNSUPPORTED_TYPE)


def infer(token, /):
    """
    Best-effort typing for variadic tokens: bool, then int, then float, else the string itself.
    """
    for parser in (_parse_bool, _parse_int, _parse_real):
        try:
            return parser(token)
        except ValueError:
            continue
    return token


def _resolve(parameter, named, remaining, index, lenient, /):
    """
    Value of a POSITIONAL/NAMED parameter: 'name=value', then the token at 'index', then the default.
    """
    if parameter.name in named:
        token = named[parameter.name]
    elif index < len(remaining):
        token = remaining[index]
    elif parameter.default is not Unset:
        return parameter.default
    else:
        raise BindError(
            "missing required argument at position %d (%r)" % (index + 1, parameter.name),
            input=parameter.name,
            index=index + 1,
            hint="pass the %s value or use %s=<value>" % (ordinal(index + 1), parameter.name),
        )
    return convert(token, parameter.type, nullable=parameter.nullable, lenient=lenient)


def bind(signature, positionals, flags, caller, /, *, lenient_enums=False):
    """
    Bind tokens to a command signature and return the values in parameter order.

    Parameters
    - signature: iterable of Parameter (usually a commands.Signature).
    - positionals: sequence of non-flag tokens (the command name already removed).
    - flags: sequence of flag tokens, passed verbatim to the FLAGS parameter.
    - caller: the interpreter handle given to the CALLER parameter (may be None).
    - lenient_enums: let nullable enum parameters fall back to None on unknown names.

    Returns
    - tuple: one value per parameter, in declaration order.

    Raises
    - BindError: a required parameter has no token and no default.
    - ConversionError: a token cannot be converted to its parameter type.

    Notes
    - Binding is all-or-nothing: it returns only once every parameter is resolved,
      so nothing is invoked after a failure.
    """
    parameters = tuple(signature)
    positionals = tuple(positionals)

    # 'name=value' tokens first; the ones claimed here take no positional index.
    named, claimed = {}, set()
    for parameter in parameters:
        if parameter.role not in (Role.POSITIONAL, Role.NAMED):
            continue
        prefix = parameter.name + "="
        for offset, token in enumerate(positionals):
            if offset not in claimed and token.startswith(prefix):
                named[parameter.name] = token[len(prefix):]
                claimed.add(offset)
                break
    remaining = [token for offset, token in enumerate(positionals) if offset not in claimed]

    values = []
    index = 0
    for parameter in parameters:
        match parameter.role:
            case Role.FLAGS:
                values.append(tuple(flags))
            case Role.CALLER:
                values.append(caller)
            case Role.VARIADIC:
                values.append(tuple(map(infer, remaining[index:])))
            case _:
                values.append(_resolve(parameter, named, remaining, index, lenient_enums))
        if parameter.role.indexed:
            index += 1

    logger.debug("bound %d value(s) from %d positional and %d flag token(s)", len(values), len(positionals), len(flags))
    return tuple(values)


__all__ = (
    # Roles and specs
    "Role",
    "Parameter",
    "Integral",

    # Fixed-width integers
    "int8",
    "int16",
    "int32",
    "int64",
    "uint8",
    "uint16",
    "uint32",
    "uint64",

    # Functions
    "typename",
    "supported",
    "convert",
    "infer",
    "bind",
)
