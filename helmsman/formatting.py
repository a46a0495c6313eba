"""
Helmsman help formatting: human-readable descriptions derived from commands.

Format
- describe(command) -> "name(type param, ...)" followed by ":descr" when the command
  has a description.
  • nullable types get a '?' suffix: "str? value"
  • named parameters show their default: "int count=1"
  • special roles: "flags name", "caller name", "...name"
- with expand=True, every parameter with a description or an enum type gets its own
  line (name, then its description), followed by the enum members:

      paint(Color color):paints the wall
          color: base coat
              Red: warm
              Blue

- describe_all(commands) -> one unexpanded line per command, in the given order.
"""
import enum

from .arguments import Role, typename

INDENT = " " * 4


def _default(value, /):
    if isinstance(value, enum.Enum):
        return value.name
    return repr(value)


def _parameter(parameter, /):
    match parameter.role:
        case Role.FLAGS:
            return "flags %s" % parameter.name
        case Role.CALLER:
            return "caller %s" % parameter.name
        case Role.VARIADIC:
            return "...%s" % parameter.name
    label = typename(parameter.type) + "?" * parameter.nullable
    if parameter.role is Role.NAMED:
        return "%s %s=%s" % (label, parameter.name, _default(parameter.default))
    return "%s %s" % (label, parameter.name)


def _details(parameter, /):
    enumerated = isinstance(parameter.type, type) and issubclass(parameter.type, enum.Enum)
    if not (parameter.descr or enumerated):
        return
    yield INDENT + parameter.name + ":" + (" " + parameter.descr if parameter.descr else "")
    if not enumerated:
        return
    for member in parameter.type:
        if descr := getattr(member, "descr", None):
            yield INDENT * 2 + "%s: %s" % (member.name, descr)
        else:
            yield INDENT * 2 + member.name


def describe(command, /, *, expand=True):
    """
    Describe one command.

    Parameters
    - command: commands.Command
    - expand: bool
      Add parameter descriptions and enum members under the first line.

    Returns
    - str: "name(...)" or "name(...):descr", plus detail lines when expanded.
    """
    line = "%s(%s)" % (command.name, ", ".join(map(_parameter, command.signature)))
    if command.descr:
        line += ":" + command.descr
    if not expand:
        return line

    lines = [line]
    for parameter in command.signature:
        lines.extend(_details(parameter))
    return "\n".join(lines)


def describe_all(commands, /):
    """
    One-line description of every command, in iteration (registration) order.

    An empty collection yields an empty string.
    """
    return "\n".join(describe(command, expand=False) for command in commands)


__all__ = (
    "describe",
    "describe_all",
)
