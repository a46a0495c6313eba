"""
Helmsman shell: the execution engine and the interactive read loop.

Execution (Shell.execute)
  IDLE → DISPATCHING → INVOKING → IDLE   (HALTED while a stop is requested)

  1. empty, blank or None line → nothing happens.
  2. tokenize; the first token names the command.
  3. lookup (ignore_case aware). Unknown 'help' (any case) → help output; any other
     unknown name → CommandNotFoundError.
  4. tokens starting with flag_marker become flags; the rest stay positional
     (relative order kept in both groups).
  5. fewer positional tokens than required parameters → ArityError, before any binding.
  6. the command is recorded in Shell.executing.
  7. 'invoking' hooks fire with (shell, command).
  8. arguments are bound (all-or-nothing).
  9. the handler runs; a non-None return value is reported on the error stream as
     an informational message (handlers report failures by raising).
 10. Shell.executing is cleared on every exit path.
 11. 'invoked' hooks fire only after a successful invocation.
  Errors are never swallowed here: every exception reaches the caller.

Read loop (Shell.run)
- prints the prompt (interface_name + entry_marker), waits for a line through a
  LineReader while watching the cancellation event and the stop flag, then executes it.
- OperationError / ArgumentError are rendered on the error stream and the loop goes on;
  anything else ends the loop and propagates. End of input ends the loop quietly.
- on every exit the stop flag is reset, so run() can be called again.

Threading
- One controlling thread drives execute()/run(). Shell.executing is advisory: a
  reentrant execute() from inside a handler overwrites it and clears it on return.
- stop() may be called from a handler or from another thread; it is observed
  between lines and while waiting for input.
"""
import enum
import logging
import sys
import threading

from rich.console import Console
from rich.text import Text

from .arguments import bind
from .commands import Registry
from .faults import CommandNotFoundError, ArityError, RECOVERABLE
from .formatting import describe, describe_all
from .reader import LineReader
from .tokens import tokenize
from .utils import mirror

logger = logging.getLogger(__name__)


class State(enum.Enum):
    IDLE = "idle"
    DISPATCHING = "dispatching"
    INVOKING = "invoking"
    HALTED = "halted"


class Hook:
    """
    Ordered list of callbacks fired synchronously with (shell, command).

    connect() returns the callback, so it doubles as a decorator:

        @shell.invoked.connect
        def audit(shell, command): ...
    """

    def __init__(self, name, /):
        self._name = name
        self._callbacks = []

    def connect(self, callback, /):
        if not callable(callback):
            raise TypeError(f"{self._name}.connect() argument must be callable")
        self._callbacks.append(callback)
        return callback

    def disconnect(self, callback, /):
        try:
            self._callbacks.remove(callback)
        except ValueError:
            raise ValueError(f"{self._name}.disconnect() argument is not connected") from None

    def fire(self, *args):
        for callback in tuple(self._callbacks):
            callback(*args)

    def __len__(self):
        return len(self._callbacks)

    def __iter__(self):
        return iter(tuple(self._callbacks))

    def __repr__(self):
        return "hook(%s, callbacks=%d)" % (self._name, len(self._callbacks))


class Context:
    """
    Per-call record of one execute(): raw line, tokens, flags and resolved command.
    """
    __slots__ = ("line", "tokens", "flags", "command")

    def __init__(self, line, tokens, flags=(), command=None):
        self.line = line
        self.tokens = tokens
        self.flags = flags
        self.command = command

    def __repr__(self):
        return "context(line=%r, tokens=%r, flags=%r, command=%r)" % (
            self.line, self.tokens, self.flags, getattr(self.command, "name", None)
        )


def _text(name, /):
    def sanitize(value):
        if not isinstance(value, str):
            raise TypeError(f"shell {name!r} must be a string")
        return value
    return sanitize


def _marker(value):
    if not isinstance(value, str):
        raise TypeError("shell 'flag_marker' must be a string")
    elif not value:
        raise ValueError("shell 'flag_marker' cannot be empty")
    return value


def _switch(name, /):
    def sanitize(value):
        if not isinstance(value, bool):
            raise TypeError(f"shell {name!r} must be a boolean")
        return value
    return sanitize


def _stream(name, method, /):
    def sanitize(value):
        if value is not None and not callable(getattr(value, method, None)):
            raise TypeError(f"shell {name!r} must be a text stream or None")
        return value
    return sanitize


def _setting(name, sanitize, /):
    """
    Writable property over self._{name}, validated on assignment.
    """
    def getter(self):
        return getattr(self, "_" + name)

    def setter(self, value):
        setattr(self, "_" + name, sanitize(value))

    getter.__name__ = setter.__name__ = name
    return property(getter, setter)


class Shell:
    """
    Line-oriented command interpreter over an ordered set of commands.

    Parameters
    - *commands: Command or CommandBuilder objects, in registration order.
    - interface_name: str, prompt prefix (default "helmsman").
    - entry_marker: str, text after the prompt prefix (default ">").
    - flag_marker: str, prefix that routes a token to the flags (default "--").
    - ignore_case: bool, case-insensitive command lookup.
    - stdin / stdout / stderr: text streams; None means the current sys stream.
    - lenient_enums: bool, nullable enum parameters fall back to None on unknown names.

    Hooks
    - invoking: fired before binding with (shell, command).
    - invoked: fired after a successful invocation with (shell, command).
    """

    interface_name = _setting("interface_name", _text("interface_name"))
    entry_marker = _setting("entry_marker", _text("entry_marker"))
    flag_marker = _setting("flag_marker", _marker)
    ignore_case = _setting("ignore_case", _switch("ignore_case"))
    lenient_enums = _setting("lenient_enums", _switch("lenient_enums"))

    commands = mirror("registry")
    executing = mirror("executing")
    context = mirror("context")
    state = mirror("state")

    def __init__(
            self,
            *commands,
            interface_name="helmsman",
            entry_marker=">",
            flag_marker="--",
            ignore_case=False,
            stdin=None,
            stdout=None,
            stderr=None,
            lenient_enums=False
    ):
        self._registry = Registry(commands)

        self.interface_name = interface_name
        self.entry_marker = entry_marker
        self.flag_marker = flag_marker
        self.ignore_case = ignore_case
        self.lenient_enums = lenient_enums
        self.stdin = stdin
        self.stdout = stdout
        self.stderr = stderr

        self.invoking = Hook("invoking")
        self.invoked = Hook("invoked")

        self._executing = None
        self._context = None
        self._state = State.IDLE
        self._stopping = False
        self._reader = None

    # --- streams -------------------------------------------------------------

    @property
    def stdin(self):
        return self._stdin if self._stdin is not None else sys.stdin

    @stdin.setter
    def stdin(self, value):
        self._stdin = _stream("stdin", "readline")(value)

    @property
    def stdout(self):
        return self._stdout if self._stdout is not None else sys.stdout

    @stdout.setter
    def stdout(self, value):
        self._stdout = _stream("stdout", "write")(value)

    @property
    def stderr(self):
        return self._stderr if self._stderr is not None else sys.stderr

    @stderr.setter
    def stderr(self, value):
        self._stderr = _stream("stderr", "write")(value)

    @property
    def prompt(self):
        return self._interface_name + self._entry_marker

    def _console(self, stream):
        return Console(file=stream, highlight=False, markup=False, emoji=False, soft_wrap=True)

    def _write(self, text, /, *, error=False, end="\n"):
        self._console(self.stderr if error else self.stdout).print(Text(text), end=end)

    def report(self, fault, /):
        """
        Render a fault on the error stream, labelled with the interface name.
        """
        self._console(self.stderr).print(fault.render(prog=self._interface_name))

    # --- stop flag -----------------------------------------------------------

    @property
    def stopping(self):
        return self._stopping

    @stopping.setter
    def stopping(self, value):
        if not isinstance(value, bool):
            raise TypeError("shell 'stopping' must be a boolean")
        self._stopping = value
        if value:
            self._state = State.HALTED

    def stop(self):
        """
        Ask the read loop to finish after the current line (or while it waits for input).
        """
        self.stopping = True
        logger.debug("stop requested")

    # --- execution -----------------------------------------------------------

    def _help(self, tokens):
        if not tokens:
            if listing := describe_all(self._registry):
                self._write(listing)
            return
        if (command := self._registry.find(tokens[0], ignore_case=self._ignore_case)) is not None:
            self._write(describe(command))
            return
        self._write("command %r not found" % tokens[0])
        if listing := describe_all(self._registry):
            self._write(listing)

    def execute(self, line):
        """
        Run one command line. See the module documentation for the exact sequence.

        Raises
        - FormatError: unterminated quoted region.
        - CommandNotFoundError: unknown command (other than 'help').
        - ArityError: fewer positional tokens than required parameters.
        - BindError / ConversionError: a value is missing or cannot be converted.
        - anything the handler or a hook raises.
        """
        if line is None:
            return
        if not isinstance(line, str):
            raise TypeError("execute() argument must be a string")
        if not line.strip():
            return

        self._state = State.DISPATCHING
        try:
            self._dispatch(line)
        finally:
            self._state = State.HALTED if self._stopping else State.IDLE

    def _dispatch(self, line):
        tokens = tokenize(line)
        name, *rest = tokens

        if (command := self._registry.find(name, ignore_case=self._ignore_case)) is None:
            if name.casefold() == "help":
                self._help(rest)
                return
            raise CommandNotFoundError(
                "unknown command %r" % name,
                input=name,
                hint="run 'help' to list the available commands",
            )

        positionals = tuple(token for token in rest if not token.startswith(self._flag_marker))
        flags = tuple(token for token in rest if token.startswith(self._flag_marker))

        if len(positionals) < (required := command.required):
            raise ArityError(
                "not enough positional arguments for %r, required %d, given %d" % (
                    command.name, required, len(positionals)
                ),
                input=command.name,
                required=required,
                given=len(positionals),
                hint="run 'help %s' to see its parameters" % command.name,
            )

        context = Context(line, tokens, flags, command)
        logger.debug("dispatching %r", context)

        self._executing = command
        self._context = context
        self._state = State.INVOKING
        try:
            self.invoking.fire(self, command)
            values = bind(command.signature, positionals, flags, self, lenient_enums=self._lenient_enums)
            result = command(*values)
        finally:
            self._executing = None
            self._context = None

        if result is not None:
            self._write("on execution of %s: %s" % (command.name, result), error=True)
        self.invoked.fire(self, command)

    # --- read loop -----------------------------------------------------------

    def _linereader(self):
        if self._reader is None or self._reader.stream is not self.stdin or self._reader.exhausted:
            self._reader = LineReader(self.stdin)
        return self._reader

    def run(self, cancel=None, /):
        """
        Read and execute lines until stopped, cancelled, or the input ends.

        Parameters
        - cancel: threading.Event | None
          Setting it ends the loop, even while waiting for input.

        Raises
        - anything execute() raises except OperationError / ArgumentError,
          which are rendered on the error stream instead.
        """
        if cancel is not None and not isinstance(cancel, threading.Event):
            raise TypeError("run() argument must be a threading.Event")

        reader = self._linereader()
        logger.debug("read loop started")
        try:
            while not self._stopping:
                if cancel is not None and cancel.is_set():
                    break
                self._write(self.prompt, end="")
                try:
                    line = reader.readline(cancel, stopped=lambda: self._stopping)
                except EOFError:
                    break
                if line is None:
                    break
                try:
                    self.execute(line)
                except RECOVERABLE as fault:
                    self.report(fault)
        finally:
            self._stopping = False
            self._state = State.IDLE
            logger.debug("read loop finished")

    def __rich_repr__(self):
        yield "interface_name", self._interface_name
        yield "commands", tuple(command.name for command in self._registry)
        yield "state", self._state

    def __repr__(self):
        return "shell(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


__all__ = (
    "State",
    "Hook",
    "Context",
    "Shell",
)
