"""
Helmsman tokenizer: split one input line into ordered string tokens.

Rules
- The line is trimmed, then scanned left to right.
- Outside a quoted region, a delimiter ends the current token and starts a new one.
  Consecutive delimiters yield empty tokens (no collapsing): 'a  b' -> ('a', '', 'b').
  A delimiter at the very end does not open a trailing empty token.
- An opening marker starts a quoted region; inside it delimiters are plain content.
  A closing marker ends it. When both markers are the same string, each occurrence
  toggles the region. Outside a region a (distinct) closing marker is plain content,
  and inside a region a (distinct) opening marker is plain content (no nesting).
- Markers and delimiters are consumed unless keep_quotes/keep_delimiters say otherwise;
  a kept delimiter stays at the end of the token it terminates.
- An empty line yields a single empty token.
- Ending the scan inside a quoted region raises FormatError.

Quick example
    >>> tokenize('save-item key1 "value with spaces"')
    ('save-item', 'key1', 'value with spaces')
"""
import logging

from .faults import FormatError
from .utils import ordinal

logger = logging.getLogger(__name__)


def _sanitize_marker(name, marker, /):
    if not isinstance(marker, str):
        raise TypeError(f"tokenize() {name!r} must be a string")
    elif not marker:
        raise ValueError(f"tokenize() {name!r} cannot be empty")
    return marker


def tokenize(line, delimiter=" ", opening='"', closing='"', *, keep_quotes=False, keep_delimiters=False):
    """
    Split a line on 'delimiter', except inside 'opening'…'closing' regions.

    Parameters
    - line: str
      Raw input line; surrounding whitespace is ignored.
    - delimiter: str
      Token separator (may be longer than one character).
    - opening, closing: str
      Quoted-region markers. Identical markers toggle.
    - keep_quotes: bool
      Keep the markers inside the produced tokens.
    - keep_delimiters: bool
      Keep each consumed delimiter at the end of the token it closes.

    Returns
    - tuple[str, ...]: at least one token.

    Raises
    - FormatError: when the line ends inside a quoted region.
    """
    if not isinstance(line, str):
        raise TypeError("tokenize() argument must be a string")
    delimiter = _sanitize_marker("delimiter", delimiter)
    opening = _sanitize_marker("opening", opening)
    closing = _sanitize_marker("closing", closing)

    source = line.strip()
    tokens = [""]
    quoted = False
    opened = 0  # where the current quoted region started, for the error message
    index = 0

    while index < len(source):
        if quoted and source.startswith(closing, index):
            quoted = False
            if keep_quotes:
                tokens[-1] += closing
            index += len(closing)
        elif not quoted and source.startswith(opening, index):
            quoted, opened = True, len(tokens)
            if keep_quotes:
                tokens[-1] += opening
            index += len(opening)
        elif not quoted and source.startswith(delimiter, index):
            if keep_delimiters:
                tokens[-1] += delimiter
            index += len(delimiter)
            if index < len(source):
                tokens.append("")
        else:
            tokens[-1] += source[index]
            index += 1

    if quoted:
        raise FormatError(
            "quoted region opened at %s token was never closed" % ordinal(opened),
            input=line,
            index=opened,
            hint="add the missing %s to close the value" % closing,
        )

    logger.debug("tokenized %r into %d token(s)", line, len(tokens))
    return tuple(tokens)


__all__ = (
    "tokenize",
)
