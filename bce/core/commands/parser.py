"""Pure function-based tokenizer for shell command lines being completed.

Splits the line the shell hands over for completion (COMP_LINE) into words
the way a POSIX shell would while the user is still typing: whitespace
separates words, an unquoted '=' ends a word (and stays attached to it), and
single or double quotes group text containing whitespace or '='. Scanning
stops at the cursor (COMP_POINT), so the last word is the one being typed.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from bce.core.errors import (
    InvalidCompletionPointError,
    MissingCompletionLineError,
    MissingCompletionPointError,
)

# POSIX whitespace
WHITESPACE = frozenset(" \t\r\n\v\f")


class _State(Enum):
    IDLE = "idle"
    IN_WORD = "in_word"
    IN_SINGLE_QUOTE = "in_single_quote"
    IN_DOUBLE_QUOTE = "in_double_quote"


_QUOTE_STATES = {
    "'": _State.IN_SINGLE_QUOTE,
    '"': _State.IN_DOUBLE_QUOTE,
}
_CLOSING_QUOTE = {
    _State.IN_SINGLE_QUOTE: "'",
    _State.IN_DOUBLE_QUOTE: '"',
}


@dataclass
class Scan:
    """Result of scanning a line up to a limit.

    Attributes:
        tokens: Words found, in order.
        open_word: True when the scan ended touching the last token (inside
            a word or quote, or right after a closing quote). False when the
            last character scanned was a delimiter, i.e. a new word starts at
            the cursor.
    """

    tokens: list[str] = field(default_factory=list)
    open_word: bool = False


def scan(line: str, limit: int) -> Scan:
    """Scan at most `limit` characters of `line` into words.

    Args:
        line: Command line text.
        limit: Number of characters to scan, clamped to the line length.

    Returns:
        Scan with the tokens and whether the last one is still open.

    Examples:
        >>> scan("kubectl get", 11)
        Scan(tokens=['kubectl', 'get'], open_word=True)

        >>> scan("kubectl get ", 12)
        Scan(tokens=['kubectl', 'get'], open_word=False)
    """
    limit = max(0, min(limit, len(line)))
    result = Scan()
    state = _State.IDLE
    start = 0

    for i in range(limit):
        ch = line[i]
        if state is _State.IDLE:
            result.open_word = False
            if ch in WHITESPACE:
                continue
            if ch in _QUOTE_STATES:
                state = _QUOTE_STATES[ch]
                start = i + 1
            else:
                state = _State.IN_WORD
                start = i
        elif state is _State.IN_WORD:
            if ch in WHITESPACE:
                result.tokens.append(line[start:i])
                state = _State.IDLE
            elif ch == "=":
                result.tokens.append(line[start : i + 1])
                state = _State.IDLE
        elif ch == _CLOSING_QUOTE[state]:
            result.tokens.append(line[start:i])
            state = _State.IDLE
            result.open_word = True

    # Partial word at the cursor
    if state is not _State.IDLE:
        result.tokens.append(line[start:limit])
        result.open_word = True

    return result


def tokenize(line: str, limit: int) -> list[str]:
    """Split `line` into words, scanning at most `limit` characters.

    Examples:
        >>> tokenize('beep --boop="/home/robot/fav sounds" -v', 41)
        ['beep', '--boop=', '/home/robot/fav sounds', '-v']

        >>> tokenize("kubectl get pods", 3)
        ['kub']

        >>> tokenize("", 10)
        []
    """
    return scan(line, limit).tokens


def command_name(line: str) -> str | None:
    """Return the first word of the line, or None for a blank line."""
    tokens = tokenize(line, len(line))
    return tokens[0] if tokens else None


def current_word(line: str, cursor: int) -> str:
    """Return the word being completed at the cursor.

    An empty string means the cursor follows a delimiter and the user has
    not started the next word yet.
    """
    result = scan(line, cursor)
    if result.open_word and result.tokens:
        return result.tokens[-1]
    return ""


def previous_word(line: str, cursor: int) -> str | None:
    """Return the word before the one being completed, or None."""
    result = scan(line, cursor)
    tokens = result.tokens
    if result.open_word:
        return tokens[-2] if len(tokens) > 1 else None
    return tokens[-1] if tokens else None


@dataclass(frozen=True)
class CompletionInput:
    """Completion context of one request: the line and the cursor offset.

    Attributes:
        line: Full command line being completed.
        cursor: Cursor offset into the line.

    Example:
        >>> ci = CompletionInput(line="kubectl get -o ", cursor=15)
        >>> ci.command_name, ci.current_word, ci.previous_word
        ('kubectl', '', '-o')
    """

    line: str
    cursor: int

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        line_var: str = "COMP_LINE",
        point_var: str = "COMP_POINT",
    ) -> "CompletionInput":
        """Build the context from the variables bash sets for `complete -C`.

        Args:
            environ: Environment mapping (defaults to os.environ).
            line_var: Variable holding the command line.
            point_var: Variable holding the cursor offset.

        Raises:
            MissingCompletionLineError: If the line is missing or empty.
            MissingCompletionPointError: If the cursor is missing or empty.
            InvalidCompletionPointError: If the cursor is not a
                non-negative integer.
        """
        if environ is None:
            environ = os.environ

        line = environ.get(line_var, "")
        if not line:
            raise MissingCompletionLineError(f"No {line_var} env var")

        point = environ.get(point_var, "")
        if not point:
            raise MissingCompletionPointError(f"No {point_var} env var")

        try:
            cursor = int(point)
        except ValueError as e:
            raise InvalidCompletionPointError(
                f"Invalid {point_var} env var: {point!r}"
            ) from e
        if cursor < 0:
            raise InvalidCompletionPointError(f"Invalid {point_var} env var: {point!r}")

        return cls(line=line, cursor=cursor)

    @property
    def tokens(self) -> list[str]:
        """All words of the line, regardless of the cursor."""
        return tokenize(self.line, len(self.line))

    @property
    def command_name(self) -> str | None:
        return command_name(self.line)

    @property
    def current_word(self) -> str:
        return current_word(self.line, self.cursor)

    @property
    def previous_word(self) -> str | None:
        return previous_word(self.line, self.cursor)
