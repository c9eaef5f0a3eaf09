"""Split OpenQASM 2.0 source text into tokens.

The scanner reads from a stack of sources: ``include`` statements push the
included file on top of the stack and the scanner returns to the including
source once the included one is exhausted.

"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final, TextIO

from qfr.utils.exceptions import QFRError, QFRFileError


class TokenKind(Enum):
    IDENTIFIER = "identifier"
    NNINTEGER = "non-negative integer"
    REAL = "real"
    STRING = "string"
    # Symbols.
    SEMICOLON = ";"
    COMMA = ","
    LPAR = "("
    RPAR = ")"
    LBRACK = "["
    RBRACK = "]"
    LBRACE = "{"
    RBRACE = "}"
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIVIDE = "/"
    POWER = "^"
    ARROW = "->"
    EQ = "=="
    # Keywords.
    OPENQASM = "OPENQASM"
    INCLUDE = "include"
    QREG = "qreg"
    CREG = "creg"
    GATE = "gate"
    OPAQUE = "opaque"
    MEASURE = "measure"
    RESET = "reset"
    BARRIER = "barrier"
    IF = "if"
    SNAPSHOT = "snapshot"
    PROBABILITIES = "probabilities"
    UGATE = "U"
    CXGATE = "CX"
    PI = "pi"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    EXP = "exp"
    LN = "ln"
    SQRT = "sqrt"
    EOF = "end of file"

    def __str__(self) -> str:
        return self.value


_KEYWORDS: Final[dict[str, TokenKind]] = {
    "OPENQASM": TokenKind.OPENQASM,
    "include": TokenKind.INCLUDE,
    "qreg": TokenKind.QREG,
    "creg": TokenKind.CREG,
    "gate": TokenKind.GATE,
    "opaque": TokenKind.OPAQUE,
    "measure": TokenKind.MEASURE,
    "reset": TokenKind.RESET,
    "barrier": TokenKind.BARRIER,
    "if": TokenKind.IF,
    "snapshot": TokenKind.SNAPSHOT,
    "probabilities": TokenKind.PROBABILITIES,
    "show_probabilities": TokenKind.PROBABILITIES,
    "U": TokenKind.UGATE,
    "CX": TokenKind.CXGATE,
    "pi": TokenKind.PI,
    "sin": TokenKind.SIN,
    "cos": TokenKind.COS,
    "tan": TokenKind.TAN,
    "exp": TokenKind.EXP,
    "ln": TokenKind.LN,
    "sqrt": TokenKind.SQRT,
}

_SYMBOLS: Final[dict[str, TokenKind]] = {
    kind.value: kind
    for kind in TokenKind
    if kind.value and not kind.value[0].isalnum() and " " not in kind.value
}

_TOKEN_REGEX: Final[re.Pattern[str]] = re.compile(
    r"""
    (?P<comment>//[^\n]*|/\*.*?\*/)
    |(?P<space>\s+)
    |(?P<real>(?:\d+\.\d*|\.\d+)(?:[eE][-+]?\d+)?|\d+[eE][-+]?\d+)
    |(?P<integer>\d+)
    |(?P<string>"[^"\n]*")
    |(?P<word>[A-Za-z_][A-Za-z0-9_]*)
    |(?P<symbol>->|==|[;,()\[\]{}+\-*/^])
    """,
    re.VERBOSE | re.DOTALL,
)


@dataclass(frozen=True)
class Token:
    """A token and its position in the source it was read from.

    Attributes:
        kind: kind of the token.
        text: the matched text, without the quotes for strings.
        line: line of the token in its source, starting at ``1``.
        source: name of the source the token was read from.

    """

    kind: TokenKind
    text: str
    line: int
    source: str = ""

    @property
    def value(self) -> float:
        return float(self.text)


def tokenize(text: str, source: str = "") -> Iterator[Token]:
    """Yield the tokens of ``text``, followed by a single ``EOF`` token.

    Raises:
        QFRError: if ``text`` contains a character that does not start any token.

    """
    line = 1
    position = 0
    while position < len(text):
        match = _TOKEN_REGEX.match(text, position)
        if match is None:
            raise QFRError(f"Unexpected character {text[position]!r} in line {line} of {source!r}.")
        group, matched = match.lastgroup, match.group()
        match group:
            case "real":
                yield Token(TokenKind.REAL, matched, line, source)
            case "integer":
                yield Token(TokenKind.NNINTEGER, matched, line, source)
            case "string":
                yield Token(TokenKind.STRING, matched[1:-1], line, source)
            case "word":
                yield Token(_KEYWORDS.get(matched, TokenKind.IDENTIFIER), matched, line, source)
            case "symbol":
                yield Token(_SYMBOLS[matched], matched, line, source)
        line += matched.count("\n")
        position = match.end()
    yield Token(TokenKind.EOF, "", line, source)


class Scanner:
    """Stream of tokens read from a main source and from the files it includes.

    Args:
        stream: the main source.
        include_dir: directory relative paths of included files are resolved from.
            Defaults to the current working directory.
        name: name of the main source, used in error messages.

    """

    def __init__(self, stream: TextIO, include_dir: Path | None = None, name: str = "") -> None:
        self.include_dir = include_dir if include_dir is not None else Path.cwd()
        self._sources: list[Iterator[Token]] = [tokenize(stream.read(), name)]

    def add_file_input(self, filename: str) -> None:
        """Read ``filename`` next, before going on with the current source.

        Raises:
            QFRFileError: if ``filename`` cannot be read.

        """
        path = Path(filename)
        if not path.is_absolute():
            path = self.include_dir / path
        try:
            text = path.read_text()
        except OSError as err:
            raise QFRFileError(f"Failed to open file '{filename}'.") from err
        self._sources.append(tokenize(text, filename))

    def next(self) -> Token:
        """Return the next token. Once every source is exhausted, ``EOF`` is returned forever."""
        while True:
            token = next(self._sources[-1])
            if token.kind != TokenKind.EOF:
                return token
            if len(self._sources) == 1:
                self._sources[-1] = _repeat(token)
                return token
            self._sources.pop()


def _repeat(token: Token) -> Iterator[Token]:
    while True:
        yield token
