import io
from pathlib import Path

import pytest

from qfr.parsers.qasm.scanner import Scanner, TokenKind, tokenize
from qfr.utils.exceptions import QFRError, QFRFileError


def test_tokenize() -> None:
    tokens = list(tokenize('OPENQASM 2.0; // header\ninclude "a.inc";\nmeasure q[1] -> c;'))
    assert [t.kind for t in tokens] == [
        TokenKind.OPENQASM,
        TokenKind.REAL,
        TokenKind.SEMICOLON,
        TokenKind.INCLUDE,
        TokenKind.STRING,
        TokenKind.SEMICOLON,
        TokenKind.MEASURE,
        TokenKind.IDENTIFIER,
        TokenKind.LBRACK,
        TokenKind.NNINTEGER,
        TokenKind.RBRACK,
        TokenKind.ARROW,
        TokenKind.IDENTIFIER,
        TokenKind.SEMICOLON,
        TokenKind.EOF,
    ]
    assert tokens[4].text == "a.inc"
    assert tokens[6].line == 3
    assert tokens[9].value == 1


def test_numbers_and_operators() -> None:
    kinds = [t.kind for t in tokenize("1e-3 .5 -2^x==")]
    assert kinds == [
        TokenKind.REAL,
        TokenKind.REAL,
        TokenKind.MINUS,
        TokenKind.NNINTEGER,
        TokenKind.POWER,
        TokenKind.IDENTIFIER,
        TokenKind.EQ,
        TokenKind.EOF,
    ]


def test_unexpected_character() -> None:
    with pytest.raises(QFRError, match="line 2"):
        list(tokenize("qreg q[1];\n@"))


def test_include_stack(tmp_path: Path) -> None:
    (tmp_path / "inner.inc").write_text("inner")
    scanner = Scanner(io.StringIO("before after"), tmp_path)
    assert scanner.next().text == "before"
    scanner.add_file_input("inner.inc")
    assert scanner.next().text == "inner"
    assert scanner.next().text == "after"
    assert scanner.next().kind == TokenKind.EOF
    assert scanner.next().kind == TokenKind.EOF


def test_missing_include(tmp_path: Path) -> None:
    scanner = Scanner(io.StringIO(""), tmp_path)
    with pytest.raises(QFRFileError):
        scanner.add_file_input("nope.inc")
