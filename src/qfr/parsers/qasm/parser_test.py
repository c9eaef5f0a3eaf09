import io
import math

import pytest

from qfr.operations import CompoundOperation, Control, OpType, StandardOperation
from qfr.parsers.qasm.parser import Parser
from qfr.parsers.qasm.scanner import Scanner
from qfr.utils.exceptions import QFRError


def _parser(text: str, nqubits: int = 3) -> Parser:
    parser = Parser(Scanner(io.StringIO(text)), {"q": (0, nqubits)}, {"c": (0, nqubits)}, nqubits)
    parser.scan()
    return parser


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("1 + 2 * 3", 7),
        ("-2^2", -4),
        ("2^3^2", 512),
        ("(1 + 2) * 3", 9),
        ("pi / 4", math.pi / 4),
        ("cos(0) + exp(0)", 2),
        ("2 * -3", -6),
        ("1.5e1 - 5", 10),
    ],
)
def test_expressions(text: str, expected: float) -> None:
    assert _parser(text).expression()({}) == pytest.approx(expected)


def test_unknown_parameter() -> None:
    with pytest.raises(QFRError, match="Unknown parameter theta"):
        _parser("rz(theta) q[0];").qop()


def test_controls_are_stripped_from_builtin_names() -> None:
    op = _parser("cccx q[0], q[1], q[2], q[3];", nqubits=4).qop()
    assert isinstance(op, StandardOperation)
    assert op.controls == [Control(0), Control(1), Control(2)]
    assert op.targets == [3]
    swap = _parser("cswap q[0], q[1], q[2];").qop()
    assert (swap.type, swap.targets, swap.controls) == (OpType.SWAP, [1, 2], [Control(0)])


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("xc q[0];", "Undefined gate xc"),
        ("cx q[0];", "expects 2 argument"),
        ("rz q[0];", "expects 1 parameter"),
        ("h q[3];", "out of range"),
        ("h r[0];", "not a qreg"),
        ("measure q[0] -> c;", "Mismatched register sizes"),
        ("h q[0]", "Expected ';'"),
    ],
)
def test_invalid_operations(text: str, message: str) -> None:
    with pytest.raises(QFRError, match=message):
        _parser(text).qop()


def test_gate_shadowing_a_builtin_calls_the_builtin() -> None:
    parser = _parser("gate h a { h a; x a; } h q[1];")
    parser.gate_declaration()
    op = parser.qop()
    assert isinstance(op, CompoundOperation)
    assert [o.type for o in op.operations] == [OpType.H, OpType.X]
    assert op.targets == [1, 1]
