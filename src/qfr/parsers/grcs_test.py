import io
import math

import pytest

from qfr.circuit import Circuit
from qfr.operations import Control, OpType
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRError


def _import(text: str) -> Circuit:
    circuit = Circuit()
    circuit.import_stream(io.StringIO(text), Format.GRCS)
    return circuit


def test_benchmark() -> None:
    circuit = _import("3\n0 h 0\n1 cz 0 1\n\n2 x_1_2 2\n")
    assert circuit.nqubits == 3
    assert circuit.input_permutation == {0: 0, 1: 1, 2: 2}
    assert len(circuit) == 3
    h, cz, rx = circuit.operations
    assert (h.gate, h.targets, h.controls) == (OpType.H, [0], [])
    assert (cz.gate, cz.targets, cz.controls) == (OpType.Z, [1], [Control(0)])
    assert (rx.gate, rx.targets) == (OpType.RX, [2])
    assert rx.lam == pytest.approx(math.pi / 2)


def test_t_and_y_gates() -> None:
    t, ry = _import("2\n0 t 1\n0 y_1_2 0\n").operations
    assert t.gate == OpType.T
    assert ry.gate == OpType.RY
    assert ry.lam == pytest.approx(math.pi / 2)


def test_unknown_gate() -> None:
    with pytest.raises(QFRError, match="Unknown gate 'sqrt_w'"):
        _import("2\n0 sqrt_w 0\n")


def test_missing_qubit_count() -> None:
    with pytest.raises(QFRError, match="number of qubits"):
        _import("0 h 0\n")
