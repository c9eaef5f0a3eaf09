import io
import math

import numpy
import pytest

from qfr.dd.dense import DensePackage
from qfr.dd.package import LINE_DEFAULT, new_line_buffer
from qfr.operations.base import Control
from qfr.operations.enums import OpType
from qfr.operations.standard import StandardOperation, gate_matrix
from qfr.utils.exceptions import QFRError


def _names(n: int, name: str = "q") -> list[tuple[str, str]]:
    return [(name, f"{name}[{i}]") for i in range(n)]


def _identity_permutation(n: int) -> dict[int, int]:
    return {i: i for i in range(n)}


def _dense(op: StandardOperation, permutation: dict[int, int] | None = None) -> numpy.ndarray:
    package = DensePackage()
    line = new_line_buffer()
    edge = op.get_dd(package, line, permutation or _identity_permutation(op.nqubits))
    assert (line == LINE_DEFAULT).all()
    return edge.matrix


def test_construction_checks() -> None:
    StandardOperation(2, [1], OpType.X, [Control(0)])
    with pytest.raises(QFRError, match="expects 2 target"):
        StandardOperation(2, [1], OpType.SWAP)
    with pytest.raises(QFRError, match="expects 1 target"):
        StandardOperation(2, [0, 1], OpType.H)
    with pytest.raises(QFRError, match="more than once"):
        StandardOperation(2, [1], OpType.X, [Control(1)])
    with pytest.raises(QFRError, match="does not fit in 2 qubits"):
        StandardOperation(2, [2], OpType.X)


def test_acts_on() -> None:
    op = StandardOperation(4, [3], OpType.Z, [Control(1, positive=False)])
    assert op.acts_on(1)
    assert op.acts_on(3)
    assert not op.acts_on(0)
    assert not op.acts_on(2)


def test_parametrized_matrices() -> None:
    numpy.testing.assert_allclose(gate_matrix(OpType.U1, math.pi / 4), gate_matrix(OpType.T))
    numpy.testing.assert_allclose(gate_matrix(OpType.RX, math.pi / 2), gate_matrix(OpType.V))
    numpy.testing.assert_allclose(
        gate_matrix(OpType.U2, 0, math.pi), gate_matrix(OpType.H), atol=1e-12
    )
    numpy.testing.assert_allclose(
        gate_matrix(OpType.U3, math.pi, 0, math.pi), gate_matrix(OpType.X), atol=1e-12
    )
    with pytest.raises(QFRError, match="no single-target matrix"):
        gate_matrix(OpType.SWAP)


def test_single_gate_dd() -> None:
    matrix = _dense(StandardOperation(1, [0], OpType.H))
    numpy.testing.assert_allclose(matrix, gate_matrix(OpType.H))


def test_dd_follows_permutation() -> None:
    cx = StandardOperation(2, [1], OpType.X, [Control(0)])
    assert _dense(cx)[3, 1] == 1
    swapped = _dense(cx, {0: 1, 1: 0})
    assert swapped[3, 2] == 1
    assert swapped[1, 1] == 1


def test_two_target_gates_dd() -> None:
    swap = _dense(StandardOperation(2, [0, 1], OpType.SWAP))
    assert swap[2, 1] == 1
    assert swap[1, 2] == 1
    assert swap[3, 3] == 1

    iswap = _dense(StandardOperation(2, [0, 1], OpType.ISWAP))
    numpy.testing.assert_allclose(iswap[2, 1], 1j)
    numpy.testing.assert_allclose(iswap[1, 2], 1j)
    numpy.testing.assert_allclose(iswap[3, 3], 1)

    # Peres on a=0, b=1, c=2: c ^= a & b then b ^= a.
    peres = _dense(StandardOperation(3, [2, 1], OpType.PERES, [Control(0)]))
    assert peres[0b101, 0b011] == 1
    assert peres[0b011, 0b001] == 1
    peres_dagger = _dense(StandardOperation(3, [2, 1], OpType.PERESDG, [Control(0)]))
    numpy.testing.assert_allclose(peres_dagger @ peres, numpy.eye(8))


def test_dump_openqasm() -> None:
    qreg, creg = _names(3), _names(3, "c")
    assert StandardOperation(3, [1], OpType.X, [Control(0)]).to_openqasm(qreg, creg) == (
        "cx q[0], q[1];\n"
    )
    assert StandardOperation(3, [2], OpType.X, [Control(0), Control(1)]).to_openqasm(
        qreg, creg
    ) == ("ccx q[0], q[1], q[2];\n")
    assert StandardOperation(3, [2], OpType.Z, [Control(0, positive=False)]).to_openqasm(
        qreg, creg
    ) == ("x q[0];\ncz q[0], q[2];\nx q[0];\n")
    assert StandardOperation(3, [0], OpType.V).to_openqasm(qreg, creg) == "rx(pi/2) q[0];\n"
    assert StandardOperation(3, [0], OpType.U3, lam=0.5, phi=0.25, theta=1).to_openqasm(
        qreg, creg
    ) == ("u3(1, 0.25, 0.5) q[0];\n")
    assert StandardOperation(3, [2, 1], OpType.PERES, [Control(0)]).to_openqasm(
        qreg, creg
    ) == ("ccx q[0], q[1], q[2];\ncx q[0], q[1];\n")


def test_dump_qiskit() -> None:
    qreg, creg = _names(5), _names(5, "c")

    def dump(op: StandardOperation) -> str:
        stream = io.StringIO()
        op.dump_qiskit(stream, qreg, creg, "anc")
        return stream.getvalue()

    assert dump(StandardOperation(5, [0], OpType.X)) == "qc.x(q[0])\n"
    assert dump(StandardOperation(5, [1], OpType.X, [Control(0)])) == "qc.cx(q[0], q[1])\n"
    controls = [Control(0), Control(1), Control(2), Control(3)]
    assert dump(StandardOperation(5, [4], OpType.X, controls)) == (
        "qc.mcx([q[0], q[1], q[2], q[3]], q[4], anc[:2], mode='v-chain')\n"
    )
    assert dump(StandardOperation(5, [2], OpType.H, [Control(0), Control(1, False)])) == (
        "qc.append(HGate().control(2, ctrl_state='01'), [q[0], q[1], q[2]])\n"
    )
    assert dump(StandardOperation(5, [3], OpType.U2, lam=1, phi=2)) == (
        "qc.append(UGate(pi/2, 2, 1), [q[3]])\n"
    )
