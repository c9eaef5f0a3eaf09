import io

import pytest

from qfr.dd.dense import DensePackage
from qfr.dd.package import new_line_buffer
from qfr.operations.base import Control
from qfr.operations.classic_controlled import ClassicControlledOperation
from qfr.operations.compound import CompoundOperation
from qfr.operations.enums import OpType
from qfr.operations.non_unitary import NonUnitaryOperation
from qfr.operations.standard import StandardOperation
from qfr.utils.exceptions import QFRError

_QREG = [("q", f"q[{i}]") for i in range(3)]
_CREG = [("c", f"c[{i}]") for i in range(3)]


def test_non_unitary_construction() -> None:
    measure = NonUnitaryOperation.measure(3, [0, 1], [1, 2])
    assert not measure.is_unitary()
    assert measure.acts_on(1)
    assert not measure.acts_on(2)
    assert not NonUnitaryOperation.show_probabilities(3).acts_on(0)
    with pytest.raises(QFRError, match="into 1 classical bit"):
        NonUnitaryOperation.measure(3, [0, 1], [0])
    with pytest.raises(QFRError, match="not a non-unitary operation"):
        NonUnitaryOperation(3, OpType.H)


def test_non_unitary_has_no_dd() -> None:
    with pytest.raises(QFRError, match="no decision diagram"):
        NonUnitaryOperation.reset(3, [0]).get_dd(DensePackage(), new_line_buffer(), {})


def test_non_unitary_dump() -> None:
    assert NonUnitaryOperation.measure(3, [0, 1], [1, 2]).to_openqasm(_QREG, _CREG) == (
        "measure q[0] -> c[1];\nmeasure q[1] -> c[2];\n"
    )
    assert NonUnitaryOperation.barrier(3, [0, 2]).to_openqasm(_QREG, _CREG) == (
        "barrier q[0], q[2];\n"
    )
    assert NonUnitaryOperation.snapshot(3, [1], 4).to_openqasm(_QREG, _CREG) == (
        "snapshot(4) q[1];\n"
    )
    assert NonUnitaryOperation.show_probabilities(3).to_openqasm(_QREG, _CREG) == (
        "show_probabilities;\n"
    )
    stream = io.StringIO()
    NonUnitaryOperation.reset(3, [2]).dump_qiskit(stream, _QREG, _CREG, "anc")
    assert stream.getvalue() == "qc.reset(q[2])\n"


def test_classic_controlled() -> None:
    inner = StandardOperation(3, [0], OpType.X)
    op = ClassicControlledOperation(inner, (1, 2), 1)
    assert op.control_bit == 2
    assert not op.is_unitary()
    assert op.acts_on(0)
    op.set_nqubits(5)
    assert inner.nqubits == 5
    assert op.nqubits == 5
    creg = [("c0", "c0[0]"), ("c", "c[0]"), ("c", "c[1]")]
    assert op.to_openqasm(_QREG, creg) == "if(c==1) x q[0];\n"

    stream = io.StringIO()
    op.dump_qiskit(stream, _QREG, _CREG, "anc")
    assert stream.getvalue() == (
        "with qc.if_test((c[1], 1)):\n"
        "    with qc.if_test((c[2], 0)):\n"
        "        qc.x(q[0])\n"
    )


def test_compound() -> None:
    compound = CompoundOperation(
        2,
        [StandardOperation(2, [0], OpType.H), StandardOperation(2, [1], OpType.X, [Control(0)])],
    )
    assert compound.is_unitary()
    assert compound.targets == [0, 1]
    compound.set_nqubits(3)
    assert all(op.nqubits == 3 for op in compound.operations)

    package = DensePackage()
    state = package.multiply(
        compound.get_dd(package, new_line_buffer(), {0: 0, 1: 1, 2: 2}),
        package.make_zero_state(3),
    )
    assert abs(package.get_value(state, 0, 0) - 2**-0.5) < 1e-12
    assert abs(package.get_value(state, 3, 0) - 2**-0.5) < 1e-12

    compound.operations.append(NonUnitaryOperation.barrier(3, [2]))
    assert not compound.is_unitary()
    assert compound.to_openqasm(_QREG, _CREG) == "h q[0];\ncx q[0], q[1];\nbarrier q[2];\n"
