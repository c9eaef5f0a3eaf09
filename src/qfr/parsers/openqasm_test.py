import io
import math
from pathlib import Path

import pytest

from qfr.circuit import Circuit
from qfr.operations import (
    ClassicControlledOperation,
    CompoundOperation,
    Control,
    NonUnitaryOperation,
    OpType,
    StandardOperation,
)
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRError, QFRFileError, QFRWarning

_HEADER = 'OPENQASM 2.0;\ninclude "qelib1.inc";\n'


def _import(body: str, include_dir: Path | None = None) -> Circuit:
    circuit = Circuit()
    circuit.import_stream(io.StringIO(_HEADER + body), Format.OPENQASM, include_dir=include_dir)
    return circuit


def test_registers_and_gates() -> None:
    circuit = _import("qreg q[2];\nqreg r[1];\ncreg c[2];\nh q[0];\ncx q[0], r[0];\n")
    assert circuit.qregs == {"q": (0, 2), "r": (2, 1)}
    assert circuit.cregs == {"c": (0, 2)}
    assert circuit.nqubits == 3
    assert circuit.max_controls == 2
    h, cx = circuit.operations
    assert isinstance(cx, StandardOperation)
    assert (h.gate, h.targets) == (OpType.H, [0])
    assert (cx.gate, cx.targets, cx.controls) == (OpType.X, [2], [Control(0)])
    assert circuit.input_permutation == {0: 0, 1: 1, 2: 2}
    assert circuit.output_permutation == {0: 0, 1: 1, 2: 2}


def test_late_register_resizes_operations() -> None:
    circuit = _import("qreg q[1];\nx q[0];\nqreg r[2];\n")
    assert circuit.operations[0].nqubits == 3


def test_parameters() -> None:
    circuit = _import("qreg q[1];\nu3(pi/2, -pi, 2*pi^2) q[0];\nrz(sqrt(4) - ln(1)) q[0];\n")
    u3, rz = circuit.operations
    assert (u3.theta, u3.phi, u3.lam) == pytest.approx((math.pi / 2, -math.pi, 2 * math.pi**2))
    assert rz.lam == pytest.approx(2.0)


def test_controlled_builtins() -> None:
    circuit = _import("qreg q[3];\nccx q[0], q[1], q[2];\ncrz(0.5) q[2], q[0];\nCX q[1], q[0];\n")
    ccx, crz, cx = circuit.operations
    assert (ccx.gate, ccx.controls) == (OpType.X, [Control(0), Control(1)])
    assert (crz.gate, crz.targets, crz.lam) == (OpType.RZ, [0], 0.5)
    assert cx.controls == [Control(1)]


def test_broadcast() -> None:
    circuit = _import("qreg a[2];\nqreg b[2];\ncx a, b;\nh a[1];\n")
    compound = circuit.operations[0]
    assert isinstance(compound, CompoundOperation)
    assert [(op.targets, op.controls) for op in compound.operations] == [
        ([2], [Control(0)]),
        ([3], [Control(1)]),
    ]
    with pytest.raises(QFRError, match="Register sizes do not match"):
        _import("qreg a[2];\nqreg b[3];\ncx a, b;\n")


def test_gate_declaration() -> None:
    body = "gate bell(theta) a, b {\n  h a;\n  CX a, b;\n  rz(theta/2) b;\n}\nqreg q[2];\nbell(pi) q[1], q[0];\n"
    circuit = _import(body)
    (compound,) = circuit.operations
    assert isinstance(compound, CompoundOperation)
    h, cx, rz = compound.operations
    assert h.targets == [1]
    assert (cx.targets, cx.controls) == ([0], [Control(1)])
    assert rz.lam == pytest.approx(math.pi / 2)


def test_opaque_gate() -> None:
    with pytest.raises(QFRError, match="opaque"):
        _import("opaque magic a;\nqreg q[1];\nmagic q[0];\n")


def test_undefined_gate() -> None:
    with pytest.raises(QFRError, match="Undefined gate foo"):
        _import("qreg q[1];\nfoo q[0];\n")


def test_measure_reset_barrier() -> None:
    circuit = _import("qreg q[2];\ncreg c[2];\nbarrier q;\nmeasure q -> c;\nreset q[1];\n")
    barrier, measure, reset = circuit.operations
    assert isinstance(barrier, NonUnitaryOperation)
    assert (barrier.type, barrier.targets) == (OpType.BARRIER, [0, 1])
    assert (measure.targets, measure.classics) == ([0, 1], [0, 1])
    assert (reset.type, reset.targets) == (OpType.RESET, [1])


def test_classically_controlled() -> None:
    circuit = _import("qreg q[1];\ncreg a[1];\ncreg c[2];\nif(c==1) x q[0];\n")
    (op,) = circuit.operations
    assert isinstance(op, ClassicControlledOperation)
    assert op.control_register == (1, 2)
    assert op.control_bit == 2
    assert op.operation.type == OpType.X


def test_if_with_undeclared_register() -> None:
    with pytest.warns(QFRWarning, match="d is not a creg"):
        circuit = _import("qreg q[1];\nif(d==1) x q[0];\nh q[0];\n")
    assert [op.type for op in circuit.operations] == [OpType.H]


def test_if_with_non_quantum_statement() -> None:
    with pytest.warns(QFRWarning, match="Only quantum operations"):
        circuit = _import("qreg q[1];\ncreg c[1];\nif(c==1) barrier q;\nh q[0];\n")
    assert [op.type for op in circuit.operations] == [OpType.H]


def test_snapshot_and_probabilities() -> None:
    circuit = _import("qreg q[2];\nsnapshot(3) q[0], q[1];\nshow_probabilities;\n")
    snapshot, probabilities = circuit.operations
    assert (snapshot.type, snapshot.snapshot_id, snapshot.targets) == (OpType.SNAPSHOT, 3, [0, 1])
    assert probabilities.type == OpType.SHOW_PROBABILITIES
    with pytest.warns(QFRWarning, match="must be qubits"):
        _import("qreg q[2];\nsnapshot(1) q;\n")


def test_duplicate_registers() -> None:
    with pytest.raises(QFRError, match="declared twice"):
        _import("qreg q[1];\nqreg q[1];\n")
    with pytest.raises(QFRError, match="not supported"):
        _import("creg c[1];\ncreg c[1];\n")


def test_unexpected_statement() -> None:
    with pytest.raises(QFRError, match="Unexpected statement"):
        _import("qreg q[1];\n] q;\n")


def test_include(tmp_path: Path) -> None:
    (tmp_path / "lib.inc").write_text("gate flip a { x a; }\n")
    circuit = _import('include "lib.inc";\nqreg q[1];\nflip q[0];\n', include_dir=tmp_path)
    assert isinstance(circuit.operations[0], CompoundOperation)
    with pytest.raises(QFRFileError, match="missing.inc"):
        _import('include "missing.inc";\n', include_dir=tmp_path)
