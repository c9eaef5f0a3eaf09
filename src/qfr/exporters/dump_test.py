import io
from pathlib import Path

import pytest

from qfr.circuit import Circuit
from qfr.exporters.qiskit import auxiliary_paths, device_size, total_qubits
from qfr.operations import Control, NonUnitaryOperation, OpType, StandardOperation
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRFileError, QFRWarning

_SOURCE = """\
OPENQASM 2.0;
include "qelib1.inc";
qreg q[2];
qreg anc[1];
creg c[2];
h q[0];
cx q[0], anc[0];
rz(0.25) q[1];
measure q -> c;
if(c==1) x q[1];
"""


def _dump(circuit: Circuit, fmt: Format = Format.OPENQASM, path: str = "") -> str:
    stream = io.StringIO()
    circuit.dump_stream(stream, fmt, path)
    return stream.getvalue()


def test_openqasm_round_trip() -> None:
    circuit = Circuit()
    circuit.import_stream(io.StringIO(_SOURCE), Format.OPENQASM)
    lines = _dump(circuit).splitlines()
    assert lines[:5] == [
        "OPENQASM 2.0;",
        'include "qelib1.inc";',
        "qreg q[2];",
        "qreg anc[1];",
        "creg c[2];",
    ]
    assert lines[5:] == [
        "h q[0];",
        "cx q[0], anc[0];",
        "rz(0.25) q[1];",
        "measure q[0] -> c[0];",
        "measure q[1] -> c[1];",
        "if(c==1) x q[1];",
    ]

    reimported = Circuit()
    reimported.import_stream(io.StringIO("\n".join(lines)), Format.OPENQASM)
    assert reimported.qregs == circuit.qregs
    assert reimported.cregs == circuit.cregs
    assert [op.type for op in reimported] == [
        OpType.H,
        OpType.X,
        OpType.RZ,
        OpType.MEASURE,
        OpType.CLASSIC_CONTROLLED,
    ]


def test_openqasm_default_registers() -> None:
    circuit = Circuit()
    circuit.nqubits = 2
    circuit.input_permutation = {0: 0, 1: 1}
    circuit.output_permutation = {0: 0, 1: 1}
    circuit.append(StandardOperation(2, [1], OpType.X, [Control(0, False)]))
    assert _dump(circuit).splitlines()[2:] == [
        "qreg q[2];",
        "creg c[0];",
        "x q[0];",
        "cx q[0], q[1];",
        "x q[0];",
    ]


@pytest.mark.parametrize("fmt", [Format.REAL, Format.GRCS])
def test_unsupported_formats(fmt: Format, tmp_path: Path) -> None:
    path = tmp_path / f"out.{fmt.value}"
    with pytest.warns(QFRWarning, match="not supported"):
        Circuit(1).dump(path)
    assert not path.exists()
    with pytest.warns(QFRWarning, match="not supported"):
        assert _dump(Circuit(1), fmt) == ""


def test_dump_to_file(tmp_path: Path) -> None:
    circuit = Circuit(1)
    circuit.append(StandardOperation(1, [0], OpType.H))
    path = tmp_path / "out.qasm"
    circuit.dump(path)
    assert path.read_text().endswith("h q[0];\n")
    with pytest.raises(QFRFileError):
        circuit.dump(tmp_path / "missing" / "out.qasm")


def test_qiskit_script(tmp_path: Path) -> None:
    circuit = Circuit()
    circuit.add_qubit_register(2, "a")
    circuit.add_qubit_register(3, "b")
    circuit.add_classical_register(1, "m")
    circuit.append(StandardOperation(5, [4], OpType.X, [Control(0), Control(1), Control(2)]))
    circuit.append(StandardOperation(5, [3], OpType.H, [Control(1, False)]))
    circuit.append(NonUnitaryOperation.measure(5, [3], [0]))
    path = tmp_path / "script.py"
    circuit.dump(path)
    script = path.read_text()
    assert "q = QuantumRegister(5, 'q')" in script
    assert "c = ClassicalRegister(1, 'c')" in script
    assert "anc = QuantumRegister(1, 'anc')" in script
    assert "qc = QuantumCircuit(q, c, anc)" in script
    assert "qc.mcx([q[0], q[1], q[2]], q[4], anc[:1], mode='v-chain')" in script
    assert "qc.append(HGate().control(1, ctrl_state='0'), [q[1], q[3]])" in script
    assert "qc.measure(q[3], c[0])" in script
    decomposed, transpiled = auxiliary_paths(path)
    assert f'open("{decomposed.as_posix()}", "w")' in script
    assert f'open("{transpiled.as_posix()}", "w")' in script
    assert "GenericBackendV2(num_qubits=20, seed=420)" in script
    compile(script, str(path), "exec")


def test_qiskit_width_limit() -> None:
    circuit = Circuit(52)
    circuit.max_controls = 4
    assert total_qubits(circuit) == 54
    with pytest.warns(QFRWarning, match="No more than 53"):
        assert _dump(circuit, Format.QISKIT) == ""


@pytest.mark.parametrize(("nqubits", "expected"), [(1, 5), (5, 5), (6, 20), (20, 20), (53, 53)])
def test_device_size(nqubits: int, expected: int) -> None:
    assert device_size(nqubits) == expected


def test_auxiliary_paths() -> None:
    assert auxiliary_paths("out/bench.py") == (
        Path("out/bench_decomposed.qasm"),
        Path("out/bench_transpiled.qasm"),
    )
