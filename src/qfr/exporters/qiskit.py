"""Write circuits as Python scripts building the circuit with Qiskit.

The generated script rebuilds the circuit on fused registers (every qubit
register becomes part of ``q`` and every classical register part of ``c``),
then decomposes it to the ``id, u1, u2, u3, cx`` basis and maps it on a
generic device whose size depends on the number of qubits. Both results are
written as OpenQASM next to the script, in ``<stem>_decomposed.qasm`` and
``<stem>_transpiled.qasm``.

"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import TYPE_CHECKING, Final, TextIO

from qfr.circuit.registers import DEFAULT_ANCREG, DEFAULT_CREG, DEFAULT_QREG, create_reg_array
from qfr.utils.exceptions import QFRWarning

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit

MAX_QISKIT_QUBITS: Final[int] = 53

_DEVICE_TIERS: Final[tuple[int, ...]] = (5, 20, MAX_QISKIT_QUBITS)

_HEADER: Final[str] = """\
from math import pi

from qiskit import ClassicalRegister, QuantumCircuit, QuantumRegister, qasm2, transpile
from qiskit.circuit.library import *
from qiskit.providers.fake_provider import GenericBackendV2
from qiskit.transpiler import PassManager
from qiskit.transpiler.passes import (
    ApplyLayout,
    EnlargeWithAncilla,
    FullAncillaAllocation,
    SabreSwap,
    TrivialLayout,
)

"""

_FOOTER: Final[str] = """
qc_decomposed = transpile(qc, basis_gates=["id", "u1", "u2", "u3", "cx"], optimization_level=0)

with open("{decomposed}", "w") as f:
    f.write(qasm2.dumps(qc_decomposed))

coupling_map = GenericBackendV2(num_qubits={device_size}, seed=420).coupling_map
pm = PassManager(
    [
        TrivialLayout(coupling_map),
        FullAncillaAllocation(coupling_map),
        EnlargeWithAncilla(),
        ApplyLayout(),
        SabreSwap(coupling_map, seed=420),
    ]
)
qc_transpiled = pm.run(qc_decomposed)
layout = pm.property_set["layout"]

with open("{transpiled}", "w") as f:
    f.write("// layout: physical qubit <- logical qubit\\n")
    for i in range(qc.num_qubits):
        f.write("// " + str(i) + " " + str(qc.find_bit(layout[i]).index) + "\\n")
    f.write("\\n")
    f.write(qasm2.dumps(qc_transpiled))
"""


def total_qubits(circuit: Circuit) -> int:
    """Number of qubits of the generated script, ancillae of multi-controlled gates included."""
    return circuit.nqubits + max(0, circuit.max_controls - 2)


def device_size(nqubits: int) -> int:
    """Return the size of the smallest generic device able to hold ``nqubits`` qubits."""
    return next(size for size in _DEVICE_TIERS if nqubits <= size)


def auxiliary_paths(path: str | Path) -> tuple[Path, Path]:
    """Return the paths of the decomposed and transpiled OpenQASM files of the script at ``path``."""
    path = Path(path)
    return (
        path.with_name(f"{path.stem}_decomposed.qasm"),
        path.with_name(f"{path.stem}_transpiled.qasm"),
    )


def can_dump_qiskit(circuit: Circuit) -> bool:
    """Return ``True`` if ``circuit`` fits in a generated script, warning otherwise."""
    if total_qubits(circuit) > MAX_QISKIT_QUBITS:
        warnings.warn(
            f"No more than {MAX_QISKIT_QUBITS} total qubits are currently supported, "
            f"got {total_qubits(circuit)}.",
            QFRWarning,
        )
        return False
    return True


def dump_qiskit(circuit: Circuit, stream: TextIO, path: str | Path) -> None:
    """Write a Qiskit script rebuilding ``circuit`` to ``stream``.

    Args:
        circuit: the circuit to export.
        stream: where the script is written.
        path: path of the script, from which the paths of the auxiliary
            OpenQASM files are derived.

    Nothing is written if the circuit needs more than :data:`MAX_QISKIT_QUBITS`
    qubits, see :func:`can_dump_qiskit`.
    """
    if not can_dump_qiskit(circuit):
        return
    stream.write(_HEADER)
    stream.write(f"{DEFAULT_QREG} = QuantumRegister({circuit.nqubits}, '{DEFAULT_QREG}')\n")
    stream.write(f"{DEFAULT_CREG} = ClassicalRegister({circuit.nclassics}, '{DEFAULT_CREG}')\n")
    registers = [DEFAULT_QREG, DEFAULT_CREG]
    if circuit.max_controls > 2:
        stream.write(
            f"{DEFAULT_ANCREG} = QuantumRegister({circuit.max_controls - 2}, '{DEFAULT_ANCREG}')\n"
        )
        registers.append(DEFAULT_ANCREG)
    stream.write(f"qc = QuantumCircuit({', '.join(registers)})\n\n")

    qreg_names = create_reg_array(circuit.qregs, circuit.nqubits, DEFAULT_QREG, True)
    creg_names = create_reg_array(circuit.cregs, circuit.nclassics, DEFAULT_CREG, True)
    for op in circuit.operations:
        op.dump_qiskit(stream, qreg_names, creg_names, DEFAULT_ANCREG)

    decomposed, transpiled = auxiliary_paths(path)
    stream.write(
        _FOOTER.format(
            decomposed=decomposed.as_posix(),
            transpiled=transpiled.as_posix(),
            device_size=device_size(total_qubits(circuit)),
        )
    )
