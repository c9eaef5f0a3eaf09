"""Translate Qiskit circuits into :class:`~qfr.circuit.circuit.Circuit` instances.

Every register of the Qiskit circuit is declared in the target circuit, then
the instructions are translated one by one. Instructions that do not
correspond to a known gate are replaced by their definition, translated
recursively. Each level of the recursion carries a :class:`_Context` mapping
the bits of the (sub-)circuit being translated to absolute indices in the
target circuit.

"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final

from qiskit import QuantumCircuit, qpy
from qiskit.circuit import Clbit, Instruction, Qubit

from qfr.operations import Control, NonUnitaryOperation, OpType, StandardOperation
from qfr.utils.exceptions import QFRError, QFRFileError, QFRWarning

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit

_GATES: Final[dict[str, OpType]] = {
    "i": OpType.I,
    "id": OpType.I,
    "iden": OpType.I,
    "x": OpType.X,
    "cx": OpType.X,
    "ccx": OpType.X,
    "mcx": OpType.X,
    "mcx_gray": OpType.X,
    "y": OpType.Y,
    "cy": OpType.Y,
    "z": OpType.Z,
    "cz": OpType.Z,
    "h": OpType.H,
    "ch": OpType.H,
    "s": OpType.S,
    "sdg": OpType.SDG,
    "t": OpType.T,
    "tdg": OpType.TDG,
    "rx": OpType.RX,
    "crx": OpType.RX,
    "mcrx": OpType.RX,
    "ry": OpType.RY,
    "cry": OpType.RY,
    "mcry": OpType.RY,
    "rz": OpType.RZ,
    "crz": OpType.RZ,
    "mcrz": OpType.RZ,
    "p": OpType.U1,
    "u1": OpType.U1,
    "cp": OpType.U1,
    "cu1": OpType.U1,
    "mcphase": OpType.U1,
    "sx": OpType.SX,
    "csx": OpType.SX,
    "sxdg": OpType.SXDG,
    "u2": OpType.U2,
    "u": OpType.U3,
    "u3": OpType.U3,
    "cu3": OpType.U3,
    "swap": OpType.SWAP,
    "cswap": OpType.SWAP,
    "iswap": OpType.ISWAP,
    "mcx_recursive": OpType.X,
    "mcx_vchain": OpType.X,
}


@dataclass(frozen=True)
class _Context:
    """Absolute index, in the target circuit, of every bit of the circuit being translated."""

    qubits: dict[Qubit, int]
    clbits: dict[Clbit, int]


def _declare_registers(circuit: Circuit, qc: QuantumCircuit) -> _Context:
    for qreg in qc.qregs:
        circuit.add_qubit_register(qreg.size, qreg.name)
    for creg in qc.cregs:
        circuit.add_classical_register(creg.size, creg.name)

    qubits: dict[Qubit, int] = {}
    for qubit in qc.qubits:
        location = qc.find_bit(qubit)
        if not location.registers:
            raise QFRError(f"Qubit {location.index} does not belong to any register.")
        register, offset = location.registers[0]
        qubits[qubit] = circuit.get_index_from_qubit_register(register.name, offset)
    clbits: dict[Clbit, int] = {}
    for clbit in qc.clbits:
        location = qc.find_bit(clbit)
        if not location.registers:
            raise QFRError(f"Classical bit {location.index} does not belong to any register.")
        register, offset = location.registers[0]
        clbits[clbit] = circuit.get_index_from_classical_register(register.name, offset)
    return _Context(qubits, clbits)


def import_qiskit_circuit(circuit: Circuit, qc: QuantumCircuit) -> None:
    """Append the translation of ``qc`` to ``circuit``.

    Instructions that cannot be translated and have no definition are skipped
    after emitting a :class:`~qfr.utils.exceptions.QFRWarning`.

    Raises:
        QFRError: if a bit of ``qc`` is not part of a register or if an
            instruction has an unbound parameter.

    """
    context = _declare_registers(circuit, qc)
    _translate(circuit, qc, context)


def load_qpy_circuit(path: str | Path) -> Circuit:
    """Read the first circuit of the QPY file at ``path`` and translate it.

    Raises:
        QFRFileError: if ``path`` cannot be read.

    """
    from qfr.circuit.circuit import Circuit  # noqa: PLC0415

    try:
        with open(path, "rb") as f:
            qc = qpy.load(f)[0]
    except OSError as err:
        raise QFRFileError(f"Error opening/reading from file: {path}") from err
    circuit = Circuit(name=Path(path).stem)
    import_qiskit_circuit(circuit, qc)
    return circuit


def _translate(circuit: Circuit, qc: QuantumCircuit, context: _Context) -> None:
    for instruction in qc.data:
        qubits = [context.qubits[q] for q in instruction.qubits]
        clbits = [context.clbits[c] for c in instruction.clbits]
        _translate_instruction(circuit, instruction.operation, qubits, clbits)


def _translate_instruction(
    circuit: Circuit, operation: Instruction, qubits: list[int], clbits: list[int]
) -> None:
    name = operation.name
    match name:
        case "measure":
            circuit.append(NonUnitaryOperation.measure(circuit.nqubits, qubits, clbits))
            return
        case "barrier":
            circuit.append(NonUnitaryOperation.barrier(circuit.nqubits, qubits))
            return
        case "reset":
            circuit.append(NonUnitaryOperation.reset(circuit.nqubits, qubits))
            return
        case "mcx_recursive" if len(qubits) > 5:
            # The last qubit is an ancilla.
            qubits = qubits[:-1]
        case "mcx_vchain":
            ncontrols = math.ceil((len(qubits) + 1) / 2)
            qubits = qubits[: len(qubits) - max(0, ncontrols - 2)]

    if name in _GATES:
        circuit.append(_standard_operation(circuit.nqubits, name, _GATES[name], qubits, operation))
        return

    definition = operation.definition
    if definition is None:
        warnings.warn(
            f"Failed to import instruction {name} from Qiskit: it has no definition.",
            QFRWarning,
        )
        return
    context = _Context(
        dict(zip(definition.qubits, qubits)),
        dict(zip(definition.clbits, clbits)),
    )
    _translate(circuit, definition, context)


def _parameters(name: str, operation: Instruction) -> tuple[float, float, float]:
    """Return ``(lambda, phi, theta)`` from the parameters of ``operation``."""
    try:
        values = [float(p) for p in operation.params]
    except TypeError as err:
        raise QFRError(f"Instruction {name} has an unbound parameter: {operation.params}.") from err
    match values:
        case [lam]:
            return lam, 0.0, 0.0
        case [phi, lam]:
            return lam, phi, 0.0
        case [theta, phi, lam]:
            return lam, phi, theta
    return 0.0, 0.0, 0.0


def _standard_operation(
    nqubits: int, name: str, gate: OpType, qubits: list[int], operation: Instruction
) -> StandardOperation:
    ntargets = 2 if gate.is_two_target else 1
    if len(qubits) < ntargets:
        raise QFRError(f"Instruction {name} acts on too few qubits: {qubits}.")
    lam, phi, theta = _parameters(name, operation)
    return StandardOperation(
        nqubits,
        qubits[-ntargets:],
        gate,
        [Control(q) for q in qubits[:-ntargets]],
        lam=lam,
        phi=phi,
        theta=theta,
    )
