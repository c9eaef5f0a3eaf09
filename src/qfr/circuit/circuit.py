"""Defines :class:`Circuit`, the canonical in-memory model of a quantum circuit.

A circuit is made of

- qubit and classical register tables, each mapping a register name to the
  ``(start, size)`` range of global indices it covers,
- two permutations mapping logical qubits to physical wires, respectively at
  the start (``input_permutation``) and at the end (``output_permutation``)
  of the circuit,
- a list of operations, earliest first.

Circuits are filled either by importing a file (see :meth:`Circuit.from_file`),
by translating a Qiskit circuit (see :meth:`Circuit.from_qiskit`) or
incrementally through :meth:`Circuit.add_qubit_register` and
:meth:`Circuit.append`. They can then be folded into a single decision
diagram (:meth:`Circuit.build_functionality`, :meth:`Circuit.simulate`) or
written back to disk (:meth:`Circuit.dump`).

"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from qfr.circuit.registers import (
    DEFAULT_CREG,
    DEFAULT_QREG,
    RegisterMap,
    index_in,
    register_of,
)
from qfr.dd.package import MAX_QUBITS, DDPackage, Edge
from qfr.operations import (
    ClassicControlledOperation,
    CompoundOperation,
    Operation,
    StandardOperation,
)
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRError

if TYPE_CHECKING:
    from qiskit import QuantumCircuit


def _control_count(op: Operation) -> int:
    match op:
        case StandardOperation():
            return len(op.controls)
        case ClassicControlledOperation():
            return _control_count(op.operation)
        case CompoundOperation():
            return max((_control_count(o) for o in op.operations), default=0)
    return 0


def _format_complex(value: complex) -> str:
    return f"{value.real:.4g}{value.imag:+.4g}i"


class Circuit:
    """A quantum circuit over qubit and classical registers.

    Args:
        nqubits: if strictly positive, a qubit register ``q`` and a classical
            register ``c`` of that size are created.
        name: name of the circuit. Set from the file name on import.

    """

    def __init__(self, nqubits: int = 0, name: str = "") -> None:
        self.name = name
        self.nqubits = 0
        self.nclassics = 0
        self.qregs: RegisterMap = {}
        self.cregs: RegisterMap = {}
        self.input_permutation: dict[int, int] = {}
        self.output_permutation: dict[int, int] = {}
        self.operations: list[Operation] = []
        self.max_controls = 0
        if nqubits > 0:
            self.add_qubit_register(nqubits, DEFAULT_QREG)
            self.add_classical_register(nqubits, DEFAULT_CREG)

    # CONSTRUCTION
    @staticmethod
    def from_file(path: str | Path, fmt: Format | None = None) -> Circuit:
        """Import a circuit from ``path``, guessing the format from the extension if needed."""
        circuit = Circuit()
        circuit.import_file(path, fmt)
        return circuit

    @staticmethod
    def from_qiskit(qc: QuantumCircuit) -> Circuit:
        """Translate the Qiskit circuit ``qc``, see :func:`~qfr.interop.qiskit.import_qiskit_circuit`."""
        from qfr.interop.qiskit import import_qiskit_circuit  # noqa: PLC0415

        circuit = Circuit(name=qc.name)
        import_qiskit_circuit(circuit, qc)
        return circuit

    def import_file(self, path: str | Path, fmt: Format | None = None) -> None:
        from qfr.parsers import import_file  # noqa: PLC0415

        import_file(self, path, fmt)

    def import_stream(
        self, stream: TextIO, fmt: Format, name: str = "", include_dir: Path | None = None
    ) -> None:
        from qfr.parsers import import_stream  # noqa: PLC0415

        import_stream(self, stream, fmt, name, include_dir)

    # OPERATIONS
    def append(self, op: Operation) -> None:
        """Append ``op`` at the end of the circuit."""
        self.update_max_controls(_control_count(op))
        self.operations.append(op)

    def update_max_controls(self, ncontrols: int) -> None:
        self.max_controls = max(self.max_controls, ncontrols)

    def __iter__(self) -> Iterator[Operation]:
        return iter(self.operations)

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def size(self) -> int:
        return len(self.operations)

    def get_n_individual_ops(self) -> int:
        """Return the number of targets summed over every operation."""
        return sum(len(op.targets) for op in self.operations)

    # REGISTERS
    def add_qubit_register(self, nq: int, name: str = DEFAULT_QREG) -> None:
        """Add ``nq`` qubits to the circuit, in register ``name``.

        If ``name`` is the last qubit register of the circuit, it is extended.
        Otherwise a new register is created. The new qubits are mapped to
        themselves in both permutations and every operation is resized.

        Raises:
            QFRError: if the circuit would exceed the maximum supported width or
                if ``name`` is an existing register that is not the last one.

        """
        if self.nqubits + nq > MAX_QUBITS:
            raise QFRError(
                "Adding additional qubits results in too many qubits. "
                f"{self.nqubits + nq} vs. {MAX_QUBITS}."
            )
        if name in self.qregs:
            start, size = self.qregs[name]
            if start + size != self.nqubits:
                raise QFRError(
                    "Augmenting existing qubit registers is only supported for the last "
                    f"register in a circuit, {name} is not the last register."
                )
            self.qregs[name] = (start, size + nq)
        else:
            self.qregs[name] = (self.nqubits, nq)

        for j in range(self.nqubits, self.nqubits + nq):
            self.input_permutation[j] = j
            self.output_permutation[j] = j
        self.nqubits += nq

        for op in self.operations:
            op.set_nqubits(self.nqubits)

    def add_classical_register(self, nc: int, name: str = DEFAULT_CREG) -> None:
        """Add a classical register ``name`` of ``nc`` bits.

        Raises:
            QFRError: if ``name`` is an existing classical register.

        """
        if name in self.cregs:
            raise QFRError(
                f"Augmenting existing classical registers is currently not supported ({name})."
            )
        self.cregs[name] = (self.nclassics, nc)
        self.nclassics += nc

    def get_qubit_register(self, index: int) -> str:
        return register_of(self.qregs, index)[0]

    def get_qubit_register_and_index(self, index: int) -> tuple[str, int]:
        return register_of(self.qregs, index)

    def get_index_from_qubit_register(self, name: str, offset: int) -> int:
        return index_in(self.qregs, name, offset)

    def get_index_from_classical_register(self, name: str, offset: int) -> int:
        return index_in(self.cregs, name, offset)

    def is_idle_qubit(self, index: int) -> bool:
        return not any(op.acts_on(index) for op in self.operations)

    def strip_trailing_idle_qubits(self) -> None:
        """Remove the idle qubits at the end of the circuit.

        Qubits are considered from the highest index downwards and removal stops
        at the first qubit some operation acts on. Idle qubits below that one are
        kept. Registers left empty are deleted.
        """
        for index in range(self.nqubits - 1, -1, -1):
            if not self.is_idle_qubit(index):
                break
            name = self.get_qubit_register(index)
            start, size = self.qregs[name]
            if size == 1:
                del self.qregs[name]
            else:
                self.qregs[name] = (start, size - 1)
            self.input_permutation.pop(index, None)
            self.output_permutation.pop(index, None)
            self.nqubits -= 1

        for op in self.operations:
            op.set_nqubits(self.nqubits)

    # DECISION DIAGRAMS
    def build_functionality(self, package: DDPackage) -> Edge:
        from qfr.simulation import build_functionality  # noqa: PLC0415

        return build_functionality(self, package)

    def simulate(self, state: Edge, package: DDPackage) -> Edge:
        from qfr.simulation import simulate  # noqa: PLC0415

        return simulate(self, state, package)

    def get_entry(self, package: DDPackage, edge: Edge, i: int, j: int) -> complex:
        """Return the entry ``(i, j)`` of ``edge``, reading rows and columns through the permutations."""
        if package.is_terminal(edge):
            return package.get_value(edge, 0, 0)
        row = sum(((i >> self.output_permutation[w]) & 1) << w for w in range(self.nqubits))
        col = sum(((j >> self.input_permutation[w]) & 1) << w for w in range(self.nqubits))
        return package.get_value(edge, row, col)

    def print_matrix(self, package: DDPackage, edge: Edge, stream: TextIO | None = None) -> None:
        stream = stream or sys.stdout
        dim = 2**self.nqubits
        for i in range(dim):
            entries = (_format_complex(self.get_entry(package, edge, i, j)) for j in range(dim))
            stream.write("\t".join(entries) + "\n")

    def print_col(
        self, package: DDPackage, edge: Edge, j: int, stream: TextIO | None = None
    ) -> None:
        stream = stream or sys.stdout
        for i in range(2**self.nqubits):
            label = format(i, f"0{max(self.nqubits, 1)}b")
            stream.write(f"{label}: {_format_complex(self.get_entry(package, edge, i, j))}\n")

    def print_vector(self, package: DDPackage, edge: Edge, stream: TextIO | None = None) -> None:
        self.print_col(package, edge, 0, stream)

    def print_statistics(self, stream: TextIO | None = None) -> None:
        stream = stream or sys.stdout
        stream.write("QC Statistics:\n")
        stream.write(f"\tn: {self.nqubits}\n")
        stream.write(f"\tm: {len(self.operations)}\n")
        stream.write("--------------\n")

    # EXPORT
    def dump(self, path: str | Path, fmt: Format | None = None) -> None:
        from qfr.exporters import dump  # noqa: PLC0415

        dump(self, path, fmt)

    def dump_stream(self, stream: TextIO, fmt: Format, path: str | Path = "") -> None:
        from qfr.exporters import dump_stream  # noqa: PLC0415

        dump_stream(self, stream, fmt, path)

    def __str__(self) -> str:
        width = int(math.log10(len(self.operations))) + 1 if self.operations else 1
        lines = [
            f"{'i':>{width}}: \t\t\t"
            + "\t".join(str(self.input_permutation.get(i, "?")) for i in range(self.nqubits))
        ]
        for k, op in enumerate(self.operations, start=1):
            lines.append(f"{k:>{width}}: \t{op}")
        lines.append(
            f"{'o':>{width}}: \t\t\t"
            + "\t".join(str(self.output_permutation.get(i, "?")) for i in range(self.nqubits))
        )
        return "\n".join(lines)
