"""Defines :class:`NonUnitaryOperation`: measurements, resets and simulator markers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TextIO

from typing_extensions import override

from qfr.dd.package import DDPackage, Edge, LineBuffer
from qfr.operations.base import BaseOperation, Permutation, RegisterNames
from qfr.operations.enums import OpType
from qfr.utils.exceptions import QFRError

_NON_UNITARY_TYPES = frozenset(
    {
        OpType.MEASURE,
        OpType.RESET,
        OpType.BARRIER,
        OpType.SNAPSHOT,
        OpType.SHOW_PROBABILITIES,
    }
)


@dataclass
class NonUnitaryOperation(BaseOperation):
    """An operation without a unitary representation.

    Use the static constructors rather than building instances directly.

    Attributes:
        nqubits: width of the circuit the operation belongs to.
        kind: one of ``MEASURE``, ``RESET``, ``BARRIER``, ``SNAPSHOT`` and
            ``SHOW_PROBABILITIES``.
        targets: measured, reset or marked qubits.
        classics: classical bits receiving the outcome of each measured qubit,
            in the same order as ``targets``.
        snapshot_id: identifier of a ``SNAPSHOT`` marker.

    """

    nqubits: int
    kind: OpType
    targets: list[int] = field(default_factory=list)
    classics: list[int] = field(default_factory=list)
    snapshot_id: int = 0

    def __post_init__(self) -> None:
        if self.kind not in _NON_UNITARY_TYPES:
            raise QFRError(f"{self.kind} is not a non-unitary operation.")
        if self.kind == OpType.MEASURE and len(self.targets) != len(self.classics):
            raise QFRError(
                f"Measuring {len(self.targets)} qubit(s) into {len(self.classics)} classical bit(s)."
            )

    @staticmethod
    def measure(nqubits: int, qubits: list[int], classics: list[int]) -> NonUnitaryOperation:
        return NonUnitaryOperation(nqubits, OpType.MEASURE, list(qubits), list(classics))

    @staticmethod
    def reset(nqubits: int, qubits: list[int]) -> NonUnitaryOperation:
        return NonUnitaryOperation(nqubits, OpType.RESET, list(qubits))

    @staticmethod
    def barrier(nqubits: int, qubits: list[int]) -> NonUnitaryOperation:
        return NonUnitaryOperation(nqubits, OpType.BARRIER, list(qubits))

    @staticmethod
    def snapshot(nqubits: int, qubits: list[int], snapshot_id: int) -> NonUnitaryOperation:
        return NonUnitaryOperation(nqubits, OpType.SNAPSHOT, list(qubits), snapshot_id=snapshot_id)

    @staticmethod
    def show_probabilities(nqubits: int) -> NonUnitaryOperation:
        return NonUnitaryOperation(nqubits, OpType.SHOW_PROBABILITIES)

    @property
    @override
    def type(self) -> OpType:
        return self.kind

    @override
    def is_unitary(self) -> bool:
        return False

    @override
    def acts_on(self, qubit: int) -> bool:
        return qubit in self.targets

    @override
    def get_dd(self, package: DDPackage, line: LineBuffer, permutation: Permutation) -> Edge:
        raise QFRError(f"Operation {self.kind} has no decision diagram representation.")

    @override
    def dump_openqasm(self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames) -> None:
        match self.kind:
            case OpType.MEASURE:
                for qubit, bit in zip(self.targets, self.classics):
                    stream.write(f"measure {qreg[qubit][1]} -> {creg[bit][1]};\n")
            case OpType.RESET:
                for qubit in self.targets:
                    stream.write(f"reset {qreg[qubit][1]};\n")
            case OpType.BARRIER:
                stream.write(f"barrier {', '.join(qreg[q][1] for q in self.targets)};\n")
            case OpType.SNAPSHOT:
                arguments = ", ".join(qreg[q][1] for q in self.targets)
                stream.write(f"snapshot({self.snapshot_id}) {arguments};\n")
            case OpType.SHOW_PROBABILITIES:
                stream.write("show_probabilities;\n")

    @override
    def dump_qiskit(
        self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames, anc_reg_name: str
    ) -> None:
        match self.kind:
            case OpType.MEASURE:
                for qubit, bit in zip(self.targets, self.classics):
                    stream.write(f"qc.measure({qreg[qubit][1]}, {creg[bit][1]})\n")
            case OpType.RESET:
                for qubit in self.targets:
                    stream.write(f"qc.reset({qreg[qubit][1]})\n")
            case OpType.BARRIER:
                stream.write(f"qc.barrier({', '.join(qreg[q][1] for q in self.targets)})\n")
            case OpType.SNAPSHOT | OpType.SHOW_PROBABILITIES:
                stream.write(f"# {self.kind} has no Qiskit equivalent\n")

    @override
    def _column_symbol(self, qubit: int) -> str:
        if qubit not in self.targets:
            return "|"
        match self.kind:
            case OpType.MEASURE:
                return "m"
            case OpType.RESET:
                return "r"
            case OpType.BARRIER:
                return "b"
        return "s"
