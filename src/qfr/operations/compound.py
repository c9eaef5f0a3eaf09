"""Defines :class:`CompoundOperation`, an ordered group of operations treated as one."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

from typing_extensions import override

from qfr.dd.package import DDPackage, Edge, LineBuffer
from qfr.operations.base import BaseOperation, Permutation, RegisterNames
from qfr.operations.enums import OpType

if TYPE_CHECKING:
    from qfr.operations import Operation


@dataclass
class CompoundOperation(BaseOperation):
    """Operations applied one after the other, earliest first.

    Produced when a user-defined OpenQASM gate is called or when a gate call is
    broadcast over whole registers.
    """

    nqubits: int
    operations: list[Operation] = field(default_factory=list)

    @property
    @override
    def type(self) -> OpType:
        return OpType.COMPOUND

    @property  # type: ignore[override]
    def targets(self) -> list[int]:
        return [t for op in self.operations for t in op.targets]

    @override
    def set_nqubits(self, nqubits: int) -> None:
        super().set_nqubits(nqubits)
        for op in self.operations:
            op.set_nqubits(nqubits)

    @override
    def is_unitary(self) -> bool:
        return all(op.is_unitary() for op in self.operations)

    @override
    def acts_on(self, qubit: int) -> bool:
        return any(op.acts_on(qubit) for op in self.operations)

    @override
    def get_dd(self, package: DDPackage, line: LineBuffer, permutation: Permutation) -> Edge:
        edge = package.make_identity(self.nqubits)
        for op in self.operations:
            edge = package.multiply(op.get_dd(package, line, permutation), edge)
        return edge

    @override
    def dump_openqasm(self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames) -> None:
        for op in self.operations:
            op.dump_openqasm(stream, qreg, creg)

    @override
    def dump_qiskit(
        self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames, anc_reg_name: str
    ) -> None:
        for op in self.operations:
            op.dump_qiskit(stream, qreg, creg, anc_reg_name)

    @override
    def __str__(self) -> str:
        return "\n".join(
            [f"{str(self.type):<19}"] + [f"  {op}" for op in self.operations]
        )
