"""Defines :class:`ClassicControlledOperation`, an operation guarded by a classical register."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from typing_extensions import override

from qfr.dd.package import DDPackage, Edge, LineBuffer
from qfr.operations.base import BaseOperation, Permutation, RegisterNames
from qfr.operations.enums import OpType
from qfr.utils.exceptions import QFRError

if TYPE_CHECKING:
    from qfr.operations import Operation


@dataclass
class ClassicControlledOperation(BaseOperation):
    """Apply ``operation`` only if the classical register ``control_register`` holds ``expected_value``.

    Attributes:
        operation: the guarded operation.
        control_register: ``(start, size)`` of the tested classical register.
        expected_value: value the register should hold for ``operation`` to apply.

    """

    operation: Operation
    control_register: tuple[int, int]
    expected_value: int

    @property
    def nqubits(self) -> int:  # type: ignore[override]
        return self.operation.nqubits

    @override
    def set_nqubits(self, nqubits: int) -> None:
        self.operation.set_nqubits(nqubits)

    @property
    def control_bit(self) -> int:
        """Absolute index of the classical bit the operation is keyed to."""
        return self.control_register[0] + self.expected_value

    @property
    @override
    def type(self) -> OpType:
        return OpType.CLASSIC_CONTROLLED

    @property  # type: ignore[override]
    def targets(self) -> list[int]:
        return self.operation.targets

    @override
    def is_unitary(self) -> bool:
        return False

    @override
    def acts_on(self, qubit: int) -> bool:
        return self.operation.acts_on(qubit)

    @override
    def get_dd(self, package: DDPackage, line: LineBuffer, permutation: Permutation) -> Edge:
        raise QFRError("Classically controlled operations have no decision diagram representation.")

    @override
    def dump_openqasm(self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames) -> None:
        start, _ = self.control_register
        condition = f"if({creg[start][0]}=={self.expected_value}) "
        inner = io.StringIO()
        self.operation.dump_openqasm(inner, qreg, creg)
        for statement in inner.getvalue().splitlines():
            stream.write(condition + statement + "\n")

    @override
    def dump_qiskit(
        self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames, anc_reg_name: str
    ) -> None:
        start, size = self.control_register
        # Registers are fused in Qiskit scripts, so the condition is checked bit by bit.
        for depth in range(size):
            bit = (self.expected_value >> depth) & 1
            stream.write("    " * depth + f"with qc.if_test(({creg[start + depth][1]}, {bit})):\n")
        inner = io.StringIO()
        self.operation.dump_qiskit(inner, qreg, creg, anc_reg_name)
        for statement in inner.getvalue().splitlines():
            stream.write("    " * size + statement + "\n")

    @override
    def __str__(self) -> str:
        start, size = self.control_register
        return f"if c[{start}:{start + size}] == {self.expected_value}: {self.operation}"
