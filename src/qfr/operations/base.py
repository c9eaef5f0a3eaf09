"""Defines :class:`BaseOperation`, the capability set shared by every operation.

An operation only exposes what the rest of ``qfr`` needs from it: whether it
is unitary, which qubits it acts on, how to adapt to a new circuit width, how
to contribute a decision-diagram fragment and how to render itself as
OpenQASM or as a Qiskit call.

"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TextIO, TypeAlias

from qfr.dd.package import MAX_QUBITS, DDPackage, Edge, LineBuffer
from qfr.operations.enums import OpType
from qfr.utils.exceptions import QFRError

RegisterNames: TypeAlias = Sequence[tuple[str, str]]
"""One ``(register name, "name[offset]")`` entry per global index."""

Permutation: TypeAlias = Mapping[int, int]
"""Mapping from logical qubit index to physical wire index."""


@dataclass(frozen=True)
class Control:
    """A control qubit. Negative controls trigger on ``|0>`` instead of ``|1>``."""

    qubit: int
    positive: bool = True

    def __str__(self) -> str:
        return f"{'' if self.positive else '-'}{self.qubit}"


def format_parameter(value: float) -> str:
    return f"{value:.17g}"


def wire_of(permutation: Permutation, qubit: int) -> int:
    """Return the wire ``qubit`` is mapped to, failing if ``permutation`` does not cover it."""
    try:
        return permutation[qubit]
    except KeyError:
        raise QFRError(f"Qubit {qubit} is not covered by the permutation.") from None


class BaseOperation(ABC):
    """Interface implemented by the operation variants listed in :data:`~qfr.operations.Operation`."""

    nqubits: int
    targets: list[int]
    """Qubits the operation acts on, controls excluded."""

    def set_nqubits(self, nqubits: int) -> None:
        """Inform ``self`` that the circuit it belongs to is now ``nqubits`` wide."""
        if nqubits > MAX_QUBITS:
            raise QFRError(f"Operations may not act on more than {MAX_QUBITS} qubits.")
        self.nqubits = nqubits

    @property
    @abstractmethod
    def type(self) -> OpType:
        """Kind of the operation."""

    @abstractmethod
    def is_unitary(self) -> bool:
        pass

    @abstractmethod
    def acts_on(self, qubit: int) -> bool:
        """Return ``True`` if ``qubit`` is a target or a control of ``self``."""

    @abstractmethod
    def get_dd(self, package: DDPackage, line: LineBuffer, permutation: Permutation) -> Edge:
        """Build the decision diagram of ``self``.

        Args:
            package: backend used to build the diagram.
            line: caller-owned line buffer. Every entry must be unused on entry and
                is left unused on return.
            permutation: mapping used to route logical qubits to wires.

        Raises:
            QFRError: if ``self`` has no unitary representation.

        """

    @abstractmethod
    def dump_openqasm(self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames) -> None:
        """Write the OpenQASM statement(s) for ``self`` to ``stream``."""

    @abstractmethod
    def dump_qiskit(
        self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames, anc_reg_name: str
    ) -> None:
        """Write the Qiskit call(s) reproducing ``self`` on the ``qc`` circuit to ``stream``."""

    def to_openqasm(self, qreg: RegisterNames, creg: RegisterNames) -> str:
        stream = io.StringIO()
        self.dump_openqasm(stream, qreg, creg)
        return stream.getvalue()

    def _column_symbol(self, qubit: int) -> str:
        return "|"

    def __str__(self) -> str:
        columns = "\t".join(self._column_symbol(q) for q in range(self.nqubits))
        return f"{str(self.type):<19}\t{columns}"
