"""Dense reference implementation of :class:`~qfr.dd.package.DDPackage`.

Every "decision diagram" is stored as a plain ``numpy`` array, so this package
is only usable for a few qubits. It implements the reference-counting and
garbage-collection protocol faithfully though, which makes it the tool of
choice to check that callers retain and release edges correctly.

Basis states are indexed such that wire ``w`` corresponds to bit ``w`` of the
row (or column) index.

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy
import numpy.typing as npt

from qfr.dd.package import (
    LINE_CONTROL_NEG,
    LINE_CONTROL_POS,
    LINE_TARGET,
    GateMatrix,
    LineBuffer,
)
from qfr.utils.exceptions import QFRError


@dataclass(eq=False)
class DenseEdge:
    """A matrix or column vector owned by a :class:`DensePackage`.

    Attributes:
        matrix: the dense representation, of shape ``(2**n, 2**n)`` for
            operators or ``(2**n, 1)`` for states.
        node_id: identifier of the edge in the node table of its package.

    """

    matrix: npt.NDArray[numpy.complex128]
    node_id: int

    @property
    def nqubits(self) -> int:
        return int(self.matrix.shape[0]).bit_length() - 1

    @property
    def is_vector(self) -> bool:
        return self.matrix.shape[1] == 1


class DensePackage:
    """Dense, reference-counted stand-in for a decision-diagram package."""

    def __init__(self) -> None:
        self._next_id = 1
        self._nodes: dict[int, DenseEdge] = {}
        self._ref_counts: dict[int, int] = {}
        self.one = DenseEdge(numpy.ones((1, 1), dtype=numpy.complex128), 0)
        self.matrix_normalization = False
        self.gc_runs = 0
        self.collected_nodes = 0

    def _new_edge(self, matrix: npt.NDArray[numpy.complex128]) -> DenseEdge:
        edge = DenseEdge(matrix, self._next_id)
        self._nodes[edge.node_id] = edge
        self._ref_counts[edge.node_id] = 0
        self._next_id += 1
        return edge

    @property
    def active_references(self) -> int:
        """Total number of references currently held on edges of ``self``."""
        return sum(self._ref_counts.values())

    @property
    def live_nodes(self) -> int:
        """Number of non-terminal edges not yet garbage collected."""
        return len(self._nodes)

    def ref_count(self, edge: DenseEdge) -> int:
        if edge.node_id == 0:
            return 0
        return self._ref_counts.get(edge.node_id, 0)

    def make_identity(self, nqubits: int) -> DenseEdge:
        if nqubits == 0:
            return self.one
        return self._new_edge(numpy.eye(2**nqubits, dtype=numpy.complex128))

    def make_zero_state(self, nqubits: int) -> DenseEdge:
        return self.make_basis_state(nqubits, [False] * nqubits)

    def make_basis_state(self, nqubits: int, bits: Sequence[bool]) -> DenseEdge:
        """Return the computational basis state where wire ``w`` holds ``bits[w]``."""
        if len(bits) != nqubits:
            raise QFRError(f"Expected {nqubits} bits to build a basis state, got {len(bits)}.")
        state = numpy.zeros((2**nqubits, 1), dtype=numpy.complex128)
        state[sum(1 << w for w, bit in enumerate(bits) if bit), 0] = 1
        return self._new_edge(state)

    def multiply(self, lhs: DenseEdge, rhs: DenseEdge) -> DenseEdge:
        if lhs.matrix.shape[1] != rhs.matrix.shape[0]:
            raise QFRError(
                f"Cannot multiply diagrams over {lhs.nqubits} and {rhs.nqubits} qubits."
            )
        return self._new_edge(lhs.matrix @ rhs.matrix)

    def inc_ref(self, edge: DenseEdge) -> None:
        if edge.node_id == 0:
            return
        if edge.node_id not in self._nodes:
            raise QFRError(f"Edge {edge.node_id} has already been garbage collected.")
        self._ref_counts[edge.node_id] += 1

    def dec_ref(self, edge: DenseEdge) -> None:
        if edge.node_id == 0:
            return
        if self._ref_counts.get(edge.node_id, 0) == 0:
            raise QFRError(f"Releasing edge {edge.node_id} that holds no reference.")
        self._ref_counts[edge.node_id] -= 1

    def garbage_collect(self) -> None:
        dead = [node_id for node_id, count in self._ref_counts.items() if count == 0]
        for node_id in dead:
            del self._nodes[node_id]
            del self._ref_counts[node_id]
        self.gc_runs += 1
        self.collected_nodes += len(dead)

    def use_matrix_normalization(self, enable: bool) -> None:
        self.matrix_normalization = enable

    def is_terminal(self, edge: DenseEdge) -> bool:
        return edge.matrix.shape == (1, 1)

    def make_gate_dd(self, matrix: GateMatrix, nqubits: int, line: LineBuffer) -> DenseEdge:
        targets = [w for w in range(nqubits) if line[w] == LINE_TARGET]
        if len(targets) != 1:
            raise QFRError(f"Expected exactly one target wire, found {len(targets)}.")
        (target,) = targets
        positive = [w for w in range(nqubits) if line[w] == LINE_CONTROL_POS]
        negative = [w for w in range(nqubits) if line[w] == LINE_CONTROL_NEG]

        dim = 2**nqubits
        result = numpy.zeros((dim, dim), dtype=numpy.complex128)
        for col in range(dim):
            if any(not (col >> w) & 1 for w in positive) or any((col >> w) & 1 for w in negative):
                result[col, col] = 1
                continue
            bit = (col >> target) & 1
            base = col & ~(1 << target)
            for out_bit in (0, 1):
                result[base | (out_bit << target), col] += matrix[out_bit, bit]
        return self._new_edge(result)

    def get_value(self, edge: DenseEdge, row: int, col: int) -> complex:
        return complex(edge.matrix[row, col])
