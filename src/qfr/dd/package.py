"""Defines the interface expected from a decision-diagram package.

The functionality and simulation builders in :mod:`qfr.simulation` never look
inside a decision diagram. They only need the handful of operations listed in
:class:`DDPackage`, which lets any backend honouring this protocol (the dense
:class:`~qfr.dd.dense.DensePackage` shipped with ``qfr`` or an external one) be
plugged in.

Operations communicate the role of every wire to the package through a *line
buffer*: a caller-owned integer array indexed by wire, where each entry is one
of :data:`LINE_DEFAULT` (untouched), :data:`LINE_CONTROL_NEG`,
:data:`LINE_CONTROL_POS` or :data:`LINE_TARGET`.

"""

from __future__ import annotations

from typing import Any, Final, Protocol, TypeAlias

import numpy
import numpy.typing as npt

MAX_QUBITS: Final[int] = 128

LINE_DEFAULT: Final[int] = -1
LINE_CONTROL_NEG: Final[int] = 0
LINE_CONTROL_POS: Final[int] = 1
LINE_TARGET: Final[int] = 2

Edge: TypeAlias = Any
LineBuffer: TypeAlias = npt.NDArray[numpy.int8]
GateMatrix: TypeAlias = npt.NDArray[numpy.complex128]


def new_line_buffer() -> LineBuffer:
    """Return a line buffer able to describe any supported circuit, with every wire unused."""
    return numpy.full(MAX_QUBITS, LINE_DEFAULT, dtype=numpy.int8)


def reset_line_buffer(line: LineBuffer) -> None:
    """Mark every wire of ``line`` as unused."""
    line.fill(LINE_DEFAULT)


class DDPackage(Protocol):
    """Operations consumed from a decision-diagram backend."""

    def make_identity(self, nqubits: int) -> Edge:
        """Return the identity over ``nqubits`` wires (the terminal one for ``0`` wires)."""
        ...

    def multiply(self, lhs: Edge, rhs: Edge) -> Edge:
        """Return the product ``lhs * rhs``."""
        ...

    def inc_ref(self, edge: Edge) -> None: ...

    def dec_ref(self, edge: Edge) -> None: ...

    def garbage_collect(self) -> None:
        """Free every node that is not reachable from a referenced edge."""
        ...

    def use_matrix_normalization(self, enable: bool) -> None: ...

    def is_terminal(self, edge: Edge) -> bool: ...

    def make_gate_dd(self, matrix: GateMatrix, nqubits: int, line: LineBuffer) -> Edge:
        """Return the diagram of the single-target ``matrix`` placed according to ``line``."""
        ...

    def get_value(self, edge: Edge, row: int, col: int) -> complex:
        """Return the entry at ``(row, col)`` of the matrix (or vector) represented by ``edge``."""
        ...
