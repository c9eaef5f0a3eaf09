"""Read the random circuits of the Google "GRCS" supremacy benchmarks.

The first line holds the number of qubits. Every following non-empty line
reads ``<cycle> <gate> <qubit>...``, where the cycle number is ignored.

"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, TextIO

from qfr.circuit.registers import DEFAULT_QREG
from qfr.operations import Control, OpType, StandardOperation
from qfr.utils.exceptions import QFRError

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit

_SINGLE_QUBIT_GATES = {
    "h": (OpType.H, 0.0),
    "t": (OpType.T, 0.0),
    "x_1_2": (OpType.RX, math.pi / 2),
    "y_1_2": (OpType.RY, math.pi / 2),
}


def _qubit(token: str, line: str) -> int:
    if not token.isdigit():
        raise QFRError(f"Invalid qubit index '{token}' in line '{line}'.")
    return int(token)


def import_grcs(circuit: Circuit, stream: TextIO) -> None:
    """Append the content of the GRCS ``stream`` to ``circuit``.

    Raises:
        QFRError: if the qubit count is missing or if a line holds an unknown gate.

    """
    header = stream.readline().strip()
    if not header.isdigit():
        raise QFRError(f"Expected the number of qubits on the first line, got '{header}'.")
    circuit.add_qubit_register(int(header), DEFAULT_QREG)
    nqubits = circuit.nqubits

    for line in stream:
        tokens = line.split()
        if not tokens:
            continue
        if len(tokens) < 3:
            raise QFRError(f"Incomplete gate description '{line.strip()}'.")
        _, identifier, *arguments = tokens
        if identifier == "cz":
            if len(arguments) < 2:
                raise QFRError(f"Incomplete gate description '{line.strip()}'.")
            control, target = (_qubit(a, line.strip()) for a in arguments[:2])
            circuit.append(StandardOperation(nqubits, [target], OpType.Z, [Control(control)]))
        elif identifier in _SINGLE_QUBIT_GATES:
            gate, lam = _SINGLE_QUBIT_GATES[identifier]
            target = _qubit(arguments[0], line.strip())
            circuit.append(StandardOperation(nqubits, [target], gate, lam=lam))
        else:
            raise QFRError(f"Unknown gate '{identifier}'")
