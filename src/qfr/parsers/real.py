"""Read circuits written in the REAL format of RevLib.

A REAL file is made of a header, closed by ``.BEGIN``, that declares the
circuit variables, followed by one gate per line until ``.END``. Each gate line
starts with an identifier such as ``t3`` (a Toffoli gate with 2 controls) or
``rz2:4`` (a controlled rotation around Z by ``pi/4``), followed by the labels
of the controls and then of the target.

"""

from __future__ import annotations

import math
import re
import warnings
from collections.abc import Iterator
from typing import TYPE_CHECKING, Final, TextIO

from qfr.operations import REAL_IDENTIFIERS, Control, OpType, StandardOperation
from qfr.utils.exceptions import QFRError, QFRWarning

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit

TOLERANCE: Final[float] = 1e-13

_GATE_REGEX: Final[re.Pattern[str]] = re.compile(
    r"(r[xyz]|q|[0a-z](?:[+i])?)(\d+)?(?::([-+]?[0-9]+[.]?[0-9]*(?:[eE][-+]?[0-9]+)?))?"
)
_IGNORED_COMMANDS: Final[frozenset[str]] = frozenset(
    {
        ".CONSTANTS",
        ".INPUTS",
        ".OUTPUTS",
        ".GARBAGE",
        ".VERSION",
        ".INPUTBUS",
        ".OUTPUTBUS",
    }
)
_SNAPPED_ROTATIONS: Final[dict[int, OpType]] = {
    1: OpType.Z,
    -1: OpType.Z,
    2: OpType.S,
    -2: OpType.SDG,
    4: OpType.T,
    -4: OpType.TDG,
}


class _TokenReader:
    """Whitespace-separated tokens of a stream, with line-level skipping."""

    def __init__(self, stream: TextIO) -> None:
        self._lines: Iterator[str] = iter(stream)
        self._tokens: list[str] = []

    def next_token(self) -> str | None:
        """Return the next token, reading further lines if needed, or ``None`` at the end."""
        while not self._tokens:
            line = next(self._lines, None)
            if line is None:
                return None
            self._tokens = line.split()
        return self._tokens.pop(0)

    def rest_of_line(self) -> list[str]:
        """Return the remaining tokens of the current line and move to the next one."""
        tokens, self._tokens = self._tokens, []
        return tokens

    def skip_line(self) -> None:
        self._tokens = []


def import_real(circuit: Circuit, stream: TextIO) -> None:
    """Append the content of the REAL ``stream`` to ``circuit``.

    Raises:
        QFRError: if the header or one of the gates is invalid.

    """
    reader = _TokenReader(stream)
    _read_header(circuit, reader)
    _read_gates(circuit, reader)


def _read_header(circuit: Circuit, reader: _TokenReader) -> None:
    nvariables = 0
    while True:
        token = reader.next_token()
        if token is None:
            raise QFRError("Unexpected end of file while reading the header.")
        command = token.upper()
        if command.startswith("#"):
            reader.skip_line()
            continue
        if not command.startswith("."):
            raise QFRError("Invalid file header!")

        match command:
            case ".BEGIN":
                if circuit.nqubits < nvariables:
                    circuit.add_qubit_register(nvariables - circuit.nqubits)
                    circuit.add_classical_register(nvariables - circuit.nclassics)
                return
            case ".NUMVARS":
                value = reader.next_token()
                if value is None or not value.isdigit():
                    raise QFRError(f"Invalid number of variables: {value}.")
                nvariables = int(value)
            case ".VARIABLES":
                for _ in range(nvariables):
                    variable = reader.next_token()
                    if variable is None:
                        raise QFRError("Unexpected end of file while reading the variables.")
                    circuit.add_qubit_register(1, variable)
                    circuit.add_classical_register(1, f"c_{variable}")
            case ".DEFINE":
                warnings.warn(
                    "File contains 'define' statement, which is currently not supported "
                    "and thus simply skipped.",
                    QFRWarning,
                )
                while command != ".ENDDEFINE":
                    reader.skip_line()
                    token = reader.next_token()
                    if token is None:
                        raise QFRError("Unexpected end of file while skipping a '.DEFINE' block.")
                    command = token.upper()
            case _ if command in _IGNORED_COMMANDS:
                reader.skip_line()
            case _:
                raise QFRError(f"Unknown command: {command}")


def _resolve_label(circuit: Circuit, label: str) -> int:
    if label not in circuit.qregs:
        raise QFRError(f"Label {label} not found!")
    return circuit.qregs[label][0]


def _divide_pi(gate: str, divisor: float) -> float:
    if divisor == 0:
        raise QFRError(f"Gate {gate} has a zero divisor in its parameter.")
    return math.pi / divisor


def _read_gates(circuit: Circuit, reader: _TokenReader) -> None:
    while (token := reader.next_token()) is not None:
        command = token.lower()
        if command.startswith("#"):
            reader.skip_line()
            continue
        if command == ".end":
            return

        match = _GATE_REGEX.fullmatch(command)
        if match is None:
            raise QFRError(f"Unsupported gate detected: {command}")
        identifier, count, literal = match.groups()
        if identifier == "t":
            gate = OpType.X
        elif identifier in REAL_IDENTIFIERS:
            gate = REAL_IDENTIFIERS[identifier]
        else:
            raise QFRError(f"Unknown gate identifier: {identifier}")

        ncontrols = int(count) - 1 if count else 0
        lam = float(literal) if literal else 0.0
        if gate in (OpType.V, OpType.VDG) or identifier == "c":
            ncontrols = 1
        elif gate in (OpType.PERES, OpType.PERESDG):
            ncontrols = 2
        if ncontrols >= circuit.nqubits:
            raise QFRError(
                f"Gate acts on {ncontrols + 1} qubits, but only {circuit.nqubits} qubits "
                "are available."
            )

        labels = reader.rest_of_line()
        if len(labels) < ncontrols:
            raise QFRError(f"Too few variables for gate {identifier}")
        controls: list[Control] = []
        for label in labels[:ncontrols]:
            positive = not label.startswith("-")
            controls.append(Control(_resolve_label(circuit, label.lstrip("-")), positive))
        if len(labels) == ncontrols:
            raise QFRError(f"Too few variables (no target) for gate {identifier}")
        target = _resolve_label(circuit, labels[ncontrols])

        circuit.append(_make_operation(circuit.nqubits, gate, identifier, controls, target, lam))


def _make_operation(
    nqubits: int,
    gate: OpType,
    identifier: str,
    controls: list[Control],
    target: int,
    lam: float,
) -> StandardOperation:
    match gate:
        case OpType.NONE:
            raise QFRError("'None' operation detected.")
        case OpType.X:
            return StandardOperation(nqubits, [target], gate, controls)
        case OpType.RX | OpType.RY:
            return StandardOperation(
                nqubits, [target], gate, controls, lam=_divide_pi(identifier, lam)
            )
        case OpType.RZ | OpType.U1:
            nearest = round(lam)
            if abs(lam - nearest) < TOLERANCE:
                if nearest in _SNAPPED_ROTATIONS:
                    return StandardOperation(
                        nqubits, [target], _SNAPPED_ROTATIONS[nearest], controls
                    )
                return StandardOperation(
                    nqubits, [target], gate, controls, lam=_divide_pi(identifier, nearest)
                )
            return StandardOperation(
                nqubits, [target], gate, controls, lam=_divide_pi(identifier, lam)
            )
        case OpType.SWAP | OpType.PERES | OpType.PERESDG:
            if not controls:
                raise QFRError(f"Gate {identifier} needs a second target.")
            *controls, second = controls
            return StandardOperation(nqubits, [target, second.qubit], gate, controls)
    return StandardOperation(nqubits, [target], gate, controls, lam=lam)
