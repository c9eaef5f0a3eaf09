"""Defines :class:`StandardOperation`, a (multi-)controlled gate on one or two targets."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Final, TextIO

import numpy
from typing_extensions import override

from qfr.dd.package import (
    LINE_CONTROL_NEG,
    LINE_CONTROL_POS,
    LINE_DEFAULT,
    LINE_TARGET,
    MAX_QUBITS,
    DDPackage,
    Edge,
    GateMatrix,
    LineBuffer,
)
from qfr.operations.base import (
    BaseOperation,
    Control,
    Permutation,
    RegisterNames,
    format_parameter,
    wire_of,
)
from qfr.operations.enums import OpType
from qfr.utils.exceptions import QFRError

_SQRT1_2: Final[float] = 1 / math.sqrt(2)

_FIXED_MATRICES: Final[dict[OpType, list[list[complex]]]] = {
    OpType.I: [[1, 0], [0, 1]],
    OpType.H: [[_SQRT1_2, _SQRT1_2], [_SQRT1_2, -_SQRT1_2]],
    OpType.X: [[0, 1], [1, 0]],
    OpType.Y: [[0, -1j], [1j, 0]],
    OpType.Z: [[1, 0], [0, -1]],
    OpType.S: [[1, 0], [0, 1j]],
    OpType.SDG: [[1, 0], [0, -1j]],
    OpType.T: [[1, 0], [0, complex(_SQRT1_2, _SQRT1_2)]],
    OpType.TDG: [[1, 0], [0, complex(_SQRT1_2, -_SQRT1_2)]],
    OpType.V: [[_SQRT1_2, -1j * _SQRT1_2], [-1j * _SQRT1_2, _SQRT1_2]],
    OpType.VDG: [[_SQRT1_2, 1j * _SQRT1_2], [1j * _SQRT1_2, _SQRT1_2]],
    OpType.SX: [[(1 + 1j) / 2, (1 - 1j) / 2], [(1 - 1j) / 2, (1 + 1j) / 2]],
    OpType.SXDG: [[(1 - 1j) / 2, (1 + 1j) / 2], [(1 + 1j) / 2, (1 - 1j) / 2]],
}

_QASM_NAMES: Final[dict[OpType, str]] = {
    OpType.I: "id",
    OpType.H: "h",
    OpType.X: "x",
    OpType.Y: "y",
    OpType.Z: "z",
    OpType.S: "s",
    OpType.SDG: "sdg",
    OpType.T: "t",
    OpType.TDG: "tdg",
    OpType.V: "rx",
    OpType.VDG: "rx",
    OpType.SX: "sx",
    OpType.SXDG: "sxdg",
    OpType.U3: "u3",
    OpType.U2: "u2",
    OpType.U1: "u1",
    OpType.RX: "rx",
    OpType.RY: "ry",
    OpType.RZ: "rz",
    OpType.SWAP: "swap",
    OpType.ISWAP: "iswap",
}

_QISKIT_GATES: Final[dict[OpType, str]] = {
    OpType.I: "IGate",
    OpType.H: "HGate",
    OpType.X: "XGate",
    OpType.Y: "YGate",
    OpType.Z: "ZGate",
    OpType.S: "SGate",
    OpType.SDG: "SdgGate",
    OpType.T: "TGate",
    OpType.TDG: "TdgGate",
    OpType.V: "RXGate",
    OpType.VDG: "RXGate",
    OpType.SX: "SXGate",
    OpType.SXDG: "SXdgGate",
    OpType.U3: "UGate",
    OpType.U2: "UGate",
    OpType.U1: "PhaseGate",
    OpType.RX: "RXGate",
    OpType.RY: "RYGate",
    OpType.RZ: "RZGate",
    OpType.SWAP: "SwapGate",
    OpType.ISWAP: "iSwapGate",
}


def gate_matrix(gate: OpType, lam: float = 0.0, phi: float = 0.0, theta: float = 0.0) -> GateMatrix:
    """Return the ``2x2`` unitary matrix of the single-target ``gate``.

    Raises:
        QFRError: if ``gate`` is not a single-target gate.

    """
    if gate in _FIXED_MATRICES:
        return numpy.array(_FIXED_MATRICES[gate], dtype=numpy.complex128)
    match gate:
        case OpType.U3 | OpType.U2:
            if gate == OpType.U2:
                theta = math.pi / 2
            cos, sin = math.cos(theta / 2), math.sin(theta / 2)
            return numpy.array(
                [
                    [cos, -numpy.exp(1j * lam) * sin],
                    [numpy.exp(1j * phi) * sin, numpy.exp(1j * (phi + lam)) * cos],
                ],
                dtype=numpy.complex128,
            )
        case OpType.U1:
            return numpy.array([[1, 0], [0, numpy.exp(1j * lam)]], dtype=numpy.complex128)
        case OpType.RX:
            cos, sin = math.cos(lam / 2), math.sin(lam / 2)
            return numpy.array([[cos, -1j * sin], [-1j * sin, cos]], dtype=numpy.complex128)
        case OpType.RY:
            cos, sin = math.cos(lam / 2), math.sin(lam / 2)
            return numpy.array([[cos, -sin], [sin, cos]], dtype=numpy.complex128)
        case OpType.RZ:
            return numpy.array(
                [[numpy.exp(-0.5j * lam), 0], [0, numpy.exp(0.5j * lam)]], dtype=numpy.complex128
            )
    raise QFRError(f"Gate {gate} has no single-target matrix.")


@dataclass
class StandardOperation(BaseOperation):
    """A gate, possibly controlled, acting on one target or on two targets.

    Attributes:
        nqubits: width of the circuit the operation belongs to.
        targets: the target qubit, or both target qubits of ``SWAP``, ``iSWAP``,
            ``P`` and ``P-dagger``.
        gate: kind of the gate.
        controls: control qubits, each one positive or negative.
        lam: first (or only) gate parameter.
        phi: second gate parameter.
        theta: third gate parameter.

    Raises:
        QFRError: if the number of targets does not match ``gate``, if a qubit is
            used more than once or if a qubit does not fit in ``nqubits``.

    """

    nqubits: int
    targets: list[int]
    gate: OpType
    controls: list[Control] = field(default_factory=list)
    lam: float = 0.0
    phi: float = 0.0
    theta: float = 0.0

    def __post_init__(self) -> None:
        if self.nqubits > MAX_QUBITS:
            raise QFRError(f"Operations may not act on more than {MAX_QUBITS} qubits.")
        expected_targets = 2 if self.gate.is_two_target else 1
        if len(self.targets) != expected_targets:
            raise QFRError(
                f"Gate {self.gate} expects {expected_targets} target(s), got {len(self.targets)}."
            )
        qubits = self.targets + [c.qubit for c in self.controls]
        if len(set(qubits)) != len(qubits):
            raise QFRError(f"Gate {self.gate} uses a qubit more than once: {qubits}.")
        if any(q < 0 or q >= self.nqubits for q in qubits):
            raise QFRError(
                f"Gate {self.gate} on qubits {qubits} does not fit in {self.nqubits} qubits."
            )

    @property
    @override
    def type(self) -> OpType:
        return self.gate

    @property
    def parameters(self) -> tuple[float, float, float]:
        return self.lam, self.phi, self.theta

    @override
    def is_unitary(self) -> bool:
        return True

    @override
    def acts_on(self, qubit: int) -> bool:
        return qubit in self.targets or any(c.qubit == qubit for c in self.controls)

    def _with(self, gate: OpType, targets: list[int], controls: list[Control]) -> StandardOperation:
        return StandardOperation(self.nqubits, targets, gate, controls)

    def _decompose(self) -> list[StandardOperation]:
        """Express two-target gates as a sequence of single-target gates, earliest first."""
        t0, t1 = self.targets
        controls = self.controls
        match self.gate:
            case OpType.SWAP:
                return [
                    self._with(OpType.X, [t1], controls + [Control(t0)]),
                    self._with(OpType.X, [t0], controls + [Control(t1)]),
                    self._with(OpType.X, [t1], controls + [Control(t0)]),
                ]
            case OpType.ISWAP:
                return [
                    self._with(OpType.S, [t0], controls),
                    self._with(OpType.S, [t1], controls),
                    self._with(OpType.Z, [t1], controls + [Control(t0)]),
                    *self._with(OpType.SWAP, [t0, t1], controls)._decompose(),
                ]
            case OpType.PERES:
                return [
                    self._with(OpType.X, [t0], controls + [Control(t1)]),
                    self._with(OpType.X, [t1], controls),
                ]
            case OpType.PERESDG:
                return [
                    self._with(OpType.X, [t1], controls),
                    self._with(OpType.X, [t0], controls + [Control(t1)]),
                ]
        return [self]

    def matrix(self) -> GateMatrix:
        return gate_matrix(self.gate, self.lam, self.phi, self.theta)

    @override
    def get_dd(self, package: DDPackage, line: LineBuffer, permutation: Permutation) -> Edge:
        if self.gate.is_two_target:
            edge: Edge | None = None
            for part in self._decompose():
                fragment = part.get_dd(package, line, permutation)
                edge = fragment if edge is None else package.multiply(fragment, edge)
            return edge

        for control in self.controls:
            line[wire_of(permutation, control.qubit)] = (
                LINE_CONTROL_POS if control.positive else LINE_CONTROL_NEG
            )
        target_wire = wire_of(permutation, self.targets[0])
        line[target_wire] = LINE_TARGET
        edge = package.make_gate_dd(self.matrix(), self.nqubits, line)
        for control in self.controls:
            line[wire_of(permutation, control.qubit)] = LINE_DEFAULT
        line[target_wire] = LINE_DEFAULT
        return edge

    def _qasm_parameters(self) -> list[str]:
        match self.gate:
            case OpType.V:
                return ["pi/2"]
            case OpType.VDG:
                return ["-pi/2"]
            case OpType.U3:
                return [format_parameter(p) for p in (self.theta, self.phi, self.lam)]
            case OpType.U2:
                return [format_parameter(p) for p in (self.phi, self.lam)]
            case OpType.U1 | OpType.RX | OpType.RY | OpType.RZ:
                return [format_parameter(self.lam)]
        return []

    @override
    def dump_openqasm(self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames) -> None:
        if self.gate in (OpType.PERES, OpType.PERESDG):
            for part in self._decompose():
                part.dump_openqasm(stream, qreg, creg)
            return

        negative = [c for c in self.controls if not c.positive]
        for control in negative:
            stream.write(f"x {qreg[control.qubit][1]};\n")
        name = "c" * len(self.controls) + _QASM_NAMES[self.gate]
        parameters = self._qasm_parameters()
        if parameters:
            name += f"({', '.join(parameters)})"
        arguments = [qreg[c.qubit][1] for c in self.controls] + [qreg[t][1] for t in self.targets]
        stream.write(f"{name} {', '.join(arguments)};\n")
        for control in negative:
            stream.write(f"x {qreg[control.qubit][1]};\n")

    def _qiskit_gate(self) -> str:
        match self.gate:
            case OpType.V:
                parameters = ["pi/2"]
            case OpType.VDG:
                parameters = ["-pi/2"]
            case OpType.U2:
                parameters = ["pi/2", format_parameter(self.phi), format_parameter(self.lam)]
            case _:
                parameters = self._qasm_parameters()
        return f"{_QISKIT_GATES[self.gate]}({', '.join(parameters)})"

    @override
    def dump_qiskit(
        self, stream: TextIO, qreg: RegisterNames, creg: RegisterNames, anc_reg_name: str
    ) -> None:
        if self.gate in (OpType.PERES, OpType.PERESDG):
            for part in self._decompose():
                part.dump_qiskit(stream, qreg, creg, anc_reg_name)
            return

        controls = [qreg[c.qubit][1] for c in self.controls]
        targets = [qreg[t][1] for t in self.targets]
        if self.gate == OpType.X and all(c.positive for c in self.controls):
            match len(controls):
                case 0:
                    stream.write(f"qc.x({targets[0]})\n")
                case 1:
                    stream.write(f"qc.cx({controls[0]}, {targets[0]})\n")
                case 2:
                    stream.write(f"qc.ccx({controls[0]}, {controls[1]}, {targets[0]})\n")
                case n:
                    stream.write(
                        f"qc.mcx([{', '.join(controls)}], {targets[0]}, "
                        f"{anc_reg_name}[:{n - 2}], mode='v-chain')\n"
                    )
            return

        gate = self._qiskit_gate()
        if self.controls:
            # Qiskit reads control states from the right: the first control is the last character.
            ctrl_state = "".join("1" if c.positive else "0" for c in reversed(self.controls))
            gate += f".control({len(controls)}, ctrl_state='{ctrl_state}')"
        stream.write(f"qc.append({gate}, [{', '.join(controls + targets)}])\n")

    @override
    def _column_symbol(self, qubit: int) -> str:
        if qubit in self.targets:
            return "t"
        for control in self.controls:
            if control.qubit == qubit:
                return "c" if control.positive else "n"
        return "|"
