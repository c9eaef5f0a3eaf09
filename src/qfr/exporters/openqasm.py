"""Write circuits as OpenQASM 2.0."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

from qfr.circuit.registers import DEFAULT_CREG, DEFAULT_QREG, create_reg_array

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit


def dump_openqasm(circuit: Circuit, stream: TextIO) -> None:
    """Write ``circuit`` to ``stream`` as an OpenQASM 2.0 program.

    Registers are declared as in ``circuit``. A circuit without qubit (resp.
    classical) register gets a single ``q`` (resp. ``c``) register spanning all
    of its qubits (resp. classical bits).
    """
    stream.write("OPENQASM 2.0;\n")
    stream.write('include "qelib1.inc";\n')
    if circuit.qregs:
        for name, (_, size) in sorted(circuit.qregs.items(), key=lambda item: item[1][0]):
            stream.write(f"qreg {name}[{size}];\n")
    else:
        stream.write(f"qreg {DEFAULT_QREG}[{circuit.nqubits}];\n")
    if circuit.cregs:
        for name, (_, size) in sorted(circuit.cregs.items(), key=lambda item: item[1][0]):
            stream.write(f"creg {name}[{size}];\n")
    else:
        stream.write(f"creg {DEFAULT_CREG}[{circuit.nclassics}];\n")

    qreg_names = create_reg_array(circuit.qregs, circuit.nqubits, DEFAULT_QREG)
    creg_names = create_reg_array(circuit.cregs, circuit.nclassics, DEFAULT_CREG)
    for op in circuit.operations:
        op.dump_openqasm(stream, qreg_names, creg_names)
