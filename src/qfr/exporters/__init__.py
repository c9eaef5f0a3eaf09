"""Write circuits as OpenQASM 2.0 or as Qiskit scripts."""

from .dump import dump as dump
from .dump import dump_stream as dump_stream
from .openqasm import dump_openqasm as dump_openqasm
from .qiskit import MAX_QISKIT_QUBITS as MAX_QISKIT_QUBITS
from .qiskit import dump_qiskit as dump_qiskit
