from __future__ import annotations

from pathlib import Path

from qfr.circuit import Circuit
from qfr.interop.qiskit import load_qpy_circuit


def load_circuit(path: Path) -> Circuit:
    """Load the circuit stored in ``path``.

    Files with a ``.qpy`` extension are read as serialized Qiskit circuits,
    every other file goes through :meth:`Circuit.from_file`.
    """
    if path.suffix.lower() == ".qpy":
        return load_qpy_circuit(path)
    return Circuit.from_file(path)
