"""Write circuits to files or text streams, dispatching on the requested format."""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from qfr.exporters.openqasm import dump_openqasm
from qfr.exporters.qiskit import can_dump_qiskit, dump_qiskit
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRFileError, QFRWarning

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit


def _is_supported(circuit: Circuit, fmt: Format) -> bool:
    match fmt:
        case Format.REAL | Format.GRCS:
            warnings.warn(f"Dumping in {fmt} format currently not supported.", QFRWarning)
            return False
        case Format.QISKIT:
            return can_dump_qiskit(circuit)
    return True


def _write(circuit: Circuit, stream: TextIO, fmt: Format, path: str | Path) -> None:
    if fmt == Format.QISKIT:
        dump_qiskit(circuit, stream, path or f"{circuit.name or 'circuit'}.py")
    else:
        dump_openqasm(circuit, stream)


def dump_stream(circuit: Circuit, stream: TextIO, fmt: Format, path: str | Path = "") -> None:
    """Write ``circuit`` to ``stream`` in the ``fmt`` format.

    Exporting to REAL or GRCS is not supported: a :class:`~qfr.utils.exceptions.QFRWarning`
    is emitted and nothing is written.

    Args:
        circuit: the circuit to export.
        stream: where the circuit is written.
        fmt: format to write.
        path: for Qiskit scripts, the path the script is meant to be saved at.
            Used to name the auxiliary files written by the script. Defaults
            to the name of ``circuit`` in the working directory.

    """
    if _is_supported(circuit, fmt):
        _write(circuit, stream, fmt, path)


def dump(circuit: Circuit, path: str | Path, fmt: Format | None = None) -> None:
    """Write ``circuit`` to the file at ``path``.

    The format is deduced from the extension of ``path`` when ``fmt`` is not
    given. No file is created if the format cannot be exported.

    Raises:
        QFRError: if the format cannot be deduced from the extension of ``path``.
        QFRFileError: if the file cannot be opened for writing.

    """
    path = Path(path)
    if fmt is None:
        fmt = Format.from_path(path)
    if not _is_supported(circuit, fmt):
        return
    try:
        stream = path.open("w")
    except OSError as err:
        raise QFRFileError(f"Error opening file: {path}") from err
    with stream:
        _write(circuit, stream, fmt, path)
