"""Import circuits from files or text streams, dispatching on their format."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from qfr.parsers.grcs import import_grcs
from qfr.parsers.openqasm import import_openqasm
from qfr.parsers.real import import_real
from qfr.utils.enums import Format
from qfr.utils.exceptions import QFRError, QFRFileError

if TYPE_CHECKING:
    from qfr.circuit.circuit import Circuit


def import_stream(
    circuit: Circuit,
    stream: TextIO,
    fmt: Format,
    name: str = "",
    include_dir: Path | None = None,
) -> None:
    """Append the circuit described in ``stream`` to ``circuit``.

    Args:
        circuit: the circuit to fill.
        stream: text stream holding the circuit description.
        fmt: format of the description.
        name: name given to ``circuit``. Left untouched if empty.
        include_dir: directory OpenQASM ``include`` statements are resolved
            from. Defaults to the current working directory.

    Raises:
        QFRError: if ``fmt`` cannot be imported or if the description is invalid.

    """
    if name:
        circuit.name = name
    match fmt:
        case Format.REAL:
            import_real(circuit, stream)
        case Format.OPENQASM:
            circuit.update_max_controls(2)
            import_openqasm(circuit, stream, include_dir)
        case Format.GRCS:
            import_grcs(circuit, stream)
        case _:
            raise QFRError(f"Format {fmt} not yet supported.")


def import_file(circuit: Circuit, path: str | Path, fmt: Format | None = None) -> None:
    """Append the circuit described in the file at ``path`` to ``circuit``.

    ``circuit`` is named after the stem of ``path``. Files included from an
    OpenQASM file are resolved relative to the directory of ``path``.

    Raises:
        QFRError: if the format cannot be deduced from the extension of ``path``
            or if the description is invalid.
        QFRFileError: if ``path`` cannot be read.

    """
    path = Path(path)
    if fmt is None:
        fmt = Format.from_path(path)
    try:
        stream = path.open()
    except OSError as err:
        raise QFRFileError(f"Error opening/reading from file: {path}") from err
    with stream:
        import_stream(circuit, stream, fmt, path.stem, path.parent)
