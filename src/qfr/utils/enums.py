from __future__ import annotations

from enum import Enum
from pathlib import Path

from qfr.utils.exceptions import QFRError


class Format(Enum):
    """Textual formats a circuit can be read from or written to."""

    REAL = "real"
    OPENQASM = "qasm"
    GRCS = "txt"
    QISKIT = "py"

    @staticmethod
    def from_path(path: str | Path) -> Format:
        """Deduce the format from the (case-insensitive) extension of ``path``.

        Raises:
            QFRError: if the extension does not correspond to any known format.

        """
        extension = Path(path).suffix.lstrip(".").lower()
        for fmt in Format:
            if fmt.value == extension:
                return fmt
        raise QFRError(f"Extension {extension} not recognized.")

    def __str__(self) -> str:
        return self.name
