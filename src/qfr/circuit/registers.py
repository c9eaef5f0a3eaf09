"""Helpers around register tables.

A register table maps a register name to ``(start, size)``, the contiguous
range of global indices the register covers.

"""

from __future__ import annotations

from typing import Final, TypeAlias

from qfr.utils.exceptions import QFRError

RegisterMap: TypeAlias = dict[str, tuple[int, int]]

DEFAULT_QREG: Final[str] = "q"
DEFAULT_CREG: Final[str] = "c"
DEFAULT_ANCREG: Final[str] = "anc"


def register_of(registers: RegisterMap, index: int) -> tuple[str, int]:
    """Return the name of the register covering ``index`` and the offset of ``index`` in it.

    Raises:
        QFRError: if no register covers ``index``.

    """
    for name, (start, size) in registers.items():
        if start <= index < start + size:
            return name, index - start
    raise QFRError(f"Index {index} not found in any register.")


def index_in(registers: RegisterMap, name: str, offset: int) -> int:
    """Return the global index of the ``offset``-th element of register ``name``.

    Raises:
        QFRError: if ``name`` is not a register or if ``offset`` does not fit in it.

    """
    if name not in registers:
        raise QFRError(f"Unknown register {name}.")
    start, size = registers[name]
    if not 0 <= offset < size:
        raise QFRError(f"Index {offset} out of range for register {name} of size {size}.")
    return start + offset


def create_reg_array(
    registers: RegisterMap, default_count: int, default_name: str, fuse_together: bool = False
) -> list[tuple[str, str]]:
    """Name every global index covered by ``registers``.

    Args:
        registers: the register table.
        default_count: number of indices to name when ``registers`` is empty.
        default_name: register name used when ``registers`` is empty or when
            ``fuse_together`` is ``True``.
        fuse_together: if ``True``, every index is named after ``default_name``
            and its global index, as if all the registers formed a single one.

    Returns:
        one ``(register name, "name[offset]")`` pair per global index, sorted by
        global index.

    """
    if not registers:
        return [(default_name, f"{default_name}[{i}]") for i in range(default_count)]
    names: list[tuple[str, str]] = []
    for name, (start, size) in sorted(registers.items(), key=lambda item: item[1][0]):
        for i in range(size):
            if fuse_together:
                names.append((default_name, f"{default_name}[{start + i}]"))
            else:
                names.append((name, f"{name}[{i}]"))
    return names
