import pytest

from qfr.circuit.registers import create_reg_array, index_in, register_of
from qfr.utils.exceptions import QFRError

_REGISTERS = {"b": (2, 3), "a": (0, 2)}


def test_register_of() -> None:
    assert register_of(_REGISTERS, 0) == ("a", 0)
    assert register_of(_REGISTERS, 4) == ("b", 2)
    with pytest.raises(QFRError, match="Index 5 not found"):
        register_of(_REGISTERS, 5)


def test_index_in() -> None:
    assert index_in(_REGISTERS, "b", 1) == 3
    with pytest.raises(QFRError, match="Unknown register"):
        index_in(_REGISTERS, "z", 0)
    with pytest.raises(QFRError, match="out of range"):
        index_in(_REGISTERS, "a", 2)


def test_create_reg_array_sorted_by_start() -> None:
    assert create_reg_array(_REGISTERS, 0, "q") == [
        ("a", "a[0]"),
        ("a", "a[1]"),
        ("b", "b[0]"),
        ("b", "b[1]"),
        ("b", "b[2]"),
    ]


def test_create_reg_array_defaults() -> None:
    assert create_reg_array({}, 2, "q") == [("q", "q[0]"), ("q", "q[1]")]
    assert create_reg_array({}, 0, "c") == []


def test_create_reg_array_fused() -> None:
    names = create_reg_array(_REGISTERS, 0, "q", fuse_together=True)
    assert [n for _, n in names] == [f"q[{i}]" for i in range(5)]
