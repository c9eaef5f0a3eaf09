from __future__ import annotations

from enum import Enum
from typing import Final


class OpType(Enum):
    """Kind of an operation. The value is the short name used when printing circuits."""

    NONE = "none"
    # Unitary gates.
    I = "i"  # noqa: E741
    H = "h"
    X = "x"
    Y = "y"
    Z = "z"
    S = "s"
    SDG = "sdg"
    T = "t"
    TDG = "tdg"
    V = "v"
    VDG = "vdg"
    SX = "sx"
    SXDG = "sxdg"
    U3 = "u3"
    U2 = "u2"
    U1 = "u1"
    RX = "rx"
    RY = "ry"
    RZ = "rz"
    SWAP = "swap"
    ISWAP = "iswap"
    PERES = "p"
    PERESDG = "pdg"
    # Containers.
    COMPOUND = "compound"
    CLASSIC_CONTROLLED = "classic_controlled"
    # Non-unitary operations.
    MEASURE = "measure"
    RESET = "reset"
    BARRIER = "barrier"
    SNAPSHOT = "snapshot"
    SHOW_PROBABILITIES = "show_probabilities"

    @property
    def is_two_target(self) -> bool:
        return self in (OpType.SWAP, OpType.ISWAP, OpType.PERES, OpType.PERESDG)

    def __str__(self) -> str:
        return self.value


# Gate identifiers of the REAL format. "t" (Toffoli) is handled by the parser as it means
# a (multi-)controlled X gate.
REAL_IDENTIFIERS: Final[dict[str, OpType]] = {
    "0": OpType.I,
    "h": OpType.H,
    "n": OpType.X,
    "c": OpType.X,
    "x": OpType.X,
    "y": OpType.Y,
    "z": OpType.Z,
    "s": OpType.S,
    "si": OpType.SDG,
    "s+": OpType.SDG,
    "v": OpType.V,
    "vi": OpType.VDG,
    "v+": OpType.VDG,
    "ti": OpType.TDG,
    "t+": OpType.TDG,
    "rx": OpType.RX,
    "ry": OpType.RY,
    "rz": OpType.RZ,
    "f": OpType.SWAP,
    "p": OpType.PERES,
    "pi": OpType.PERESDG,
    "p+": OpType.PERESDG,
    "q": OpType.U1,
}
