"""Operations that make up a :class:`~qfr.circuit.circuit.Circuit`.

Operations are one of four variants, all implementing the capability set of
:class:`~qfr.operations.base.BaseOperation`:

- :class:`~qfr.operations.standard.StandardOperation`: a (multi-)controlled gate,
- :class:`~qfr.operations.non_unitary.NonUnitaryOperation`: measurement, reset
  and simulator markers (barrier, snapshot, show-probabilities),
- :class:`~qfr.operations.classic_controlled.ClassicControlledOperation`: an
  operation guarded by the value of a classical register,
- :class:`~qfr.operations.compound.CompoundOperation`: a group of operations.

"""

from typing import TypeAlias

from .base import BaseOperation as BaseOperation
from .base import Control as Control
from .base import Permutation as Permutation
from .base import RegisterNames as RegisterNames
from .classic_controlled import ClassicControlledOperation as ClassicControlledOperation
from .compound import CompoundOperation as CompoundOperation
from .enums import REAL_IDENTIFIERS as REAL_IDENTIFIERS
from .enums import OpType as OpType
from .non_unitary import NonUnitaryOperation as NonUnitaryOperation
from .standard import StandardOperation as StandardOperation
from .standard import gate_matrix as gate_matrix

Operation: TypeAlias = (
    StandardOperation | NonUnitaryOperation | ClassicControlledOperation | CompoundOperation
)
