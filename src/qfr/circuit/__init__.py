"""Canonical model of a quantum circuit and helpers around its registers."""

from .circuit import Circuit as Circuit
from .registers import DEFAULT_ANCREG as DEFAULT_ANCREG
from .registers import DEFAULT_CREG as DEFAULT_CREG
from .registers import DEFAULT_QREG as DEFAULT_QREG
from .registers import RegisterMap as RegisterMap
from .registers import create_reg_array as create_reg_array
