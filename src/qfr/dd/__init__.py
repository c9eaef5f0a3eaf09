"""Decision-diagram backend interface and a dense reference implementation."""

from .dense import DenseEdge as DenseEdge
from .dense import DensePackage as DensePackage
from .package import LINE_CONTROL_NEG as LINE_CONTROL_NEG
from .package import LINE_CONTROL_POS as LINE_CONTROL_POS
from .package import LINE_DEFAULT as LINE_DEFAULT
from .package import LINE_TARGET as LINE_TARGET
from .package import MAX_QUBITS as MAX_QUBITS
from .package import DDPackage as DDPackage
from .package import new_line_buffer as new_line_buffer
from .package import reset_line_buffer as reset_line_buffer
