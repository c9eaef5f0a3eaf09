"""Read circuits from the REAL, OpenQASM and GRCS formats."""

from .grcs import import_grcs as import_grcs
from .load import import_file as import_file
from .load import import_stream as import_stream
from .openqasm import import_openqasm as import_openqasm
from .real import import_real as import_real
