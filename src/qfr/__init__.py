from ._version import __version__ as __version__
from .circuit import Circuit as Circuit
from .dd import DensePackage as DensePackage
from .utils import Format as Format
from .utils.exceptions import QFRError as QFRError
from .utils.exceptions import QFRFileError as QFRFileError
from .utils.exceptions import QFRWarning as QFRWarning
