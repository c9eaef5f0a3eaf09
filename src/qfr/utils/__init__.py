"""Defines a few core data-structures that are independent of other ``qfr`` modules.

The goal of this module is to host data-structures that do not clearly belong to
another existing ``qfr`` sub-module and that also do not import any code from
the other ``qfr`` sub-modules.

"""

from .enums import Format as Format
from .exceptions import QFRError as QFRError
from .exceptions import QFRFileError as QFRFileError
from .exceptions import QFRWarning as QFRWarning
