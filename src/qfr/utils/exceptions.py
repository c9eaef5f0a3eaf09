"""Defines the base exception and warning subclasses used by the ``qfr`` library."""


class QFRError(Exception):
    pass


class QFRFileError(QFRError):
    """Raised when a file cannot be opened for reading or writing."""

    pass


class QFRWarning(Warning):
    pass
