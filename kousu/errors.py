"""
Exception types for the MA-EYES work-log tool.

Two failure kinds are fatal for a run: the input document is malformed
(ValidationError) or the MA-EYES page does not have the shape the tool
expects (StructuralError). Both are reported to the user verbatim.
"""


class KousuError(Exception):
    """Base class for errors that abort a run with exit status 1."""
    pass


class ValidationError(KousuError):
    """Raised when a work-log JSON document is malformed or unsupported."""
    pass


class StructuralError(KousuError):
    """Raised when the MA-EYES page layout does not match expectations."""
    pass
