"""Defines all exceptions in the package."""


class PSBaseException(Exception):
    """Base class for all exceptions in the package"""


class PSAlreadyAttached(PSBaseException):
    """Raised if the component is already attached to a system."""


class PSNotStored(PSBaseException):
    """Raised if the requested object is not stored."""


class PSComponentNotFound(PSNotStored):
    """Raised if a component has no counterpart in another system."""


class PSOperationNotAllowed(PSBaseException):
    """Raised if the requested operation is not allowed."""


class PSInconsistentSystems(PSBaseException):
    """Raised if two systems disagree on compared values."""


class DataFormatError(PSBaseException):
    """Raised if input data files are missing or malformed."""
