"""
Custom exceptions for obsplanner operations.

The web layer maps each class onto an HTTP status; the CLI prints the
message and exits non-zero.
"""


class PlannerError(Exception):
    """Base exception for all obsplanner errors."""

    pass


class ValidationError(PlannerError):
    """Raised when request input fails validation."""

    pass


class NotFoundError(PlannerError):
    """Raised when a referenced row does not exist."""

    pass


class ConstraintError(PlannerError):
    """Raised when a unique constraint would be violated."""

    pass


class OperationError(PlannerError):
    """Raised when an operation fails."""

    pass


class IngestError(OperationError):
    """Raised when an OBS feed cannot be parsed at all."""

    pass
