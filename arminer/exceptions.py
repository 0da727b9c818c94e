"""Exception types raised by arminer."""

from __future__ import annotations


class ArminerError(Exception):
    """Base class for all arminer errors."""


class DuplicateEntityError(ArminerError, ValueError):
    """An entity key is empty or appears more than once in the input."""


class InvalidParameterError(ArminerError, ValueError):
    """A threshold or other caller-supplied parameter is out of range."""


class InvariantViolationError(ArminerError, RuntimeError):
    """An internal consistency check failed.

    This always indicates a defect in arminer itself, never a property of the
    input data, and is never caught inside the package.
    """
