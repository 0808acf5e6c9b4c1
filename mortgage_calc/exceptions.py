"""Exception hierarchy for the mortgage calculator."""

from typing import Optional


class MortgageCalcError(Exception):
    """Base exception for all mortgage calculator errors."""


class InvalidParameterError(MortgageCalcError, ValueError):
    """Raised when a loan parameter violates its constraint.

    Validation happens before any schedule iteration, so no partial schedule
    is ever produced when this is raised. ``field`` names the offending
    parameter when known.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class ConfigurationError(MortgageCalcError):
    """Raised when environment configuration cannot be parsed."""
