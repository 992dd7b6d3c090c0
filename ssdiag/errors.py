"""
Exception types raised by the diagnostics engine.

All derive from ValueError so callers that already guard numeric code with
``except ValueError`` keep working.
"""


class DiagnosticError(ValueError):
    """Base class for diagnostic failures."""


class InvalidParameter(DiagnosticError):
    """Malformed test parameter (lags, diffuse count, degrees of freedom)."""


class InsufficientData(DiagnosticError):
    """Residual series too short for the requested test."""


class NumericDegeneracy(DiagnosticError):
    """Zero-variance input that would divide by zero."""


class ExternalFitFailure(DiagnosticError):
    """The external model-fitting routine failed or did not converge."""
