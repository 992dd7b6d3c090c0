"""
Residual diagnostics for state-space time series models.

Q, r, H and N tests on model residuals, the textbook diagnostic table and
a random search for starting hyperparameters. Filtering, smoothing and
likelihood maximisation are left to statsmodels.
"""

import logging

from ssdiag.errors import (
    DiagnosticError,
    ExternalFitFailure,
    InsufficientData,
    InvalidParameter,
    NumericDegeneracy,
)
from ssdiag.formulas import (
    h_statistic,
    max_acf_lag,
    n_statistic,
    q_statistic,
    r_statistic,
)
from ssdiag.init_search import (
    repeat_transform,
    search_initial_value,
    search_initial_value_transformed,
)
from ssdiag.report import (
    format_diagnostic_table,
    format_report,
    print_diagnostic_table,
    run_diagnostics,
)
from ssdiag.result_types import (
    DiagnosticReport,
    HResult,
    InitSearchResult,
    InitSearchTrial,
    NResult,
    QResult,
    RResult,
)

__version__ = "0.1.0"

# Handlers are attached only by the command line entry point.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # errors
    "DiagnosticError",
    "ExternalFitFailure",
    "InsufficientData",
    "InvalidParameter",
    "NumericDegeneracy",
    # statistics
    "max_acf_lag",
    "q_statistic",
    "r_statistic",
    "h_statistic",
    "n_statistic",
    # report
    "format_diagnostic_table",
    "format_report",
    "print_diagnostic_table",
    "run_diagnostics",
    # search
    "repeat_transform",
    "search_initial_value",
    "search_initial_value_transformed",
    # types
    "DiagnosticReport",
    "HResult",
    "InitSearchResult",
    "InitSearchTrial",
    "NResult",
    "QResult",
    "RResult",
]
