"""
Pure statistical functions for residual diagnostics.

config.py retains runtime parameters and defaults; this package holds the
statistics.
"""

from ssdiag.formulas.statistics import (
    max_acf_lag,
    q_statistic,
    r_statistic,
    h_statistic,
    n_statistic,
)

__all__ = [
    "max_acf_lag",
    "q_statistic",
    "r_statistic",
    "h_statistic",
    "n_statistic",
]
