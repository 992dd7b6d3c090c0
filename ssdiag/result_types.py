"""
Typed result dataclasses for diagnostic tests and the initial-value search.

Each statistic primitive returns one of these records; the report formatter
and the CSV writer consume them without recomputing anything.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from ssdiag.schemas import TrialLogSchema


@dataclass(frozen=True)
class QResult:
    """Ljung-Box portmanteau test over lags 1..k."""

    k: int
    w: int
    value: float
    critical_value: float
    p_value: float = math.nan

    @property
    def dof(self):
        return self.k - self.w + 1

    @property
    def passed(self):
        return self.value < self.critical_value


@dataclass(frozen=True)
class RResult:
    """Autocorrelations at lag 1 and lag l with a shared 95% band."""

    lag: int
    value_at_lag1: float
    value_at_lag_l: float
    critical_value: float
    nobs: int = 0

    @property
    def lags(self):
        return (1, self.lag)

    @property
    def passed_lag1(self):
        return abs(self.value_at_lag1) < self.critical_value

    @property
    def passed_lag_l(self):
        return abs(self.value_at_lag_l) < self.critical_value

    @property
    def passed(self):
        return self.passed_lag1 and self.passed_lag_l


@dataclass(frozen=True)
class HResult:
    """Sum-of-squares ratio between the last and first thirds."""

    h: int
    ratio: float
    value: float
    critical_value: float

    @property
    def reciprocal(self):
        """True when the statistic is 1/ratio."""
        return self.ratio < 1

    @property
    def label(self):
        return "H" if self.ratio > 1 else "1/H"

    @property
    def passed(self):
        return self.value < self.critical_value


@dataclass(frozen=True)
class NResult:
    """Jarque-Bera normality test."""

    value: float
    critical_value: float
    skewness: float = math.nan
    kurtosis: float = math.nan
    nobs: int = 0

    @property
    def passed(self):
        return self.value < self.critical_value


@dataclass(frozen=True)
class DiagnosticReport:
    """The four test results for one residual series, plus a title."""

    title: str
    q: QResult
    r: RResult
    h: HResult
    n: NResult

    @property
    def all_passed(self):
        return self.q.passed and self.r.passed and self.h.passed and self.n.passed

    def rows(self):
        """One (test, statistic, value, critical_value, passed) tuple per sub-test."""
        return [
            ("independence", f"Q({self.q.k})", self.q.value,
             self.q.critical_value, self.q.passed),
            ("independence", "r(1)", self.r.value_at_lag1,
             self.r.critical_value, self.r.passed_lag1),
            ("independence", f"r({self.r.lag})", self.r.value_at_lag_l,
             self.r.critical_value, self.r.passed_lag_l),
            ("homoscedasticity", f"{self.h.label}({self.h.h})", self.h.value,
             self.h.critical_value, self.h.passed),
            ("normality", "N", self.n.value,
             self.n.critical_value, self.n.passed),
        ]

    def to_dict(self):
        return {
            "title": self.title,
            "all_passed": self.all_passed,
            "tests": [
                {
                    "test": test,
                    "statistic": stat,
                    "value": value,
                    "critical_value": critical,
                    "passed": passed,
                }
                for test, stat, value, critical, passed in self.rows()
            ],
        }

    def to_frame(self):
        return pd.DataFrame(
            self.rows(),
            columns=["test", "statistic", "value", "critical_value", "passed"],
        )


@dataclass(frozen=True)
class InitSearchTrial:
    """One sampled candidate and the normalized log-likelihood it reached."""

    index: int
    candidate: float
    loglikelihood: float
    error: Optional[str] = None

    @property
    def failed(self):
        return self.error is not None


def trial_sort_key(trial):
    """Descending likelihood, then ascending candidate."""
    return (-trial.loglikelihood, trial.candidate)


@dataclass
class InitSearchResult:
    """Outcome of an initial-value search."""

    best_value: float
    best_loglikelihood: float
    start_params: list = field(default_factory=list)
    trials: list = field(default_factory=list)

    @property
    def n_failed(self):
        return sum(1 for t in self.trials if t.failed)

    def to_frame(self):
        """Trial log in ranked order, validated against TrialLogSchema."""
        df = pd.DataFrame(
            [
                {
                    "index": t.index,
                    "value": t.candidate,
                    "loglikelihood": t.loglikelihood,
                    "error": t.error,
                }
                for t in self.trials
            ],
            columns=["index", "value", "loglikelihood", "error"],
        ).astype({"index": "int64", "value": float, "loglikelihood": float,
                  "error": object})
        return TrialLogSchema.validate(df)
