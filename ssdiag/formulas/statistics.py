"""
Residual diagnostic statistics for fitted state-space models.

Four tests on a residual series, each returning the statistic together
with its critical value:

    Q  independence (Ljung-Box portmanteau over lags 1..k)
    r  independence (autocorrelation at lag 1 and lag l)
    H  homoscedasticity (sum of squares, last third over first third)
    N  normality (Jarque-Bera, skewness and kurtosis)

All functions are pure (no I/O, no side effects). Critical values depend
only on the test parameters and the number of residuals used, never on the
residual values themselves.

The first ``d`` residuals belong to the diffuse initialisation period and
are dropped before testing; the state-space literature treats them as
uninformative.
Citation: Commandeur & Koopman (2007), Sections 2.4 and 8.5.
"""

import math

import numpy as np
from scipy import stats
from statsmodels.stats.diagnostic import acorr_ljungbox
from statsmodels.stats.stattools import jarque_bera
from statsmodels.tsa.stattools import acf

from ssdiag import config
from ssdiag.errors import InsufficientData, InvalidParameter, NumericDegeneracy
from ssdiag.result_types import HResult, NResult, QResult, RResult


def max_acf_lag(n):
    """Largest autocorrelation lag available for a series of length n.

    Uses the conventional cap floor(10 * log10(n)) for a single series,
    limited to n - 1 so that short series never ask for a lag the sample
    autocorrelation cannot provide.
    """
    if n < 1:
        return 0
    cap = int(math.floor(config.ACF_LAG_CAP_FACTOR * math.log10(n)))
    return min(cap, n - 1)


def _prepare_residuals(residuals, d):
    """Return residuals after the diffuse period as a float array."""
    x = np.asarray(residuals, dtype=float)
    if x.ndim != 1:
        raise InvalidParameter(f"residuals must be 1-D, got shape {x.shape}")
    n = len(x)
    if d < 0 or d >= n:
        raise InvalidParameter(
            f"diffuse count d={d} must satisfy 0 <= d < n (n={n})"
        )
    x = x[d:]
    if not np.all(np.isfinite(x)):
        raise InvalidParameter(
            f"residuals contain {int(np.sum(~np.isfinite(x)))} non-finite "
            f"values after the diffuse period"
        )
    return x


def _require_variance(x, test_name):
    if np.ptp(x) == 0:
        raise NumericDegeneracy(f"{test_name}: residuals have zero variance")


def q_statistic(residuals, k=None, w=1, d=0, significance=None):
    """Ljung-Box Q(k) statistic against chi-square(k - w + 1).

    Parameters
    ----------
    residuals : array-like
        Residual series.
    k : int, optional
        Number of lags. Default: config.DEFAULT_Q_LAGS (15).
    w : int
        Number of estimated hyperparameters (disturbance variances).
    d : int
        Leading diffuse residuals to drop.
    significance : float, optional
        Default: config.Q_SIGNIFICANCE (0.05).

    Returns
    -------
    QResult
    """
    if k is None:
        k = config.DEFAULT_Q_LAGS
    if significance is None:
        significance = config.Q_SIGNIFICANCE

    if k < 1:
        raise InvalidParameter(f"Q: number of lags k={k} must be >= 1")
    dof = k - w + 1
    if dof <= 0:
        raise InvalidParameter(
            f"Q: degrees of freedom k - w + 1 = {dof} must be positive "
            f"(k={k}, w={w})"
        )

    x = _prepare_residuals(residuals, d)
    if k >= len(x):
        raise InsufficientData(
            f"Q: {len(x)} residuals cannot support {k} lags"
        )
    _require_variance(x, "Q")

    lb = acorr_ljungbox(x, lags=[k])
    value = float(lb["lb_stat"].iloc[-1])
    critical = float(stats.chi2.ppf(1 - significance, dof))

    return QResult(
        k=k,
        w=w,
        value=value,
        critical_value=critical,
        p_value=float(stats.chi2.sf(value, dof)),
    )


def r_statistic(residuals, d=0, l=None):
    """Autocorrelations at lag 1 and lag l with critical value 2/sqrt(n-d).

    Parameters
    ----------
    residuals : array-like
        Residual series.
    d : int
        Leading diffuse residuals to drop.
    l : int, optional
        Second lag to report. Default: config.DEFAULT_R_LAG (12). Must lie in
        1..max_acf_lag(n - d).

    Returns
    -------
    RResult
    """
    if l is None:
        l = config.DEFAULT_R_LAG

    x = _prepare_residuals(residuals, d)
    cap = max_acf_lag(len(x))
    if l < 1 or l > cap:
        raise InvalidParameter(
            f"r: lag l={l} outside 1..{cap} for {len(x)} residuals"
        )
    _require_variance(x, "r")

    rho = acf(x, nlags=l, fft=False)
    critical = config.R_CONFIDENCE_Z / math.sqrt(len(x))

    return RResult(
        lag=l,
        value_at_lag1=float(rho[1]),
        value_at_lag_l=float(rho[l]),
        critical_value=critical,
        nobs=len(x),
    )


def h_statistic(residuals, d=0, tail=None):
    """Heteroscedasticity statistic H(h) with the reciprocal trick.

    The n - d residuals are split into thirds of size h = round((n - d) / 3).
    ratio = SS(last h) / SS(first h). The statistic is ratio when
    ratio >= 1 and 1/ratio otherwise, compared with the upper ``tail``
    quantile of F(h, h). This makes a one-sided comparison of a two-sided
    test.

    Raises
    ------
    InsufficientData
        If h < 1.
    NumericDegeneracy
        If either third has a zero sum of squares.
    """
    if tail is None:
        tail = config.H_TAIL

    x = _prepare_residuals(residuals, d)
    h = int(round(len(x) / 3))
    if h < 1:
        raise InsufficientData(
            f"H: {len(x)} residuals give an empty third (h={h})"
        )

    ss_first = float(np.sum(x[:h] ** 2))
    ss_last = float(np.sum(x[-h:] ** 2))
    if ss_first == 0 or ss_last == 0:
        raise NumericDegeneracy(
            f"H: zero sum of squares (first third={ss_first}, "
            f"last third={ss_last})"
        )

    ratio = ss_last / ss_first
    value = ratio if ratio >= 1 else 1 / ratio
    critical = float(stats.f.ppf(1 - tail, h, h))

    return HResult(h=h, ratio=ratio, value=value, critical_value=critical)


def n_statistic(residuals, d=0, significance=None, min_sample=None):
    """Jarque-Bera normality statistic against chi-square(2)."""
    if significance is None:
        significance = config.N_SIGNIFICANCE
    if min_sample is None:
        min_sample = config.N_MIN_SAMPLE

    x = _prepare_residuals(residuals, d)
    if len(x) < min_sample:
        raise InsufficientData(
            f"N: {len(x)} residuals, need at least {min_sample}"
        )
    _require_variance(x, "N")

    jb, _, skew, kurtosis = jarque_bera(x)
    critical = float(stats.chi2.ppf(1 - significance,
                                    config.N_DEGREES_OF_FREEDOM))

    return NResult(
        value=float(jb),
        critical_value=critical,
        skewness=float(skew),
        kurtosis=float(kurtosis),
        nobs=len(x),
    )
