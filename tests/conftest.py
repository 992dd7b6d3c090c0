"""
Shared fixtures for diagnostics tests.

Provides synthetic residual series with known properties so each test
module can focus on verifying the statistics against known inputs.
"""

import tempfile

import numpy as np
import pytest
from scipy import stats

from ssdiag.logging_config import reset_logging


# ---------------------------------------------------------------------------
# Constants for synthetic residuals
# ---------------------------------------------------------------------------
# Eight-value pattern repeated 24 times (192 observations)
PATTERN = [0.1, -0.2, 0.05, 0.3, -0.1, 0.0, 0.2, -0.05]
PATTERN_REPEATS = 24


@pytest.fixture(autouse=True)
def clean_logging():
    """Drop handlers a CLI run attached to the package logger."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory(prefix="ssdiag_test_") as d:
        yield d


@pytest.fixture
def pattern_residuals():
    """192 residuals built from a repeated eight-value pattern."""
    return np.array(PATTERN * PATTERN_REPEATS)


@pytest.fixture
def white_noise():
    """200 standard normal draws with a fixed seed."""
    rng = np.random.default_rng(42)
    return rng.normal(0.0, 1.0, 200)


@pytest.fixture
def normal_quantile_residuals():
    """500 values at the normal quantiles (i - 0.5) / n, shuffled.

    Skewness is ~0 and kurtosis ~3 by construction, so the sample is
    as normal as a finite sample can be.
    """
    n = 500
    values = stats.norm.ppf((np.arange(1, n + 1) - 0.5) / n)
    rng = np.random.default_rng(7)
    return rng.permutation(values)


@pytest.fixture
def skewed_residuals():
    """90 zeros followed by 10 tens: skewness ~2.67, kurtosis ~8.1."""
    return np.concatenate([np.zeros(90), np.full(10, 10.0)])


@pytest.fixture
def ar1_residuals():
    """200 values from a strongly autocorrelated AR(1) process (phi=0.9)."""
    rng = np.random.default_rng(3)
    eps = rng.normal(0.0, 1.0, 200)
    x = np.empty(200)
    x[0] = eps[0]
    for t in range(1, 200):
        x[t] = 0.9 * x[t - 1] + eps[t]
    return x


@pytest.fixture
def local_level_series():
    """100 observations of a random-walk level plus noise."""
    rng = np.random.default_rng(0)
    level = np.cumsum(rng.normal(0.0, 0.5, 100)) + 10.0
    return level + rng.normal(0.0, 1.0, 100)
