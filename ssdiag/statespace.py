"""
Adapter between the diagnostics engine and statsmodels state-space models.

statsmodels does the filtering, smoothing and maximum likelihood; this
module only exposes what the diagnostics need from it:

    make_fit_fn       start vector -> fitted MLEResults
    loglikelihood     MLEResults -> log-likelihood
    residuals_of      MLEResults -> standardized residual series
    diffuse_count     MLEResults -> number of diffuse observations

Example:
    from statsmodels.tsa.statespace.structural import UnobservedComponents
    model = UnobservedComponents(y, level="llevel")
    search = search_initial_value(make_fit_fn(model), loglikelihood,
                                  nobs=model.nobs, w=model.k_params)
    results = model.fit(start_params=search.start_params, disp=False)
    report = diagnose_results(results, k=15, w=2, l=12)
"""

import warnings

import numpy as np
from statsmodels.tools.sm_exceptions import ConvergenceWarning

from ssdiag import config
from ssdiag.errors import ExternalFitFailure, InvalidParameter
from ssdiag.logging_config import get_logger
from ssdiag.report import run_diagnostics

log = get_logger(__name__)

RESIDUAL_KINDS = ("recursive", "pearson", "state")


def make_fit_fn(model, method=None, maxiter=None, require_convergence=True):
    """Build ``fit_fn(start_params)`` for a statsmodels MLEModel.

    Parameters
    ----------
    model : statsmodels.tsa.statespace.mlemodel.MLEModel
        Model whose ``update()`` maps a parameter vector to system matrices.
    method : str, optional
        scipy optimizer name passed to ``fit``. Default: config.FIT_METHOD.
    maxiter : int, optional
        Default: config.FIT_MAXITER.
    require_convergence : bool
        Raise ExternalFitFailure when the optimizer reports no convergence.

    Returns
    -------
    callable
    """
    if method is None:
        method = config.FIT_METHOD
    if maxiter is None:
        maxiter = config.FIT_MAXITER

    def fit_fn(start_params):
        start_params = np.asarray(start_params, dtype=float)
        if len(start_params) != model.k_params:
            raise InvalidParameter(
                f"start vector has {len(start_params)} values, model "
                f"expects {model.k_params}"
            )
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", ConvergenceWarning)
                results = model.fit(start_params=start_params, method=method,
                                    maxiter=maxiter, disp=False)
        except (np.linalg.LinAlgError, ValueError) as exc:
            raise ExternalFitFailure(f"{method} fit failed: {exc}") from exc

        converged = results.mle_retvals.get("converged", True)
        if require_convergence and not converged:
            raise ExternalFitFailure(
                f"{method} did not converge from start {start_params.tolist()}"
            )
        return results

    return fit_fn


def loglikelihood(results):
    """Log-likelihood of fitted results (diffuse observations excluded)."""
    return float(results.llf)


def _standardize(values, cov):
    with np.errstate(divide="ignore", invalid="ignore"):
        out = values / np.sqrt(cov)
    out[~(cov > 0)] = np.nan
    return out


def residuals_of(results, kind="recursive", index=0):
    """Standardized residuals from fitted state-space results.

    Parameters
    ----------
    results : statsmodels MLEResults
    kind : str
        "recursive": standardized one-step-ahead prediction errors.
        "pearson": standardized smoothed observation disturbances.
        "state": standardized smoothed state disturbances.
    index : int
        Observation series (recursive, pearson) or state disturbance (state).

    Returns
    -------
    numpy.ndarray
    """
    if kind == "recursive":
        return np.asarray(
            results.filter_results.standardized_forecasts_error[index],
            dtype=float,
        )

    smoother = results.smoother_results
    if kind == "pearson":
        return _standardize(
            np.asarray(smoother.smoothed_measurement_disturbance[index]),
            np.asarray(smoother.smoothed_measurement_disturbance_cov[index, index]),
        )
    if kind == "state":
        return _standardize(
            np.asarray(smoother.smoothed_state_disturbance[index]),
            np.asarray(smoother.smoothed_state_disturbance_cov[index, index]),
        )
    raise InvalidParameter(
        f"unknown residual kind {kind!r}; expected one of {RESIDUAL_KINDS}"
    )


def diffuse_count(results):
    """Number of leading observations in the diffuse initialisation period."""
    burn = int(getattr(results, "loglikelihood_burn", 0) or 0)
    diffuse = int(getattr(results, "nobs_diffuse", 0) or 0)
    return max(burn, diffuse)


def diagnose_results(results, k=None, w=None, l=None, title="Diagnostic tests",
                     kind="recursive", index=0):
    """Run the four residual diagnostics on fitted statsmodels results.

    ``w`` defaults to the number of estimated parameters and ``d`` is taken
    from the results' diffuse period.
    """
    if w is None:
        w = len(results.params)
    residuals = residuals_of(results, kind=kind, index=index)
    d = diffuse_count(results)
    log.debug("Diagnosing %s residuals: n=%d, d=%d, w=%d",
              kind, len(residuals), d, w)
    return run_diagnostics(residuals, d=d, k=k, w=w, l=l, title=title)
