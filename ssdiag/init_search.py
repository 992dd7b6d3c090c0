"""
Brute-force search for good starting hyperparameters.

Numerical maximum likelihood for state-space models is sensitive to the
starting point. The search draws random scalar candidates from (low, high],
turns each into a start vector, fits the model from there and keeps the
candidate with the highest normalized log-likelihood (loglik / n).

Two variants:
    search_initial_value              candidate repeated w times
    search_initial_value_transformed  candidate passed through a callable

The external fit is injected as two callables, ``fit_fn(start_params)``
returning a fitted object and ``loglike_fn(fitted)`` returning its
log-likelihood. See ssdiag.statespace for statsmodels-backed versions.
"""

import math
import traceback
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from ssdiag import config
from ssdiag.errors import ExternalFitFailure, InvalidParameter
from ssdiag.logging_config import StepTimer, get_logger, log_step_summary
from ssdiag.result_types import InitSearchResult, InitSearchTrial, trial_sort_key

log = get_logger(__name__)

# Failures that count against a single trial instead of aborting the search.
TRIAL_EXCEPTIONS = (
    ExternalFitFailure,
    np.linalg.LinAlgError,
    ValueError,
    ArithmeticError,
    RuntimeError,
)


def repeat_transform(w):
    """Return a transform mapping a scalar to a length-w start vector."""
    if w < 1:
        raise InvalidParameter(f"w={w} must be >= 1")

    def _repeat(value):
        return np.full(w, value, dtype=float)

    return _repeat


def _draw_candidates(rng, max_loop, low, high):
    # rng.random() is in [0, 1), so high - u * (high - low) is in (low, high].
    return [high - rng.random() * (high - low) for _ in range(max_loop)]


def _run_trial(index, candidate, transform, fit_fn, loglike_fn, nobs):
    try:
        start = transform(candidate)
        fitted = fit_fn(start)
        loglik = float(loglike_fn(fitted)) / nobs
    except TRIAL_EXCEPTIONS as exc:
        log.debug("trial %d failed:\n%s", index, traceback.format_exc())
        return InitSearchTrial(index, candidate, -math.inf,
                               error=f"{type(exc).__name__}: {exc}")
    if not math.isfinite(loglik):
        return InitSearchTrial(index, candidate, -math.inf,
                               error=f"non-finite log-likelihood {loglik}")
    return InitSearchTrial(index, candidate, loglik)


def _run_search(fit_fn, loglike_fn, nobs, transform, max_loop, rng, seed,
                bounds, max_workers, cancel):
    if max_loop is None:
        max_loop = config.INIT_SEARCH_MAX_LOOP
    if bounds is None:
        bounds = config.INIT_SEARCH_BOUNDS
    if max_workers is None:
        max_workers = config.INIT_SEARCH_MAX_WORKERS
    if rng is None:
        rng = np.random.default_rng(
            config.INIT_SEARCH_SEED if seed is None else seed
        )

    low, high = bounds
    if nobs < 1:
        raise InvalidParameter(f"nobs={nobs} must be >= 1")
    if max_loop < 1:
        raise InvalidParameter(f"max_loop={max_loop} must be >= 1")
    if low >= high:
        raise InvalidParameter(f"empty candidate range ({low}, {high}]")

    # Candidates are drawn up front so a seeded search gives the same
    # trials whether or not it runs in parallel.
    candidates = _draw_candidates(rng, max_loop, low, high)

    def _trial(i):
        if cancel is not None and cancel.is_set():
            return None
        return _run_trial(i, candidates[i], transform, fit_fn, loglike_fn, nobs)

    with StepTimer() as timer:
        if max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                outcomes = list(executor.map(_trial, range(max_loop)))
        else:
            outcomes = []
            for i in range(max_loop):
                outcome = _trial(i)
                if outcome is None:
                    break
                outcomes.append(outcome)

    trials = [t for t in outcomes if t is not None]
    for t in trials:
        if t.failed:
            log.warning("trial %d: value=%.6f failed (%s)",
                        t.index, t.candidate, t.error)
        else:
            log.debug("trial %d: value=%.6f loglik=%.6f",
                      t.index, t.candidate, t.loglikelihood)

    if len(trials) < max_loop:
        log.info("Search cancelled after %d of %d trials", len(trials), max_loop)

    trials.sort(key=trial_sort_key)
    if not trials or trials[0].failed:
        raise ExternalFitFailure(
            f"all {len(trials)} completed trials failed to fit"
        )

    best = trials[0]
    result = InitSearchResult(
        best_value=best.candidate,
        best_loglikelihood=best.loglikelihood,
        start_params=list(transform(best.candidate)),
        trials=trials,
    )

    log_step_summary(
        log,
        "init_search",
        input_summary={"max_loop": max_loop, "nobs": nobs,
                       "bounds": [low, high]},
        output_summary={"best_value": round(best.candidate, 6),
                        "best_loglikelihood": round(best.loglikelihood, 6),
                        "failed": result.n_failed},
        timing_seconds=timer.elapsed,
    )
    return result


def search_initial_value(fit_fn, loglike_fn, nobs, w, max_loop=None,
                         rng=None, seed=None, bounds=None, max_workers=None,
                         cancel=None):
    """Search for a scalar start value repeated across all w hyperparameters.

    Parameters
    ----------
    fit_fn : callable
        ``fit_fn(start_params) -> fitted``. Fits the model from a length-w
        start vector.
    loglike_fn : callable
        ``loglike_fn(fitted) -> float``. Log-likelihood of a fitted model.
    nobs : int
        Number of observations, used to normalize the log-likelihood.
    w : int
        Number of hyperparameters.
    max_loop : int, optional
        Number of trials. Default: config.INIT_SEARCH_MAX_LOOP.
    rng : numpy.random.Generator, optional
        Random source. Takes precedence over ``seed``.
    seed : int, optional
        Seed for a fresh generator. Default: config.INIT_SEARCH_SEED.
    bounds : tuple, optional
        (low, high); candidates are drawn from (low, high].
        Default: config.INIT_SEARCH_BOUNDS.
    max_workers : int, optional
        Threads for running trials. 1 (default) runs sequentially.
    cancel : threading.Event, optional
        When set, trials not yet started are skipped.

    Returns
    -------
    InitSearchResult
        Best candidate, its normalized log-likelihood, the start vector
        built from it and the ranked trial log.

    Raises
    ------
    ExternalFitFailure
        If no trial produced a finite log-likelihood.
    """
    return _run_search(fit_fn, loglike_fn, nobs, repeat_transform(w),
                       max_loop, rng, seed, bounds, max_workers, cancel)


def search_initial_value_transformed(fit_fn, loglike_fn, nobs, transform,
                                     max_loop=None, rng=None, seed=None,
                                     bounds=None, max_workers=None,
                                     cancel=None):
    """Search for a scalar start value mapped to a start vector by ``transform``.

    ``transform(value) -> array-like`` builds the start vector, e.g.
    ``lambda x: [x, x, 0.1 * x]`` to fix one variance relative to the
    others. All other parameters are as in search_initial_value().
    """
    return _run_search(fit_fn, loglike_fn, nobs, transform,
                       max_loop, rng, seed, bounds, max_workers, cancel)
