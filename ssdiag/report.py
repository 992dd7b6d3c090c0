"""
Diagnostic report: run the four residual tests and render the summary table.

The table layout follows the textbook presentation:

    Diagnostic tests for the local level model
    -------------------------------------------------------------------
                      statistic        value  critical value  satisfied
    -------------------------------------------------------------------
    independence      Q(15)            8.836           21.03          +
                      r(1)             0.055            0.14          +
                      r(12)           -0.004            0.14          +
    homoscedasticity  H(64)            1.212            1.64          +
    normality         N                0.817            5.99          +
    -------------------------------------------------------------------

Values too wide for their column at fixed precision (a Jarque-Bera value
of 1e8 on a badly misspecified model, say) are written in exponent
notation so every row keeps the table width.

The formatter only presents results; pass/fail comes from each result's
own ``passed`` check.
"""

import os
import sys

from ssdiag import config
from ssdiag.formulas.statistics import h_statistic, n_statistic, q_statistic, r_statistic
from ssdiag.logging_config import StepTimer, get_logger, log_step_summary
from ssdiag.result_types import DiagnosticReport
from ssdiag.schemas import DiagnosticsSchema

log = get_logger(__name__)

# (header, width, alignment)
_TEST_COL = ("", 18, "<")
_STAT_COL = ("statistic", 10, "<")
_VALUE_COL = ("value", 12, ">")
_CRIT_COL = ("critical value", 16, ">")
_MARK_COL = ("satisfied", 11, ">")
_COLUMNS = (_TEST_COL, _STAT_COL, _VALUE_COL, _CRIT_COL, _MARK_COL)

TABLE_WIDTH = sum(width for _, width, _ in _COLUMNS)


def _marker(passed):
    return config.REPORT_PASS_MARKER if passed else config.REPORT_FAIL_MARKER


def _format_number(number, decimals, width):
    # Fixed point unless it would touch the column to the left.
    text = f"{number:.{decimals}f}"
    if len(text) >= width:
        text = f"{number:.{decimals}e}"
    return f"{text:>{width}}"


def _format_row(test, statistic, value, critical, passed):
    return (
        f"{test:{_TEST_COL[2]}{_TEST_COL[1]}}"
        f"{statistic:{_STAT_COL[2]}{_STAT_COL[1]}}"
        f"{_format_number(value, config.REPORT_VALUE_DECIMALS, _VALUE_COL[1])}"
        f"{_format_number(critical, config.REPORT_CRITICAL_DECIMALS, _CRIT_COL[1])}"
        f"{_marker(passed):{_MARK_COL[2]}{_MARK_COL[1]}}"
    )


def format_diagnostic_table(q, r, h, n, title="Diagnostic tests"):
    """Render the Q, r, H and N results as a fixed-width table.

    Parameters
    ----------
    q, r, h, n : QResult, RResult, HResult, NResult
        Results from the statistic primitives. Not validated here.
    title : str
        First line of the table.

    Returns
    -------
    str
        Table text ending with a newline.
    """
    separator = "-" * TABLE_WIDTH
    header = "".join(
        f"{name:{align}{width}}" for name, width, align in _COLUMNS
    )

    rows = [
        _format_row("independence", f"Q({q.k})", q.value,
                    q.critical_value, q.passed),
        _format_row("", "r(1)", r.value_at_lag1,
                    r.critical_value, r.passed_lag1),
        _format_row("", f"r({r.lag})", r.value_at_lag_l,
                    r.critical_value, r.passed_lag_l),
        _format_row("homoscedasticity", f"{h.label}({h.h})", h.value,
                    h.critical_value, h.passed),
        _format_row("normality", "N", n.value,
                    n.critical_value, n.passed),
    ]

    lines = [title, separator, header, separator, *rows, separator]
    return "\n".join(lines) + "\n"


def format_report(report):
    """Render a DiagnosticReport with format_diagnostic_table()."""
    return format_diagnostic_table(report.q, report.r, report.h, report.n,
                                   title=report.title)


def print_diagnostic_table(q, r, h, n, title="Diagnostic tests", stream=None):
    """Write the diagnostic table to a stream (stdout by default)."""
    if stream is None:
        stream = sys.stdout
    stream.write(format_diagnostic_table(q, r, h, n, title=title))


def run_diagnostics(residuals, d=0, k=None, w=1, l=None,
                    title="Diagnostic tests"):
    """Run Q, r, H and N on one residual series.

    Parameters
    ----------
    residuals : array-like
        Standardized residuals from a fitted model.
    d : int
        Number of leading diffuse residuals to exclude.
    k : int, optional
        Q lags. Default: config.DEFAULT_Q_LAGS.
    w : int
        Number of estimated hyperparameters.
    l : int, optional
        Second autocorrelation lag. Default: config.DEFAULT_R_LAG.
    title : str
        Report title.

    Returns
    -------
    DiagnosticReport
    """
    with StepTimer() as timer:
        report = DiagnosticReport(
            title=title,
            q=q_statistic(residuals, k=k, w=w, d=d),
            r=r_statistic(residuals, d=d, l=l),
            h=h_statistic(residuals, d=d),
            n=n_statistic(residuals, d=d),
        )

    failed = [stat for _, stat, _, _, passed in report.rows() if not passed]
    log_step_summary(
        log,
        "diagnostics",
        input_summary={"n": len(residuals), "d": d, "w": w},
        output_summary={"all_passed": report.all_passed},
        timing_seconds=timer.elapsed,
        warnings_list=[f"{stat} outside critical value" for stat in failed],
    )
    return report


def save_diagnostics_csv(report, output_csv):
    """Validate and save the report rows as CSV. Returns the DataFrame."""
    df = DiagnosticsSchema.validate(report.to_frame())
    os.makedirs(os.path.dirname(output_csv) or ".", exist_ok=True)
    df.to_csv(output_csv, index=False)
    log.info("Saved diagnostics: %s", output_csv)
    return df
