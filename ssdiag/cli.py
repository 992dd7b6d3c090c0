"""
Command line entry point: print the diagnostic table for a residual file.

Usage:
    python -m ssdiag report residuals.csv --column resid --d 1 --w 2
"""

import argparse
import sys

import pandas as pd

from ssdiag import config
from ssdiag.errors import DiagnosticError
from ssdiag.logging_config import get_logger, setup_logging
from ssdiag.report import format_report, run_diagnostics, save_diagnostics_csv

log = get_logger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ssdiag",
        description="Residual diagnostics for fitted state-space models",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Print the Q, r, H, N table")
    report.add_argument("residuals_csv", help="CSV file holding residuals")
    report.add_argument(
        "--column",
        default=None,
        help="Residual column (default: first column)",
    )
    report.add_argument(
        "--d",
        type=int,
        default=0,
        help="Number of leading diffuse residuals to exclude",
    )
    report.add_argument(
        "--k",
        type=int,
        default=config.DEFAULT_Q_LAGS,
        help="Number of lags for the Q statistic",
    )
    report.add_argument(
        "--w",
        type=int,
        default=1,
        help="Number of estimated hyperparameters",
    )
    report.add_argument(
        "--l",
        type=int,
        default=config.DEFAULT_R_LAG,
        help="Second lag for the r statistic",
    )
    report.add_argument("--title", default="Diagnostic tests")
    report.add_argument(
        "--output-csv",
        default=None,
        dest="output_csv",
        help="Also save the table rows as CSV",
    )
    report.add_argument(
        "--log-dir",
        default=None,
        dest="log_dir",
        help="Directory for a JSON Lines run log",
    )
    return parser


def _load_residuals(path, column):
    df = pd.read_csv(path)
    if column is None:
        column = df.columns[0]
    if column not in df.columns:
        raise DiagnosticError(f"column {column!r} not in {list(df.columns)}")
    return df[column].to_numpy(dtype=float)


def main(argv=None):
    args = build_parser().parse_args(argv)

    setup_logging(log_dir=args.log_dir)

    try:
        residuals = _load_residuals(args.residuals_csv, args.column)
        report = run_diagnostics(residuals, d=args.d, k=args.k, w=args.w,
                                 l=args.l, title=args.title)
    except DiagnosticError as exc:
        log.error("Diagnostics failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    sys.stdout.write(format_report(report))
    if args.output_csv:
        save_diagnostics_csv(report, args.output_csv)
    return 0 if report.all_passed else 1


if __name__ == "__main__":
    sys.exit(main())
