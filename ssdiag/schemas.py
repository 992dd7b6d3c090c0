"""
Pandera DataFrame schemas for diagnostic outputs.

Usage:
    from ssdiag.schemas import DiagnosticsSchema
    DiagnosticsSchema.validate(df)  # raises pandera.errors.SchemaError on failure
"""

from pandera.pandas import Check, Column, DataFrameSchema


# ── Diagnostic table rows ──────────────────────────────────────────────

DiagnosticsSchema = DataFrameSchema(
    columns={
        "test": Column(
            str,
            Check.isin(["independence", "homoscedasticity", "normality"]),
            nullable=False,
        ),
        "statistic": Column(str, nullable=False),
        "value": Column(float, nullable=False),
        "critical_value": Column(float, Check.greater_than(0.0), nullable=False),
        "passed": Column(bool, nullable=False),
    },
    checks=[Check(lambda df: len(df) == 5, error="expected five sub-test rows")],
    strict=True,
    coerce=False,
    name="DiagnosticsSchema",
)


# ── Initial-value search trial log ─────────────────────────────────────

TrialLogSchema = DataFrameSchema(
    columns={
        "index": Column(int, Check.greater_than_or_equal_to(0), nullable=False),
        "value": Column(float, nullable=False),
        # -inf marks a failed trial
        "loglikelihood": Column(float, nullable=False),
        "error": Column(object, nullable=True),
    },
    strict=True,
    coerce=False,
    name="TrialLogSchema",
)
