"""
Tests for ssdiag/report.py.

Verifies that:
1. Each data row carries exactly one pass/fail marker matching its result
2. Column alignment is stable across value magnitudes
3. The H row label follows the direction of the ratio
4. run_diagnostics() wires the four tests together and logs a summary
"""

import io
import os

import pandas as pd
import pytest

from ssdiag.report import (
    TABLE_WIDTH,
    format_diagnostic_table,
    format_report,
    print_diagnostic_table,
    run_diagnostics,
    save_diagnostics_csv,
)
from ssdiag.result_types import DiagnosticReport, HResult, NResult, QResult, RResult


MARK_WIDTH = 11


def _stubs(q_value=7.333, h_ratio=0.5):
    q = QResult(k=15, w=3, value=q_value, critical_value=22.36)
    r = RResult(lag=12, value_at_lag1=0.05, value_at_lag_l=-0.3, critical_value=0.14)
    h_value = h_ratio if h_ratio >= 1 else 1 / h_ratio
    h = HResult(h=64, ratio=h_ratio, value=h_value, critical_value=1.64)
    n = NResult(value=1.0, critical_value=5.99)
    return q, r, h, n


def _data_rows(table):
    return table.splitlines()[4:9]


class TestFormatDiagnosticTable:

    def test_layout(self):
        table = format_diagnostic_table(*_stubs(), title="Local level model")
        lines = table.splitlines()

        assert lines[0] == "Local level model"
        assert len(lines) == 10
        for idx in (1, 3, 9):
            assert set(lines[idx]) == {"-"}
        assert "statistic" in lines[2]
        assert "critical value" in lines[2]
        assert table.endswith("\n")

    def test_one_marker_per_row(self):
        """Q pass, r(1) pass, r(12) fail, 1/H fail, N pass."""
        rows = _data_rows(format_diagnostic_table(*_stubs()))

        markers = [row[-MARK_WIDTH:].strip() for row in rows]
        assert markers == ["+", "+", "-", "-", "+"]

    def test_failing_q_marked(self):
        rows = _data_rows(format_diagnostic_table(*_stubs(q_value=700.0)))
        assert rows[0].startswith("independence")
        assert rows[0][-MARK_WIDTH:].strip() == "-"

    @pytest.mark.parametrize(
        "q_value", [7.333, 700.0, 0.0, 12345.678, 1.23e8, 123456789.123, -9.87e12]
    )
    def test_alignment_stable_across_magnitudes(self, q_value):
        lines = format_diagnostic_table(*_stubs(q_value=q_value)).splitlines()
        for line in lines[1:]:
            assert len(line) == TABLE_WIDTH

    def test_huge_normality_value_keeps_row_width(self):
        q, r, h, _ = _stubs()
        n = NResult(value=123456789.123, critical_value=5.99)
        rows = _data_rows(format_diagnostic_table(q, r, h, n))

        assert {len(row) for row in rows} == {TABLE_WIDTH}
        assert "1.235e+08" in rows[4]
        assert rows[4][-MARK_WIDTH:].strip() == "-"

    def test_huge_critical_value_switches_to_exponent(self):
        q = QResult(k=15, w=3, value=1.0, critical_value=1.5e15)
        _, r, h, n = _stubs()
        row = _data_rows(format_diagnostic_table(q, r, h, n))[0]

        assert len(row) == TABLE_WIDTH
        assert "1.50e+15" in row

    def test_value_columns_line_up(self):
        small = _data_rows(format_diagnostic_table(*_stubs(q_value=7.333)))[0]
        large = _data_rows(format_diagnostic_table(*_stubs(q_value=700.0)))[0]
        assert small.index("7.333") + len("7.333") == large.index("700.000") + len("700.000")

    def test_precision(self):
        table = format_diagnostic_table(*_stubs())
        assert "7.333" in table
        assert "22.36" in table
        assert "-0.300" in table
        assert "0.14" in table

    def test_h_label_follows_ratio(self):
        reciprocal = format_diagnostic_table(*_stubs(h_ratio=0.5))
        direct = format_diagnostic_table(*_stubs(h_ratio=1.25))

        assert "1/H(64)" in reciprocal
        assert "1/H(64)" not in direct
        assert "H(64)" in direct

    def test_row_labels(self):
        rows = _data_rows(format_diagnostic_table(*_stubs()))
        assert "Q(15)" in rows[0]
        assert "r(1)" in rows[1]
        assert "r(12)" in rows[2]
        assert rows[3].startswith("homoscedasticity")
        assert rows[4].startswith("normality")

    def test_print_to_stream(self):
        buf = io.StringIO()
        print_diagnostic_table(*_stubs(), title="T", stream=buf)
        assert buf.getvalue() == format_diagnostic_table(*_stubs(), title="T")

    def test_format_report_uses_title(self):
        q, r, h, n = _stubs()
        report = DiagnosticReport(title="Seasonal model", q=q, r=r, h=h, n=n)
        assert format_report(report).splitlines()[0] == "Seasonal model"


class TestDiagnosticReport:

    def test_all_passed(self):
        q, r, h, n = _stubs(h_ratio=1.25)
        r_ok = RResult(lag=12, value_at_lag1=0.05, value_at_lag_l=0.01, critical_value=0.14)
        assert DiagnosticReport("ok", q, r_ok, h, n).all_passed
        assert not DiagnosticReport("bad", q, r, h, n).all_passed

    def test_to_frame(self):
        report = DiagnosticReport("t", *_stubs())
        df = report.to_frame()
        assert list(df.columns) == ["test", "statistic", "value", "critical_value", "passed"]
        assert len(df) == 5
        assert df["passed"].tolist() == [True, True, False, False, True]

    def test_to_dict(self):
        d = DiagnosticReport("t", *_stubs()).to_dict()
        assert d["title"] == "t"
        assert d["all_passed"] is False
        assert [t["statistic"] for t in d["tests"]] == ["Q(15)", "r(1)", "r(12)", "1/H(64)", "N"]


class TestRunDiagnostics:

    def test_runs_all_four_tests(self, pattern_residuals):
        report = run_diagnostics(pattern_residuals, d=0, k=15, w=3, l=12,
                                 title="Pattern")

        assert report.title == "Pattern"
        assert report.q.k == 15
        assert report.q.dof == 13
        assert report.r.lag == 12
        assert report.h.h == 64
        assert report.n.nobs == 192

    def test_table_renders(self, white_noise):
        report = run_diagnostics(white_noise, d=1, k=10, w=2, l=8)
        table = format_report(report)
        assert "Q(10)" in table
        assert "r(8)" in table

    def test_logs_summary(self, white_noise, caplog):
        with caplog.at_level("INFO"):
            run_diagnostics(white_noise, d=0, k=10, w=2, l=8)
        assert "[diagnostics] finished" in caplog.text

    def test_errors_propagate(self, white_noise):
        from ssdiag.errors import InvalidParameter

        with pytest.raises(InvalidParameter):
            run_diagnostics(white_noise, d=0, k=2, w=5, l=8)


class TestSaveDiagnosticsCsv:

    def test_writes_csv(self, white_noise, tmp_dir):
        report = run_diagnostics(white_noise, d=0, k=10, w=2, l=8)
        path = os.path.join(tmp_dir, "out", "diag.csv")

        df = save_diagnostics_csv(report, path)

        assert os.path.exists(path)
        loaded = pd.read_csv(path)
        assert len(loaded) == len(df) == 5
        assert loaded["statistic"].tolist()[0] == "Q(10)"
