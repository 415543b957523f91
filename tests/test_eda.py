"""Tests for EDA tables and charts."""

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest
from matplotlib.colors import to_hex

import eda


class TestTables:
    """Tests for the descriptive tables."""

    def test_rate_table(self) -> None:
        """Bad rate per category, in the requested order."""
        df = pd.DataFrame({"g": ["A", "A", "B", "B", "B", None], "is_bad": [1, 0, 0, 0, 1, 1]})
        out = eda.rate_table(df, "g", order=["B", "A", "Z"])
        assert list(out.index) == ["B", "A"]
        assert out.loc["A", "loans"] == 2
        assert out.loc["A", "bad_rate"] == pytest.approx(0.5)
        assert out.loc["B", "bad_rate"] == pytest.approx(1 / 3)

    def test_missingness_table(self, workdir) -> None:
        """Missing counts and shares, worst column first."""
        df = pd.DataFrame({"a": [1, np.nan, np.nan, 4], "b": [1, 2, 3, np.nan], "c": [1, 2, 3, 4]})
        out = eda.missingness_table(df)
        assert list(out.index) == ["a", "b", "c"]
        assert out.loc["a", "missing_pct"] == 50.0
        assert (workdir / "reports" / "missingness.csv").exists()

    def test_high_corr_report(self, workdir) -> None:
        """Only pairs at or above the threshold are listed."""
        x = np.arange(20, dtype=float)
        df = pd.DataFrame({"x": x, "y": 2 * x + 1, "z": np.tile([1.0, -1.0], 10)})
        out = eda.high_corr_report(df, thr=0.9)
        assert len(out) == 1
        assert set(out.iloc[0][["feature_1", "feature_2"]]) == {"x", "y"}

    def test_grade_summary(self, clean_loans, workdir) -> None:
        """One row per grade present, shares summing to one."""
        out = eda.grade_summary(clean_loans)
        assert list(out.index) == [g for g in eda.GRADE_ORDER if g in set(out.index)]
        assert out["share"].sum() == pytest.approx(1.0)
        assert "median_borrower_rate" in out.columns
        assert (workdir / "reports" / "grade_summary.csv").exists()


class TestHelpers:
    """Tests for small plotting helpers."""

    def test_first_mode(self) -> None:
        """Most frequent value; NaN for empty input."""
        assert eda._first_mode(pd.Series([1, 2, 2, 3])) == 2.0
        assert np.isnan(eda._first_mode(pd.Series([], dtype=float)))


@pytest.fixture
def captured_figs(monkeypatch):
    """Keep figures open instead of saving them."""
    figs = []

    def _keep(fig, filename):
        figs.append(fig)
        return filename

    monkeypatch.setattr(eda, "save_and_show", _keep)
    yield figs
    plt.close("all")


class TestChartLayout:
    """Tests for axis order and colours on individual charts."""

    def test_era_lines_share_grade_axis(self, captured_figs) -> None:
        """Both eras plot on the worst -> best grade axis even if one lacks HR loans."""
        df = pd.DataFrame({
            "CombinedGrade": ["E", "D", "C", "E", "D", "C", "HR", "HR"],
            "Era": ["post-2009"] * 3 + ["pre-2009"] * 5,
            "is_bad": [1, 0, 0, 1, 1, 0, 1, 0],
        })
        eda.plot_grade_rate_by_era(df)
        ax = captured_figs[0].axes[0]
        labels = list(ax.xaxis.get_major_formatter().format_ticks(ax.get_xticks()))
        assert labels == eda.GRADE_ORDER

        lines = {ln.get_label().split(" ")[0]: ln for ln in ax.get_lines()}
        pre, post = lines["pre-2009"], lines["post-2009"]
        assert list(pre.get_xdata()) == list(range(len(eda.GRADE_ORDER)))
        assert pre.get_ydata()[0] == pytest.approx(0.5)   # HR
        assert np.isnan(post.get_ydata()[0])              # no HR loans after 2009
        assert post.get_ydata()[1] == pytest.approx(1.0)  # E

    def test_status_colours_follow_label_rule(self, captured_figs) -> None:
        """Good statuses are drawn blue and bad ones coral."""
        df = pd.DataFrame({"LoanStatus": ["Completed"] * 3 + ["FinalPaymentInProgress"] * 2 + ["Defaulted"]})
        eda.plot_status_counts(df)
        ax = captured_figs[0].axes[0]
        colours = [to_hex(p.get_facecolor()) for p in ax.patches]
        # bars are drawn least frequent first
        assert colours == [eda.COLOR_BAD.lower(), eda.COLOR_GOOD.lower(), eda.COLOR_GOOD.lower()]


class TestCharts:
    """Smoke tests: every chart lands in reports/figures."""

    def test_missing_charts(self, clean_loans, workdir) -> None:
        """Both missing-data views are written."""
        assert eda.plot_missing_bars(clean_loans) is not None
        assert eda.plot_missing_matrix(clean_loans, n_rows=100) is not None
        assert (workdir / "reports" / "figures" / "missing_matrix.png").exists()

    def test_no_missing_values_skips_bars(self, workdir) -> None:
        """A complete table has no missing-share chart."""
        assert eda.plot_missing_bars(pd.DataFrame({"a": [1, 2]})) is None

    def test_numeric_distribution_empty(self, workdir) -> None:
        """An all-missing column produces no chart."""
        df = pd.DataFrame({"x": [np.nan, np.nan]})
        assert eda.plot_numeric_distribution(df, "x", "t", "x.png") is None

    def test_make_eda_charts(self, clean_loans, workdir) -> None:
        """The full EDA run writes the univariate, bivariate and multivariate charts."""
        eda.make_eda_charts(clean_loans)
        figs = workdir / "reports" / "figures"
        expected = [
            "missing_share.png", "missing_matrix.png",
            "loan_status_counts.png", "good_bad_counts.png", "grade_counts.png",
            "borrower_rate.png", "loan_amount.png", "monthly_income.png", "credit_score.png",
            "debt_to_income.png", "term_counts.png", "listing_category_counts.png",
            "income_range_counts.png", "listing_year_counts.png",
            "grade_bad_rate.png", "income_range_bad_rate.png", "listing_category_bad_rate.png",
            "term_bad_rate.png", "debt_to_income_risk_bins.png", "borrower_rate_by_grade.png",
            "amount_vs_rate.png", "correlation_heatmap.png",
            "borrower_rate_by_grade_status.png", "grade_term_bad_rate.png",
            "grade_bad_rate_by_era.png", "credit_score_vs_rate_status.png",
        ]
        missing = [f for f in expected if not (figs / f).exists()]
        assert missing == []

    def test_charts_skip_absent_columns(self, workdir) -> None:
        """A bare status table only yields the status charts."""
        from recode import clean_data

        df, _ = clean_data(pd.DataFrame({"LoanStatus": ["Completed", "Defaulted", "Current", "Chargedoff"]}))
        eda.make_eda_charts(df)
        figs = workdir / "reports" / "figures"
        assert (figs / "good_bad_counts.png").exists()
        assert not (figs / "borrower_rate.png").exists()
