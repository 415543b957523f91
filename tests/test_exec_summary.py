"""Tests for the executive summary writer."""

import numpy as np
import pandas as pd
import pytest

import exec_summary as es


class TestFormatters:
    """Tests for the number formatters."""

    def test_fmt_pct(self) -> None:
        assert es.fmt_pct(0.1234) == "12.3%"
        assert es.fmt_pct(np.nan) == "—"

    def test_fmt_float(self) -> None:
        assert es.fmt_float(0.12345) == "0.123"
        assert es.fmt_float(None) == "—"

    def test_fmt_int(self) -> None:
        assert es.fmt_int(1234567) == "1,234,567"
        assert es.fmt_int(2.6) == "3"
        assert es.fmt_int(float("nan")) == "—"


class TestTables:
    """Tests for the Markdown table helpers."""

    def test_df_to_md_table(self) -> None:
        """Header, separator and one line per row."""
        md = es.df_to_md_table(pd.DataFrame({"a": [1, 2], "b": ["x", "y"]}))
        lines = md.splitlines()
        assert lines[0] == "| a | b |"
        assert lines[1] == "| --- | --- |"
        assert lines[3] == "| 2 | y |"

    def test_band_table(self) -> None:
        """Shares sum to one and bands follow the given order."""
        df = pd.DataFrame({"g": ["B", "A", "A", "B"], "is_bad": [1, 0, 1, 1]})
        t = es.band_table(df, "g", ["B", "A"])
        assert t["Group"].tolist() == ["B", "A"]
        assert t["Share of loans"].sum() == pytest.approx(1.0)
        assert t["Bad rate"].tolist() == [1.0, 0.5]

    @pytest.mark.parametrize("rates, expected", [
        ([0.4, 0.3, 0.3, 0.1], True),
        ([0.4, 0.5, 0.1], False),
        ([0.2], False),
    ])
    def test_is_monotonic_risk(self, rates, expected) -> None:
        assert es.is_monotonic_risk(pd.Series(rates)) is expected


class TestBuildSummary:
    """Tests for the Markdown document."""

    def test_sections_without_model(self, clean_loans) -> None:
        """Data, grade and income sections are present; no model section."""
        md = es.build_summary(clean_loans)
        assert md.startswith("# Executive Summary")
        assert "## The data" in md
        assert "## Bad rate by combined grade" in md
        assert "## Bad rate by income range" in md
        assert "## Decision tree" not in md
        assert f"**{len(clean_loans):,}** labelled loans" in md

    def test_model_section(self, clean_loans) -> None:
        """Model metrics are reported in confusion-matrix terms."""
        metrics = {"max_depth": 3, "n_train": 80, "n_test": 20, "accuracy": 0.75,
                   "precision": 0.5, "recall": 0.6, "specificity": 0.8, "f1": 0.545,
                   "auc": 0.7, "TP": 3, "FP": 3, "TN": 12, "FN": 2,
                   "top_features": "BorrowerRate;CreditScore"}
        md = es.build_summary(clean_loans, metrics)
        assert "## Decision tree (illustrative)" in md
        assert "TP=3 FP=3 TN=12 FN=2" in md
        assert "BorrowerRate, CreditScore" in md

    def test_write_summary(self, workdir) -> None:
        path = es.write_summary("# hello\n")
        assert (workdir / path).read_text(encoding="utf-8") == "# hello\n"
