# exec_summary.py
# Writes a plain-English executive summary to reports/executive_summary.md
# - Dataset overview (rows, listing span, which grading scheme graded how many loans)
# - Good/bad balance, bad rate by combined grade and by income band
# - Decision-tree holdout results in confusion-matrix terms
# Called from main.py; can also be re-run alone from the exported CSVs.

from __future__ import annotations

import os
from typing import List, Optional

import numpy as np
import pandas as pd

from recode import GRADE_ORDER, INCOME_RANGE_ORDER, TARGET

EXPORTS = "exports"
REPORTS = "reports"
OUT_MD = os.path.join(REPORTS, "executive_summary.md")
CLEAN_CSV = os.path.join(EXPORTS, "clean_loans.csv")
MODEL_METRICS_CSV = os.path.join(EXPORTS, "model_metrics.csv")

# ------------ helpers

def ensure_dirs():
    os.makedirs(REPORTS, exist_ok=True)

def read_csv_safe(path: str) -> Optional[pd.DataFrame]:
    if not os.path.exists(path):
        return None
    try:
        return pd.read_csv(path, low_memory=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError):
        return None

def fmt_pct(x: float, d: int = 1) -> str:
    if x is None or not np.isfinite(x): return "—"
    return f"{100.0 * float(x):.{d}f}%"

def fmt_float(x: float, d: int = 3) -> str:
    if x is None or not np.isfinite(x): return "—"
    return f"{float(x):.{d}f}"

def fmt_int(x: float | int) -> str:
    if x is None or (isinstance(x, float) and not np.isfinite(x)): return "—"
    try:
        return f"{int(round(float(x))):,}"
    except (TypeError, ValueError):
        return str(x)

def df_to_md_table(df: pd.DataFrame) -> str:
    """Render a DataFrame as a GitHub-style Markdown table."""
    cols = list(df.columns)
    header = "| " + " | ".join(cols) + " |"
    sep = "| " + " | ".join(["---"] * len(cols)) + " |"
    rows = ["| " + " | ".join(str(df.iloc[i, j]) for j in range(len(cols))) + " |"
            for i in range(len(df))]
    return "\n".join([header, sep] + rows)

def band_table(df: pd.DataFrame, col: str, order: List[str]) -> pd.DataFrame:
    tmp = pd.DataFrame({"Group": df[col].astype(object), "y": df[TARGET]}).dropna()
    tmp["Group"] = tmp["Group"].astype(str)
    g = tmp.groupby("Group")["y"].agg(loans="size", bad="sum")
    g = g.reindex([o for o in order if o in g.index])
    total = g["loans"].sum()
    g["Share of loans"] = g["loans"] / total if total else 0.0
    g["Bad rate"] = g["bad"] / g["loans"]
    return g.reset_index()

def is_monotonic_risk(rates: pd.Series) -> bool:
    """Bad rate never rises as the grade improves (worst -> best order)."""
    r = rates.dropna().to_numpy()
    return bool(len(r) >= 2 and np.all(np.diff(r) <= 1e-12))

# ------------ main

def build_summary(df: pd.DataFrame, metrics: Optional[dict] = None) -> str:
    lines: List[str] = []
    lines.append("# Executive Summary — Prosper loans\n")

    total = len(df)
    bad = int(pd.to_numeric(df[TARGET], errors="coerce").fillna(0).sum()) if TARGET in df.columns else 0
    base_rate = bad / total if total else np.nan

    # Overview
    lines.append("## The data")
    lines.append(f"- **{fmt_int(total)}** labelled loans after cleaning.")
    if "ListingCreationDate" in df.columns:
        dt = pd.to_datetime(df["ListingCreationDate"], errors="coerce").dropna()
        if not dt.empty:
            lines.append(f"- Listings from **{dt.min():%b %Y}** to **{dt.max():%b %Y}**.")
    if "GradeSource" in df.columns:
        src = df["GradeSource"].value_counts()
        lines.append(
            f"- Grades: **{fmt_int(src.get('CreditGrade', 0))}** loans from the pre-2009 CreditGrade scheme, "
            f"**{fmt_int(src.get('ProsperRating', 0))}** from the post-2009 Prosper rating; "
            f"**{fmt_int(df['GradeSource'].isna().sum())}** ungraded."
        )
    lines.append(f"- About **{fmt_pct(base_rate)}** of loans are bad (charged off, defaulted or past due).")
    lines.append("")

    # Grades
    if {"CombinedGrade", TARGET}.issubset(df.columns):
        t = band_table(df, "CombinedGrade", GRADE_ORDER)
        if not t.empty:
            lines.append("## Bad rate by combined grade (worst → best)")
            show = t[["Group", "loans", "Share of loans", "Bad rate"]].copy()
            show["loans"] = show["loans"].apply(fmt_int)
            for c in ["Share of loans", "Bad rate"]:
                show[c] = show[c].apply(fmt_pct)
            lines.append(df_to_md_table(show.rename(columns={"Group": "Grade", "loans": "Loans"})))
            lines.append("")
            if is_monotonic_risk(t["Bad rate"]):
                lines.append("**Takeaway:** the unified grade ranks risk cleanly — each better grade has a lower bad rate.")
            else:
                worst = t.loc[t["Bad rate"].idxmax(), "Group"]
                lines.append(f"**Takeaway:** risk mostly falls as grades improve, but not strictly; the highest bad rate is in **{worst}**.")
            lines.append("")

    # Income
    if {"IncomeRange", TARGET}.issubset(df.columns):
        t = band_table(df, "IncomeRange", INCOME_RANGE_ORDER)
        if not t.empty:
            lines.append("## Bad rate by income range")
            show = t[["Group", "Share of loans", "Bad rate"]].copy()
            for c in ["Share of loans", "Bad rate"]:
                show[c] = show[c].apply(fmt_pct)
            lines.append(df_to_md_table(show.rename(columns={"Group": "Income range"})))
            lines.append("")

    # Model
    if metrics:
        lines.append("## Decision tree (illustrative)")
        lines.append(
            f"- Depth-{fmt_int(metrics.get('max_depth'))} tree on resolved loans; "
            f"{fmt_int(metrics.get('n_train'))} train / {fmt_int(metrics.get('n_test'))} holdout."
        )
        lines.append(
            f"- Accuracy **{fmt_float(metrics.get('accuracy'))}**, precision **{fmt_float(metrics.get('precision'))}**, "
            f"recall **{fmt_float(metrics.get('recall'))}**, specificity **{fmt_float(metrics.get('specificity'))}**, "
            f"F1 **{fmt_float(metrics.get('f1'))}**, AUC **{fmt_float(metrics.get('auc'))}**."
        )
        lines.append(
            f"- Confusion mix: TP={fmt_int(metrics.get('TP'))} FP={fmt_int(metrics.get('FP'))} "
            f"TN={fmt_int(metrics.get('TN'))} FN={fmt_int(metrics.get('FN'))}"
        )
        top = metrics.get("top_features")
        if isinstance(top, str) and top:
            lines.append(f"- Splits rely most on: **{', '.join(top.split(';'))}**.")
        lines.append("")
        lines.append("_The tree is shallow on purpose: it shows which fields separate good from bad loans, "
                     "not a production scorecard._")
        lines.append("")

    return "\n".join(lines).strip() + "\n"

def write_summary(md: str) -> str:
    ensure_dirs()
    with open(OUT_MD, "w", encoding="utf-8") as f:
        f.write(md)
    print(f"[SAVE] {OUT_MD}")
    return OUT_MD


if __name__ == "__main__":
    df = read_csv_safe(CLEAN_CSV)
    if df is None or df.empty:
        raise SystemExit(f"Missing {CLEAN_CSV} — run main.py first.")
    mdf = read_csv_safe(MODEL_METRICS_CSV)
    metrics = mdf.iloc[0].to_dict() if mdf is not None and not mdf.empty else None
    write_summary(build_summary(df, metrics))
