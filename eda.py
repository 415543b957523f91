"""
================= Prosper Loans — Exploratory Data Analysis =================
Univariate, bivariate and multivariate views of the cleaned loan table,
plus the missing-data picture and a few descriptive tables.

Every chart is optional: if its columns are absent it is skipped.
Figures go to reports/figures, tables to reports/.

Palette: blue = good loan, coral = bad loan.
=============================================================================
"""

from __future__ import annotations

import os

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from matplotlib.ticker import FuncFormatter

from recode import GOOD_STATUSES, GRADE_ORDER, INCOME_RANGE_ORDER, LABEL_COL, STATUS_COL, TARGET

# -------------------- Configuration ----------------------------------------
OUTPUT_DIR   = "reports/figures"
REPORTS      = "reports"
SHOW_WINDOWS = False                    # True to pop up figure windows
MISSING_SAMPLE_ROWS = 1_000             # rows drawn for the presence matrix
RANDOM_SEED  = 42
# ----------------------------------------------------------------------------

# ------------------ Palette (color-vision friendly) ------------------------
COLOR_GOOD = "#3B5BA5"  # deep blue  — good loan
COLOR_BAD  = "#E45756"  # coral      — bad loan
LINE_MED   = "#FFB000"  # gold       — median
LINE_MEAN  = "#6B7280"  # slate      — mean
LINE_MODE  = "#8E6AC8"  # purple     — mode
HEATMAP_CMAP = "PuOr"   # purple <-> orange
RATE_CMAP    = "Reds"
LABEL_PALETTE = {"good": COLOR_GOOD, "bad": COLOR_BAD}
ERA_PALETTE   = {"pre-2009": LINE_MODE, "post-2009": COLOR_GOOD}
# ----------------------------------------------------------------------------

sns.set_theme(
    style="whitegrid",
    rc={
        "axes.titlesize": 13,
        "axes.labelsize": 11,
        "axes.titlepad": 10,
        "legend.frameon": False,
        "figure.dpi": 110,
        "axes.facecolor": "white",
        "grid.color": "#EEF2F5",
        "grid.linewidth": 0.8,
        "font.family": "DejaVu Sans",
    }
)

# ---------------------- Formatters -----------------------------------------
PCT = FuncFormatter(lambda v, _: f"{v*100:.0f}%")  # [0,1] → "xx%"
def _fmt_thousands(x, _):
    try:
        return f"{int(x):,}"
    except (TypeError, ValueError, OverflowError):
        return str(x)
FMT_THOUSANDS = FuncFormatter(_fmt_thousands)

# ============================== Small helpers ==============================

def make_output_folder() -> None:
    os.makedirs(OUTPUT_DIR, exist_ok=True)

def new_fig(figsize=(7, 4)):
    return plt.subplots(figsize=figsize, constrained_layout=True)

def save_and_show(fig: plt.Figure, filename: str) -> str:
    make_output_folder()
    out = os.path.join(OUTPUT_DIR, filename)
    fig.savefig(out, dpi=150, bbox_inches="tight")
    if SHOW_WINDOWS:
        plt.show()
    plt.close(fig)
    print(f"[SAVE] {out}")
    return out

def save_table(df: pd.DataFrame, filename: str, index: bool = False) -> str:
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, filename)
    df.to_csv(path, index=index)
    print(f"[SAVE] {path}")
    return path

def _first_mode(s: pd.Series) -> float:
    m = s.mode(dropna=True)
    return float(m.iloc[0]) if not m.empty else np.nan

def add_stats_box(ax, s: pd.Series, round_to: float | None = None, fmt: str = ",.0f"):
    s = pd.to_numeric(s, errors="coerce").dropna()
    s_for_mode = (s / round_to).round() * round_to if round_to else s
    mean_v   = float(s.mean()) if len(s) else np.nan
    median_v = float(s.median()) if len(s) else np.nan
    mode_v   = _first_mode(s_for_mode) if len(s_for_mode) else np.nan
    lines = []
    if np.isfinite(mean_v):   lines.append(f"Mean: {mean_v:{fmt}}")
    if np.isfinite(median_v): lines.append(f"Median: {median_v:{fmt}}")
    if np.isfinite(mode_v):   lines.append(f"Mode: {mode_v:{fmt}}")
    if lines:
        ax.text(
            0.98, 0.98, "\n".join(lines),
            transform=ax.transAxes, ha="right", va="top", fontsize=9,
            bbox=dict(facecolor="white", edgecolor="#D1D5DB", boxstyle="round,pad=0.3")
        )
    return mean_v, median_v, mode_v

def _has(df: pd.DataFrame, *cols: str) -> bool:
    return set(cols).issubset(df.columns)

def _label_bars(ax, values, fmt="{:,.0f}"):
    for i, v in enumerate(values):
        if v is None or not np.isfinite(v):
            continue
        ax.text(i, v, fmt.format(v), ha="center", va="bottom", fontsize=9, color="#374151")

# ============================== Tables =====================================

def missingness_table(df: pd.DataFrame) -> pd.DataFrame:
    miss = df.isna().sum().rename("missing")
    pct = (df.isna().mean()*100).round(2).rename("missing_pct")
    out = pd.concat([miss, pct], axis=1).sort_values("missing_pct", ascending=False)
    save_table(out, "missingness.csv", index=True)
    return out

def high_corr_report(df: pd.DataFrame, thr: float = 0.80) -> pd.DataFrame:
    num = df.select_dtypes(include=[np.number])
    pairs = []
    if num.shape[1] >= 2:
        corr = num.corr(numeric_only=True)
        cols = corr.columns
        for i in range(len(cols)):
            for j in range(i+1, len(cols)):
                r = corr.iloc[i, j]
                if np.isfinite(r) and abs(r) >= thr:
                    pairs.append((cols[i], cols[j], float(r)))
    out = pd.DataFrame(pairs, columns=["feature_1", "feature_2", "corr"])
    save_table(out, "high_corr_pairs.csv")
    return out

def rate_table(df: pd.DataFrame, col: str, order: list | None = None) -> pd.DataFrame:
    """Loans, bad loans and bad rate per category of `col` (categories as strings)."""
    tmp = pd.DataFrame({col: df[col].astype(object), TARGET: df[TARGET]}).dropna()
    tmp[col] = tmp[col].astype(str)
    out = (
        tmp.groupby(col)[TARGET]
           .agg(loans="count", bad="sum")
           .assign(bad_rate=lambda d: d["bad"] / d["loans"])
    )
    if order is not None:
        out = out.reindex([o for o in order if o in out.index])
    out.index.name = col
    return out

def grade_summary(df: pd.DataFrame) -> pd.DataFrame:
    if not _has(df, "CombinedGrade", TARGET):
        return pd.DataFrame()
    tbl = rate_table(df, "CombinedGrade", GRADE_ORDER)
    if "BorrowerRate" in df.columns:
        rates = df.groupby(df["CombinedGrade"].astype(object))["BorrowerRate"].median()
        tbl["median_borrower_rate"] = rates.reindex(tbl.index).values
    tbl["share"] = tbl["loans"] / tbl["loans"].sum() if len(tbl) else np.nan
    save_table(tbl, "grade_summary.csv", index=True)
    return tbl

# ============================== Missing data ===============================

def plot_missing_bars(df: pd.DataFrame, top_n: int = 30):
    share = df.isna().mean().sort_values(ascending=False)
    share = share[share > 0].head(top_n)
    if share.empty:
        print("[EDA] No missing values — skipping missing-share chart")
        return None
    fig, ax = new_fig(figsize=(8, max(3.0, 0.28 * len(share) + 1)))
    ax.barh(share.index[::-1], share.values[::-1], color=COLOR_BAD)
    ax.xaxis.set_major_formatter(PCT)
    ax.set_xlim(0, 1)
    ax.set_title("Missing values by column")
    ax.set_xlabel("% of loans missing")
    for y, v in enumerate(share.values[::-1]):
        ax.text(v, y, f" {v*100:.1f}%", va="center", fontsize=8, color="#374151")
    return save_and_show(fig, "missing_share.png")

def plot_missing_matrix(df: pd.DataFrame, n_rows: int = MISSING_SAMPLE_ROWS):
    """Presence matrix on a sample, rows ordered by listing date (grading-era switch shows up)."""
    if df.empty:
        return None
    sample = df.sample(n=min(n_rows, len(df)), random_state=RANDOM_SEED)
    if "ListingCreationDate" in sample.columns:
        sample = sample.sort_values("ListingCreationDate")
    cols = [c for c in sample.columns if sample[c].isna().any()] or list(sample.columns)
    mask = sample[cols].isna().astype(int).reset_index(drop=True)
    fig, ax = new_fig(figsize=(max(6, 0.3 * len(cols) + 2), 6))
    sns.heatmap(mask, cmap=["#E5E7EB", COLOR_BAD], vmin=0, vmax=1, cbar=False,
                yticklabels=False, ax=ax)
    ax.set_title("Missing-data matrix (red = missing; rows by listing date)")
    ax.set_ylabel(f"Loans (sample of {len(sample):,})")
    ax.tick_params(axis="x", labelrotation=90, labelsize=8)
    return save_and_show(fig, "missing_matrix.png")

# ============================== Univariate =================================

def plot_status_counts(df: pd.DataFrame):
    counts = df[STATUS_COL].astype(str).value_counts()
    fig, ax = new_fig(figsize=(8, 4.5))
    colors = [COLOR_GOOD if s in GOOD_STATUSES else COLOR_BAD
              for s in counts.index]
    ax.barh(counts.index[::-1], counts.values[::-1], color=colors[::-1])
    ax.set_title("Loans by raw LoanStatus")
    ax.set_xlabel("Number of loans"); ax.xaxis.set_major_formatter(FMT_THOUSANDS)
    for y, v in enumerate(counts.values[::-1]):
        ax.text(v, y, f" {v:,}", va="center", fontsize=8, color="#374151")
    return save_and_show(fig, "loan_status_counts.png")

def plot_label_balance(df: pd.DataFrame):
    counts = df[LABEL_COL].value_counts().reindex(["good", "bad"]).fillna(0).astype(int)
    total = int(counts.sum())
    fig, ax = new_fig(figsize=(6.2, 4))
    ax.bar(counts.index, counts.values, color=[COLOR_GOOD, COLOR_BAD])
    ax.set_title("Good vs bad loans")
    ax.set_xlabel("Loan outcome"); ax.set_ylabel("Number of loans")
    ax.yaxis.set_major_formatter(FMT_THOUSANDS)
    for i, v in enumerate(counts.values):
        share = v / total if total else 0
        ax.text(i, v, f"{v:,}\n({share:.1%})", ha="center", va="bottom", fontsize=9)
    ax.margins(y=0.12)
    if total:
        print(f"[EDA] Bad loans: {counts['bad']:,} of {total:,} = {counts['bad']/total:.1%}")
    return save_and_show(fig, "good_bad_counts.png")

def plot_grade_counts(df: pd.DataFrame):
    tmp = df[["CombinedGrade", "GradeSource"]].dropna().astype(str)
    if tmp.empty:
        return None
    ctab = pd.crosstab(tmp["CombinedGrade"], tmp["GradeSource"]).reindex(GRADE_ORDER).fillna(0)
    fig, ax = new_fig(figsize=(7.5, 4))
    bottom = np.zeros(len(ctab))
    for src, color in [("CreditGrade", LINE_MODE), ("ProsperRating", COLOR_GOOD)]:
        if src in ctab.columns:
            ax.bar(ctab.index, ctab[src].values, bottom=bottom, color=color, label=src)
            bottom += ctab[src].values
    ax.set_title("Loans by combined credit grade (HR = worst, AA = best)")
    ax.set_xlabel("Combined grade"); ax.set_ylabel("Number of loans")
    ax.yaxis.set_major_formatter(FMT_THOUSANDS)
    _label_bars(ax, bottom)
    ax.legend(title="Grade source")
    return save_and_show(fig, "grade_counts.png")

def plot_numeric_distribution(df: pd.DataFrame, col: str, title: str, fname: str,
                              xlabel: str | None = None, log: bool = False,
                              as_pct: bool = False, bins: int = 50):
    s = pd.to_numeric(df[col], errors="coerce").dropna()
    if log:
        s = s[s > 0]
    if s.empty:
        return None
    fig, ax = new_fig()
    sns.histplot(s, bins=bins, kde=not log, ax=ax, color=COLOR_GOOD, log_scale=log)
    ax.set_title(title)
    ax.set_xlabel(xlabel or col)
    ax.set_ylabel("Number of loans"); ax.yaxis.set_major_formatter(FMT_THOUSANDS)
    if as_pct:
        ax.xaxis.set_major_formatter(PCT)
    fmt = ".2f" if as_pct or s.abs().max() < 10 else ",.0f"
    mean_v, median_v, mode_v = add_stats_box(ax, s, fmt=fmt)
    if np.isfinite(median_v): ax.axvline(median_v, linestyle="--", linewidth=2, color=LINE_MED,  label=f"Median {median_v:{fmt}}")
    if np.isfinite(mean_v):   ax.axvline(mean_v,   linestyle=":",  linewidth=2, color=LINE_MEAN, label=f"Mean {mean_v:{fmt}}")
    ax.legend(loc="upper left")
    return save_and_show(fig, fname)

def plot_category_counts(df: pd.DataFrame, col: str, title: str, fname: str,
                         order: list | None = None, horizontal: bool = False):
    s = df[col].dropna().astype(str)
    if s.empty:
        return None
    counts = s.value_counts()
    if order is not None:
        counts = counts.reindex([o for o in order if o in counts.index])
    elif not horizontal:
        counts = counts.sort_index()
    if horizontal:
        fig, ax = new_fig(figsize=(8, max(3.0, 0.3 * len(counts) + 1)))
        ax.barh(counts.index[::-1], counts.values[::-1], color=COLOR_GOOD)
        ax.set_xlabel("Number of loans"); ax.xaxis.set_major_formatter(FMT_THOUSANDS)
        for y, v in enumerate(counts.values[::-1]):
            ax.text(v, y, f" {v:,}", va="center", fontsize=8, color="#374151")
    else:
        fig, ax = new_fig(figsize=(7.5, 4))
        ax.bar(counts.index, counts.values, color=COLOR_GOOD)
        ax.set_ylabel("Number of loans"); ax.yaxis.set_major_formatter(FMT_THOUSANDS)
        ax.set_xlabel(col)
        _label_bars(ax, counts.values)
        if len(counts) > 5:
            ax.tick_params(axis="x", labelrotation=45)
            for lbl in ax.get_xticklabels():
                lbl.set_ha("right")
    ax.set_title(title)
    return save_and_show(fig, fname)

# ============================== Bivariate ==================================

def plot_bad_rate_by(df: pd.DataFrame, col: str, title: str, fname: str,
                     order: list | None = None):
    tbl = rate_table(df, col, order)
    if tbl.empty:
        return None
    fig, ax = new_fig(figsize=(max(6.4, 0.6 * len(tbl) + 3), 4.2))
    ax.bar(tbl.index, tbl["bad_rate"], color=COLOR_BAD)
    ax.set_title(title)
    ax.set_xlabel(col); ax.set_ylabel("Bad rate")
    ax.yaxis.set_major_formatter(PCT)
    for i, (r, n) in enumerate(zip(tbl["bad_rate"], tbl["loans"])):
        ax.text(i, r, f"{r*100:.1f}%\n{n:,}", ha="center", va="bottom", fontsize=8, color="#374151")
    ax.margins(y=0.15)
    if len(tbl) > 5:
        ax.tick_params(axis="x", labelrotation=45)
        for lbl in ax.get_xticklabels():
            lbl.set_ha("right")
    return save_and_show(fig, fname)

def risk_by_bins_plot(df: pd.DataFrame, col: str, title: str, fname: str, bins=None):
    if not _has(df, col, TARGET):
        return None
    s = pd.to_numeric(df[col], errors="coerce")
    tmp = pd.DataFrame({col: s, TARGET: df[TARGET]}).dropna()
    if tmp.empty:
        return None
    if bins is None:
        bins = [0, 0.1, 0.2, 0.3, 0.4, 0.6, 1.0, 1.5]
    tmp["bin"] = pd.cut(tmp[col], bins=bins, include_lowest=True)
    grp = tmp.groupby("bin", observed=False)[TARGET].agg(bad="mean", loans="count").reset_index()
    grp["label"] = grp["bin"].astype(str)
    fig, ax1 = new_fig(figsize=(8.5, 4.2))
    ax1.bar(grp["label"], grp["loans"], color=COLOR_GOOD)
    ax1.set_ylabel("Number of loans"); ax1.yaxis.set_major_formatter(FMT_THOUSANDS)
    ax1.tick_params(axis="x", labelrotation=45)
    for lbl in ax1.get_xticklabels():
        lbl.set_ha("right")
    ax2 = ax1.twinx()
    ax2.plot(grp["label"], grp["bad"], marker="o", linewidth=2, color=COLOR_BAD)
    ax2.set_ylabel("Bad rate"); ax2.yaxis.set_major_formatter(PCT)
    ax2.grid(False)
    fig.suptitle(title)
    return save_and_show(fig, fname)

def plot_box_by_grade(df: pd.DataFrame, y: str, title: str, fname: str, hue: str | None = None):
    cols = ["CombinedGrade", y] + ([hue] if hue else [])
    tmp = df[cols].dropna().copy()
    if tmp.empty:
        return None
    tmp["CombinedGrade"] = tmp["CombinedGrade"].astype(str)
    tmp[y] = pd.to_numeric(tmp[y], errors="coerce")
    order = [g for g in GRADE_ORDER if g in set(tmp["CombinedGrade"])]
    fig, ax = new_fig(figsize=(8, 4.5))
    if hue:
        hue_order = [h for h in ["good", "bad"] if h in set(tmp[hue])]
        sns.boxplot(data=tmp, x="CombinedGrade", y=y, hue=hue, order=order, hue_order=hue_order,
                    palette=LABEL_PALETTE, ax=ax)
        ax.legend(title="Outcome")
    else:
        sns.boxplot(data=tmp, x="CombinedGrade", y=y, order=order, color=COLOR_GOOD, ax=ax)
    ax.set_title(title)
    ax.set_xlabel("Combined grade (worst → best)"); ax.set_ylabel(y)
    return save_and_show(fig, fname)

def plot_scatter(df: pd.DataFrame, x: str, y: str, title: str, fname: str,
                 hue: str | None = None, max_points: int = 5_000):
    cols = [x, y] + ([hue] if hue else [])
    tmp = df[cols].dropna()
    if tmp.empty:
        return None
    if len(tmp) > max_points:
        tmp = tmp.sample(n=max_points, random_state=RANDOM_SEED)
    fig, ax = new_fig(figsize=(7, 5))
    if hue:
        sns.scatterplot(data=tmp, x=x, y=y, hue=hue, palette=LABEL_PALETTE,
                        hue_order=[h for h in ["good", "bad"] if h in set(tmp[hue])],
                        alpha=0.4, s=12, ax=ax)
    else:
        sns.scatterplot(data=tmp, x=x, y=y, color=COLOR_GOOD, alpha=0.3, s=12, ax=ax)
    ax.set_title(title)
    return save_and_show(fig, fname)

def plot_correlation_heatmap(df: pd.DataFrame, max_cols: int = 25):
    num_df = df.select_dtypes(include=[np.number]).copy()
    num_df = num_df.loc[:, num_df.nunique(dropna=True) > 1]
    if num_df.shape[1] < 2:
        return None
    if num_df.shape[1] > max_cols:
        keep = num_df.corrwith(df[TARGET]).abs().sort_values(ascending=False).index[:max_cols] \
            if TARGET in num_df.columns else num_df.columns[:max_cols]
        num_df = num_df[list(keep)]
    corr = num_df.corr(numeric_only=True)
    upper = corr.where(np.triu(np.ones_like(corr, dtype=bool), k=1))
    vals = upper.unstack().dropna().abs().values
    lim = float(np.quantile(vals, 0.95)) if len(vals) else 0.35
    lim = min(max(lim, 0.25), 0.9)
    mask = np.triu(np.ones_like(corr, dtype=bool))
    labels = corr.round(2).astype(str).where(np.abs(corr) >= 0.30, "")
    labels = labels.mask(mask, "")
    fig, ax = new_fig(figsize=(11, 9))
    sns.heatmap(
        corr, mask=mask, cmap=HEATMAP_CMAP, center=0,
        vmin=-lim, vmax=lim, square=True,
        linewidths=0.5, linecolor="#E6ECF2",
        cbar_kws={"shrink": 0.8},
        annot=labels, fmt="", annot_kws={"fontsize": 7, "color": "#1F2937"},
        ax=ax
    )
    ax.set_title("Correlation heatmap (numeric fields)")
    return save_and_show(fig, "correlation_heatmap.png")

# ============================== Multivariate ===============================

def plot_grade_term_heatmap(df: pd.DataFrame):
    tmp = df[["CombinedGrade", "Term", TARGET]].dropna().copy()
    if tmp.empty:
        return None
    tmp["CombinedGrade"] = tmp["CombinedGrade"].astype(str)
    tmp["Term"] = pd.to_numeric(tmp["Term"], errors="coerce")
    tmp = tmp.dropna(subset=["Term"])
    tmp["Term"] = tmp["Term"].astype(int)
    pivot = tmp.pivot_table(index="CombinedGrade", columns="Term", values=TARGET, aggfunc="mean")
    pivot = pivot.reindex([g for g in GRADE_ORDER[::-1] if g in pivot.index])
    counts = tmp.pivot_table(index="CombinedGrade", columns="Term", values=TARGET, aggfunc="count")
    counts = counts.reindex(index=pivot.index, columns=pivot.columns)
    annot = pivot.map(lambda v: f"{v*100:.0f}%" if np.isfinite(v) else "") + counts.map(
        lambda n: f"\n(n={int(n):,})" if np.isfinite(n) else "")
    fig, ax = new_fig(figsize=(6.5, 5))
    sns.heatmap(pivot, annot=annot, fmt="", cmap=RATE_CMAP, vmin=0,
                cbar_kws={"label": "Bad rate", "format": PCT}, linewidths=0.5, ax=ax)
    ax.set_title("Bad rate by grade and term (months)")
    ax.set_xlabel("Term (months)"); ax.set_ylabel("Combined grade")
    return save_and_show(fig, "grade_term_bad_rate.png")

def plot_grade_rate_by_era(df: pd.DataFrame):
    tmp = df[["CombinedGrade", "Era", TARGET]].dropna().copy()
    if tmp.empty:
        return None
    tmp["CombinedGrade"] = tmp["CombinedGrade"].astype(str)
    x = np.arange(len(GRADE_ORDER))  # fixed worst -> best positions shared by both eras
    fig, ax = new_fig(figsize=(7.5, 4.2))
    for era, sub in tmp.groupby("Era"):
        tbl = rate_table(sub, "CombinedGrade", GRADE_ORDER).reindex(GRADE_ORDER)
        ax.plot(x, tbl["bad_rate"].to_numpy(dtype=float), marker="o", linewidth=2,
                color=ERA_PALETTE.get(era, LINE_MEAN), label=f"{era} ({int(tbl['loans'].sum()):,} loans)")
    ax.set_xticks(x)
    ax.set_xticklabels(GRADE_ORDER)
    ax.set_title("Bad rate by grade — before vs after the 2009 relaunch")
    ax.set_xlabel("Combined grade (worst → best)"); ax.set_ylabel("Bad rate")
    ax.yaxis.set_major_formatter(PCT)
    ax.legend()
    return save_and_show(fig, "grade_bad_rate_by_era.png")

# ================================ EDA ======================================

def make_eda_charts(df: pd.DataFrame) -> None:
    make_output_folder()
    plt.close("all")
    print("\n[EDA] Columns:", len(df.columns))

    missingness_table(df)
    high_corr_report(df, thr=0.80)
    grade_summary(df)

    # Missing data
    plot_missing_bars(df)
    plot_missing_matrix(df)

    # 1) Univariate
    if STATUS_COL in df.columns:
        plot_status_counts(df)
    if LABEL_COL in df.columns:
        plot_label_balance(df)
    if _has(df, "CombinedGrade", "GradeSource"):
        plot_grade_counts(df)
    if "BorrowerRate" in df.columns:
        plot_numeric_distribution(df, "BorrowerRate", "Borrower interest rate", "borrower_rate.png",
                                  xlabel="Borrower rate", as_pct=True)
    if "LoanOriginalAmount" in df.columns:
        plot_numeric_distribution(df, "LoanOriginalAmount", "Loan amount", "loan_amount.png",
                                  xlabel="Original loan amount ($)")
    if "StatedMonthlyIncome_capped" in df.columns:
        plot_numeric_distribution(df, "StatedMonthlyIncome_capped", "Stated monthly income (capped)",
                                  "monthly_income.png", xlabel="Stated monthly income ($)")
    if "CreditScore" in df.columns:
        plot_numeric_distribution(df, "CreditScore", "Credit score (range midpoint)", "credit_score.png",
                                  bins=40)
    if "DebtToIncomeRatio_capped" in df.columns:
        plot_numeric_distribution(df, "DebtToIncomeRatio_capped", "Debt-to-income ratio (capped)",
                                  "debt_to_income.png", xlabel="Debt-to-income", as_pct=True)
    if "Term" in df.columns:
        plot_category_counts(df.assign(Term=pd.to_numeric(df["Term"], errors="coerce").astype("Int64")),
                             "Term", "Loans by term (months)", "term_counts.png",
                             order=["12", "36", "60"])
    if "ListingCategory" in df.columns:
        plot_category_counts(df, "ListingCategory", "Loans by listing category",
                             "listing_category_counts.png", horizontal=True)
    if "IncomeRange" in df.columns:
        plot_category_counts(df, "IncomeRange", "Loans by income range", "income_range_counts.png",
                             order=INCOME_RANGE_ORDER)
    if "ListingYear" in df.columns:
        plot_category_counts(df, "ListingYear", "Listings per year", "listing_year_counts.png")

    # 2) Bivariate
    if TARGET in df.columns:
        if "CombinedGrade" in df.columns:
            plot_bad_rate_by(df, "CombinedGrade", "Bad rate by combined grade", "grade_bad_rate.png",
                             order=GRADE_ORDER)
        if "IncomeRange" in df.columns:
            plot_bad_rate_by(df, "IncomeRange", "Bad rate by income range", "income_range_bad_rate.png",
                             order=INCOME_RANGE_ORDER)
        if "ListingCategory" in df.columns:
            plot_bad_rate_by(df, "ListingCategory", "Bad rate by listing category",
                             "listing_category_bad_rate.png")
        if "Term" in df.columns:
            plot_bad_rate_by(df.assign(Term=pd.to_numeric(df["Term"], errors="coerce").astype("Int64")),
                             "Term", "Bad rate by term (months)", "term_bad_rate.png",
                             order=["12", "36", "60"])
        risk_by_bins_plot(df, "DebtToIncomeRatio_capped", "Debt-to-income bins: loans and bad rate",
                          "debt_to_income_risk_bins.png")
    if _has(df, "CombinedGrade", "BorrowerRate"):
        plot_box_by_grade(df, "BorrowerRate", "Borrower rate by combined grade", "borrower_rate_by_grade.png")
    if _has(df, "LoanOriginalAmount", "BorrowerRate"):
        plot_scatter(df, "LoanOriginalAmount", "BorrowerRate", "Loan amount vs borrower rate",
                     "amount_vs_rate.png")
    plot_correlation_heatmap(df)

    # 3) Multivariate
    if _has(df, "CombinedGrade", "BorrowerRate", LABEL_COL):
        plot_box_by_grade(df, "BorrowerRate", "Borrower rate by grade and outcome",
                          "borrower_rate_by_grade_status.png", hue=LABEL_COL)
    if _has(df, "CombinedGrade", "Term", TARGET):
        plot_grade_term_heatmap(df)
    if _has(df, "CombinedGrade", "Era", TARGET):
        plot_grade_rate_by_era(df)
    if _has(df, "CreditScore", "BorrowerRate", LABEL_COL):
        plot_scatter(df, "CreditScore", "BorrowerRate", "Credit score vs borrower rate by outcome",
                     "credit_score_vs_rate_status.png", hue=LABEL_COL)
