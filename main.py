"""
================= Prosper Loans — EDA Report + Decision Tree =================

Batch report over the Prosper peer-to-peer loan table:
load the CSV; clean and recode (good/bad label from LoanStatus, one
combined credit grade from CreditGrade + ProsperRating, capped
long-tailed fields); missing-data views; univariate, bivariate and
multivariate charts; one shallow decision tree with confusion-matrix
metrics; an executive summary, key numbers and an HTML figure gallery.

Usage:  python main.py [path/to/prosperLoanData.csv]
===========================================================================
"""


import os
import sys
import platform
import warnings
warnings.filterwarnings("ignore", category=UserWarning)

import numpy as np
import pandas as pd
from matplotlib import image as mpimg  # for figure sizes in manifest

import eda
import exec_summary
import modeling
import recode
from recode import TARGET

# -------------------- Configuration ----------------------------------------
DATA_PATH  = "prosperLoanData.csv"      # CSV path (first CLI argument overrides)
OUTPUT_DIR = eda.OUTPUT_DIR
SHOW_WINDOWS = False                    # True to pop up figure windows
REPORTS    = "reports"
EXPORTS    = "exports"
# ----------------------------------------------------------------------------

# ============================== Small helpers ==============================

def save_run_environment():
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, "run_environment.txt")
    import sklearn, matplotlib, seaborn, joblib
    with open(path, "w", encoding="utf-8") as f:
        f.write("=== Run Environment ===\n")
        f.write(f"Python        : {sys.version.split()[0]} ({platform.system()})\n")
        f.write(f"numpy         : {np.__version__}\n")
        f.write(f"pandas        : {pd.__version__}\n")
        f.write(f"scikit-learn  : {sklearn.__version__}\n")
        f.write(f"matplotlib    : {matplotlib.__version__}\n")
        f.write(f"seaborn       : {seaborn.__version__}\n")
        f.write(f"joblib        : {joblib.__version__}\n")
    print(f"[SAVE] Environment -> {path}")

# -------- Figures index + manifest, and key numbers -------------------

FIGURE_CAPTIONS = {
    "missing_share.png": "Share of missing values per column; grade fields split by era.",
    "missing_matrix.png": "Presence matrix by listing date: CreditGrade gives way to ProsperRating in 2009.",
    "loan_status_counts.png": "Raw LoanStatus values (blue = good, coral = bad).",
    "good_bad_counts.png": "Good vs bad loans after collapsing LoanStatus.",
    "grade_counts.png": "Combined grade, stacked by the scheme that graded the loan.",
    "borrower_rate.png": "Borrower interest rate with mean/median/mode.",
    "loan_amount.png": "Original loan amount; peaks at round numbers.",
    "monthly_income.png": "Stated monthly income, capped.",
    "credit_score.png": "Credit score range midpoint.",
    "debt_to_income.png": "Debt-to-income ratio, capped.",
    "term_counts.png": "Loans by term in months.",
    "listing_category_counts.png": "What borrowers said the loan was for.",
    "income_range_counts.png": "Loans by stated income range.",
    "listing_year_counts.png": "Listings per year (gap around the 2008–2009 quiet period).",
    "grade_bad_rate.png": "Bad rate by combined grade (labels include loan counts).",
    "income_range_bad_rate.png": "Bad rate by income range.",
    "listing_category_bad_rate.png": "Bad rate by listing category.",
    "term_bad_rate.png": "Bad rate by term.",
    "debt_to_income_risk_bins.png": "Debt-to-income bins: loans (bars) and bad rate (line).",
    "borrower_rate_by_grade.png": "Borrower rate rises as grade worsens.",
    "amount_vs_rate.png": "Loan amount vs borrower rate.",
    "correlation_heatmap.png": "Correlation heatmap (numeric fields).",
    "borrower_rate_by_grade_status.png": "Borrower rate by grade, good vs bad loans.",
    "grade_term_bad_rate.png": "Bad rate by grade × term.",
    "grade_bad_rate_by_era.png": "Bad rate by grade before vs after the 2009 relaunch.",
    "credit_score_vs_rate_status.png": "Credit score vs borrower rate, coloured by outcome.",
    "cm_tree.png": "Confusion matrix — decision tree (holdout).",
    "decision_tree.png": "The fitted depth-3 decision tree.",
    "tree_importance.png": "Which fields the tree splits on.",
}

def write_figure_captions():
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, "figure_captions.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write("=== Figure Captions (short, ready for the report) ===\n")
        for k, v in FIGURE_CAPTIONS.items():
            f.write(f"{k}: {v}\n")
    print(f"[SAVE] Figure captions -> {path}")

GALLERY_TITLE = "Prosper Loans — Figures"
GALLERY_CSS = """
body{font-family:Arial, sans-serif;max-width:1100px;margin:24px auto;padding:0 12px;}
.card{margin:16px 0;padding:12px 16px;border:1px solid #e5e7eb;border-radius:10px;}
.card img{max-width:100%;height:auto;border:1px solid #e5e7eb;border-radius:8px;}
.meta{color:#6b7280;font-size:12px}
"""

def _figure_row(fig_dir: str, fname: str) -> dict:
    """Manifest row for one PNG: caption, pixel size and file size."""
    fpath = os.path.join(fig_dir, fname)
    try:
        h, w = mpimg.imread(fpath).shape[:2]
    except (OSError, ValueError, SyntaxError) as e:
        print(f"[WARN] Could not read {fpath}: {e}")
        w = h = None
    return {
        "filename": fname,
        "caption": FIGURE_CAPTIONS.get(fname, ""),
        "width_px": w,
        "height_px": h,
        "size_kb": round(os.path.getsize(fpath) / 1024, 1),
    }

def _figure_card(row: dict) -> str:
    size = f"{row['width_px']}×{row['height_px']} px" if row["width_px"] else "size unknown"
    return (
        f"<div class='card'><h3>{row['filename']}</h3>"
        f"<p>{row['caption']}</p>"
        f"<img src='{row['filename']}' alt='{row['caption'] or row['filename']}'>"
        f"<p class='meta'>{size} • {row['size_kb']} KB</p></div>"
    )

def gallery_html(rows: list, title: str = GALLERY_TITLE) -> str:
    head = f"<!doctype html><meta charset='utf-8'><title>{title}</title><style>{GALLERY_CSS}</style>"
    intro = f"<h1>{title}</h1><p>{len(rows)} figures from the loan report, with short captions.</p>"
    return "\n".join([head, intro] + [_figure_card(r) for r in rows])

def build_figures_index() -> list:
    """Write reports/figures/manifest.csv and a one-page index.html gallery."""
    os.makedirs(OUTPUT_DIR, exist_ok=True)
    files = sorted(f for f in os.listdir(OUTPUT_DIR) if f.lower().endswith(".png"))
    rows = [_figure_row(OUTPUT_DIR, f) for f in files]

    manifest_path = os.path.join(OUTPUT_DIR, "manifest.csv")
    pd.DataFrame(rows, columns=["filename", "caption", "width_px", "height_px", "size_kb"]).to_csv(
        manifest_path, index=False)
    index_path = os.path.join(OUTPUT_DIR, "index.html")
    with open(index_path, "w", encoding="utf-8") as f:
        f.write(gallery_html(rows))

    print(f"[SAVE] Manifest   -> {manifest_path}")
    print(f"[SAVE] Index page -> {index_path}")
    return rows

def build_key_numbers(df: pd.DataFrame, metrics: dict) -> pd.DataFrame:
    """Save key summary numbers (data + model) to reports/key_numbers.csv."""
    total = len(df)
    bad = int(df[TARGET].sum()) if TARGET in df.columns else np.nan
    bad_rate = bad / total if total else np.nan

    def _median(col, mask=None):
        if col not in df.columns:
            return np.nan
        s = pd.to_numeric(df[col], errors="coerce")
        return float(s[mask].median()) if mask is not None else float(s.median())

    is_bad = df[TARGET] == 1 if TARGET in df.columns else None
    out = pd.DataFrame([{
        "total_loans": total,
        "bad_loans": bad,
        "bad_rate": bad_rate,
        "median_borrower_rate": _median("BorrowerRate"),
        "median_borrower_rate_good": _median("BorrowerRate", ~is_bad) if is_bad is not None else np.nan,
        "median_borrower_rate_bad": _median("BorrowerRate", is_bad) if is_bad is not None else np.nan,
        "median_loan_amount": _median("LoanOriginalAmount"),
        "median_credit_score": _median("CreditScore"),
        "grade_missing": int(df["CombinedGrade"].isna().sum()) if "CombinedGrade" in df.columns else np.nan,
        **{f"tree_{k}": v for k, v in metrics.items()},
    }])
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, "key_numbers.csv")
    out.to_csv(path, index=False)
    print(f"[SAVE] Key numbers -> {path}")
    return out

# ================================ Loading ==================================

def load_csv(path: str = DATA_PATH) -> pd.DataFrame:
    path_abs = os.path.abspath(path)
    if not os.path.exists(path):
        print(f"Looked for: {path_abs}")
        print("➡ Put 'prosperLoanData.csv' next to this script or pass its path as the first argument.")
        raise FileNotFoundError(path_abs)
    df = pd.read_csv(path, low_memory=False)
    if "Unnamed: 0" in df.columns:
        df = df.drop(columns=["Unnamed: 0"])
    return df

def export_clean(df: pd.DataFrame) -> str:
    os.makedirs(EXPORTS, exist_ok=True)
    path = os.path.join(EXPORTS, "clean_loans.csv")
    df.to_csv(path, index=False)
    print(f"[SAVE] {path}")
    return path

# ================================ Main =====================================

def main(argv=None) -> dict:
    argv = sys.argv[1:] if argv is None else argv
    data_path = argv[0] if argv else DATA_PATH

    eda.SHOW_WINDOWS = SHOW_WINDOWS
    eda.make_output_folder()
    df = load_csv(data_path)
    save_run_environment()
    print("Raw shape:", df.shape)
    print("\n[Preview] First 5 rows:\n", df.head())

    df, clean_summary = recode.clean_data(df)
    print("\n=== Cleaning summary ===")
    for k, v in clean_summary.items():
        print(f"[CLEAN] {k:>26}: {v:,}")
    recode.save_cleaning_report(clean_summary)
    print("\nClean shape:", df.shape)
    export_clean(df)

    eda.make_eda_charts(df)
    metrics = modeling.run_model(df)

    build_key_numbers(df, metrics)
    exec_summary.write_summary(exec_summary.build_summary(df, metrics))
    write_figure_captions()
    build_figures_index()
    print("\nAll done. Figures saved in:", OUTPUT_DIR)
    return metrics

if __name__ == "__main__":
    main()
