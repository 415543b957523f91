# recode.py
# Cleaning + categorical recoding for the Prosper loan table.
# - LoanStatus collapsed to good/bad (static set membership)
# - CreditGrade (pre-2009) and ProsperRating (post-2009) unified into one ordinal scale
# - Fixed-threshold caps for long-tailed money/ratio fields
# - A few lookups (listing category, income band, credit score midpoint, era)

from __future__ import annotations

import os
from typing import Dict, Tuple

import numpy as np
import pandas as pd

# -------------------- Configuration ----------------------------------------
STATUS_COL = "LoanStatus"
LABEL_COL  = "Status"                   # "good" / "bad"
TARGET     = "is_bad"                   # 0 / 1
REPORTS    = "reports"

PAST_DUE_BUCKETS = ["1-15", "16-30", "31-60", "61-90", "91-120", ">120"]
BAD_STATUSES = frozenset(
    ["Chargedoff", "Defaulted"] + [f"Past Due ({b} days)" for b in PAST_DUE_BUCKETS]
)
GOOD_STATUSES = frozenset(["Current", "Completed", "FinalPaymentInProgress"])

GRADE_ORDER = ["HR", "E", "D", "C", "B", "A", "AA"]     # worst -> best
GRADE_SCORE = {g: i + 1 for i, g in enumerate(GRADE_ORDER)}
NO_GRADE    = "NC"
OLD_GRADE_COL = "CreditGrade"
NEW_GRADE_COL = "ProsperRating (Alpha)"
RELAUNCH_DATE = pd.Timestamp("2009-07-01")

CAPS = {
    "StatedMonthlyIncome": 30_000,
    "DebtToIncomeRatio": 1.5,
    "RevolvingCreditBalance": 100_000,
    "BankcardUtilization": 1.5,
}
# ----------------------------------------------------------------------------

LISTING_CATEGORIES = {
    0: "Not Available", 1: "Debt Consolidation", 2: "Home Improvement",
    3: "Business", 4: "Personal Loan", 5: "Student Use", 6: "Auto",
    7: "Other", 8: "Baby & Adoption", 9: "Boat", 10: "Cosmetic Procedure",
    11: "Engagement Ring", 12: "Green Loans", 13: "Household Expenses",
    14: "Large Purchases", 15: "Medical/Dental", 16: "Motorcycle", 17: "RV",
    18: "Taxes", 19: "Vacation", 20: "Wedding Loans",
}

INCOME_RANGE_ORDER = [
    "Not employed", "$0", "$1-24,999", "$25,000-49,999",
    "$50,000-74,999", "$75,000-99,999", "$100,000+",
]

# ============================== Status label ===============================

def binarize_status(status) -> str | float:
    """Map a raw LoanStatus value to 'good' / 'bad'; anything else -> NaN."""
    if not isinstance(status, str):
        return np.nan
    s = status.strip()
    if s in BAD_STATUSES:
        return "bad"
    if s in GOOD_STATUSES:
        return "good"
    return np.nan

def add_status_label(df: pd.DataFrame) -> pd.DataFrame:
    if STATUS_COL not in df.columns:
        raise ValueError(f"Missing status column '{STATUS_COL}'.")
    out = df.copy()
    out[LABEL_COL] = out[STATUS_COL].map(binarize_status)
    out[TARGET] = out[LABEL_COL].map({"good": 0, "bad": 1})
    return out

# ============================== Credit grade ===============================

def _clean_grade(s: pd.Series) -> pd.Series:
    g = s.astype("string").str.strip().str.upper()
    return g.where(g.isin(GRADE_ORDER))

def unify_credit_grade(df: pd.DataFrame) -> pd.DataFrame:
    """
    One grade per loan on the HR..AA scale:
      - ProsperRating (Alpha) wins when present (post-2009 listings)
      - else CreditGrade (pre-2009 listings)
      - 'NC' (no credit) and blanks stay missing
    """
    out = df.copy()
    empty = pd.Series(pd.NA, index=out.index, dtype="string")
    new = _clean_grade(out[NEW_GRADE_COL]) if NEW_GRADE_COL in out.columns else empty
    old = _clean_grade(out[OLD_GRADE_COL]) if OLD_GRADE_COL in out.columns else empty

    combined = new.fillna(old).astype(object).where(lambda s: s.notna(), None)
    source = np.where(new.notna(), "ProsperRating", np.where(old.notna(), "CreditGrade", None))

    out["CombinedGrade"] = pd.Categorical(combined, categories=GRADE_ORDER, ordered=True)
    out["CombinedGradeScore"] = combined.map(GRADE_SCORE).astype(float)
    out["GradeSource"] = pd.Series(source, index=out.index, dtype="object")
    return out

# ============================== Capping ====================================

def cap_at(s: pd.Series, upper: float) -> pd.Series:
    """Values above `upper` become `upper`; NaN and smaller values are untouched."""
    s = pd.to_numeric(s, errors="coerce")
    return s.where(~(s > upper), upper)

def add_capped_columns(df: pd.DataFrame, caps: Dict[str, float] | None = None) -> Tuple[pd.DataFrame, Dict[str, int]]:
    caps = CAPS if caps is None else caps
    out = df.copy()
    counts = {}
    for col, upper in caps.items():
        if col not in out.columns:
            continue
        raw = pd.to_numeric(out[col], errors="coerce")
        counts[col] = int((raw > upper).sum())
        out[f"{col}_capped"] = cap_at(raw, upper)
    return out, counts

# ============================== Other recodes ==============================

def recode_listing_category(df: pd.DataFrame) -> pd.DataFrame:
    col = "ListingCategory (numeric)"
    if col not in df.columns:
        return df
    out = df.copy()
    codes = pd.to_numeric(out[col], errors="coerce")
    out["ListingCategory"] = codes.map(LISTING_CATEGORIES.get).fillna("Not Available")
    return out

def recode_income_range(df: pd.DataFrame) -> pd.DataFrame:
    if "IncomeRange" not in df.columns:
        return df
    out = df.copy()
    # "Not displayed" carries no information -> missing
    vals = out["IncomeRange"].astype("string").str.strip()
    out["IncomeRange"] = pd.Categorical(vals.astype(object).where(vals.isin(INCOME_RANGE_ORDER), None),
                                        categories=INCOME_RANGE_ORDER, ordered=True)
    return out

def add_credit_score(df: pd.DataFrame) -> pd.DataFrame:
    lo, hi = "CreditScoreRangeLower", "CreditScoreRangeUpper"
    if not {lo, hi}.issubset(df.columns):
        return df
    out = df.copy()
    out["CreditScore"] = (pd.to_numeric(out[lo], errors="coerce") + pd.to_numeric(out[hi], errors="coerce")) / 2
    return out

def add_listing_dates(df: pd.DataFrame) -> pd.DataFrame:
    if "ListingCreationDate" not in df.columns:
        return df
    out = df.copy()
    dt = pd.to_datetime(out["ListingCreationDate"], errors="coerce")
    out["ListingCreationDate"] = dt
    out["ListingYear"] = dt.dt.year.astype("Int64")
    out["Era"] = np.where(dt.isna(), None, np.where(dt < RELAUNCH_DATE, "pre-2009", "post-2009"))
    return out

def recode_employment(df: pd.DataFrame) -> pd.DataFrame:
    if "EmploymentStatus" not in df.columns:
        return df
    out = df.copy()
    out["EmploymentStatus"] = out["EmploymentStatus"].replace({"Not available": np.nan})
    return out

def recode_homeowner(df: pd.DataFrame) -> pd.DataFrame:
    if "IsBorrowerHomeowner" not in df.columns:
        return df
    out = df.copy()
    mapping = {True: 1.0, False: 0.0, "True": 1.0, "False": 0.0, "true": 1.0, "false": 0.0}
    out["IsBorrowerHomeowner"] = out["IsBorrowerHomeowner"].map(mapping).astype(float)
    return out

# ============================== Cleaning ===================================

def clean_data(df: pd.DataFrame, caps: Dict[str, float] | None = None):
    """
    Minimal, explainable cleaning:
      - Strip column names; drop duplicate listings (ListingKey, else full rows)
      - Good/bad label, unified grade
      - Listing category / income band / credit score / era recodes
      - Drop rows without a good/bad label (Cancelled, blanks)
      - Capped copies of long-tailed fields, counted on the kept rows
    Returns: (clean_df, summary_dict)
    """
    summary = {}
    out = df.copy()
    out.columns = out.columns.str.strip()
    rows_before = len(out)

    if "ListingKey" in out.columns:
        dups = int(out.duplicated(subset=["ListingKey"]).sum())
        out = out.drop_duplicates(subset=["ListingKey"])
    else:
        dups = int(out.duplicated().sum())
        out = out.drop_duplicates()
    summary["duplicates_removed"] = dups

    out = add_status_label(out)
    out = unify_credit_grade(out)
    out = recode_listing_category(out)
    out = recode_income_range(out)
    out = add_credit_score(out)
    out = add_listing_dates(out)
    out = recode_employment(out)
    out = recode_homeowner(out)

    unlabeled = int(out[TARGET].isna().sum())
    out = out.dropna(subset=[TARGET])
    out[TARGET] = out[TARGET].astype(int)
    out = out.reset_index(drop=True)
    summary["unlabeled_dropped"] = unlabeled

    # caps are counted on the kept rows only
    out, capped = add_capped_columns(out, caps)
    for col, n in capped.items():
        summary[f"capped_{col}"] = n
    src = out["GradeSource"].value_counts()
    summary["grade_from_creditgrade"] = int(src.get("CreditGrade", 0))
    summary["grade_from_prosperrating"] = int(src.get("ProsperRating", 0))
    summary["grade_missing"] = int(out["CombinedGrade"].isna().sum())
    summary["bad_loans"] = int(out[TARGET].sum())
    summary["rows_before"] = int(rows_before)
    summary["rows_after"] = int(len(out))
    summary["rows_removed_total"] = int(rows_before - len(out))
    return out, summary

def save_cleaning_report(summary: dict) -> str:
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, "cleaning_report.txt")
    lines = [
        "=== Data Cleaning Summary ===\n",
        f"Rows before cleaning        : {summary.get('rows_before', 0):,}\n",
        f"Rows after cleaning         : {summary.get('rows_after', 0):,}\n",
        f"Total rows removed          : {summary.get('rows_removed_total', 0):,}\n",
        f"Duplicate listings removed  : {summary.get('duplicates_removed', 0):,}\n",
        f"Unlabeled statuses dropped  : {summary.get('unlabeled_dropped', 0):,}\n",
        f"Bad loans                   : {summary.get('bad_loans', 0):,}\n",
        f"Grade from CreditGrade      : {summary.get('grade_from_creditgrade', 0):,}\n",
        f"Grade from ProsperRating    : {summary.get('grade_from_prosperrating', 0):,}\n",
        f"Grade missing               : {summary.get('grade_missing', 0):,}\n",
    ]
    for k, v in summary.items():
        if k.startswith("capped_"):
            lines.append(f"{('Capped ' + k[len('capped_'):]):<28}: {v:,}\n")
    with open(path, "w", encoding="utf-8") as f:
        f.writelines(lines)
    print(f"[SAVE] Cleaning summary -> {path}")
    return path
