"""Shared fixtures: a small synthetic Prosper-like loan table."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

GRADES = ["HR", "E", "D", "C", "B", "A", "AA"]
GOOD = ["Completed", "Current", "FinalPaymentInProgress"]
BAD = ["Chargedoff", "Defaulted", "Past Due (1-15 days)", "Past Due (31-60 days)"]
INCOME = ["Not employed", "$0", "$1-24,999", "$25,000-49,999",
          "$50,000-74,999", "$75,000-99,999", "$100,000+", "Not displayed"]


def make_loans(n: int = 300, seed: int = 0) -> pd.DataFrame:
    """Half the rows graded by CreditGrade (pre-2009), half by ProsperRating."""
    rng = np.random.default_rng(seed)
    half = n // 2

    pre_dates = pd.Timestamp("2006-01-01") + pd.to_timedelta(rng.integers(0, 900, half), unit="D")
    post_dates = pd.Timestamp("2009-08-01") + pd.to_timedelta(rng.integers(0, 1500, n - half), unit="D")
    dates = list(pre_dates) + list(post_dates)

    grade_idx = rng.integers(0, len(GRADES), n)
    grades = np.array(GRADES)[grade_idx]
    credit_grade = np.where(np.arange(n) < half, grades, None).astype(object)
    credit_grade[:5] = "NC"
    prosper_rating = np.where(np.arange(n) >= half, grades, None).astype(object)

    p_bad = 0.55 - 0.07 * grade_idx
    is_bad = rng.random(n) < p_bad
    status = np.where(is_bad, rng.choice(BAD, n), rng.choice(GOOD, n))

    lower = rng.choice(np.arange(560, 820, 20), n)
    income = rng.lognormal(8.4, 0.4, n)
    income[:3] = 50_000
    dti = rng.uniform(0, 0.9, n)
    dti[3:6] = 4.0
    dti[6:10] = np.nan

    df = pd.DataFrame({
        "ListingKey": [f"K{i:05d}" for i in range(n)],
        "ListingCreationDate": [d.strftime("%Y-%m-%d %H:%M:%S") for d in dates],
        "CreditGrade": credit_grade,
        "ProsperRating (Alpha)": prosper_rating,
        "Term": rng.choice([12, 36, 60], n),
        "LoanStatus": status,
        "BorrowerRate": np.clip(0.33 - 0.035 * grade_idx + rng.normal(0, 0.02, n), 0.04, 0.36),
        "ListingCategory (numeric)": rng.integers(0, 21, n),
        "EmploymentStatus": rng.choice(["Employed", "Full-time", "Not available", "Self-employed"], n),
        "IsBorrowerHomeowner": rng.random(n) < 0.5,
        "CreditScoreRangeLower": lower,
        "CreditScoreRangeUpper": lower + 19,
        "DebtToIncomeRatio": dti,
        "IncomeRange": rng.choice(INCOME, n),
        "StatedMonthlyIncome": income,
        "LoanOriginalAmount": rng.choice([1_000, 4_000, 10_000, 15_000, 25_000], n),
        "InquiriesLast6Months": rng.integers(0, 8, n),
        "BankcardUtilization": rng.uniform(0, 2.0, n),
        "RevolvingCreditBalance": rng.lognormal(9, 1.2, n),
    })
    df.loc[[1, 2], "LoanStatus"] = "Cancelled"
    df = pd.concat([df, df.iloc[[0]]], ignore_index=True)  # one duplicate listing
    return df


@pytest.fixture
def raw_loans() -> pd.DataFrame:
    return make_loans()


@pytest.fixture
def clean_loans(raw_loans):
    from recode import clean_data

    df, _ = clean_data(raw_loans)
    return df


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run inside a temp dir so reports/, exports/ and artifacts/ land there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
