# modeling.py
# One shallow decision tree as an illustrative good/bad classifier.
# - Only resolved loans are modeled (Current loans have no outcome yet)
# - Median imputation -> DecisionTreeClassifier(max_depth=3, balanced)
# - Stratified 5-fold CV, 80/20 holdout, confusion-matrix metrics
# - Tree diagram, text rules, feature importances, saved pipeline

from __future__ import annotations

import os
from typing import List, Tuple

import numpy as np
import pandas as pd
import seaborn as sns
from joblib import dump
from sklearn.impute import SimpleImputer
from sklearn.metrics import (
    accuracy_score, precision_score, recall_score, f1_score,
    roc_auc_score, confusion_matrix
)
from sklearn.model_selection import train_test_split, StratifiedKFold, cross_val_score
from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier, plot_tree, export_text

from eda import COLOR_GOOD, new_fig, save_and_show
from recode import STATUS_COL, TARGET

# -------------------- Configuration ----------------------------------------
RANDOM_SEED = 42
TEST_SIZE   = 0.20
MAX_DEPTH   = 3
CV_FOLDS    = 5
UNRESOLVED_STATUSES = ("Current",)      # outcome not known yet
MODEL_FEATURES = [
    "CombinedGradeScore",
    "BorrowerRate",
    "CreditScore",
    "DebtToIncomeRatio_capped",
    "StatedMonthlyIncome_capped",
    "BankcardUtilization_capped",
    "LoanOriginalAmount",
    "Term",
    "InquiriesLast6Months",
    "IsBorrowerHomeowner",
]
REPORTS   = "reports"
EXPORTS   = "exports"
ARTIFACTS = "artifacts"
CLASS_NAMES = ["good", "bad"]
# ----------------------------------------------------------------------------

def model_frame(df: pd.DataFrame, features: List[str] | None = None) -> Tuple[pd.DataFrame, np.ndarray]:
    """Numeric feature matrix + 0/1 target for resolved loans."""
    if TARGET not in df.columns:
        raise ValueError(f"Missing target column '{TARGET}'.")
    features = MODEL_FEATURES if features is None else features
    cols = [c for c in features if c in df.columns]
    if not cols:
        raise ValueError(f"None of the model features are present: {features}")

    data = df
    if STATUS_COL in data.columns:
        data = data[~data[STATUS_COL].isin(UNRESOLVED_STATUSES)]
    data = data.dropna(subset=[TARGET])

    X = data[cols].apply(pd.to_numeric, errors="coerce").astype(float)
    y = data[TARGET].astype(int).values
    if len(np.unique(y)) < 2:
        raise ValueError("Need both good and bad loans to fit the tree.")
    return X.reset_index(drop=True), y

def build_tree() -> Pipeline:
    return Pipeline([
        ("impute", SimpleImputer(strategy="median", keep_empty_features=True)),
        ("clf", DecisionTreeClassifier(max_depth=MAX_DEPTH, class_weight="balanced",
                                       random_state=RANDOM_SEED)),
    ])

def kfold_report(model, X, y, name: str, folds: int = CV_FOLDS) -> dict:
    folds = max(2, min(folds, int(np.bincount(y).min())))
    cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=RANDOM_SEED)
    acc = cross_val_score(model, X, y, cv=cv, scoring="accuracy", n_jobs=-1)
    auc = cross_val_score(model, X, y, cv=cv, scoring="roc_auc", n_jobs=-1)
    print(f"\n[CV] {name} — {folds}-fold")
    print(f"  Accuracy: {acc.mean():.3f} ± {acc.std():.3f}")
    print(f"  AUC     : {auc.mean():.3f} ± {auc.std():.3f}")
    return {"cv_accuracy_mean": float(acc.mean()), "cv_accuracy_std": float(acc.std()),
            "cv_auc_mean": float(auc.mean()), "cv_auc_std": float(auc.std())}

def confusion_metrics(y_true, y_pred) -> dict:
    tn, fp, fn, tp = confusion_matrix(y_true, y_pred, labels=[0, 1]).ravel()
    specificity = tn / (tn + fp) if (tn + fp) else np.nan
    return {
        "TN": int(tn), "FP": int(fp), "FN": int(fn), "TP": int(tp),
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "specificity": float(specificity),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
    }

def nice_confusion(y_true, y_pred, title, fname):
    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    df_cm = pd.DataFrame(cm,
                         index=["True: good", "True: bad"],
                         columns=["Pred: good", "Pred: bad"])
    fig, ax = new_fig(figsize=(6, 5))
    sns.heatmap(df_cm, annot=True, fmt="d", cmap="Purples", cbar=False, ax=ax)
    ax.set_title(title)
    ax.text(0.0, -0.15,
            "Rows = actual, Columns = predicted. FP = good loan flagged bad. FN = missed bad loan.",
            transform=ax.transAxes, ha="left", va="top", fontsize=9, color="#374151")
    save_and_show(fig, fname)
    tn, fp, fn, tp = cm.ravel()
    print(f"[EXPLAIN] {title}: TN={tn:,}, FP={fp:,}, FN={fn:,}, TP={tp:,}")
    return cm

def plot_decision_tree(pipe: Pipeline, feature_names: List[str], fname: str = "decision_tree.png"):
    clf = pipe.named_steps["clf"]
    fig, ax = new_fig(figsize=(16, 7))
    plot_tree(clf, feature_names=feature_names, class_names=CLASS_NAMES, filled=True,
              impurity=False, proportion=True, rounded=True, fontsize=8, ax=ax)
    ax.set_title(f"Decision tree (max depth {clf.get_depth()})")
    return save_and_show(fig, fname)

def export_tree_rules(pipe: Pipeline, feature_names: List[str]) -> str:
    rules = export_text(pipe.named_steps["clf"], feature_names=list(feature_names), show_weights=True)
    os.makedirs(REPORTS, exist_ok=True)
    path = os.path.join(REPORTS, "tree_rules.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write(rules)
    print(f"[SAVE] Tree rules -> {path}")
    return rules

def feature_importances(pipe: Pipeline, feature_names: List[str]) -> pd.DataFrame:
    imp = pipe.named_steps["clf"].feature_importances_
    return (pd.DataFrame({"feature": feature_names, "importance": imp})
              .sort_values("importance", ascending=False)
              .reset_index(drop=True))

def feature_importance_plot(imp: pd.DataFrame, title: str, fname: str):
    shown = imp[imp["importance"] > 0]
    if shown.empty:
        print("[WARN] Tree uses no splits — skipping importance chart")
        return None
    fig, ax = new_fig(figsize=(8, 0.45 * len(shown) + 1.5))
    sns.barplot(data=shown, x="importance", y="feature", ax=ax, color=COLOR_GOOD)
    ax.set_title(title); ax.set_xlabel("Impurity decrease (share)")
    return save_and_show(fig, fname)

def run_model(df: pd.DataFrame) -> dict:
    X, y = model_frame(df)
    feats = list(X.columns)
    print(f"\n[MODEL] {len(X):,} resolved loans, {int(y.sum()):,} bad ({y.mean():.1%}); features: {feats}")

    tree = build_tree()
    cv = kfold_report(tree, X, y, "Decision tree")

    Xtr, Xte, ytr, yte = train_test_split(X, y, test_size=TEST_SIZE, random_state=RANDOM_SEED, stratify=y)
    tree.fit(Xtr, ytr)
    yhat  = tree.predict(Xte)
    yprob = tree.predict_proba(Xte)[:, 1]
    auc = roc_auc_score(yte, yprob) if len(np.unique(yte)) == 2 else np.nan

    m = confusion_metrics(yte, yhat)
    print("\n=== Decision tree (holdout) ===")
    print(f"Accuracy   : {m['accuracy']:.4f}")
    print(f"Precision  : {m['precision']:.4f}")
    print(f"Recall     : {m['recall']:.4f}")
    print(f"Specificity: {m['specificity']:.4f}")
    print(f"F1-score   : {m['f1']:.4f}")
    print(f"ROC AUC    : {auc:.4f}")

    nice_confusion(yte, yhat, "Confusion matrix — Decision tree", "cm_tree.png")
    plot_decision_tree(tree, feats)
    export_tree_rules(tree, feats)
    imp = feature_importances(tree, feats)
    feature_importance_plot(imp, "Feature importance — Decision tree", "tree_importance.png")

    os.makedirs(EXPORTS, exist_ok=True)
    pd.DataFrame({"y_true": yte, "y_pred": yhat, "proba_tree": yprob}).to_csv(
        os.path.join(EXPORTS, "holdout_predictions.csv"), index=False)
    print(f"[SAVE] {os.path.join(EXPORTS, 'holdout_predictions.csv')}")

    metrics = {
        "model": "DecisionTree",
        "max_depth": MAX_DEPTH,
        "n_train": int(len(ytr)),
        "n_test": int(len(yte)),
        "auc": float(auc),
        **m,
        **cv,
        "top_features": ";".join(imp.loc[imp["importance"] > 0, "feature"].head(5)),
    }
    pd.DataFrame([metrics]).to_csv(os.path.join(EXPORTS, "model_metrics.csv"), index=False)
    print(f"[SAVE] {os.path.join(EXPORTS, 'model_metrics.csv')}")

    try:
        os.makedirs(ARTIFACTS, exist_ok=True)
        dump(tree, os.path.join(ARTIFACTS, "decision_tree.joblib"))
        print(f"[SAVE] {os.path.join(ARTIFACTS, 'decision_tree.joblib')}")
    except OSError as e:
        print("[WARN] Could not save joblib artifact:", e)

    return metrics
